import os

os.environ.setdefault("MPLBACKEND", "Agg")

from typing import Any, Dict, List, Mapping, Optional, Tuple

import pytest

from compression_bench.clients.base import BaseDocumentStoreClient
from compression_bench.config import BenchmarkConfig, DocumentConfig
from compression_bench.deadline import Deadline
from compression_bench.results import BenchmarkReport, RunResult


class FakeBackend:
    """In-memory stand-in for MongoDB shared by every FakeClient."""

    def __init__(self, storage_sizes: Optional[Dict[str, Any]] = None):
        self.storage_sizes = storage_sizes or {"snappy": 3525000, "zlib": 2256000, "zstd": 2209000}
        self.failures: Dict[Tuple[str, str], Exception] = {}
        self.events: List[Tuple] = []
        self.collections: Dict[str, List[Mapping[str, Any]]] = {}
        self.clients: List["FakeClient"] = []

    def fail(self, compressor: str, operation: str, error: Exception) -> None:
        self.failures[(compressor, operation)] = error

    def factory(self) -> "FakeClient":
        client = FakeClient(self)
        self.clients.append(client)
        return client


class FakeClient(BaseDocumentStoreClient):
    def __init__(self, backend: FakeBackend):
        self.backend = backend
        self.compressor = ""
        self.connected = False
        self.disconnect_calls = 0

    @property
    def name(self) -> str:
        return "Fake"

    def _maybe_fail(self, operation: str) -> None:
        error = self.backend.failures.get((self.compressor, operation))
        if error is not None:
            raise error

    def connect(self, uri, compressors, app_name, deadline: Optional[Deadline] = None) -> None:
        self.compressor = compressors[0] if compressors else ""
        self.backend.events.append(("connect", self.compressor, app_name))
        self._maybe_fail("connect")
        self.connected = True

    def disconnect(self) -> None:
        self.disconnect_calls += 1
        self.connected = False
        self.backend.events.append(("disconnect", self.compressor))

    def drop_collection(self, database, collection) -> None:
        self.backend.events.append(("drop_collection", database, collection))
        self._maybe_fail("drop")
        self.backend.collections.pop(collection, None)

    def insert_one(self, database, collection, document) -> None:
        self.backend.events.append(("insert_one", database, collection))
        self._maybe_fail("insert")
        self.backend.collections.setdefault(collection, []).append(document)

    def collection_stats(self, database, collection) -> Dict[str, Any]:
        self.backend.events.append(("collection_stats", database, collection))
        self._maybe_fail("stats")
        return {"ns": f"{database}.{collection}", "storageSize": self.backend.storage_sizes[self.compressor]}

    def drop_database(self, database) -> None:
        self.backend.events.append(("drop_database", database))
        self._maybe_fail("drop_database")


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def small_config() -> BenchmarkConfig:
    """Config with a tiny document so tests stay fast."""
    return BenchmarkConfig(
        document=DocumentConfig(repeat_count=20, item_count=10, binary_length=256, seed=7),
        inter_run_delay_seconds=0.0,
    )


def make_result(algorithm: str, compressed: int, original: int = 4700000, insert_time: float = 0.05) -> RunResult:
    return RunResult(
        algorithm=algorithm,
        compressor=algorithm.lower(),
        original_size=original,
        compressed_size=compressed,
        reduction_percent=(1 - compressed / original) * 100,
        compression_ratio=original / compressed,
        insert_time_seconds=insert_time,
    )


@pytest.fixture
def scenario_report() -> BenchmarkReport:
    return BenchmarkReport(
        original_size=4700000,
        timestamp="2024-01-01 00:00:00",
        database="compression_demo",
        results=[
            make_result("Snappy", 3525000, insert_time=0.040),
            make_result("Zlib", 2256000, insert_time=0.090),
            make_result("Zstd", 2209000, insert_time=0.060),
        ],
    )
