"""Benchmark runner for MongoDB wire-compression testing."""

import logging
import time
from datetime import datetime
from typing import Callable, Optional

from .clients.base import BaseDocumentStoreClient
from .config import AlgorithmSpec, BenchmarkConfig
from .deadline import Deadline
from .document import TestDocument
from .errors import AlgorithmRunError, BenchmarkError, StatsError
from .metrics import calculate_compression_ratio, calculate_reduction_percent
from .results import BenchmarkReport, RunResult
from .sizing import measure_document_size

logger = logging.getLogger(__name__)


class BenchmarkRunner:
    """Runs one isolated insert per compression algorithm."""

    def __init__(
        self,
        client_factory: Callable[[], BaseDocumentStoreClient],
        config: BenchmarkConfig,
        deadline: Optional[Deadline] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """
        Initialize the benchmark runner.

        Args:
            client_factory: Returns a new, unconnected client; called once per run
            config: Benchmark configuration
            deadline: Overall deadline; defaults to config.timeout_seconds from now
            sleep: Sleep function used for the inter-run delay
        """
        self.client_factory = client_factory
        self.config = config
        self.deadline = deadline or Deadline(config.timeout_seconds)
        self.sleep = sleep

    def collection_name(self, algorithm: AlgorithmSpec) -> str:
        """Per-algorithm collection name, e.g. 'test_zstd'."""
        return f"{self.config.connection.collection_prefix}{algorithm.name.lower()}"

    def run_algorithm(
        self,
        algorithm: AlgorithmSpec,
        document: TestDocument,
        original_size: Optional[int] = None,
    ) -> RunResult:
        """
        Measure one compression algorithm.

        Opens a dedicated connection negotiating only `algorithm.compressor`,
        resets the target collection, times a single insert and reads the
        backend's storageSize for the collection. The connection is closed
        on every exit path.

        Args:
            algorithm: Algorithm to test
            document: Payload to insert
            original_size: Pre-computed BSON size; measured if None

        Returns:
            RunResult for this algorithm
        """
        if original_size is None:
            original_size = measure_document_size(document)

        conn = self.config.connection
        collection = self.collection_name(algorithm)

        self.deadline.check(f"{algorithm.name} connect")
        client = self.client_factory()
        client.connect(
            uri=conn.uri,
            compressors=[algorithm.compressor],
            app_name=conn.app_name,
            deadline=self.deadline,
        )

        with client:
            # Clear previous data
            client.drop_collection(conn.database, collection)

            # Single timed insert; includes client-side compression cost
            payload = document.to_mongo()
            start_time = time.perf_counter()
            client.insert_one(conn.database, collection, payload)
            insert_time = time.perf_counter() - start_time

            stats = client.collection_stats(conn.database, collection)

        storage_size = stats.get("storageSize")
        if not isinstance(storage_size, int) or isinstance(storage_size, bool):
            raise StatsError(f"Unexpected storageSize in collection stats: {storage_size!r}")

        logger.debug(
            "%s: original=%d storage=%d insert=%.4fs",
            algorithm.name, original_size, storage_size, insert_time,
        )

        return RunResult(
            algorithm=algorithm.name,
            compressor=algorithm.compressor,
            original_size=original_size,
            compressed_size=storage_size,
            reduction_percent=calculate_reduction_percent(original_size, storage_size),
            compression_ratio=calculate_compression_ratio(original_size, storage_size),
            insert_time_seconds=insert_time,
        )

    def run_all(
        self, document: TestDocument, original_size: Optional[int] = None
    ) -> BenchmarkReport:
        """
        Run every configured algorithm in declared order.

        Fail-fast: the first failure aborts the benchmark and no partial
        results are returned.

        Args:
            document: Payload shared by every run
            original_size: Encoded size of the document, measured here if None

        Returns:
            BenchmarkReport with one RunResult per algorithm, in order

        Raises:
            AlgorithmRunError: Wrapping the first failure
        """
        if original_size is None:
            original_size = measure_document_size(document)

        report = BenchmarkReport(
            original_size=original_size,
            timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            database=self.config.connection.database,
        )

        algorithms = self.config.algorithms
        for idx, algorithm in enumerate(algorithms):
            print(f"Testing {algorithm.name} compression...")
            try:
                result = self.run_algorithm(algorithm, document, original_size)
            except Exception as e:
                raise AlgorithmRunError(algorithm.name, e) from e
            report.results.append(result)

            # Small delay between tests
            if idx < len(algorithms) - 1:
                try:
                    self.deadline.sleep(self.config.inter_run_delay_seconds, self.sleep)
                except BenchmarkError as e:
                    raise AlgorithmRunError(algorithms[idx + 1].name, e) from e

        return report

    def cleanup(self) -> None:
        """Drop the benchmark database over a plain connection (best-effort)."""
        conn = self.config.connection
        client = self.client_factory()
        try:
            client.connect(
                uri=conn.uri,
                compressors=[],
                app_name=conn.app_name,
                deadline=self.deadline,
            )
            with client:
                client.drop_database(conn.database)
        except BenchmarkError as e:
            logger.warning("Could not drop database '%s': %s", conn.database, e)
