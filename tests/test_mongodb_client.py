import importlib.util
from pathlib import Path

import pytest
from pymongo.errors import OperationFailure, ServerSelectionTimeoutError
from pymongo.errors import WriteError as PyMongoWriteError

from compression_bench.clients import mongodb_client
from compression_bench.clients.mongodb_client import (
    COMPRESSOR_PACKAGES,
    MongoDBClient,
    check_compressor_support,
)
from compression_bench.config import DEFAULT_ALGORITHMS
from compression_bench.deadline import Deadline
from compression_bench.errors import (
    BackendConnectionError,
    BenchmarkTimeoutError,
    StatsError,
    WriteError,
)


class FakeCollection:
    def __init__(self, server, name):
        self.server = server
        self.name = name

    def insert_one(self, document):
        if self.server.insert_error:
            raise self.server.insert_error
        self.server.inserted.append((self.name, document))

    def aggregate(self, pipeline):
        self.server.calls.append(("aggregate", self.name, pipeline))
        return iter([{"storageStats": {"storageSize": 8192}}])


class FakeDatabase:
    def __init__(self, server, name):
        self.server = server
        self.name = name

    def __getitem__(self, name):
        return FakeCollection(self.server, name)

    def command(self, name, *args):
        self.server.calls.append((self.name, name) + args)
        if name == "ping":
            if self.server.ping_error:
                raise self.server.ping_error
            return {"ok": 1}
        if name == "collStats":
            if self.server.stats_error:
                raise self.server.stats_error
            return dict(self.server.stats)
        raise AssertionError(f"unexpected command {name}")

    def drop_collection(self, name):
        self.server.calls.append(("drop_collection", self.name, name))


class FakeMongoClient:
    def __init__(self, server, uri, **kwargs):
        self.server = server
        self.uri = uri
        self.kwargs = kwargs
        self.closed = False
        server.instances.append(self)

    @property
    def admin(self):
        return FakeDatabase(self.server, "admin")

    def __getitem__(self, name):
        return FakeDatabase(self.server, name)

    def drop_database(self, name):
        self.server.calls.append(("drop_database", name))

    def server_info(self):
        return {"version": "7.0.4"}

    def close(self):
        self.closed = True


class FakeServer:
    def __init__(self):
        self.instances = []
        self.calls = []
        self.inserted = []
        self.ping_error = None
        self.insert_error = None
        self.stats_error = None
        self.stats = {"ns": "compression_demo.test_zlib", "storageSize": 2256000, "size": 4700000}


@pytest.fixture
def server(monkeypatch):
    server = FakeServer()
    monkeypatch.setattr(
        mongodb_client, "MongoClient", lambda uri, **kwargs: FakeMongoClient(server, uri, **kwargs)
    )
    return server


@pytest.fixture
def client(server):
    c = MongoDBClient()
    c.connect("mongodb://db:27017", ["zlib"], "compression-demo")
    return c


def test_connect_negotiates_single_compressor(server, client):
    mongo = server.instances[0]
    assert mongo.uri == "mongodb://db:27017"
    assert mongo.kwargs == {"appname": "compression-demo", "compressors": ["zlib"]}
    assert ("admin", "ping") in server.calls
    assert client.compressors == ["zlib"]
    assert client.get_version() == "7.0.4"


def test_connect_without_compressors_omits_option(server):
    c = MongoDBClient()
    c.connect("mongodb://db:27017", [], "compression-demo")
    assert "compressors" not in server.instances[0].kwargs


def test_unknown_compressor_is_rejected(server):
    with pytest.raises(BackendConnectionError, match="Unsupported compressor"):
        MongoDBClient().connect("mongodb://db:27017", ["lz4"], "compression-demo")
    assert server.instances == []


def test_missing_codec_library_is_rejected(monkeypatch):
    monkeypatch.setattr(importlib.util, "find_spec", lambda name: None)
    with pytest.raises(BackendConnectionError, match="pip install python-snappy"):
        check_compressor_support("snappy")
    # zlib ships with Python
    check_compressor_support("zlib")


def test_unreachable_server_raises_connection_error(server):
    server.ping_error = ServerSelectionTimeoutError("no servers found")
    c = MongoDBClient()

    with pytest.raises(BackendConnectionError):
        c.connect("mongodb://db:27017", ["zlib"], "compression-demo")

    assert server.instances[0].closed


def test_expired_deadline_raises_timeout(server):
    c = MongoDBClient()
    with pytest.raises(BenchmarkTimeoutError):
        c.connect("mongodb://db:27017", ["zlib"], "compression-demo", deadline=Deadline(0, clock=lambda: 0.0))
    assert server.instances[0].closed


def test_operations_run_under_live_deadline(server):
    c = MongoDBClient()
    c.connect("mongodb://db:27017", ["zlib"], "compression-demo", deadline=Deadline(30))
    c.insert_one("compression_demo", "test_zlib", {"_id": 1})
    assert c.collection_stats("compression_demo", "test_zlib")["storageSize"] == 2256000


def test_drop_insert_stats(server, client):
    client.drop_collection("compression_demo", "test_zlib")
    client.insert_one("compression_demo", "test_zlib", {"_id": 1, "x": "y"})
    stats = client.collection_stats("compression_demo", "test_zlib")

    assert ("drop_collection", "compression_demo", "test_zlib") in server.calls
    assert server.inserted == [("test_zlib", {"_id": 1, "x": "y"})]
    assert stats["storageSize"] == 2256000


def test_insert_rejection_maps_to_write_error(server, client):
    server.insert_error = PyMongoWriteError("E11000 duplicate key error", 11000)
    with pytest.raises(WriteError):
        client.insert_one("compression_demo", "test_zlib", {"_id": 1})


def test_stats_with_unexpected_shape(server, client):
    server.stats = {"ns": "x"}
    with pytest.raises(StatsError):
        client.collection_stats("compression_demo", "test_zlib")

    server.stats = {"storageSize": 12.5}
    with pytest.raises(StatsError):
        client.collection_stats("compression_demo", "test_zlib")


def test_stats_failure_maps_to_stats_error(server, client):
    server.stats_error = OperationFailure("not authorized", 13)
    with pytest.raises(StatsError):
        client.collection_stats("compression_demo", "test_zlib")


def test_stats_falls_back_to_aggregation(server, client):
    server.stats_error = OperationFailure("no such command: 'collStats'", 59)
    stats = client.collection_stats("compression_demo", "test_zlib")

    assert stats["storageSize"] == 8192
    assert server.calls[-1][0] == "aggregate"


def test_drop_database_and_disconnect(server, client):
    client.drop_database("compression_demo")
    client.disconnect()
    client.disconnect()

    assert ("drop_database", "compression_demo") in server.calls
    assert server.instances[0].closed
    with pytest.raises(RuntimeError):
        client.insert_one("compression_demo", "test_zlib", {})


def test_context_manager_disconnects(server):
    with MongoDBClient() as c:
        c.connect("mongodb://db:27017", ["zlib"], "compression-demo")
    assert server.instances[0].closed


def test_default_algorithms_have_core_codec_dependencies():
    pyproject = (Path(__file__).resolve().parent.parent / "pyproject.toml").read_text()
    dependencies = pyproject.split("dependencies = [", 1)[1].split("]", 1)[0]

    for algorithm in DEFAULT_ALGORITHMS:
        package = COMPRESSOR_PACKAGES.get(algorithm.compressor)
        if package is not None:
            assert f'"{package}"' in dependencies
    assert "snappy = [" not in pyproject
