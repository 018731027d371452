"""MongoDB client implementation."""

import contextlib
import importlib.util
import logging
from typing import Any, Dict, List, Mapping, Optional, Type

import pymongo
from bson.errors import InvalidDocument
from pymongo import MongoClient
from pymongo.errors import (
    ConfigurationError,
    DocumentTooLarge,
    OperationFailure,
    PyMongoError,
)

from ..deadline import Deadline
from ..errors import (
    BackendConnectionError,
    BenchmarkError,
    BenchmarkTimeoutError,
    EncodingError,
    StatsError,
    WriteError,
)
from .base import BaseDocumentStoreClient

logger = logging.getLogger(__name__)

# Wire compressor -> module pymongo needs to speak it (None = stdlib)
COMPRESSOR_MODULES = {
    "snappy": "snappy",
    "zlib": None,
    "zstd": "zstandard",
}
COMPRESSOR_PACKAGES = {
    "snappy": "python-snappy",
    "zstd": "zstandard",
}

# Server error code for an unknown command
COMMAND_NOT_FOUND = 59


def check_compressor_support(compressor: str) -> None:
    """
    Verify that pymongo can negotiate the given compressor.

    pymongo silently drops compressors it cannot load, which would make a
    run measure an uncompressed connection, so this is checked up front.

    Raises:
        BackendConnectionError: Unknown compressor or missing codec library
    """
    if compressor not in COMPRESSOR_MODULES:
        raise BackendConnectionError(
            f"Unsupported compressor: {compressor}. "
            f"Supported: {', '.join(COMPRESSOR_MODULES)}"
        )

    module = COMPRESSOR_MODULES[compressor]
    if module is not None and importlib.util.find_spec(module) is None:
        raise BackendConnectionError(
            f"{module} package not installed, cannot use {compressor} compression. "
            f"Install with: pip install {COMPRESSOR_PACKAGES[compressor]}"
        )


class MongoDBClient(BaseDocumentStoreClient):
    """MongoDB client; one instance per negotiated compressor."""

    def __init__(self):
        """Initialize the MongoDB client."""
        self._client: Optional[MongoClient] = None
        self._deadline: Optional[Deadline] = None
        self._compressors: List[str] = []

    @property
    def name(self) -> str:
        """Return the database name."""
        return "MongoDB"

    @property
    def compressors(self) -> List[str]:
        """Compressors this connection was opened with."""
        return list(self._compressors)

    def _operation_timeout(self, stage: str):
        """Bound the next operation by whatever is left of the deadline."""
        if self._deadline is None:
            return contextlib.nullcontext()
        self._deadline.check(stage)
        return pymongo.timeout(self._deadline.remaining())

    def _translate(
        self,
        error: Exception,
        stage: str,
        error_cls: Type[BenchmarkError],
    ) -> BenchmarkError:
        """Map a pymongo exception onto the benchmark's error taxonomy."""
        if self._deadline is not None and self._deadline.expired():
            return BenchmarkTimeoutError(
                f"Benchmark deadline of {self._deadline.timeout_seconds:.1f}s "
                f"exceeded during {stage}: {error}"
            )
        return error_cls(f"MongoDB {stage} failed: {error}")

    def _require_client(self) -> MongoClient:
        if self._client is None:
            raise RuntimeError("Not connected to database")
        return self._client

    def connect(
        self,
        uri: str,
        compressors: List[str],
        app_name: str,
        deadline: Optional[Deadline] = None,
    ) -> None:
        """
        Connect to MongoDB with the given wire compressors.

        Args:
            uri: MongoDB connection string
            compressors: Compressors to negotiate; empty for none
            app_name: Application name sent in the handshake
            deadline: Optional overall deadline
        """
        for compressor in compressors:
            check_compressor_support(compressor)

        self._deadline = deadline
        self._compressors = list(compressors)

        options: Dict[str, Any] = {"appname": app_name}
        if compressors:
            options["compressors"] = list(compressors)

        try:
            self._client = MongoClient(uri, **options)
        except ConfigurationError as e:
            raise BackendConnectionError(f"Invalid MongoDB configuration: {e}") from e

        # MongoClient connects lazily; ping forces the handshake
        try:
            with self._operation_timeout("connect"):
                self._client.admin.command("ping")
        except PyMongoError as e:
            self.disconnect()
            raise self._translate(e, "connect", BackendConnectionError) from e
        except BenchmarkTimeoutError:
            self.disconnect()
            raise

        logger.debug(
            "Connected to MongoDB at %s (compressors=%s, appname=%s)",
            uri, compressors or "none", app_name,
        )

    def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self._client is not None:
            try:
                self._client.close()
            except PyMongoError as e:
                logger.warning("Error while closing MongoDB connection: %s", e)
        self._client = None

    def get_version(self) -> str:
        """Return the MongoDB server version."""
        if self._client is None:
            return "unknown"
        try:
            with self._operation_timeout("server info"):
                return self._client.server_info().get("version", "unknown")
        except PyMongoError:
            return "unknown"

    def drop_collection(self, database: str, collection: str) -> None:
        """Drop a collection; pymongo already ignores NamespaceNotFound."""
        client = self._require_client()
        try:
            with self._operation_timeout("drop collection"):
                client[database].drop_collection(collection)
        except PyMongoError as e:
            raise self._translate(e, "drop collection", WriteError) from e

    def insert_one(
        self,
        database: str,
        collection: str,
        document: Mapping[str, Any],
    ) -> None:
        """Insert a single document."""
        client = self._require_client()
        try:
            with self._operation_timeout("insert"):
                client[database][collection].insert_one(document)
        except DocumentTooLarge as e:
            raise WriteError(f"Document rejected as too large: {e}") from e
        except InvalidDocument as e:
            raise EncodingError(f"Failed to encode document as BSON: {e}") from e
        except PyMongoError as e:
            raise self._translate(e, "insert", WriteError) from e

    def collection_stats(self, database: str, collection: str) -> Dict[str, Any]:
        """
        Get collection statistics.

        Uses the collStats command, falling back to the $collStats
        aggregation stage on servers where the command has been removed.
        """
        client = self._require_client()
        db = client[database]
        try:
            with self._operation_timeout("collection stats"):
                try:
                    stats = db.command("collStats", collection)
                except OperationFailure as e:
                    if e.code != COMMAND_NOT_FOUND:
                        raise
                    logger.debug("collStats unavailable, using $collStats aggregation")
                    stats = self._aggregate_stats(db, collection)
        except PyMongoError as e:
            raise self._translate(e, "collection stats", StatsError) from e

        storage_size = stats.get("storageSize")
        if isinstance(storage_size, bool) or not isinstance(storage_size, int):
            raise StatsError(
                f"Unexpected collection stats for {database}.{collection}: "
                f"storageSize={storage_size!r}"
            )
        return dict(stats)

    @staticmethod
    def _aggregate_stats(db, collection: str) -> Dict[str, Any]:
        pipeline = [{"$collStats": {"storageStats": {}}}]
        docs = list(db[collection].aggregate(pipeline))
        if not docs:
            raise StatsError(f"No $collStats output for collection {collection}")
        return docs[0].get("storageStats", {})

    def drop_database(self, database: str) -> None:
        """Drop the whole benchmark database."""
        client = self._require_client()
        try:
            with self._operation_timeout("drop database"):
                client.drop_database(database)
        except PyMongoError as e:
            raise self._translate(e, "drop database", WriteError) from e
