"""Abstract base class for document store clients."""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional

from ..deadline import Deadline


class BaseDocumentStoreClient(ABC):
    """
    Abstract base class for document store clients.

    A client instance represents one connection, opened with exactly the
    compressors passed to connect(). All backend implementations must
    inherit from this class and implement all abstract methods.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of the backend (e.g., 'MongoDB')."""
        pass

    @abstractmethod
    def connect(
        self,
        uri: str,
        compressors: List[str],
        app_name: str,
        deadline: Optional[Deadline] = None,
    ) -> None:
        """
        Open a session restricted to the given wire compressors.

        Args:
            uri: Connection string
            compressors: Compressor identifiers to negotiate (empty for none)
            app_name: Application name reported to the server
            deadline: Optional overall deadline bounding every operation

        Raises:
            BackendConnectionError: Backend unreachable or compressor rejected
        """
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Close the connection. Safe to call more than once."""
        pass

    @abstractmethod
    def drop_collection(self, database: str, collection: str) -> None:
        """
        Drop a collection; a missing collection is not an error.

        Raises:
            WriteError: If the drop is rejected
        """
        pass

    @abstractmethod
    def insert_one(
        self,
        database: str,
        collection: str,
        document: Mapping[str, Any],
    ) -> None:
        """
        Insert a single document.

        Raises:
            WriteError: If the insert is rejected
        """
        pass

    @abstractmethod
    def collection_stats(self, database: str, collection: str) -> Dict[str, Any]:
        """
        Get storage statistics for a collection.

        Returns:
            Dictionary containing at least an integer 'storageSize'

        Raises:
            StatsError: If statistics cannot be retrieved
        """
        pass

    @abstractmethod
    def drop_database(self, database: str) -> None:
        """Drop a whole database."""
        pass

    def get_version(self) -> str:
        """Return the backend server version.

        Subclasses should override this to query the actual version.
        Called after connect().
        """
        return "unknown"

    def __enter__(self) -> "BaseDocumentStoreClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.disconnect()
