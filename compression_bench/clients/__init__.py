# Document Store Clients Package
from .base import BaseDocumentStoreClient
from .mongodb_client import MongoDBClient

__all__ = [
    'BaseDocumentStoreClient',
    'MongoDBClient',
]
