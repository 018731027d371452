"""BSON size measurement."""

from typing import Any, Mapping, Union

import bson
from bson.errors import InvalidDocument

from .document import TestDocument
from .errors import EncodingError

BYTES_PER_MB = 1024 * 1024


def measure_document_size(document: Union[TestDocument, Mapping[str, Any]]) -> int:
    """
    Return the length in bytes of the document's BSON encoding.

    Raises:
        EncodingError: If the document cannot be encoded as BSON
    """
    if isinstance(document, TestDocument):
        document = document.to_mongo()

    try:
        return len(bson.encode(document))
    except (InvalidDocument, TypeError, OverflowError) as e:
        raise EncodingError(f"Failed to encode document as BSON: {e}") from e


def bytes_to_mb(num_bytes: float) -> float:
    """Convert bytes to MB (1024 * 1024)."""
    return num_bytes / BYTES_PER_MB
