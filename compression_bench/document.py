"""Synthetic test document for the compression benchmark.

The document mixes three content classes so that reduction percentages are
meaningful: one sentence repeated tens of thousands of times (compresses
extremely well), thousands of near-identical structured records (compresses
well), and a block of pseudo-random bytes (barely compresses at all).
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import numpy as np
from bson import Binary, ObjectId

from .config import DocumentConfig

DOCUMENT_VERSION = "1.0"
DOCUMENT_DESCRIPTION = "Large 4.7MB document for MongoDB compression testing"
ITEM_DESCRIPTION = (
    "This is a repeated item description that compresses efficiently "
    "with MongoDB compression algorithms"
)
ITEM_TAGS = ["electronics", "home", "kitchen", "premium"]
ITEM_CATEGORIES = ["main", "featured", "bestseller"]
ITEM_FEATURES = ["wireless", "bluetooth", "rechargeable", "smart"]
REVIEW_STARS = [100, 200, 300, 250, 150]


@dataclass(frozen=True)
class TestDocument:
    """The payload persisted once per compression algorithm."""

    __test__ = False  # not a pytest test class

    id: ObjectId
    description: str
    timestamp: datetime
    version: str
    repetitive_text: str
    product_items: Tuple[Dict[str, Any], ...]
    binary_data: bytes
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_mongo(self) -> Dict[str, Any]:
        """Return the ordered mapping that is encoded and inserted."""
        return {
            "_id": self.id,
            "description": self.description,
            "timestamp": self.timestamp,
            "version": self.version,
            "repetitive_text": self.repetitive_text,
            "product_items": list(self.product_items),
            "binary_data": Binary(self.binary_data),
            "metadata": dict(self.metadata),
        }


def build_item(index: int) -> Dict[str, Any]:
    """Build one near-duplicate product record."""
    return {
        "id": index,
        "name": f"Product_Item_Number_{index}",
        "description": ITEM_DESCRIPTION,
        "price": float(index) * 1.99,
        "metadata": {
            "tags": list(ITEM_TAGS),
            "categories": list(ITEM_CATEGORIES),
            "features": list(ITEM_FEATURES),
        },
        "reviews": {
            "average_rating": 4.5,
            "total_reviews": 150,
            "stars": list(REVIEW_STARS),
        },
    }


def generate_binary_block(length: int, seed: int) -> bytes:
    """
    Generate near-uniform pseudo-random bytes.

    Args:
        length: Number of bytes
        seed: Seed for the generator; same seed gives the same bytes

    Returns:
        Random byte string of the requested length
    """
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=length, dtype=np.uint8).tobytes()


def generate_document(config: Optional[DocumentConfig] = None) -> TestDocument:
    """
    Generate the synthetic test document.

    Composition (repeat count, item count, binary length) is fixed by the
    config, so every call yields the same encoded size; only the ObjectId
    and timestamp differ.

    Args:
        config: Document composition; defaults produce roughly 4.7MB

    Returns:
        A new TestDocument
    """
    config = config or DocumentConfig()

    items = tuple(build_item(i) for i in range(config.item_count))

    return TestDocument(
        id=ObjectId(),
        description=DOCUMENT_DESCRIPTION,
        # BSON dates have millisecond precision
        timestamp=datetime.now(timezone.utc).replace(microsecond=0),
        version=DOCUMENT_VERSION,
        repetitive_text=config.repeated_sentence * config.repeat_count,
        product_items=items,
        binary_data=generate_binary_block(config.binary_length, config.seed),
        metadata={
            "created_by": "compression-demo",
            "document_type": "performance_test",
            "size_category": "4.7MB",
            "compression_test": True,
        },
    )
