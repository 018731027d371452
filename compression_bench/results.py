"""Data classes for benchmark results."""

from dataclasses import dataclass, field
from typing import List

from .sizing import bytes_to_mb


@dataclass(frozen=True)
class RunResult:
    """Results from one per-algorithm run."""

    algorithm: str
    compressor: str
    original_size: int  # BSON bytes, shared across all runs
    compressed_size: int  # storageSize reported by the backend
    reduction_percent: float
    compression_ratio: float
    insert_time_seconds: float

    @property
    def original_mb(self) -> float:
        return bytes_to_mb(self.original_size)

    @property
    def compressed_mb(self) -> float:
        return bytes_to_mb(self.compressed_size)

    @property
    def insert_time_ms(self) -> int:
        """Insert time rounded to the nearest millisecond."""
        return int(round(self.insert_time_seconds * 1000))


@dataclass
class BenchmarkReport:
    """Complete benchmark results."""

    original_size: int
    timestamp: str
    database: str
    results: List[RunResult] = field(default_factory=list)

    @property
    def original_mb(self) -> float:
        return bytes_to_mb(self.original_size)
