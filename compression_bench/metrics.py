"""Metrics calculation for compression benchmarks."""

from dataclasses import dataclass
from typing import List, Sequence

import numpy as np

from .errors import StatsError
from .results import RunResult
from .sizing import bytes_to_mb


@dataclass(frozen=True)
class BandwidthProjection:
    """Network volume for repeated transfers of one algorithm's payload."""

    algorithm: str
    total_mb: float
    saved_mb: float
    savings_percent: float


@dataclass(frozen=True)
class AlgorithmCost:
    """Monthly transfer cost for one algorithm."""

    algorithm: str
    monthly_cost: float
    savings: float
    savings_percent: float


@dataclass(frozen=True)
class CostProjection:
    """Monthly transfer cost with and without compression."""

    uncompressed_cost: float
    costs: List[AlgorithmCost]


def _check_sizes(original_size: int, compressed_size: int) -> None:
    if compressed_size <= 0:
        raise StatsError(
            f"Backend reported storage size {compressed_size}; "
            f"cannot derive compression metrics"
        )
    if original_size <= 0:
        raise ValueError(f"original_size must be positive, got {original_size}")


def calculate_reduction_percent(original_size: int, compressed_size: int) -> float:
    """
    Calculate the size reduction as a percentage.

    Args:
        original_size: Uncompressed BSON size in bytes
        compressed_size: Storage size reported by the backend in bytes

    Returns:
        (1 - compressed/original) * 100; negative if the payload grew

    Raises:
        StatsError: If compressed_size is zero or negative
    """
    _check_sizes(original_size, compressed_size)
    return (1 - compressed_size / original_size) * 100


def calculate_compression_ratio(original_size: int, compressed_size: int) -> float:
    """
    Calculate original/compressed.

    Raises:
        StatsError: If compressed_size is zero or negative
    """
    _check_sizes(original_size, compressed_size)
    return original_size / compressed_size


def select_best_compression(results: Sequence[RunResult]) -> RunResult:
    """Return the result with the highest reduction; first one wins ties."""
    if not results:
        raise ValueError("No results to select from")
    # argmax returns the first occurrence of the maximum
    return results[int(np.argmax([r.reduction_percent for r in results]))]


def select_fastest_insert(results: Sequence[RunResult]) -> RunResult:
    """Return the result with the lowest insert time; first one wins ties."""
    if not results:
        raise ValueError("No results to select from")
    return results[int(np.argmin([r.insert_time_seconds for r in results]))]


def project_bandwidth(
    results: Sequence[RunResult],
    original_size: int,
    transfers: int,
) -> List[BandwidthProjection]:
    """
    Project network volume for `transfers` transfers of the payload.

    Args:
        results: Per-algorithm results
        original_size: Uncompressed BSON size in bytes
        transfers: Number of times the payload is sent

    Returns:
        One projection per result, in the same order
    """
    original_total_mb = bytes_to_mb(original_size) * transfers

    projections = []
    for r in results:
        total_mb = bytes_to_mb(r.compressed_size) * transfers
        saved_mb = original_total_mb - total_mb
        projections.append(
            BandwidthProjection(
                algorithm=r.algorithm,
                total_mb=total_mb,
                saved_mb=saved_mb,
                savings_percent=saved_mb / original_total_mb * 100,
            )
        )
    return projections


def calculate_transfer_cost(size_mb: float, transfers: int, cost_per_gb: float) -> float:
    """Cost of sending `size_mb` MB `transfers` times at `cost_per_gb`."""
    return size_mb * transfers / 1024 * cost_per_gb


def project_cost(
    results: Sequence[RunResult],
    original_size: int,
    transfers: int,
    cost_per_gb: float,
) -> CostProjection:
    """
    Project monthly data-transfer cost for each algorithm.

    Args:
        results: Per-algorithm results
        original_size: Uncompressed BSON size in bytes
        transfers: Transfers per month
        cost_per_gb: Price per GB transferred

    Returns:
        CostProjection with the uncompressed baseline and one entry per result
    """
    uncompressed_cost = calculate_transfer_cost(
        bytes_to_mb(original_size), transfers, cost_per_gb
    )

    costs = []
    for r in results:
        cost = calculate_transfer_cost(r.compressed_mb, transfers, cost_per_gb)
        savings = uncompressed_cost - cost
        savings_percent = savings / uncompressed_cost * 100 if uncompressed_cost > 0 else 0.0
        costs.append(
            AlgorithmCost(
                algorithm=r.algorithm,
                monthly_cost=cost,
                savings=savings,
                savings_percent=savings_percent,
            )
        )

    return CostProjection(uncompressed_cost=uncompressed_cost, costs=costs)
