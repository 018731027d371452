"""Report generation for compression benchmark results."""

import csv
from pathlib import Path
from typing import Optional

import matplotlib.pyplot as plt

from .config import ReportConfig
from .metrics import (
    project_bandwidth,
    project_cost,
    select_best_compression,
    select_fastest_insert,
)
from .results import BenchmarkReport

# Illustrative figures from a 4.7MB reference run: (reduction %, final size MB)
EXPECTED_RESULTS = (
    ("Snappy", 25.0, 3.53),
    ("Zlib", 52.0, 2.26),
    ("Zstd", 53.0, 2.21),
)

KEY_INSIGHTS = (
    "Zstd provides the best balance of compression and speed",
    "Zlib offers maximum compression but with higher CPU cost",
    "Snappy is fastest but provides less compression",
    "For 4.7MB documents, compression saves ~2.5MB per transfer!",
)


def reduction_rating(reduction_percent: float) -> str:
    """Classify a reduction percentage as good, fair or poor."""
    if reduction_percent >= 50:
        return "good"
    if reduction_percent >= 30:
        return "fair"
    return "poor"


def reduction_bar(reduction_percent: float) -> str:
    """One block per 2% of reduction; no bar for a payload that grew."""
    return "█" * max(0, int(reduction_percent / 2))


def print_console_report(report: BenchmarkReport) -> None:
    """
    Print per-algorithm results to console.

    Args:
        report: Complete benchmark results (must contain at least one result)
    """
    print(f"\nCOMPRESSION RESULTS FOR {report.original_mb:.2f}MB DOCUMENT")
    print("═" * 70)

    for r in report.results:
        print(f"{r.algorithm}:")
        print(f"   Original:    {r.original_mb:6.2f} MB")
        print(f"   Compressed:  {r.compressed_mb:6.2f} MB")
        print(f"   Reduction:   {r.reduction_percent:6.1f}% ({reduction_rating(r.reduction_percent)})")
        print(f"   Ratio:       {r.compression_ratio:.2f}x")
        print(f"   Insert Time: {r.insert_time_ms}ms")
        print()


def print_comparison_chart(report: BenchmarkReport) -> None:
    """Print a text bar chart of reduction percentages."""
    print("COMPRESSION PERFORMANCE COMPARISON:")
    print("─" * 60)

    for r in report.results:
        print(f"{r.algorithm:<8} {reduction_bar(r.reduction_percent)} {r.reduction_percent:5.1f}%")

    print("─" * 60)


def print_performance_analysis(report: BenchmarkReport, config: ReportConfig) -> None:
    """Print best/fastest selection and the network traffic simulation."""
    print("\nPERFORMANCE ANALYSIS:")
    print("─" * 50)

    best = select_best_compression(report.results)
    fastest = select_fastest_insert(report.results)

    print(f"Best Compression: {best.algorithm} ({best.reduction_percent:.1f}% reduction)")
    print(f"Fastest Insert:   {fastest.algorithm} ({fastest.insert_time_ms}ms)")

    print(f"\nNETWORK TRAFFIC SIMULATION ({config.network_transfers:,} transfers):")
    for p in project_bandwidth(report.results, report.original_size, config.network_transfers):
        print(
            f"{p.algorithm:<8}: {p.total_mb:6.1f} MB total "
            f"(saves {p.saved_mb:5.1f} MB, {p.savings_percent:4.1f}%)"
        )


def print_cost_analysis(report: BenchmarkReport, config: ReportConfig) -> None:
    """Print projected monthly data-transfer cost per algorithm."""
    print(f"\nCLOUD COST ANALYSIS (Data Transfer ${config.cost_per_gb:.2f}/GB, "
          f"{config.monthly_transfers:,} transfers/month):")
    print("─" * 55)

    projection = project_cost(
        report.results,
        report.original_size,
        config.monthly_transfers,
        config.cost_per_gb,
    )

    print(f"No Compression: ${projection.uncompressed_cost:.2f}/month")
    for c in projection.costs:
        print(
            f"{c.algorithm:<8}: ${c.monthly_cost:6.2f}/month "
            f"(saves ${c.savings:5.2f}, {c.savings_percent:.1f}% cost reduction)"
        )


def print_expected_results() -> None:
    """Print the illustrative reference results and key insights."""
    print("\nEXPECTED RESULTS (reference 4.7MB document test):")
    print("═" * 65)

    for algorithm, reduction, size_mb in EXPECTED_RESULTS:
        print(f"{algorithm}:")
        print(f"   • Reduction: {reduction:.1f}%")
        print(f"   • Final Size: {size_mb:.2f}MB")
        print(f"   • Bandwidth Saved: {reduction:.1f}%")
        print()

    print("KEY INSIGHTS:")
    for insight in KEY_INSIGHTS:
        print(f"   • {insight}")
    print("═" * 65)


def save_results_csv(report: BenchmarkReport, output_path: str) -> None:
    """
    Save per-algorithm results to CSV.

    Args:
        report: Complete benchmark results
        output_path: Path to output CSV file
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", newline="") as f:
        writer = csv.writer(f)

        # Header
        writer.writerow([
            "algorithm",
            "compressor",
            "original_size_bytes",
            "compressed_size_bytes",
            "reduction_percent",
            "compression_ratio",
            "insert_time_ms",
        ])

        # Data
        for r in report.results:
            writer.writerow([
                r.algorithm,
                r.compressor,
                r.original_size,
                r.compressed_size,
                f"{r.reduction_percent:.2f}",
                f"{r.compression_ratio:.3f}",
                f"{r.insert_time_seconds * 1000:.2f}",
            ])

    print(f"Saved results to {path}")


def plot_reduction_chart(
    report: BenchmarkReport,
    output_path: str,
    title: Optional[str] = None,
) -> None:
    """
    Create a bar chart of stored size per algorithm against the original.

    Args:
        report: Complete benchmark results
        output_path: Path to save the plot
        title: Plot title
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    labels = ["Uncompressed"] + [r.algorithm for r in report.results]
    sizes_mb = [report.original_mb] + [r.compressed_mb for r in report.results]
    colors = ["grey"] + ["tab:blue"] * len(report.results)

    fig, ax = plt.subplots(figsize=(8, 5))
    bars = ax.bar(labels, sizes_mb, color=colors)

    # Annotate each compressed bar with its reduction
    for bar, r in zip(bars[1:], report.results):
        ax.annotate(
            f"-{r.reduction_percent:.1f}%",
            (bar.get_x() + bar.get_width() / 2, bar.get_height()),
            textcoords="offset points",
            xytext=(0, 4),
            ha="center",
            fontsize=9,
        )

    ax.set_ylabel("Stored size (MB)", fontsize=12)
    ax.set_title(title or f"Storage size for {report.original_mb:.2f}MB document", fontsize=14)
    ax.grid(True, axis="y", alpha=0.3)

    plt.tight_layout()
    plt.savefig(path, dpi=150, bbox_inches="tight")
    plt.close(fig)

    print(f"Saved plot to {path}")


def generate_full_report(
    report: BenchmarkReport,
    config: ReportConfig,
    output_dir: Optional[str] = None,
) -> None:
    """
    Generate all reports (console, and optionally CSV and plot).

    Args:
        report: Complete benchmark results; must not be empty
        config: Projection constants
        output_dir: Directory to save output files; None for console only
    """
    print_console_report(report)
    print_comparison_chart(report)
    print_performance_analysis(report, config)
    print_cost_analysis(report, config)

    if config.show_expected_results:
        print_expected_results()

    if output_dir is not None:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        save_results_csv(report, str(output_path / "compression_results.csv"))
        plot_reduction_chart(report, str(output_path / "compression_sizes.png"))
