#!/usr/bin/env python3
"""
MongoDB Compression Benchmark Tool

Inserts one large synthetic document into MongoDB once per wire compressor
(snappy, zlib, zstd), each over its own connection, and compares storage
size, insert latency and projected network cost.

Usage:
    python run_benchmark.py

    # Custom settings and CSV/PNG output
    python run_benchmark.py --config benchmark.yaml --output results
"""

import argparse
import logging
import sys
from typing import Optional

from compression_bench.clients.base import BaseDocumentStoreClient
from compression_bench.config import BenchmarkConfig, load_config
from compression_bench.deadline import Deadline
from compression_bench.document import generate_document
from compression_bench.errors import AlgorithmRunError, BenchmarkError
from compression_bench.report import generate_full_report
from compression_bench.runner import BenchmarkRunner
from compression_bench.sizing import bytes_to_mb, measure_document_size


def get_client(database: str) -> BaseDocumentStoreClient:
    """
    Get the appropriate document store client.

    Args:
        database: Backend name (e.g., 'mongodb')

    Returns:
        Unconnected client instance
    """
    if database.lower() in ("mongodb", "mongo"):
        from compression_bench.clients.mongodb_client import MongoDBClient
        return MongoDBClient()
    else:
        raise ValueError(f"Unsupported database: {database}. Supported: mongodb")


def run(config: BenchmarkConfig, output_dir: Optional[str] = None, client_factory=None) -> None:
    """
    Run the full benchmark: generate, measure, report, clean up.

    Args:
        config: Benchmark configuration
        output_dir: Optional directory for CSV and plot output
        client_factory: Returns a new client per connection (default: MongoDB)
    """
    client_factory = client_factory or (lambda: get_client("mongodb"))
    deadline = Deadline(config.timeout_seconds)

    print("MongoDB Compression Demo - Python")
    print()

    print("Generating test document...")
    document = generate_document(config.document)
    original_size = measure_document_size(document)
    print(f"Generated document: {bytes_to_mb(original_size):.2f}MB\n")

    print("Running compression tests...")
    print("─" * 40)

    runner = BenchmarkRunner(client_factory, config, deadline=deadline)
    report = runner.run_all(document, original_size)

    generate_full_report(report, config.report, output_dir)

    print("\nCleaning up...")
    runner.cleanup()

    print("Demo completed successfully!")


def main():
    parser = argparse.ArgumentParser(
        description="MongoDB Compression Benchmark Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Default settings (mongodb://localhost:27017, 30s deadline)
    python run_benchmark.py

    # Custom settings
    python run_benchmark.py --config benchmark.yaml --output results
        """,
    )
    parser.add_argument(
        "--config", "-c",
        default=None,
        help="Path to benchmark YAML config (default: built-in settings)",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Directory for CSV results and chart (default: console only)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # pymongo is chatty at DEBUG
    logging.getLogger("pymongo").setLevel(logging.WARNING)

    try:
        config = load_config(args.config)
        run(config, args.output)
    except AlgorithmRunError as e:
        print(f"\nError: compression tests failed: {e}", file=sys.stderr)
        sys.exit(1)
    except BenchmarkError as e:
        print(f"\nError: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nBenchmark interrupted by user.")
        sys.exit(1)


if __name__ == "__main__":
    main()
