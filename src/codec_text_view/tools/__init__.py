"""Developer tools module for Codec Text View.

This module provides traversal and encoding benchmarks for the iterator core
and the reference codecs.
"""

from .benchmarks import BenchmarkResult, BenchmarkSuite, TraversalBenchmark

__all__ = [
    "BenchmarkResult",
    "BenchmarkSuite",
    "TraversalBenchmark",
]
