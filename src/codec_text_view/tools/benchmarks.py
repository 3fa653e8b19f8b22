"""Performance benchmarking for decoding and encoding iterators.

This module measures how fast each traversal tier walks a storage of encoded
text and how much memory it takes, so that regressions in the stepping code
or in the reference codecs show up as numbers.
"""

import gc
import random
import statistics
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence

import psutil

from codec_text_view.character.codecs import get_codec
from codec_text_view.character.iterator import make_text_end, make_text_iterator
from codec_text_view.character.output import make_text_writer
from codec_text_view.character.sentinel import make_text_sentinel
from codec_text_view.character.storage import CodeUnitSequence, CodeUnitStream
from codec_text_view.shared.config import BenchmarkConfig
from codec_text_view.shared.logging import get_logger

DEFAULT_CODECS = ("utf-8", "utf-16", "utf-32")

SCENARIOS = ("forward_stream", "forward", "backward", "random_access", "encode")

# Characters drawn from for each generated test case
_ALPHABETS: Dict[str, str] = {
    "ascii": "abcdefghijklmnopqrstuvwxyz ABCDEFGHIJKLMNOPQRSTUVWXYZ 0123456789.,\n",
    "mixed_bmp": "aeiou éüß€Жλ中文あ\n",
    "supplementary": "ab \U0001F600\U0001F680\U00010348\U0001D11E€",
}


@dataclass
class BenchmarkResult:
    """Result of a single benchmark run."""

    codec_name: str
    scenario: str
    test_case: str
    tier: str
    processing_time_ms: float
    memory_used_mb: float
    characters_processed: int
    code_units_processed: int
    success: bool
    error_message: Optional[str] = None

    @property
    def characters_per_second(self) -> float:
        """Calculate characters processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.characters_processed * 1000.0) / self.processing_time_ms

    @property
    def code_units_per_second(self) -> float:
        """Calculate code units processed per second."""
        if self.processing_time_ms <= 0:
            return 0.0
        return (self.code_units_processed * 1000.0) / self.processing_time_ms

    @property
    def key(self) -> str:
        return f"{self.codec_name}/{self.scenario}"


@dataclass
class BenchmarkSuite:
    """Collection of benchmark results with statistical analysis."""

    results: List[BenchmarkResult] = field(default_factory=list)
    suite_name: str = "Traversal Benchmark"
    timestamp: float = field(default_factory=time.time)

    def add_result(self, result: BenchmarkResult) -> None:
        """Add a benchmark result to the suite."""
        self.results.append(result)

    def get_results_by_codec(self, codec_name: str) -> List[BenchmarkResult]:
        """Get all results for a specific codec."""
        return [r for r in self.results if r.codec_name == codec_name]

    def get_results_by_scenario(self, scenario: str) -> List[BenchmarkResult]:
        """Get all results for a specific traversal scenario."""
        return [r for r in self.results if r.scenario == scenario]

    def get_statistics(self, codec_name: str, metric: str) -> Dict[str, float]:
        """Get statistical analysis for a codec and metric."""
        values = [
            getattr(r, metric)
            for r in self.get_results_by_codec(codec_name)
            if r.success and hasattr(r, metric)
        ]
        if not values:
            return {}

        return {
            "min": min(values),
            "max": max(values),
            "mean": statistics.mean(values),
            "median": statistics.median(values),
            "stdev": statistics.stdev(values) if len(values) > 1 else 0.0,
            "count": len(values)
        }

    def generate_report(self) -> Dict[str, Any]:
        """Generate comprehensive benchmark report."""
        codecs = sorted(set(r.codec_name for r in self.results))
        scenarios = sorted(set(r.scenario for r in self.results))

        report: Dict[str, Any] = {
            "suite_name": self.suite_name,
            "timestamp": self.timestamp,
            "total_results": len(self.results),
            "codecs": codecs,
            "scenarios": scenarios,
            "summary": {},
            "detailed_results": {}
        }

        for codec_name in codecs:
            codec_results = self.get_results_by_codec(codec_name)
            successful_results = [r for r in codec_results if r.success]

            report["summary"][codec_name] = {
                "total_runs": len(codec_results),
                "successful_runs": len(successful_results),
                "success_rate": len(successful_results) / len(codec_results),
                "performance": self.get_statistics(codec_name, "characters_per_second"),
                "memory": self.get_statistics(codec_name, "memory_used_mb")
            }

        for result in self.results:
            case = report["detailed_results"].setdefault(result.test_case, {})
            case[result.key] = {
                "tier": result.tier,
                "processing_time_ms": result.processing_time_ms,
                "memory_used_mb": result.memory_used_mb,
                "characters_per_second": result.characters_per_second,
                "code_units_per_second": result.code_units_per_second,
                "success": result.success,
                "error": result.error_message
            }

        return report


class TraversalBenchmark:
    """Benchmark of the decoding and encoding iterators over reference codecs."""

    def __init__(
        self,
        config: Optional[BenchmarkConfig] = None,
        correlation_id: Optional[str] = None,
        seed: int = 0
    ) -> None:
        """Initialize benchmark.

        Args:
            config: Run counts and sample sizes
            correlation_id: Optional correlation ID for tracking
            seed: Seed for the generated test text and random-access probes
        """
        self.config = config or BenchmarkConfig()
        self.correlation_id = correlation_id
        self.seed = seed
        self.logger = get_logger(__name__, correlation_id, "benchmark")
        self.test_cases = self._create_test_cases()

    def _create_test_cases(self) -> Dict[str, str]:
        """Create test text for benchmarking."""
        rng = random.Random(self.seed)
        size = self.config.sample_characters
        return {
            name: "".join(rng.choice(alphabet) for _ in range(size))
            for name, alphabet in _ALPHABETS.items()
        }

    def _measure_memory_usage(self) -> float:
        """Get current memory usage in MB."""
        process = psutil.Process()
        return process.memory_info().rss / 1024 / 1024

    @staticmethod
    def encode_text(codec: Any, text: str) -> List[int]:
        """Encode ``text`` into a list of code units with ``codec``."""
        units: List[int] = []
        make_text_writer(codec, units).write_all(text)
        return units

    def _forward_stream(self, codec: Any, units: List[int], text: str) -> int:
        stream = CodeUnitStream(units)
        it = make_text_iterator(codec, stream)
        end = make_text_sentinel(stream)
        count = 0
        while it != end:
            count += 1
            it.advance()
        return count

    def _forward(self, codec: Any, units: List[int], text: str) -> int:
        storage = CodeUnitSequence(units)
        it = make_text_iterator(codec, storage)
        end = make_text_end(codec, storage)
        count = 0
        while it != end:
            count += 1
            it.advance()
        return count

    def _backward(self, codec: Any, units: List[int], text: str) -> int:
        storage = CodeUnitSequence(units)
        it = make_text_end(codec, storage)
        begin = make_text_iterator(codec, storage)
        if not it.capability.tier.can_retreat:
            raise TypeError(f"{it.capability.tier.name} iterators cannot retreat")
        count = 0
        while it != begin:
            it.retreat()
            count += 1
        return count

    def _random_access(self, codec: Any, units: List[int], text: str) -> int:
        storage = CodeUnitSequence(units)
        begin = make_text_iterator(codec, storage)
        if not begin.capability.tier.supports_arithmetic:
            raise TypeError(f"{begin.capability.tier.name} iterators have no offsets")
        rng = random.Random(self.seed)
        probes = self.config.random_access_probes
        for _ in range(probes):
            begin[rng.randrange(len(text))]
        return probes

    def _encode(self, codec: Any, units: List[int], text: str) -> int:
        self.encode_text(codec, text)
        return len(text)

    def _scenario(self, scenario: str) -> Callable[[Any, List[int], str], int]:
        return {
            "forward_stream": self._forward_stream,
            "forward": self._forward,
            "backward": self._backward,
            "random_access": self._random_access,
            "encode": self._encode,
        }[scenario]

    def benchmark_once(
        self,
        codec_name: str,
        scenario: str,
        test_case: str
    ) -> BenchmarkResult:
        """Run one scenario once and measure it."""
        codec = get_codec(codec_name)
        text = self.test_cases[test_case]
        units = self.encode_text(codec, text)
        storage = CodeUnitStream(units) if scenario == "forward_stream" else CodeUnitSequence(units)
        tier = make_text_iterator(codec, storage).capability.tier
        run = self._scenario(scenario)

        gc.collect()
        memory_before = self._measure_memory_usage()
        start_time = time.time()

        try:
            characters = run(codec, units, text)
            success = True
            error_message = None
        except (TypeError, ValueError) as e:
            characters = 0
            success = False
            error_message = str(e)

        processing_time = (time.time() - start_time) * 1000
        memory_after = self._measure_memory_usage()

        return BenchmarkResult(
            codec_name=codec_name,
            scenario=scenario,
            test_case=test_case,
            tier=tier.name,
            processing_time_ms=processing_time,
            memory_used_mb=max(0.0, memory_after - memory_before),
            characters_processed=characters,
            code_units_processed=len(units),
            success=success,
            error_message=error_message
        )

    def run_benchmark(
        self,
        codecs: Sequence[str] = DEFAULT_CODECS,
        scenarios: Sequence[str] = SCENARIOS
    ) -> BenchmarkSuite:
        """Run the benchmark suite.

        Args:
            codecs: Registry names of the codecs to measure
            scenarios: Traversal scenarios to run for each codec

        Returns:
            BenchmarkSuite with one averaged result per codec, scenario and
            test case
        """
        for scenario in scenarios:
            if scenario not in SCENARIOS:
                raise ValueError(f"Unknown scenario {scenario!r}; choose from {SCENARIOS}")

        suite = BenchmarkSuite()
        self.logger.info(
            "Starting benchmark suite",
            extra={
                "codecs": list(codecs),
                "scenarios": list(scenarios),
                "warmup_runs": self.config.warmup_runs,
                "benchmark_runs": self.config.benchmark_runs
            }
        )

        for test_case in self.test_cases:
            self.logger.debug(f"Benchmarking test case: {test_case}")
            for codec_name in codecs:
                for scenario in scenarios:
                    for _ in range(self.config.warmup_runs):
                        self.benchmark_once(codec_name, scenario, test_case)

                    run_results = [
                        self.benchmark_once(codec_name, scenario, test_case)
                        for _ in range(self.config.benchmark_runs)
                    ]
                    suite.add_result(self._average(run_results))

        self.logger.info(
            "Benchmark suite completed",
            extra={
                "total_results": len(suite.results),
                "suite_duration_seconds": time.time() - suite.timestamp
            }
        )
        return suite

    @staticmethod
    def _average(run_results: List[BenchmarkResult]) -> BenchmarkResult:
        successful_runs = [r for r in run_results if r.success]
        if not successful_runs:
            return run_results[0]

        first = successful_runs[0]
        return BenchmarkResult(
            codec_name=first.codec_name,
            scenario=first.scenario,
            test_case=first.test_case,
            tier=first.tier,
            processing_time_ms=statistics.mean([r.processing_time_ms for r in successful_runs]),
            memory_used_mb=statistics.mean([r.memory_used_mb for r in successful_runs]),
            characters_processed=first.characters_processed,
            code_units_processed=first.code_units_processed,
            success=True
        )

    def compare_performance(
        self,
        baseline_suite: BenchmarkSuite,
        current_suite: BenchmarkSuite,
        threshold: float = 0.05
    ) -> Dict[str, Any]:
        """Compare performance between two benchmark suites.

        Args:
            baseline_suite: Baseline benchmark results
            current_suite: Current benchmark results
            threshold: Relative time change treated as significant

        Returns:
            Performance comparison report
        """
        comparison: Dict[str, Any] = {
            "baseline_timestamp": baseline_suite.timestamp,
            "current_timestamp": current_suite.timestamp,
            "improvements": {},
            "regressions": {},
            "summary": {}
        }

        current_by_key = {
            (r.test_case, r.key): r for r in current_suite.results if r.success
        }
        for baseline in baseline_suite.results:
            current = current_by_key.get((baseline.test_case, baseline.key))
            if current is None or not baseline.success or baseline.processing_time_ms <= 0:
                continue

            time_change = (
                (current.processing_time_ms - baseline.processing_time_ms)
                / baseline.processing_time_ms
            )
            entry = {
                "time_change_percent": time_change * 100,
                "baseline_time_ms": baseline.processing_time_ms,
                "current_time_ms": current.processing_time_ms
            }
            key = f"{baseline.key}/{baseline.test_case}"
            if time_change < -threshold:
                comparison["improvements"][key] = entry
            elif time_change > threshold:
                comparison["regressions"][key] = entry

        comparison["summary"] = {
            "total_improvements": len(comparison["improvements"]),
            "total_regressions": len(comparison["regressions"]),
            "has_regressions": len(comparison["regressions"]) > 0
        }
        return comparison
