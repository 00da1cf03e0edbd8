"""
benchmarks.py - Benchmark runner for the lookup strategies

Times every named case and consolidates the results into a single pandas
DataFrame so they can be printed, ranked, plotted and exported.

A case is a ``(name, setup_fn)`` pair. ``setup_fn()`` is called once and
returns the timed callable; the runner then:

    1. Warms up      - a few untimed invocations so caches, the allocator and
                       the interpreter's specialising bytecode settle.
    2. Samples       - times single invocations with ``time.perf_counter``
                       until ``num_runs`` samples are taken or ``max_time_s``
                       is spent (never fewer than ``min_runs``).
    3. Summarises    - min / max / mean / median / std, operations per second
                       and the relative margin of error at 95% confidence
                       (Student t distribution).

A case that raises is recorded as failed with its error message; the
remaining cases still run.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
from scipy import stats

from core.constants import (
    CONFIDENCE_LEVEL,
    DEFAULT_MAX_TIME_S,
    DEFAULT_MIN_RUNS,
    DEFAULT_NUM_RUNS,
    DEFAULT_WARMUP_RUNS,
)

logger = logging.getLogger(__name__)

STATUS_OK = "ok"
STATUS_FAILED = "failed"

STAT_KEYS = [
    "min", "max", "mean", "median", "std", "total",
    "num_runs", "ops_per_sec", "margin_pct",
]
RESULT_COLUMNS = STAT_KEYS + ["status", "error", "rank", "relative_pct"]


@dataclass
class CaseResult:
    """Outcome of one benchmark case."""
    name: str
    status: str
    stats: Dict[str, float] = field(default_factory=dict)
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status == STATUS_OK

    def to_row(self) -> Dict[str, Any]:
        row: Dict[str, Any] = {"name": self.name}
        for key in STAT_KEYS:
            row[key] = self.stats.get(key, np.nan)
        row["status"] = self.status
        row["error"] = self.error
        return row


class Benchmark:
    """
    Timing harness for zero-argument benchmark cases.

    All public methods return plain dicts, :class:`CaseResult` objects or
    DataFrames so callers can serialise, plot or aggregate as they wish.
    """

    # ---- Core measurement helpers ----------------------------------------

    @staticmethod
    def summarize(times: Sequence[float], confidence: float = CONFIDENCE_LEVEL) -> Dict[str, float]:
        """
        Descriptive statistics for a list of per-invocation times (seconds).

        ``margin_pct`` is the half-width of the confidence interval of the
        mean, as a percentage of the mean. It is 0 for a single sample.
        """
        samples = np.asarray(times, dtype=np.float64)
        n = samples.size
        if n == 0:
            raise ValueError("Cannot summarise an empty sample")

        mean = float(samples.mean())
        std = float(samples.std(ddof=1)) if n > 1 else 0.0

        if n > 1 and mean > 0:
            sem = std / math.sqrt(n)
            critical = float(stats.t.ppf((1.0 + confidence) / 2.0, n - 1))
            margin_pct = critical * sem / mean * 100.0
        else:
            margin_pct = 0.0

        return {
            "min": float(samples.min()),
            "max": float(samples.max()),
            "mean": mean,
            "median": float(np.median(samples)),
            "std": std,
            "total": float(samples.sum()),
            "num_runs": int(n),
            "ops_per_sec": 1.0 / mean if mean > 0 else math.inf,
            "margin_pct": margin_pct,
        }

    @staticmethod
    def time_function(
        func: Callable[[], Any],
        num_runs: int = DEFAULT_NUM_RUNS,
        warmup_runs: int = DEFAULT_WARMUP_RUNS,
        max_time_s: Optional[float] = DEFAULT_MAX_TIME_S,
        min_runs: int = DEFAULT_MIN_RUNS,
    ) -> Dict[str, float]:
        """
        Time *func* and return descriptive statistics.

        Sampling stops after *num_runs* invocations, or once *max_time_s*
        seconds have elapsed and at least *min_runs* samples exist.

        Returns
        -------
        dict with keys: min, max, mean, median, std, total, num_runs,
            ops_per_sec, margin_pct. Times are in **seconds**.
        """
        if num_runs < 1:
            raise ValueError(f"num_runs must be >= 1 (got {num_runs})")
        min_runs = min(max(min_runs, 1), num_runs)

        for _ in range(warmup_runs):
            func()

        times: List[float] = []
        started = time.perf_counter()
        while len(times) < num_runs:
            t0 = time.perf_counter()
            func()
            t1 = time.perf_counter()
            times.append(t1 - t0)
            if (
                max_time_s is not None
                and len(times) >= min_runs
                and t1 - started >= max_time_s
            ):
                break

        return Benchmark.summarize(times)

    # ---- Cases -------------------------------------------------------------

    @staticmethod
    def run_case(
        name: str,
        setup: Callable[[], Callable[[], Any]],
        num_runs: int = DEFAULT_NUM_RUNS,
        warmup_runs: int = DEFAULT_WARMUP_RUNS,
        max_time_s: Optional[float] = DEFAULT_MAX_TIME_S,
        min_runs: int = DEFAULT_MIN_RUNS,
    ) -> CaseResult:
        """Set up one case and time its callable. Failures are captured."""
        logger.info("Running case: %s", name)
        try:
            func = setup()
            summary = Benchmark.time_function(
                func,
                num_runs=num_runs,
                warmup_runs=warmup_runs,
                max_time_s=max_time_s,
                min_runs=min_runs,
            )
        except Exception as exc:
            logger.warning("Case %r failed: %s: %s", name, type(exc).__name__, exc)
            return CaseResult(name=name, status=STATUS_FAILED, error=f"{type(exc).__name__}: {exc}")

        logger.info(
            "  %s: %.1f ops/s ±%.2f%% (%d runs)",
            name, summary["ops_per_sec"], summary["margin_pct"], summary["num_runs"],
        )
        return CaseResult(name=name, status=STATUS_OK, stats=summary)

    @staticmethod
    def run_cases(
        cases: Sequence[Tuple[str, Callable[[], Callable[[], Any]]]],
        num_runs: int = DEFAULT_NUM_RUNS,
        warmup_runs: int = DEFAULT_WARMUP_RUNS,
        max_time_s: Optional[float] = DEFAULT_MAX_TIME_S,
        min_runs: int = DEFAULT_MIN_RUNS,
    ) -> pd.DataFrame:
        """
        Run every case in order and return one row per case.

        Returns
        -------
        pd.DataFrame
            Indexed by case name with the statistics from
            :meth:`time_function` plus ``status``, ``error``, ``rank``
            (1 = fastest successful case) and ``relative_pct`` (ops/sec as a
            percentage of the fastest case).
        """
        names = [name for name, _ in cases]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise ValueError(f"Duplicate case names: {', '.join(duplicates)}")

        results = [
            Benchmark.run_case(
                name, setup,
                num_runs=num_runs,
                warmup_runs=warmup_runs,
                max_time_s=max_time_s,
                min_runs=min_runs,
            )
            for name, setup in cases
        ]
        return Benchmark.to_frame(results)

    @staticmethod
    def to_frame(results: Sequence[CaseResult]) -> pd.DataFrame:
        """Consolidate case results and add ranking columns."""
        df = pd.DataFrame(
            [r.to_row() for r in results],
            columns=["name"] + STAT_KEYS + ["status", "error"],
        ).set_index("name")

        ok = df["status"] == STATUS_OK
        df["rank"] = df.loc[ok, "ops_per_sec"].rank(ascending=False, method="min")
        df["rank"] = df["rank"].astype("Int64")
        df["relative_pct"] = np.nan
        if ok.any():
            best = df.loc[ok, "ops_per_sec"].max()
            df.loc[ok, "relative_pct"] = df.loc[ok, "ops_per_sec"] / best * 100.0
        return df[RESULT_COLUMNS]

    # ---- Extremes ----------------------------------------------------------

    @staticmethod
    def fastest(df: pd.DataFrame) -> Optional[str]:
        """Name of the successful case with the highest ops/sec."""
        ok = df[df["status"] == STATUS_OK]
        if ok.empty:
            return None
        return str(ok["ops_per_sec"].idxmax())

    @staticmethod
    def slowest(df: pd.DataFrame) -> Optional[str]:
        """Name of the successful case with the lowest ops/sec."""
        ok = df[df["status"] == STATUS_OK]
        if ok.empty:
            return None
        return str(ok["ops_per_sec"].idxmin())

    @staticmethod
    def failed(df: pd.DataFrame) -> List[str]:
        return [str(name) for name in df.index[df["status"] == STATUS_FAILED]]
