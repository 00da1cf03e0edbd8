#!/usr/bin/env python3
"""
===============================================================================
FIND THE THING - MAIN ENTRY POINT
===============================================================================
Benchmarks strategies for resolving each child record's parent by id over a
synthetic dataset (10 parents, 5000 children by default), prints a ranked
comparison and writes a chart report.

USAGE:
    python main.py                         # All strategies, default config
    python main.py --num-children 20000    # Larger dataset
    python main.py --only find --only "dict join"
    python main.py --list                  # Print strategy names

OUTPUTS (in --output-dir, default output/benchmarks):
    bench.chart.html   - HTML report with embedded chart
    bench.png          - ops/sec bar chart
    bench.csv          - full statistics
    bench.md           - Markdown summary
    bench.log          - run log

DEPENDENCIES:
    numpy, scipy, matplotlib, pandas, pyyaml
===============================================================================
"""

import sys
import os
import argparse
import time
import logging
from pathlib import Path
from datetime import datetime
from typing import List, Optional

# ---------------------------------------------------------------------------
# Path setup: ensure all project modules are importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import BenchConfig, load_config
from lookup.strategies import STRATEGIES, benchmark_cases
from performance.benchmarks import Benchmark
from performance.report import format_summary, write_artifacts

logger = logging.getLogger('FIND_THE_THING')

LOG_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'


def setup_logging(output_dir: str, level: str = 'INFO') -> None:
    """Log to stdout and to bench.log inside the output directory."""
    Path(output_dir).mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(os.path.join(output_dir, 'bench.log'), mode='w'),
        ],
        force=True,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Find The Thing: parent lookup strategy benchmark',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                          All strategies
  python main.py --runs 50 --max-time 1   Quicker run
  python main.py --only "dict join"       Single strategy
  python main.py --list                   List strategies
        """
    )
    parser.add_argument('--config', type=str, default=None,
                        help='Path to benchmark config YAML')
    parser.add_argument('--num-parents', type=int, default=None,
                        help='Number of parent records')
    parser.add_argument('--num-children', type=int, default=None,
                        help='Number of child records')
    parser.add_argument('--runs', type=int, default=None,
                        help='Maximum timed samples per strategy')
    parser.add_argument('--warmup', type=int, default=None,
                        help='Untimed warm-up invocations per strategy')
    parser.add_argument('--max-time', type=float, default=None,
                        help='Sampling time budget per strategy (seconds)')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for reports and the run log')
    parser.add_argument('--only', action='append', default=None, metavar='NAME',
                        help='Run only this strategy (repeatable)')
    parser.add_argument('--list', action='store_true',
                        help='List strategy names and exit')
    parser.add_argument('--no-chart', action='store_true',
                        help='Skip the PNG chart and HTML report')
    parser.add_argument('--log-level', type=str, default=None,
                        help='Logging level (default: INFO)')
    return parser


def resolve_config(parser: argparse.ArgumentParser, args: argparse.Namespace) -> BenchConfig:
    """Load the YAML config and apply command line overrides."""
    try:
        config = load_config(args.config)
        config = config.override(
            num_parents=args.num_parents,
            num_children=args.num_children,
            num_runs=args.runs,
            warmup_runs=args.warmup,
            max_time_s=args.max_time,
            output_dir=args.output_dir,
            strategies=args.only,
            log_level=args.log_level,
        )
        config.validate()
        benchmark_cases(config.num_parents, config.num_children, config.strategies)
    except (FileNotFoundError, ValueError, KeyError) as exc:
        parser.error(str(exc))
    return config


def run_benchmarks(config: BenchConfig, chart: bool = True) -> int:
    """Run the configured strategies, print the summary, write reports."""
    logger.info("=" * 60)
    logger.info("RUNNING LOOKUP BENCHMARKS")
    logger.info(f"Dataset: {config.num_parents} parents, {config.num_children} children")
    logger.info("=" * 60)

    cases = benchmark_cases(config.num_parents, config.num_children, config.strategies)
    results = Benchmark.run_cases(
        cases,
        num_runs=config.num_runs,
        warmup_runs=config.warmup_runs,
        max_time_s=config.max_time_s,
        min_runs=config.min_runs,
    )

    print()
    print(format_summary(results, title=config.title))
    print()

    paths = write_artifacts(
        results,
        config.output_dir,
        file_stem=config.file_stem,
        title=config.title,
        config={
            'num_parents': config.num_parents,
            'num_children': config.num_children,
            'num_runs': config.num_runs,
            'max_time_s': config.max_time_s,
        },
        chart=chart,
    )
    for kind, path in paths.items():
        logger.info(f"  {kind}: {path}")

    failed = Benchmark.failed(results)
    if failed:
        logger.warning(f"{len(failed)} case(s) failed: {', '.join(failed)}")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point. Parses command line arguments and runs the
    requested strategies.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.list:
        for strategy in STRATEGIES:
            print(f"{strategy.name:<26} {strategy.description}")
        return 0

    config = resolve_config(parser, args)
    setup_logging(config.output_dir, config.log_level)

    # Print banner
    print("=" * 70)
    print(f"  {config.title.upper()}")
    print(f"  {config.num_parents} parents, {config.num_children} children")
    print("=" * 70)
    print(f"  Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    print("=" * 70)

    start = time.time()
    status = run_benchmarks(config, chart=not args.no_chart)

    print("=" * 70)
    print("  BENCHMARK COMPLETE")
    print(f"  Total wall time: {time.time() - start:.1f} seconds")
    print(f"  Outputs saved to: {os.path.abspath(config.output_dir)}")
    print("=" * 70)
    return status


if __name__ == '__main__':
    sys.exit(main())
