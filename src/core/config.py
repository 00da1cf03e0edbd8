"""
Run configuration for the lookup benchmark.

Configuration lives in ``config/bench_config.yaml`` under a top-level
``benchmark:`` section. Any key left out falls back to the defaults in
:mod:`core.constants`; command line flags are applied on top with
:meth:`BenchConfig.override`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from core.constants import (
    DEFAULT_FILE_STEM,
    DEFAULT_MAX_TIME_S,
    DEFAULT_MIN_RUNS,
    DEFAULT_NUM_RUNS,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_TITLE,
    DEFAULT_WARMUP_RUNS,
    NUM_CHILDREN,
    NUM_PARENTS,
)

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
DEFAULT_CONFIG_PATH = PROJECT_ROOT / "config" / "bench_config.yaml"


@dataclass
class BenchConfig:
    """Dataset sizes, sampling limits and output locations for one run."""
    num_parents: int = NUM_PARENTS
    num_children: int = NUM_CHILDREN
    num_runs: int = DEFAULT_NUM_RUNS
    warmup_runs: int = DEFAULT_WARMUP_RUNS
    min_runs: int = DEFAULT_MIN_RUNS
    max_time_s: float = DEFAULT_MAX_TIME_S
    output_dir: str = DEFAULT_OUTPUT_DIR
    file_stem: str = DEFAULT_FILE_STEM
    title: str = DEFAULT_TITLE
    strategies: List[str] = field(default_factory=list)
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "BenchConfig":
        """Build a config from a mapping, rejecting unknown keys."""
        data = dict(data or {})
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown benchmark config keys: {', '.join(unknown)}")
        strategies = data.get("strategies")
        if strategies is None:
            data["strategies"] = []
        elif isinstance(strategies, str):
            data["strategies"] = [strategies]
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def override(self, **kwargs: Any) -> "BenchConfig":
        """Return a copy with every non-None keyword applied."""
        changes = {k: v for k, v in kwargs.items() if v is not None}
        return replace(self, **changes)

    def validate(self) -> "BenchConfig":
        """Raise ValueError listing every invalid setting; return self otherwise."""
        problems = []
        if self.num_parents <= 0:
            problems.append(f"num_parents must be positive (got {self.num_parents})")
        if self.num_children < 0:
            problems.append(f"num_children must be non-negative (got {self.num_children})")
        if self.num_runs < 1:
            problems.append(f"num_runs must be >= 1 (got {self.num_runs})")
        if self.min_runs < 1:
            problems.append(f"min_runs must be >= 1 (got {self.min_runs})")
        if self.warmup_runs < 0:
            problems.append(f"warmup_runs must be >= 0 (got {self.warmup_runs})")
        if self.max_time_s <= 0:
            problems.append(f"max_time_s must be positive (got {self.max_time_s})")
        if not isinstance(self.strategies, list) or not all(
            isinstance(name, str) for name in self.strategies
        ):
            problems.append(f"strategies must be a list of names (got {self.strategies!r})")
        if not self.file_stem:
            problems.append("file_stem must not be empty")
        if problems:
            raise ValueError("Invalid benchmark configuration: " + "; ".join(problems))
        return self


def load_config(config_path: Optional[str] = None) -> BenchConfig:
    """
    Load the benchmark configuration from a YAML file.

    Args:
        config_path: Path to a YAML config. Defaults to
            ``config/bench_config.yaml``; when that default is absent the
            built-in defaults are used.

    Returns:
        A validated :class:`BenchConfig`.
    """
    if config_path is None:
        path = DEFAULT_CONFIG_PATH
        if not path.exists():
            logger.info("No config file at %s, using built-in defaults", path)
            return BenchConfig().validate()
    else:
        path = Path(config_path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

    logger.info("Loading configuration from: %s", path)
    with open(path, "r") as f:
        raw = yaml.safe_load(f) or {}

    section = raw.get("benchmark", raw) if isinstance(raw, dict) else None
    if not isinstance(section, dict):
        raise ValueError(f"Config file {path} must contain a 'benchmark' mapping")
    return BenchConfig.from_dict(section).validate()
