"""
===============================================================================
FIND THE THING - Dataset and Run Constants
===============================================================================
Default sizes for the synthetic parent/child dataset and default settings for
the benchmark runner. Every value here can be overridden through the YAML
config or the command line; these are only the fallbacks.
===============================================================================
"""

# =============================================================================
# DATASET SIZES
# =============================================================================
NUM_PARENTS = 10                       # Parents, ids 0..NUM_PARENTS-1
NUM_CHILDREN = 5000                    # Children, parent_id = index % NUM_PARENTS

# =============================================================================
# RUNNER DEFAULTS
# =============================================================================
DEFAULT_NUM_RUNS = 200                 # Timed samples per case (upper bound)
DEFAULT_WARMUP_RUNS = 5                # Untimed invocations before sampling
DEFAULT_MIN_RUNS = 5                   # Samples collected even past the time budget
DEFAULT_MAX_TIME_S = 5.0               # Sampling time budget per case (s)
CONFIDENCE_LEVEL = 0.95                # For the relative margin of error

# =============================================================================
# OUTPUT
# =============================================================================
DEFAULT_OUTPUT_DIR = "output/benchmarks"
DEFAULT_FILE_STEM = "bench"            # -> bench.chart.html, bench.csv, ...
DEFAULT_TITLE = "Find The Thing"
