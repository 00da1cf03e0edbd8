"""
performance - Benchmark runner and reporting for the lookup strategies

    benchmarks - Times each named (name, setup_fn) case with warm-up,
                 bounded sampling and a time budget, and consolidates
                 mean / median / ops-per-second / margin of error, ranking
                 and failures into one pandas DataFrame.

    report     - Renders that DataFrame as a console ranking, a matplotlib
                 bar chart, a self-contained HTML report and CSV / Markdown
                 tables.

The lookup strategies only supply callables; everything about timing
methodology lives here.
"""
