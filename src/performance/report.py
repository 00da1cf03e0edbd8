"""
report.py - Console summary, charts and exports for benchmark results

Takes the DataFrame produced by :meth:`Benchmark.run_cases` and turns it into:

    * a plain-text ranking for the console
    * a horizontal bar chart of operations per second (PNG)
    * a self-contained HTML report with the chart embedded (``*.chart.html``)
    * CSV and Markdown tables
"""

from __future__ import annotations

import base64
import html
import io
import logging
import os
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np
import pandas as pd
import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for server / CI environments
import matplotlib.pyplot as plt

from performance.benchmarks import STATUS_OK, Benchmark

logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

COLORS = {
    "primary": "#2E86AB",      # Steel blue
    "fastest": "#2E7D32",      # Green
    "slowest": "#C73E1D",      # Red
    "neutral": "#546E7A",      # Blue grey
}

NO_SUCCESS_TEXT = "No case completed successfully"


# ---------------------------------------------------------------------------
# Console
# ---------------------------------------------------------------------------

def format_summary(df: pd.DataFrame, title: Optional[str] = None) -> str:
    """Human-readable ranking of every case, in run order."""
    lines = []
    if title:
        lines += [title, "=" * len(title)]

    width = max([len(str(name)) for name in df.index] + [4])
    header = f"{'case':<{width}}  {'ops/sec':>12}  {'margin':>8}  {'relative':>8}  {'rank':>4}  status"
    lines += [header, "-" * len(header)]

    for name, row in df.iterrows():
        if row["status"] == STATUS_OK:
            margin = f"±{row['margin_pct']:.2f}%"
            relative = f"{row['relative_pct']:.1f}%"
            lines.append(
                f"{name:<{width}}  {row['ops_per_sec']:>12,.1f}  "
                f"{margin:>8}  {relative:>8}  {int(row['rank']):>4}  ok"
            )
        else:
            lines.append(
                f"{name:<{width}}  {'-':>12}  {'-':>8}  {'-':>8}  {'-':>4}  "
                f"FAILED ({row['error']})"
            )

    fastest = Benchmark.fastest(df)
    slowest = Benchmark.slowest(df)
    lines.append("")
    if fastest is not None:
        lines.append(f"Fastest is {fastest}")
        lines.append(f"Slowest is {slowest}")
    else:
        lines.append(NO_SUCCESS_TEXT)
    failed = Benchmark.failed(df)
    if failed:
        lines.append(f"Failed: {', '.join(failed)}")
    return "\n".join(lines)


# ---------------------------------------------------------------------------
# Chart
# ---------------------------------------------------------------------------

def render_chart(df: pd.DataFrame, title: str = "Benchmark results") -> plt.Figure:
    """Bar chart of ops/sec per successful case, with margin-of-error bars."""
    ok = df[df["status"] == STATUS_OK]
    fig, ax = plt.subplots(figsize=(10, max(3.0, 0.5 * len(ok) + 1.5)))

    if ok.empty:
        ax.text(0.5, 0.5, "No successful cases", ha="center", va="center",
                transform=ax.transAxes)
        ax.set_axis_off()
        ax.set_title(title)
        fig.tight_layout()
        return fig

    fastest = Benchmark.fastest(df)
    slowest = Benchmark.slowest(df)
    colors = [
        COLORS["fastest"] if name == fastest
        else COLORS["slowest"] if name == slowest
        else COLORS["primary"]
        for name in ok.index
    ]

    y = np.arange(len(ok))
    ops = ok["ops_per_sec"].to_numpy(dtype=np.float64)
    errors = ops * ok["margin_pct"].to_numpy(dtype=np.float64) / 100.0
    ax.barh(y, ops, xerr=errors, color=colors, edgecolor="black", capsize=3)
    ax.set_yticks(y)
    ax.set_yticklabels(ok.index)
    ax.invert_yaxis()
    ax.set_xlabel("Operations per second")
    ax.set_title(title)
    ax.grid(axis="x", color="#E0E0E0", linewidth=0.5)
    ax.set_axisbelow(True)

    for yi, value, rel in zip(y, ops, ok["relative_pct"]):
        ax.text(value, yi, f"  {rel:.0f}%", va="center", fontsize=9)

    fig.tight_layout()
    return fig


def plot_results(df: pd.DataFrame, path: PathLike, title: str = "Benchmark results") -> Path:
    """Save the bar chart as a PNG."""
    path = Path(path)
    fig = render_chart(df, title)
    fig.savefig(path, dpi=150)
    plt.close(fig)
    logger.info("Chart saved to %s", path)
    return path


def _chart_base64(df: pd.DataFrame, title: str) -> str:
    fig = render_chart(df, title)
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=110)
    plt.close(fig)
    return base64.b64encode(buf.getvalue()).decode("ascii")


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{title}</title>
    <style>
        body {{
            font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
            background: #f8f9fa;
            margin: 0;
            padding: 20px;
        }}
        .container {{
            max-width: 1100px;
            margin: 0 auto;
            background: white;
            border-radius: 8px;
            box-shadow: 0 2px 8px rgba(0,0,0,0.1);
            padding: 30px;
        }}
        h1 {{ margin-top: 0; }}
        .meta {{ color: #666; font-size: 0.9em; }}
        .chart img {{ max-width: 100%; }}
        table {{ border-collapse: collapse; width: 100%; font-size: 0.9em; }}
        th, td {{ border-bottom: 1px solid #dee2e6; padding: 6px 10px; text-align: right; }}
        th:first-child, td:first-child {{ text-align: left; }}
        tr:hover {{ background: #f1f3f5; }}
        .fastest {{ color: #2E7D32; font-weight: bold; }}
        .slowest {{ color: #C73E1D; font-weight: bold; }}
    </style>
</head>
<body>
<div class="container">
    <h1>{title}</h1>
    <p class="meta">Generated {generated} &middot; {config}</p>
    <p>{extremes}</p>
    <div class="chart"><img alt="ops/sec chart" src="data:image/png;base64,{chart}"></div>
    <h2>Results</h2>
    {table}
</div>
</body>
</html>
"""


def _display_frame(df: pd.DataFrame) -> pd.DataFrame:
    out = df[["ops_per_sec", "margin_pct", "relative_pct", "mean", "median",
              "num_runs", "rank", "status", "error"]].copy()
    out["mean"] = out["mean"] * 1e3
    out["median"] = out["median"] * 1e3
    return out.rename(columns={"mean": "mean_ms", "median": "median_ms"})


def _html_extremes(df: pd.DataFrame) -> str:
    fastest = Benchmark.fastest(df)
    if fastest is None:
        return f'<span class="slowest">{NO_SUCCESS_TEXT}</span>'
    return (
        f'<span class="fastest">Fastest: {html.escape(fastest)}</span> &middot;\n'
        f'       <span class="slowest">Slowest: {html.escape(str(Benchmark.slowest(df)))}</span>'
    )


def save_html(
    df: pd.DataFrame,
    path: PathLike,
    title: str = "Benchmark results",
    config: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Write a self-contained HTML report with the chart embedded."""
    path = Path(path)
    config_text = ", ".join(f"{k}={v}" for k, v in (config or {}).items())
    table = _display_frame(df).to_html(
        float_format=lambda v: f"{v:,.3f}", na_rep="-", border=0,
    )
    page = HTML_TEMPLATE.format(
        title=html.escape(title),
        generated=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        config=html.escape(config_text),
        extremes=_html_extremes(df),
        chart=_chart_base64(df, title),
        table=table,
    )
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(page)
    logger.info("HTML report saved to %s", path)
    return path


def save_csv(df: pd.DataFrame, path: PathLike) -> Path:
    path = Path(path)
    df.to_csv(path)
    logger.info("Results saved to %s", path)
    return path


def generate_markdown(
    df: pd.DataFrame,
    path: PathLike,
    title: str = "Benchmark results",
    chart_name: Optional[str] = None,
) -> str:
    """
    Write a Markdown report and return its text.

    *chart_name* is the chart file name relative to the report; the image
    reference is omitted when it is None.
    """
    lines = [
        f"# {title}",
        "",
        "| Case | ops/sec | Margin | Relative | Rank | Status |",
        "|------|--------:|-------:|---------:|-----:|--------|",
    ]
    for name, row in df.iterrows():
        if row["status"] == STATUS_OK:
            lines.append(
                f"| {name} | {row['ops_per_sec']:,.1f} | ±{row['margin_pct']:.2f}% | "
                f"{row['relative_pct']:.1f}% | {int(row['rank'])} | ok |"
            )
        else:
            lines.append(f"| {name} | - | - | - | - | failed: {row['error']} |")

    if Benchmark.fastest(df) is None:
        lines += ["", NO_SUCCESS_TEXT]
    else:
        lines += ["", f"Fastest: **{Benchmark.fastest(df)}**  ",
                  f"Slowest: **{Benchmark.slowest(df)}**"]
    if chart_name:
        lines += ["", "## Chart", "", f"![ops/sec]({chart_name})"]

    report = "\n".join(lines) + "\n"
    path = Path(path)
    with open(path, "w", encoding="utf-8") as fh:
        fh.write(report)
    logger.info("Markdown report saved to %s", path)
    return report


def write_artifacts(
    df: pd.DataFrame,
    output_dir: PathLike,
    file_stem: str = "bench",
    title: str = "Benchmark results",
    config: Optional[Mapping[str, Any]] = None,
    chart: bool = True,
) -> Dict[str, Path]:
    """
    Write every report file into *output_dir* (created if missing).

    Returns
    -------
    dict mapping artifact kind (csv, markdown, png, html) to its path.
    """
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    paths: Dict[str, Path] = {}
    paths["csv"] = save_csv(df, output_dir / f"{file_stem}.csv")

    png_name = None
    if chart:
        paths["png"] = plot_results(df, output_dir / f"{file_stem}.png", title)
        png_name = paths["png"].name
        paths["html"] = save_html(df, output_dir / f"{file_stem}.chart.html", title, config)

    md_path = output_dir / f"{file_stem}.md"
    generate_markdown(df, md_path, title, chart_name=png_name)
    paths["markdown"] = md_path
    return paths
