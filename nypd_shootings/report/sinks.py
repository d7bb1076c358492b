"""
sinks.py - Output collaborators for the report

The pipeline only produces DataFrames and altair charts; these sinks decide
what happens with them. TableSink logs each table and writes it as a parquet
mart, ChartSink writes the chart spec as HTML and Vega-Lite JSON.
"""

from __future__ import annotations

import logging
from pathlib import Path

import altair as alt
import pandas as pd

log = logging.getLogger(__name__)


class TableSink:

    def __init__(self, out_dir: Path | None = None):
        self.out_dir = Path(out_dir) if out_dir is not None else None
        self.written: list[Path] = []
        if self.out_dir is not None:
            self.out_dir.mkdir(parents=True, exist_ok=True)

    def render(self, table: pd.DataFrame, caption: str, file_name: str | None = None,
               columns: dict[str, str] | None = None) -> None:
        """Log the table under ``caption``; write it to ``out_dir/file_name`` if both are set."""
        shown = table.rename(columns=columns) if columns else table

        log.info("")
        log.info(caption)
        log.info("-" * 70)
        log.info(shown.to_string(index=False))

        if self.out_dir is None or file_name is None:
            return

        path = self.out_dir / file_name
        # parquet needs string column names and homogeneous object columns
        out = table.copy()
        for col in out.columns:
            if out[col].dtype == object:
                out[col] = out[col].astype("string")
        out.to_parquet(path, index=False)
        self.written.append(path)
        log.info(f"Saved: {path}")


class ChartSink:

    def __init__(self, out_dir: Path | None = None):
        self.out_dir = Path(out_dir) if out_dir is not None else None
        self.written: list[Path] = []
        if self.out_dir is not None:
            self.out_dir.mkdir(parents=True, exist_ok=True)

    def render(self, chart: alt.TopLevelMixin, name: str) -> None:
        if self.out_dir is None:
            log.info(f"Chart '{name}' built (no output directory)")
            return

        for suffix in ("html", "json"):
            path = self.out_dir / f"{name}.{suffix}"
            chart.save(str(path))
            self.written.append(path)
        log.info(f"Saved chart: {self.out_dir / name}.{{html,json}}")
