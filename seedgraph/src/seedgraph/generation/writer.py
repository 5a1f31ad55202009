"""Tabular outputs: run summaries and table exports."""

import time
from pathlib import Path
from typing import Dict
import pandas as pd
from seedgraph.config.logging import get_logger
from .error_logging import log_error
from .report import SeedReport

logger = get_logger(__name__)


def report_frame(report: SeedReport) -> pd.DataFrame:
    """
    One row per entity type, in creation order.

    Args:
        report: Seed report

    Returns:
        DataFrame with columns entity, position, records, created, cyclic, self_relation
    """
    cyclic = set(report.cyclic)
    rows = [
        {
            "entity": name,
            "position": idx,
            "records": report.records.get(name, 0),
            "created": name not in report.missing,
            "cyclic": name in cyclic,
            "self_relation": report.self_relation_status(name) or "",
        }
        for idx, name in enumerate(report.order, 1)
    ]
    return pd.DataFrame(
        rows, columns=["entity", "position", "records", "created", "cyclic", "self_relation"]
    )


def write_csv(df: pd.DataFrame, path: Path) -> None:
    """
    Write a single DataFrame to CSV.

    Args:
        df: DataFrame to write
        path: Output file path
    """
    write_start = time.time()
    path = Path(path)
    rows = len(df)
    cols = len(df.columns)

    logger.debug(f"Writing DataFrame to {path}: {rows} rows, {cols} columns")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        df.to_csv(path, index=False)
    except Exception as e:
        log_error(
            error=e,
            context={
                'rows': rows,
                'columns': cols,
                'file_path': str(path),
                'parent_dir_exists': path.parent.exists(),
            },
            operation="writing CSV file"
        )
        raise

    write_time = time.time() - write_start
    logger.info(f"Wrote {rows:,} rows, {cols} columns to {path} in {write_time:.3f}s")


def export_tables(frames: Dict[str, pd.DataFrame], out_dir: Path) -> Dict[str, Path]:
    """
    Write each table to ``<out_dir>/<entity>.csv``.

    Returns:
        Dictionary mapping entity name -> written path
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    written = {}
    for name, df in frames.items():
        path = out_dir / f"{name}.csv"
        write_csv(df, path)
        written[name] = path
    return written
