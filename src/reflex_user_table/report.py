"""Validation reports over a whole users file, as polars DataFrames."""

from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import polars as pl

from reflex_user_table.formatting import display_cells
from reflex_user_table.models import UserRecord
from reflex_user_table.validation import validate_users

REPORT_SCHEMA: dict[str, pl.DataType] = {
    "index": pl.Int64(),
    "name": pl.String(),
    "email": pl.String(),
    "error": pl.String(),
}


def validation_report(records: Sequence[UserRecord | Mapping[str, Any]]) -> pl.DataFrame:
    """One row per validation problem: ``index``, ``name``, ``email``, ``error``.

    ``name`` and ``email`` are the display values (``"N/A"`` when missing),
    so rows stay readable even for the records being reported.
    """
    rows: list[dict[str, Any]] = []
    for index, errors in validate_users(records).items():
        cells = display_cells(records[index])
        for error in errors:
            rows.append(
                {
                    "index": index,
                    "name": cells["name"],
                    "email": cells["email"],
                    "error": error,
                }
            )
    return pl.DataFrame(rows, schema=REPORT_SCHEMA)


def error_counts(report: pl.DataFrame) -> pl.DataFrame:
    """Count report rows per error message, most frequent first."""
    return (
        report.group_by("error")
        .agg(pl.len().alias("count"))
        .sort(["count", "error"], descending=[True, False])
    )


def write_report(report: pl.DataFrame, path: Path) -> Path:
    """Write *report* to CSV or Parquet, chosen by the file extension.

    Raises:
        ValueError: If the extension is not ``.csv``, ``.parquet`` or ``.pq``.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        report.write_csv(path)
    elif suffix in (".parquet", ".pq"):
        report.write_parquet(path)
    else:
        raise ValueError(
            f"Unsupported report extension: {suffix!r}. Supported: .csv, .parquet, .pq"
        )
    return path
