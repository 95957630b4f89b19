"""Bronze layer: raw transaction exports.

The external loader drops one or more CSV exports into ``paths.raw_sales``.
This module reads them into the typed fact-table representation.
"""

from __future__ import annotations

import glob
import logging
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from retail_core.config import DataPaths

from retail_core.sales.schema import coerce_transactions

logger = logging.getLogger(__name__)


def _resolve_files(source: str | Path) -> list[str]:
    """Expand a file, directory or glob into a sorted list of CSV paths."""
    path = Path(source)
    if path.is_dir():
        return sorted(str(p) for p in path.glob("*.csv"))
    if path.is_file():
        return [str(path)]
    return sorted(glob.glob(str(source)))


def read_transactions(source: str | Path, date_format: str | None = None) -> pd.DataFrame:
    """Read raw transaction CSV(s) into a typed DataFrame.

    Args:
        source: A CSV file, a directory of CSVs, or a glob pattern.
        date_format: Optional strptime format tried first for transaction_date.

    Returns:
        Typed transactions (see ``retail_core.sales.schema``).

    Raises:
        FileNotFoundError: If no CSV matches ``source``.
        SchemaError: If a required column is missing.
        DataError: If a value cannot be parsed.
    """
    files = _resolve_files(source)
    if not files:
        raise FileNotFoundError(f"No transaction CSVs found for {source}")

    # only blank cells are missing; "NA" or "None" can be a real branch or city
    dfs = [
        pd.read_csv(f, dtype=str, keep_default_na=False, na_values=[""], encoding="utf-8")
        for f in files
    ]
    df = dfs[0] if len(dfs) == 1 else pd.concat(dfs, ignore_index=True)
    logger.info("Read %d raw transaction(s) from %d file(s)", len(df), len(files))

    return coerce_transactions(df, date_format=date_format)


def load(paths: DataPaths, date_format: str | None = None) -> pd.DataFrame:
    """Load every raw transaction CSV in the bronze layer.

    Raises:
        FileNotFoundError: If the bronze layer holds no CSV files.
    """
    files = _resolve_files(paths.raw_sales)
    if not files:
        raise FileNotFoundError(
            f"No raw transaction CSVs found in {paths.raw_sales}. "
            f"Drop the loader's export there before running enrichment."
        )
    return read_transactions(paths.raw_sales, date_format=date_format)
