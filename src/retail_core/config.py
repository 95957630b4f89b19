"""Unified configuration for Retail Core.

This module provides the single configuration class used across the
enrichment and reporting stages.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

# Environment variable consulted by the CLI when --data-root is not given
DATA_ROOT_ENV = "RETAIL_DATA_ROOT"
DEFAULT_DATA_ROOT = "data"


@dataclass
class DataPaths:
    """All filesystem paths used by the sales pipeline.

    Attributes:
        data_root: Root directory for all data layers.

    Directory Structure:
        data_root/
        ├── a_raw/sales/batch/      # Bronze: raw transaction CSVs
        ├── b_clean/sales/batch/    # Silver: fact_sales_transaction (enriched)
        └── c_processed/sales/      # Gold: report marts, one CSV per report
    """

    data_root: Path

    @classmethod
    def from_root(cls, data_root: str | Path) -> DataPaths:
        """Create DataPaths from a root directory.

        Args:
            data_root: Root directory for the data layers.

        Returns:
            DataPaths instance.

        Examples:
            >>> paths = DataPaths.from_root("data")
            >>> paths.data_root
            PosixPath('data')
        """
        if isinstance(data_root, str):
            data_root = Path(data_root)

        return cls(data_root=data_root)

    @classmethod
    def from_env(cls, data_root: str | Path | None = None) -> DataPaths:
        """Create DataPaths from an explicit root, the environment, or the default.

        Resolution order: ``data_root`` argument, ``RETAIL_DATA_ROOT``,
        then ``"data"`` relative to the working directory.
        """
        if data_root is None:
            data_root = os.environ.get(DATA_ROOT_ENV, DEFAULT_DATA_ROOT)
        return cls.from_root(data_root)

    @property
    def raw_sales(self) -> Path:
        """Bronze layer: raw transaction CSV files."""
        return self.data_root / "a_raw" / "sales" / "batch"

    @property
    def clean_sales(self) -> Path:
        """Silver layer: fact_sales_transaction (enriched CSV)."""
        return self.data_root / "b_clean" / "sales" / "batch"

    @property
    def mart_sales(self) -> Path:
        """Gold layer: report marts."""
        return self.data_root / "c_processed" / "sales"

    @property
    def fact_sales(self) -> Path:
        """Path of the enriched fact table CSV."""
        return self.clean_sales / "fact_sales_transaction.csv"

    def report_path(self, name: str) -> Path:
        """Path of the CSV mart for the named report."""
        return self.mart_sales / f"{name}.csv"

    def ensure_dirs(self) -> None:
        """Create all directories in the data structure."""
        for path in [
            self.raw_sales,
            self.clean_sales,
            self.mart_sales,
        ]:
            path.mkdir(parents=True, exist_ok=True)
