"""
Loaders for differential expression tool output.

Cuffdiff writes tab-separated ``*.diff`` files with a header row. edgeR tables
are whatever ``write.table``/``write.csv`` produced from
``topTags(..., n = Inf)$table``: feature ids in the first column (often with
an empty header) followed by logFC, logCPM, PValue and FDR.

Both loaders return plain DataFrames that the adapters accept directly.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence
import csv
import logging

import pandas as pd

from degviz.adapters.cuffdiff import CUFFDIFF_COLUMNS

__all__ = ['read_cuffdiff', 'read_edger_table', 'sniff_delimiter']

logger = logging.getLogger(__name__)

_CUFFDIFF_NUMERIC = ["value_1", "value_2", "log2(fold_change)", "test_stat", "p_value", "q_value"]


def _check_file(path: Path | str) -> Path:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    if not path.is_file():
        raise ValueError(f"Path is not a file: {path}")
    return path


def sniff_delimiter(path: Path, sample_size: int = 8192) -> str:
    """
    Auto-detect the delimiter of a delimited text file.

    Uses csv.Sniffer, falling back to counting candidates in the header line.

    Raises:
        ValueError: If no delimiter can be determined
    """
    with open(path, 'r', encoding='utf-8', errors='ignore') as f:
        sample = f.read(sample_size)

    try:
        return csv.Sniffer().sniff(sample, delimiters='\t,;').delimiter
    except csv.Error:
        pass

    first_line = sample.split('\n')[0]
    counts = {d: first_line.count(d) for d in ('\t', ',', ';')}
    if max(counts.values()) == 0:
        raise ValueError(f"Could not detect delimiter in {path}")
    return max(counts, key=counts.get)


def read_cuffdiff(path: Path | str) -> pd.DataFrame:
    """
    Load a Cuffdiff differential expression table (``gene_exp.diff`` etc).

    Numeric columns are coerced, so Cuffdiff's ``inf``/``-inf`` fold-changes
    become floats and anything unparseable becomes NaN.

    Args:
        path: Path to the tab-separated ``*.diff`` file

    Returns:
        DataFrame with Cuffdiff's original columns.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is empty or lacks Cuffdiff columns
    """
    path = _check_file(path)
    try:
        df = pd.read_csv(path, sep="\t", dtype={"test_id": str, "sample_1": str, "sample_2": str})
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"Cuffdiff file is empty: {path}") from e

    missing = [c for c in CUFFDIFF_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"{path} is not a Cuffdiff table; missing columns {missing}")

    for col in _CUFFDIFF_NUMERIC:
        if col in df.columns:
            df[col] = pd.to_numeric(df[col], errors="coerce")

    logger.info(f"Loaded {len(df)} Cuffdiff rows from {path}")
    return df


def read_edger_table(
    path: Path | str,
    comparison: Optional[Sequence[str]] = None,
) -> pd.DataFrame:
    """
    Load an exported edgeR ``topTags`` table.

    Args:
        path: CSV/TSV file; the delimiter is taken from the suffix (.csv,
            .tsv, .txt) or sniffed from the content
        comparison: Optional (x, y) pair the table was computed for, as in
            ``exactTest(pair = c(x, y))``. Stored in ``df.attrs["comparison"]``
            so the adapter can check the orientation.

    Returns:
        DataFrame indexed by feature id.

    Raises:
        FileNotFoundError: If path does not exist
        ValueError: If the file is empty or comparison is not a pair
    """
    path = _check_file(path)
    suffix = path.suffix.lower()
    if suffix == ".csv":
        sep = ","
    elif suffix == ".tsv":
        sep = "\t"
    else:
        sep = sniff_delimiter(path)

    try:
        df = pd.read_csv(path, sep=sep, index_col=0)
    except pd.errors.EmptyDataError as e:
        raise ValueError(f"edgeR table is empty: {path}") from e
    df.index = df.index.astype(str)

    if comparison is not None:
        pair = tuple(str(c) for c in comparison)
        if len(pair) != 2:
            raise ValueError(f"comparison must be a pair of condition labels, got {comparison!r}")
        df.attrs["comparison"] = pair

    logger.info(f"Loaded {len(df)} edgeR rows from {path}")
    return df
