"""
Canonical table of differential expression results.

Every supported tool reports its results in a different schema. Adapters map
those schemas onto one canonical shape, the ExpressionTable, which is what the
classifier, encoder and renderers consume.

Canonical columns (in order):
    feature_id       gene/transcript identifier (str)
    mean_x           mean expression in condition x
    mean_y           mean expression in condition y
    log_fold_change  log2(mean_y / mean_x), as reported by the tool
    adjusted_p_value multiple-testing corrected p-value, NaN when undefined

Derived columns (is_significant, bucket, is_outlier, ...) are appended by
transforms; the canonical columns are never rewritten.

Examples:
    >>> import pandas as pd
    >>> from degviz.core.table import ExpressionTable
    >>> frame = pd.DataFrame({
    ...     "feature_id": ["g1", "g2"],
    ...     "mean_x": [10.0, 5.0],
    ...     "mean_y": [40.0, 5.0],
    ...     "log_fold_change": [2.0, 0.0],
    ...     "adjusted_p_value": [0.01, float("nan")],
    ... })
    >>> table = ExpressionTable(frame, x="ctrl", y="treated", tool="cuffdiff")
    >>> table.n_records
    2
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator
import logging

import numpy as np
import pandas as pd

from degviz.core.errors import InvalidArgument
from degviz.core.types import ToolType

__all__ = [
    'ExpressionRecord',
    'ExpressionTable',
    'CANONICAL_COLUMNS',
    'REQUIRED_COLUMNS',
    'drop_incomplete',
]

logger = logging.getLogger(__name__)

CANONICAL_COLUMNS = [
    "feature_id",
    "mean_x",
    "mean_y",
    "log_fold_change",
    "adjusted_p_value",
]

# Rows missing any of these are dropped by adapters.
REQUIRED_COLUMNS = ["feature_id", "mean_x", "mean_y"]

_NUMERIC_COLUMNS = ["mean_x", "mean_y", "log_fold_change", "adjusted_p_value"]


@dataclass(frozen=True)
class ExpressionRecord:
    """One gene/transcript row of an ExpressionTable."""
    feature_id: str
    mean_x: float
    mean_y: float
    log_fold_change: float
    adjusted_p_value: float  # NaN when the tool could not test the feature

    @property
    def has_p_value(self) -> bool:
        return not np.isnan(self.adjusted_p_value)


def drop_incomplete(frame: pd.DataFrame) -> pd.DataFrame:
    """
    Drop rows that are missing a required field.

    Undefined log-fold-changes and p-values are data, not missing fields,
    and are kept.
    """
    mask = frame[REQUIRED_COLUMNS].notna().all(axis=1)
    n_dropped = int((~mask).sum())
    if n_dropped:
        logger.info(f"Dropped {n_dropped} rows with missing feature id or mean expression")
    return frame.loc[mask].reset_index(drop=True)


class ExpressionTable:
    """
    Immutable container for canonical differential expression records.

    Attributes:
        frame: Copy of the underlying DataFrame (canonical + derived columns)
        x: Label of the reference condition
        y: Label of the compared condition
        tool: ToolType that produced the records

    Invariants:
        - All CANONICAL_COLUMNS are present, numeric columns are float
        - adjusted_p_value, when defined, lies in [0, 1]
        - The frame index is a 0..n-1 RangeIndex
    """

    def __init__(
        self,
        frame: pd.DataFrame,
        x: str,
        y: str,
        tool: ToolType | str,
    ):
        if not isinstance(frame, pd.DataFrame):
            raise TypeError(f"frame must be pd.DataFrame, got {type(frame)}")

        missing = [c for c in CANONICAL_COLUMNS if c not in frame.columns]
        if missing:
            raise InvalidArgument(f"Expression table is missing columns: {missing}")

        frame = frame.reset_index(drop=True)
        frame["feature_id"] = frame["feature_id"].astype(str)
        for col in _NUMERIC_COLUMNS:
            frame[col] = pd.to_numeric(frame[col], errors="coerce").astype(float)

        padj = frame["adjusted_p_value"]
        out_of_range = padj.notna() & ((padj < 0) | (padj > 1))
        if out_of_range.any():
            examples = frame.loc[out_of_range, "feature_id"].head(3).tolist()
            raise InvalidArgument(
                f"{int(out_of_range.sum())} adjusted p-values lie outside [0, 1] "
                f"(e.g. {examples})"
            )

        self._frame = frame
        self._x = x
        self._y = y
        self._tool = ToolType.parse(tool)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame.copy()

    @property
    def x(self) -> str:
        return self._x

    @property
    def y(self) -> str:
        return self._y

    @property
    def tool(self) -> ToolType:
        return self._tool

    @property
    def n_records(self) -> int:
        return len(self._frame)

    def column(self, name: str) -> pd.Series:
        """Return a single column (a copy)."""
        return self._frame[name].copy()

    def has_column(self, name: str) -> bool:
        return name in self._frame.columns

    def with_columns(self, **columns) -> ExpressionTable:
        """
        Return a new table with derived columns added or replaced.

        Canonical columns cannot be replaced.
        """
        clash = [c for c in columns if c in CANONICAL_COLUMNS]
        if clash:
            raise ValueError(f"Cannot overwrite canonical columns: {clash}")

        frame = self._frame.copy()
        for name, values in columns.items():
            if isinstance(values, pd.Series):
                values = values.to_numpy()
            frame[name] = values
        return ExpressionTable(frame, x=self._x, y=self._y, tool=self._tool)

    def records(self) -> Iterator[ExpressionRecord]:
        """Iterate over canonical records in table order."""
        for row in self._frame[CANONICAL_COLUMNS].itertuples(index=False):
            yield ExpressionRecord(*row)

    def __len__(self) -> int:
        return self.n_records

    def __repr__(self) -> str:
        derived = [c for c in self._frame.columns if c not in CANONICAL_COLUMNS]
        return (
            f"ExpressionTable({self.n_records} records, {self._tool.value}: "
            f"{self._y} vs. {self._x})\n"
            f"  Derived columns: {derived}"
        )
