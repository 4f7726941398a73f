"""
Abstract interface for differential expression tool adapters.

Each supported tool reports results in its own schema. An adapter maps one
tool's output onto the canonical ExpressionTable:

- Cuffdiff (gene_exp.diff table)
- DESeq2 (fitted pydeseq2 DeseqDataSet)
- edgeR (topTags / exactTest table)

Sign convention: every adapter returns log_fold_change = log2(mean_y / mean_x).
Adapters whose tool reports the opposite direction negate explicitly.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Optional
import logging

import pandas as pd

from degviz.core.errors import InvalidArgument
from degviz.core.table import CANONICAL_COLUMNS, ExpressionTable, drop_incomplete
from degviz.core.types import ToolType

__all__ = ['Adapter']

logger = logging.getLogger(__name__)


class Adapter(ABC):
    """
    Maps a tool-specific result object onto an ExpressionTable.

    Subclasses set ``tool`` and implement ``to_frame``. The shared
    ``extract`` validates condition labels, drops incomplete rows and builds
    the table.

    Attributes:
        tool: ToolType handled by this adapter
        requires_factor: Whether a grouping factor (d_factor) is required
        default_fold_change_cutoff: log2 fold-change cutoff used when the
            caller does not give one
    """

    tool: ToolType
    requires_factor: bool = False
    default_fold_change_cutoff: float = 1.0

    def extract(
        self,
        data: Any,
        x: str,
        y: str,
        d_factor: Optional[str] = None,
    ) -> ExpressionTable:
        """
        Build the canonical table for condition ``y`` versus ``x``.

        Args:
            data: Tool-specific result object
            x: Reference condition label
            y: Compared condition label
            d_factor: Grouping column; required when ``requires_factor``

        Raises:
            InvalidArgument: If labels, factor or required columns are invalid.
        """
        self.check_arguments(x, y, d_factor)
        frame = self.to_frame(data, x, y, d_factor)
        n_raw = len(frame)
        frame = drop_incomplete(frame[CANONICAL_COLUMNS])
        logger.info(
            f"{self.tool.value}: extracted {len(frame)} of {n_raw} records "
            f"for {y} vs. {x}"
        )
        return ExpressionTable(frame, x=x, y=y, tool=self.tool)

    def check_arguments(self, x: str, y: str, d_factor: Optional[str]) -> None:
        """Validate labels and factor before touching the data."""
        for name, label in (("x", x), ("y", y)):
            if not isinstance(label, str) or not label:
                raise InvalidArgument(f"{name} must be a non-empty condition label, got {label!r}")
        if x == y:
            raise InvalidArgument(f"x and y must be different conditions, both are {x!r}")
        if self.requires_factor and not d_factor:
            raise InvalidArgument(
                f"{self.tool.value} data requires d_factor "
                f"(the column that defines the conditions)"
            )

    @abstractmethod
    def to_frame(
        self,
        data: Any,
        x: str,
        y: str,
        d_factor: Optional[str],
    ) -> pd.DataFrame:
        """
        Return a DataFrame with the canonical columns (extra columns allowed).

        Must not modify ``data``.
        """
        pass

    @staticmethod
    def require_columns(frame: pd.DataFrame, columns: list[str], what: str) -> None:
        missing = [c for c in columns if c not in frame.columns]
        if missing:
            raise InvalidArgument(f"{what} is missing required columns: {missing}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(tool={self.tool.value})"
