"""
Significance classification shared by all plot types.

A record is significant when its adjusted p-value is strictly below the
significance cutoff; undefined p-values are never significant. Significant
records are bucketed by the sign of their log-fold-change against a symmetric
fold-change cutoff:

    up    significant and log_fold_change >  fold_change_cutoff
    down  significant and log_fold_change < -fold_change_cutoff
    none  everything else (including values exactly at a cutoff)
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from degviz.core.errors import InvalidArgument
from degviz.core.table import ExpressionTable
from degviz.core.transform import Transform
from degviz.core.types import Bucket

__all__ = [
    'Classifier',
    'DEFAULT_SIGNIFICANCE_CUTOFF',
    'DEFAULT_FOLD_CHANGE_CUTOFF',
    'classify_buckets',
]

logger = logging.getLogger(__name__)

DEFAULT_SIGNIFICANCE_CUTOFF = 0.05
DEFAULT_FOLD_CHANGE_CUTOFF = 1.0


def classify_buckets(
    adjusted_p_value: np.ndarray | pd.Series,
    log_fold_change: np.ndarray | pd.Series,
    significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
    fold_change_cutoff: float = DEFAULT_FOLD_CHANGE_CUTOFF,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Vectorized significance and bucket assignment.

    Returns:
        (is_significant, bucket) arrays; bucket holds Bucket values as strings.
    """
    padj = np.asarray(adjusted_p_value, dtype=float)
    lfc = np.asarray(log_fold_change, dtype=float)

    # NaN comparisons are False, so undefined p-values fall out here
    with np.errstate(invalid="ignore"):
        is_significant = padj < significance_cutoff
        up = is_significant & (lfc > fold_change_cutoff)
        down = is_significant & (lfc < -fold_change_cutoff)

    bucket = np.full(len(padj), Bucket.NONE.value, dtype=object)
    bucket[up] = Bucket.UP.value
    bucket[down] = Bucket.DOWN.value
    return is_significant, bucket


class Classifier(Transform):
    """
    Label each record as significant or not and assign its bucket.

    Args:
        significance_cutoff: Adjusted p-value threshold, in (0, 1]
        fold_change_cutoff: log2 fold-change threshold, >= 0

    Raises:
        InvalidArgument: If a cutoff is out of range.

    Examples:
        >>> classified = Classifier(0.05, 1.0).apply(table)
        >>> classified.column("bucket").value_counts()
    """

    def __init__(
        self,
        significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
        fold_change_cutoff: float = DEFAULT_FOLD_CHANGE_CUTOFF,
    ):
        try:
            significance_cutoff = float(significance_cutoff)
            fold_change_cutoff = float(fold_change_cutoff)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(f"Cutoffs must be numbers: {e}") from e
        if not (0 < significance_cutoff <= 1):
            raise InvalidArgument(
                f"significance_cutoff must be in (0, 1], got {significance_cutoff}"
            )
        if not np.isfinite(fold_change_cutoff) or fold_change_cutoff < 0:
            raise InvalidArgument(
                f"fold_change_cutoff must be a finite value >= 0, got {fold_change_cutoff}"
            )
        super().__init__(
            name="Classifier",
            params={
                "significance_cutoff": significance_cutoff,
                "fold_change_cutoff": fold_change_cutoff,
            },
        )
        self.significance_cutoff = significance_cutoff
        self.fold_change_cutoff = fold_change_cutoff

    def apply(self, table: ExpressionTable) -> ExpressionTable:
        is_significant, bucket = classify_buckets(
            table.column("adjusted_p_value"),
            table.column("log_fold_change"),
            self.significance_cutoff,
            self.fold_change_cutoff,
        )
        logger.debug(
            f"{self!r}: {int(is_significant.sum())}/{table.n_records} significant"
        )
        return table.with_columns(is_significant=is_significant, bucket=bucket)
