"""
Aesthetic encoding of classified expression tables.

The encoder maps each classified record to the aesthetics a renderer draws:

- position: the log-fold-change clamped to the axis limits (``lfc_plot``)
- shape:    circle inside the limits, triangle-up / triangle-down when the
            value was clamped at the upper / lower boundary
- color:    one color per bucket (up, down, none)
- size:     small for non-significant records, larger for significant ones

Clamping is position-only: ``is_outlier`` and ``bucket`` are derived from the
true log-fold-change, so they are identical whether the limits were supplied
by the caller or computed from the data.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence
import logging

import numpy as np
import pandas as pd

from degviz.core.errors import InvalidArgument
from degviz.core.palette import Palette, resolve_palette
from degviz.core.table import ExpressionTable
from degviz.core.transform import Transform
from degviz.core.types import Bucket, PointShape

__all__ = [
    'Encoder',
    'BucketCounts',
    'compute_lfc_limits',
    'validate_limits',
    'count_buckets',
    'SIZE_SIGNIFICANT',
    'SIZE_NON_SIGNIFICANT',
    'LIMIT_QUANTILE',
]

logger = logging.getLogger(__name__)

# Marker areas in points^2
SIZE_NON_SIGNIFICANT = 8.0
SIZE_SIGNIFICANT = 24.0

LIMIT_QUANTILE = 0.99
_FALLBACK_LIMITS = (-1.0, 1.0)


@dataclass(frozen=True)
class BucketCounts:
    """Number of records per bucket, used for legend and caption text."""
    up: int
    down: int
    none: int

    @property
    def total(self) -> int:
        return self.up + self.down + self.none

    def label(self, bucket: Bucket | str) -> str:
        """Legend label such as ``"up: 12"``."""
        key = bucket.value if isinstance(bucket, Bucket) else bucket
        return f"{key}: {getattr(self, key)}"


def compute_lfc_limits(
    log_fold_change: np.ndarray | pd.Series,
    quantile: float = LIMIT_QUANTILE,
) -> tuple[float, float]:
    """
    Symmetric axis limits from the data: ``(-q, q)`` where q is the given
    quantile of |log_fold_change| over finite values.

    Falls back to (-1, 1) when there are no finite values or q is 0.
    """
    lfc = np.abs(np.asarray(log_fold_change, dtype=float))
    lfc = lfc[np.isfinite(lfc)]
    if lfc.size == 0:
        logger.debug("No finite log-fold-changes; using fallback axis limits")
        return _FALLBACK_LIMITS

    q = float(np.quantile(lfc, quantile))
    if q <= 0:
        return _FALLBACK_LIMITS
    return (-q, q)


def validate_limits(limits: Optional[Sequence[float]]) -> Optional[tuple[float, float]]:
    """
    Check user-supplied axis limits.

    Raises:
        InvalidArgument: If limits are not a pair of finite floats with low < high.
    """
    if limits is None:
        return None
    try:
        low, high = (float(v) for v in limits)
    except (TypeError, ValueError) as e:
        raise InvalidArgument(f"Axis limits must be a pair of numbers, got {limits!r}") from e
    if not (np.isfinite(low) and np.isfinite(high)) or low >= high:
        raise InvalidArgument(
            f"Axis limits must be finite with low < high, got ({low}, {high})"
        )
    return (low, high)


def count_buckets(table: ExpressionTable | pd.DataFrame) -> BucketCounts:
    """Count records per bucket of a classified table."""
    frame = table.frame if isinstance(table, ExpressionTable) else table
    counts = frame["bucket"].value_counts()
    return BucketCounts(
        up=int(counts.get(Bucket.UP.value, 0)),
        down=int(counts.get(Bucket.DOWN.value, 0)),
        none=int(counts.get(Bucket.NONE.value, 0)),
    )


class Encoder(Transform):
    """
    Assign clamped positions, shapes, colors and sizes to a classified table.

    Args:
        limits: (low, high) log-fold-change axis limits. When None they are
            computed from the table with compute_lfc_limits().
        palette: Palette or palette name for bucket colors.

    Examples:
        >>> encoder = Encoder(limits=None)
        >>> encoded = encoder.apply(Classifier().apply(table))
        >>> encoder.limits_for(table)
        (-4.1, 4.1)
    """

    def __init__(
        self,
        limits: Optional[Sequence[float]] = None,
        palette: str | Palette | None = None,
    ):
        self.limits = validate_limits(limits)
        self.palette = resolve_palette(palette)
        super().__init__(name="Encoder", params={"limits": self.limits})

    def limits_for(self, table: ExpressionTable) -> tuple[float, float]:
        """The limits used for this table: user-supplied, else data-driven."""
        if self.limits is not None:
            return self.limits
        return compute_lfc_limits(table.column("log_fold_change"))

    def validate(self, table: ExpressionTable) -> list[str]:
        errors = super().validate(table)
        for col in ("is_significant", "bucket"):
            if not table.has_column(col):
                errors.append(f"Table has no '{col}' column; classify it first")
        return errors

    def apply(self, table: ExpressionTable) -> ExpressionTable:
        low, high = self.limits_for(table)
        lfc = table.column("log_fold_change").to_numpy(dtype=float)

        with np.errstate(invalid="ignore"):
            above = lfc > high
            below = lfc < low

        shape = np.full(len(lfc), PointShape.CIRCLE.value, dtype=object)
        shape[above] = PointShape.TRIANGLE_UP.value
        shape[below] = PointShape.TRIANGLE_DOWN.value

        bucket_colors = self.palette.buckets
        color = table.column("bucket").map(bucket_colors).to_numpy()

        is_significant = table.column("is_significant").to_numpy(dtype=bool)
        size = np.where(is_significant, SIZE_SIGNIFICANT, SIZE_NON_SIGNIFICANT)

        logger.debug(
            f"Encoder limits ({low:.3g}, {high:.3g}); "
            f"{int(above.sum() + below.sum())} records clamped"
        )
        return table.with_columns(
            is_outlier=above | below,
            lfc_plot=np.clip(lfc, low, high),
            shape=shape,
            color=color,
            size=size,
        )
