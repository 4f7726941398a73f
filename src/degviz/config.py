"""
Plot configuration shared by every plot type.

All thresholds and toggles live here with documented defaults instead of
module-level globals, so a single object describes how a plot was made.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import Any, Optional, Sequence

import numpy as np

from degviz.classify import DEFAULT_SIGNIFICANCE_CUTOFF
from degviz.core.errors import InvalidArgument
from degviz.encode import validate_limits

__all__ = ['PlotConfig']


@dataclass(frozen=True)
class PlotConfig:
    """
    Settings for one plot call.

    Attributes:
        significance_cutoff: Adjusted p-value threshold (default 0.05)
        fold_change_cutoff: log2 fold-change threshold; None uses the
            adapter's default (1.0 for all supported tools)
        lfc_limits: (low, high) limits of the log-fold-change axis; None
            computes +/- the 99th percentile of |LFC|
        title: Show the "<y> vs. <x>" title
        legend: Show the legend
        grid: Show major/minor grid lines
        highlight: Feature ids to label on the plot
        return_data: Return (table, figure) instead of the figure alone
    """
    significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF
    fold_change_cutoff: Optional[float] = None
    lfc_limits: Optional[tuple[float, float]] = None
    title: bool = True
    legend: bool = True
    grid: bool = True
    highlight: tuple[str, ...] = field(default_factory=tuple)
    return_data: bool = False

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "lfc_limits", validate_limits(self.lfc_limits))
        object.__setattr__(self, "highlight", tuple(str(h) for h in (self.highlight or ())))
        for name in ("title", "legend", "grid", "return_data"):
            value = getattr(self, name)
            if not isinstance(value, (bool, np.bool_)):
                raise InvalidArgument(f"{name} must be True or False, got {value!r}")
            object.__setattr__(self, name, bool(value))

    def fold_change_for(self, default: float) -> float:
        """The fold-change cutoff to use given an adapter default."""
        return default if self.fold_change_cutoff is None else float(self.fold_change_cutoff)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_options(
        cls,
        significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
        fold_change_cutoff: Optional[float] = None,
        lfc_limits: Optional[Sequence[float]] = None,
        title: bool = True,
        legend: bool = True,
        grid: bool = True,
        highlight: Optional[Sequence[str]] = None,
        return_data: bool = False,
    ) -> PlotConfig:
        return cls(
            significance_cutoff=significance_cutoff,
            fold_change_cutoff=fold_change_cutoff,
            lfc_limits=lfc_limits,
            title=title,
            legend=legend,
            grid=grid,
            highlight=tuple(highlight or ()),
            return_data=return_data,
        )
