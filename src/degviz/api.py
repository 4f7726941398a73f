"""
Public plotting functions, one per plot type.

Every function shares the same call shape:

    vs_<plot>(x, y, data, type, d_factor=None, significance_cutoff=0.05,
              fold_change_cutoff=None, ..., title=True, legend=True,
              grid=True, return_data=False)

and the same control flow:

    validate arguments -> adapter (selected by ``type``) -> Classifier
    -> Encoder -> renderer -> Figure, or (table, Figure) if return_data

All argument validation happens before the data is touched, so a bad type
tag or cutoff raises InvalidArgument without processing anything.

Examples
--------
>>> from degviz import vs_volcano
>>> fig = vs_volcano("hESC", "iPS", diff_df, type="cuffdiff", fold_change_cutoff=2)
>>> fig.save("volcano.png")
>>>
>>> table, fig = vs_volcano("hESC", "iPS", diff_df, type="cuffdiff", return_data=True)
>>> table["bucket"].value_counts()
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Sequence
import logging

import pandas as pd

from degviz.adapters import get_adapter
from degviz.adapters.base import Adapter
from degviz.classify import Classifier, DEFAULT_SIGNIFICANCE_CUTOFF
from degviz.config import PlotConfig
from degviz.core.palette import Palette
from degviz.core.table import ExpressionTable
from degviz.core.types import ToolType
from degviz.encode import Encoder
from degviz.viz.core import Figure
from degviz.viz.plots import DifferentialVisualizer

__all__ = [
    'vs_volcano',
    'vs_ma_plot',
    'vs_scatter_plot',
    'vs_box_plot',
    'prepare_table',
]

logger = logging.getLogger(__name__)

PlotResult = Figure | tuple[pd.DataFrame, Figure]


class _Prepared:
    """Classified and encoded table plus the parameters it was built with."""

    def __init__(self, table: ExpressionTable, fold_change_cutoff: float,
                 limits: tuple[float, float]):
        self.table = table
        self.fold_change_cutoff = fold_change_cutoff
        self.limits = limits


def prepare_table(
    x: str,
    y: str,
    data: Any,
    type: ToolType | str | None,
    d_factor: Optional[str] = None,
    config: Optional[PlotConfig] = None,
    palette: str | Palette = "default",
) -> ExpressionTable:
    """
    Run adapter, Classifier and Encoder without rendering.

    Returns:
        Classified and encoded ExpressionTable.
    """
    return _prepare(x, y, data, type, d_factor, config or PlotConfig(), palette).table


def _prepare(
    x: str,
    y: str,
    data: Any,
    type: ToolType | str | None,
    d_factor: Optional[str],
    config: PlotConfig,
    palette: str | Palette,
) -> _Prepared:
    adapter: Adapter = get_adapter(type)
    adapter.check_arguments(x, y, d_factor)

    fold_change_cutoff = config.fold_change_for(adapter.default_fold_change_cutoff)
    classifier = Classifier(config.significance_cutoff, fold_change_cutoff)
    encoder = Encoder(config.lfc_limits, palette=palette)

    table = adapter.extract(data, x, y, d_factor)
    classified = classifier(table)
    limits = encoder.limits_for(classified)
    encoded = encoder(classified)
    logger.debug(f"{classifier!r} -> {encoder!r} with limits {limits}")
    return _Prepared(encoded, fold_change_cutoff, limits)


def _result(config: PlotConfig, table: ExpressionTable, figure: Figure) -> PlotResult:
    if config.return_data:
        return table.frame, figure
    return figure


def vs_volcano(
    x: str,
    y: str,
    data: Any,
    type: ToolType | str | None = None,
    d_factor: Optional[str] = None,
    significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
    fold_change_cutoff: Optional[float] = None,
    x_lim: Optional[Sequence[float]] = None,
    title: bool = True,
    legend: bool = True,
    grid: bool = True,
    highlight: Optional[Sequence[str]] = None,
    return_data: bool = False,
    palette: str | Palette = "default",
    style: Literal["paper", "presentation", "notebook"] = "paper",
) -> PlotResult:
    """
    Volcano plot of log2 fold-change against -log10 adjusted p-value.

    Args:
        x: Reference condition label (denominator of the fold-change)
        y: Compared condition label (numerator of the fold-change)
        data: Tool output: Cuffdiff ``gene_exp.diff`` DataFrame, fitted
            pydeseq2 ``DeseqDataSet``, or edgeR ``topTags`` DataFrame
        type: "cuffdiff", "deseq" or "edger"
        d_factor: Grouping column defining the conditions (DESeq2 only)
        significance_cutoff: Adjusted p-value cutoff (default 0.05)
        fold_change_cutoff: log2 fold-change cutoff (default: tool default, 1)
        x_lim: (low, high) fold-change axis limits; default +/- the 99th
            percentile of |log2 fold-change|
        title, legend, grid: Show the title / legend / grid lines
        highlight: Feature ids to label on the plot
        return_data: Return ``(table, figure)`` instead of the figure
        palette: Palette name or instance
        style: "paper", "presentation" or "notebook"

    Returns:
        Figure, or (DataFrame, Figure) when return_data is True.

    Raises:
        InvalidArgument: On a missing/unknown type, missing d_factor for
            DESeq2, unknown condition labels, or invalid cutoffs/limits.
    """
    config = PlotConfig.from_options(
        significance_cutoff, fold_change_cutoff, x_lim, title, legend, grid,
        highlight, return_data,
    )
    prepared = _prepare(x, y, data, type, d_factor, config, palette)
    figure = DifferentialVisualizer(palette=palette, style=style).plot_volcano(
        prepared.table,
        significance_cutoff=config.significance_cutoff,
        fold_change_cutoff=prepared.fold_change_cutoff,
        limits=prepared.limits,
        title=config.title,
        legend=config.legend,
        grid=config.grid,
        highlight=config.highlight,
    )
    return _result(config, prepared.table, figure)


def vs_ma_plot(
    x: str,
    y: str,
    data: Any,
    type: ToolType | str | None = None,
    d_factor: Optional[str] = None,
    significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
    fold_change_cutoff: Optional[float] = None,
    y_lim: Optional[Sequence[float]] = None,
    title: bool = True,
    legend: bool = True,
    grid: bool = True,
    highlight: Optional[Sequence[str]] = None,
    return_data: bool = False,
    palette: str | Palette = "default",
    style: Literal["paper", "presentation", "notebook"] = "paper",
) -> PlotResult:
    """
    MA plot of log10 mean expression against log2 fold-change.

    Same arguments as vs_volcano, except the fold-change axis is vertical so
    its limits are given as ``y_lim``.
    """
    config = PlotConfig.from_options(
        significance_cutoff, fold_change_cutoff, y_lim, title, legend, grid,
        highlight, return_data,
    )
    prepared = _prepare(x, y, data, type, d_factor, config, palette)
    figure = DifferentialVisualizer(palette=palette, style=style).plot_ma(
        prepared.table,
        significance_cutoff=config.significance_cutoff,
        fold_change_cutoff=prepared.fold_change_cutoff,
        limits=prepared.limits,
        title=config.title,
        legend=config.legend,
        grid=config.grid,
        highlight=config.highlight,
    )
    return _result(config, prepared.table, figure)


def vs_scatter_plot(
    x: str,
    y: str,
    data: Any,
    type: ToolType | str | None = None,
    d_factor: Optional[str] = None,
    significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
    fold_change_cutoff: Optional[float] = None,
    title: bool = True,
    legend: bool = True,
    grid: bool = True,
    highlight: Optional[Sequence[str]] = None,
    return_data: bool = False,
    palette: str | Palette = "default",
    style: Literal["paper", "presentation", "notebook"] = "paper",
) -> PlotResult:
    """Scatterplot of log10 mean expression in ``y`` against ``x``."""
    config = PlotConfig.from_options(
        significance_cutoff, fold_change_cutoff, None, title, legend, grid,
        highlight, return_data,
    )
    prepared = _prepare(x, y, data, type, d_factor, config, palette)
    figure = DifferentialVisualizer(palette=palette, style=style).plot_scatter(
        prepared.table,
        significance_cutoff=config.significance_cutoff,
        fold_change_cutoff=prepared.fold_change_cutoff,
        title=config.title,
        legend=config.legend,
        grid=config.grid,
        highlight=config.highlight,
    )
    return _result(config, prepared.table, figure)


def vs_box_plot(
    x: str,
    y: str,
    data: Any,
    type: ToolType | str | None = None,
    d_factor: Optional[str] = None,
    significance_cutoff: float = DEFAULT_SIGNIFICANCE_CUTOFF,
    fold_change_cutoff: Optional[float] = None,
    title: bool = True,
    legend: bool = True,
    grid: bool = True,
    return_data: bool = False,
    palette: str | Palette = "default",
    style: Literal["paper", "presentation", "notebook"] = "paper",
) -> PlotResult:
    """
    Box plot of log10 mean expression for conditions ``x`` and ``y``.

    The cutoffs only affect the classification in the returned table.
    """
    config = PlotConfig.from_options(
        significance_cutoff, fold_change_cutoff, None, title, legend, grid,
        None, return_data,
    )
    prepared = _prepare(x, y, data, type, d_factor, config, palette)
    figure = DifferentialVisualizer(palette=palette, style=style).plot_box(
        prepared.table,
        title=config.title,
        legend=config.legend,
        grid=config.grid,
    )
    return _result(config, prepared.table, figure)
