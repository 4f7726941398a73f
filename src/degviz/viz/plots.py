"""
Renderers for classified and encoded expression tables.

Each renderer draws one plot type from an ExpressionTable that has already
been through the Classifier and Encoder:

    Volcano  x = clamped log-fold-change, y = -log10(adjusted p-value)
    MA       x = log10 mean expression,    y = clamped log-fold-change
    Scatter  x = log10 mean_x,             y = log10 mean_y
    Box      log10 mean expression per condition

Points carry the encoder's color (bucket), marker (clamped or not) and size
(significant or not). Guide lines mark the fold-change and significance
cutoffs. Title, legend and grid are presence toggles only.
"""

from __future__ import annotations

from typing import Literal, Optional, Sequence
import logging

import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import matplotlib.patches as mpatches
from matplotlib.lines import Line2D
import seaborn as sns
from adjustText import adjust_text

from degviz.core.table import ExpressionTable
from degviz.core.types import Bucket, PointShape
from degviz.encode import BucketCounts, count_buckets
from degviz.viz.core import Figure
from degviz.viz.styles import FONT_SIZES, Palette, configure_style, italicize_gene

__all__ = ['DifferentialVisualizer', 'BUCKET_ORDER']

logger = logging.getLogger(__name__)

BUCKET_ORDER = [Bucket.UP, Bucket.DOWN, Bucket.NONE]


def _neglog10(p_values: pd.Series) -> np.ndarray:
    """
    -log10 of adjusted p-values for plotting.

    Undefined values stay NaN (not drawn). Zero p-values would be infinitely
    high; they are drawn at the largest finite height.
    """
    p = p_values.to_numpy(dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        y = -np.log10(p)
    finite = np.isfinite(y)
    if finite.any():
        y[np.isposinf(y)] = y[finite].max()
    else:
        y[np.isposinf(y)] = np.nan
    return y


def _log10_positive(values: pd.Series | np.ndarray) -> np.ndarray:
    """log10 of positive values; zero and negative values become NaN."""
    v = np.asarray(values, dtype=float)
    out = np.full(v.shape, np.nan)
    positive = v > 0
    out[positive] = np.log10(v[positive])
    return out


class DifferentialVisualizer:
    """
    Matplotlib/seaborn renderers for differential expression results.

    Usage:
        viz = DifferentialVisualizer(palette="colorblind")
        fig = viz.plot_volcano(encoded, significance_cutoff=0.05,
                               fold_change_cutoff=1.0, limits=(-4, 4))
        fig.save("volcano.png")
    """

    def __init__(
        self,
        palette: str | Palette = "default",
        style: Literal["paper", "presentation", "notebook"] = "paper",
        figsize: tuple[float, float] = (7, 6),
    ):
        self.palette = configure_style(style=style, palette=palette)
        self.style = style
        self.figsize = figsize
        self.font_sizes = FONT_SIZES.get(style, FONT_SIZES["paper"])

    # =========================================================================
    # Volcano
    # =========================================================================

    def plot_volcano(
        self,
        table: ExpressionTable,
        significance_cutoff: float,
        fold_change_cutoff: float,
        limits: tuple[float, float],
        title: bool = True,
        legend: bool = True,
        grid: bool = True,
        highlight: Optional[Sequence[str]] = None,
    ) -> Figure:
        """
        Volcano plot: clamped log2 fold-change vs -log10(adjusted p-value).

        Args:
            table: Classified and encoded ExpressionTable
            significance_cutoff: Adjusted p-value cutoff (horizontal guide)
            fold_change_cutoff: log2 fold-change cutoff (vertical guides)
            limits: x axis limits the table was encoded with
            title, legend, grid: Presence toggles
            highlight: Feature ids to label

        Returns:
            Figure wrapper with matplotlib figure
        """
        frame = table.frame
        frame["plot_x"] = frame["lfc_plot"]
        frame["plot_y"] = _neglog10(frame["adjusted_p_value"])

        fig, ax = plt.subplots(figsize=self.figsize)
        counts = count_buckets(frame)
        self._draw_points(ax, frame)

        for xv in (-fold_change_cutoff, fold_change_cutoff):
            ax.axvline(xv, color=self.palette.guide, linestyle="--", linewidth=0.8)
        ax.axhline(-np.log10(significance_cutoff), color=self.palette.guide,
                   linestyle="--", linewidth=0.8)

        ax.set_xlim(limits)
        ax.set_xlabel(f"log$_2$({table.y} / {table.x})", fontsize=self.font_sizes["label"])
        ax.set_ylabel(r"-log$_{10}$(adjusted p-value)", fontsize=self.font_sizes["label"])

        self._finish(ax, table, frame, counts, limits, title, legend, grid, highlight)
        return Figure(
            fig=fig,
            title=f"Volcano: {table.y} vs. {table.x}",
            description=(
                f"log2({table.y}/{table.x}) against -log10 adjusted p-value; "
                f"{counts.up} up, {counts.down} down at padj < {significance_cutoff}, "
                f"|LFC| > {fold_change_cutoff}"
            ),
            metadata=self._metadata(
                "volcano", table, counts, significance_cutoff, fold_change_cutoff, limits
            ),
        )

    # =========================================================================
    # MA
    # =========================================================================

    def plot_ma(
        self,
        table: ExpressionTable,
        significance_cutoff: float,
        fold_change_cutoff: float,
        limits: tuple[float, float],
        title: bool = True,
        legend: bool = True,
        grid: bool = True,
        highlight: Optional[Sequence[str]] = None,
    ) -> Figure:
        """
        MA plot: log10 mean expression vs clamped log2 fold-change.

        Mean expression is the average of mean_x and mean_y; features with no
        expression in either condition are not drawn.
        """
        frame = table.frame
        frame["plot_x"] = _log10_positive((frame["mean_x"] + frame["mean_y"]) / 2)
        frame["plot_y"] = frame["lfc_plot"]

        fig, ax = plt.subplots(figsize=self.figsize)
        counts = count_buckets(frame)
        self._draw_points(ax, frame)

        ax.axhline(0, color=self.palette.guide, linewidth=0.8)
        for yv in (-fold_change_cutoff, fold_change_cutoff):
            ax.axhline(yv, color=self.palette.guide, linestyle="--", linewidth=0.8)

        ax.set_ylim(limits)
        ax.set_xlabel(r"log$_{10}$(mean expression)", fontsize=self.font_sizes["label"])
        ax.set_ylabel(f"log$_2$({table.y} / {table.x})", fontsize=self.font_sizes["label"])

        self._finish(ax, table, frame, counts, limits, title, legend, grid, highlight)
        return Figure(
            fig=fig,
            title=f"MA: {table.y} vs. {table.x}",
            description=(
                f"log10 mean expression against log2({table.y}/{table.x}); "
                f"{counts.up} up, {counts.down} down"
            ),
            metadata=self._metadata(
                "ma", table, counts, significance_cutoff, fold_change_cutoff, limits
            ),
        )

    # =========================================================================
    # Scatter
    # =========================================================================

    def plot_scatter(
        self,
        table: ExpressionTable,
        significance_cutoff: float,
        fold_change_cutoff: float,
        title: bool = True,
        legend: bool = True,
        grid: bool = True,
        highlight: Optional[Sequence[str]] = None,
    ) -> Figure:
        """
        Scatterplot of log10 mean expression, condition y against condition x.

        The solid diagonal marks equal expression; dashed diagonals mark the
        fold-change cutoff.
        """
        frame = table.frame
        frame["plot_x"] = _log10_positive(frame["mean_x"])
        frame["plot_y"] = _log10_positive(frame["mean_y"])

        fig, ax = plt.subplots(figsize=self.figsize)
        counts = count_buckets(frame)
        self._draw_points(ax, frame, clamp_shapes=False)

        offset = fold_change_cutoff * np.log10(2)
        ax.axline((0, 0), slope=1, color=self.palette.guide, linewidth=0.8)
        for dy in (-offset, offset):
            ax.axline((0, dy), slope=1, color=self.palette.guide, linestyle="--", linewidth=0.8)

        ax.set_xlabel(f"log$_{{10}}$({table.x})", fontsize=self.font_sizes["label"])
        ax.set_ylabel(f"log$_{{10}}$({table.y})", fontsize=self.font_sizes["label"])

        self._finish(ax, table, frame, counts, None, title, legend, grid, highlight)
        return Figure(
            fig=fig,
            title=f"Scatter: {table.y} vs. {table.x}",
            description=f"log10 mean expression of {table.y} against {table.x}",
            metadata=self._metadata(
                "scatter", table, counts, significance_cutoff, fold_change_cutoff, None
            ),
        )

    # =========================================================================
    # Box
    # =========================================================================

    def plot_box(
        self,
        table: ExpressionTable,
        title: bool = True,
        legend: bool = True,
        grid: bool = True,
    ) -> Figure:
        """Box plot of log10 mean expression for each condition."""
        frame = table.frame
        long = pd.DataFrame({
            "condition": [table.x] * len(frame) + [table.y] * len(frame),
            "log10_mean": np.concatenate([
                _log10_positive(frame["mean_x"]),
                _log10_positive(frame["mean_y"]),
            ]),
        }).dropna()
        colors = {table.x: self.palette.reference, table.y: self.palette.compared}

        fig, ax = plt.subplots(figsize=self.figsize)
        sns.boxplot(
            data=long,
            x="condition",
            y="log10_mean",
            hue="condition",
            order=[table.x, table.y],
            hue_order=[table.x, table.y],
            palette=colors,
            width=0.5,
            legend=False,
            ax=ax,
        )
        ax.set_xlabel("")
        ax.set_ylabel(r"log$_{10}$(mean expression)", fontsize=self.font_sizes["label"])

        if title:
            ax.set_title(f"{table.y} vs. {table.x}", fontsize=self.font_sizes["title"],
                         fontweight="bold")
        if legend:
            handles = [
                mpatches.Patch(color=colors[c], label=f"{c} (n={int(long['condition'].eq(c).sum())})")
                for c in (table.x, table.y)
            ]
            ax.legend(handles=handles, loc="best", fontsize=self.font_sizes["annotation"])
        self._apply_grid(ax, grid)
        fig.tight_layout()

        counts = count_buckets(frame)
        return Figure(
            fig=fig,
            title=f"Box: {table.y} vs. {table.x}",
            description=f"Distribution of log10 mean expression in {table.x} and {table.y}",
            metadata=self._metadata("box", table, counts, None, None, None),
        )

    # =========================================================================
    # Shared pieces
    # =========================================================================

    def _draw_points(self, ax, frame: pd.DataFrame, clamp_shapes: bool = True) -> None:
        """Scatter points one marker shape at a time, significant ones on top."""
        frame = frame.sort_values("is_significant", kind="mergesort")
        if clamp_shapes:
            groups = [(shape, frame[frame["shape"] == shape.value]) for shape in PointShape]
        else:
            groups = [(PointShape.CIRCLE, frame)]
        for shape, sub in groups:
            if sub.empty:
                continue
            ax.scatter(
                sub["plot_x"],
                sub["plot_y"],
                c=sub["color"].tolist(),
                s=sub["size"].to_numpy(),
                marker=shape.marker,
                alpha=0.7,
                linewidths=0,
            )

    def _finish(
        self,
        ax,
        table: ExpressionTable,
        frame: pd.DataFrame,
        counts: BucketCounts,
        limits: Optional[tuple[float, float]],
        title: bool,
        legend: bool,
        grid: bool,
        highlight: Optional[Sequence[str]],
    ) -> None:
        if title:
            ax.set_title(f"{table.y} vs. {table.x}", fontsize=self.font_sizes["title"],
                         fontweight="bold")
        if legend:
            ax.legend(handles=self._legend_handles(frame, counts, limits),
                      loc="best", fontsize=self.font_sizes["annotation"])
        self._apply_grid(ax, grid)
        if highlight:
            self._label_features(ax, frame, highlight)
        ax.figure.tight_layout()

    def _legend_handles(
        self,
        frame: pd.DataFrame,
        counts: BucketCounts,
        limits: Optional[tuple[float, float]],
    ) -> list[Line2D]:
        handles = [
            Line2D([], [], marker="o", linestyle="", markersize=6,
                   color=self.palette.for_bucket(b), label=counts.label(b))
            for b in BUCKET_ORDER
        ]
        if limits is not None:
            low, high = limits
            shape_labels = {
                PointShape.TRIANGLE_UP: f"> {high:.2g}",
                PointShape.TRIANGLE_DOWN: f"< {low:.2g}",
            }
            for shape, label in shape_labels.items():
                if (frame["shape"] == shape.value).any():
                    handles.append(Line2D([], [], marker=shape.marker, linestyle="",
                                          markersize=6, color=self.palette.guide, label=label))
        return handles

    @staticmethod
    def _apply_grid(ax, grid: bool) -> None:
        if grid:
            ax.minorticks_on()
            ax.grid(True, which="major", linewidth=0.6, alpha=0.5)
            ax.grid(True, which="minor", linewidth=0.3, alpha=0.3)
        else:
            ax.grid(False)
            sns.despine(ax=ax)

    def _label_features(self, ax, frame: pd.DataFrame, highlight: Sequence[str]) -> None:
        """Label highlighted features using adjustText for non-overlapping placement."""
        wanted = set(highlight)
        rows = frame[frame["feature_id"].isin(wanted)]
        unknown = wanted - set(rows["feature_id"])
        if unknown:
            logger.warning(f"Highlighted features not in table: {sorted(unknown)}")

        texts = []
        for _, row in rows.iterrows():
            if not (np.isfinite(row["plot_x"]) and np.isfinite(row["plot_y"])):
                continue
            texts.append(ax.text(
                row["plot_x"], row["plot_y"],
                italicize_gene(row["feature_id"]),
                fontsize=self.font_sizes["annotation"],
                color=self.palette.label,
            ))

        if texts:
            adjust_text(
                texts, ax=ax,
                arrowprops=dict(arrowstyle="-", color=self.palette.guide, lw=0.5),
            )

    @staticmethod
    def _metadata(
        kind: str,
        table: ExpressionTable,
        counts: BucketCounts,
        significance_cutoff: Optional[float],
        fold_change_cutoff: Optional[float],
        limits: Optional[tuple[float, float]],
    ) -> dict:
        return {
            "kind": kind,
            "tool": table.tool.value,
            "x": table.x,
            "y": table.y,
            "n_points": table.n_records,
            "counts": {"up": counts.up, "down": counts.down, "none": counts.none},
            "significance_cutoff": significance_cutoff,
            "fold_change_cutoff": fold_change_cutoff,
            "limits": limits,
        }
