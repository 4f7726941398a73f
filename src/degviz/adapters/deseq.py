"""
DESeq2 adapter.

DESeq2 results depend on the contrast requested, so this adapter needs the
fitted dataset plus the grouping factor (``d_factor``) that defines the two
conditions. The input is a pydeseq2 ``DeseqDataSet`` (an AnnData with sample
metadata in ``.obs``) on which ``deseq2()`` has been run.

The contrast is requested as ``[d_factor, y, x]``, so DESeq2's
``log2FoldChange`` is already log2(y / x).

Mean expression per condition is the average of the normalized counts
(``layers["normed_counts"]``) over the samples of each level. Datasets without
that layer fall back to splitting ``baseMean`` by the fold-change.
"""

from __future__ import annotations

from typing import Any, Optional
import logging

import numpy as np
import pandas as pd

from degviz.adapters.base import Adapter
from degviz.core.errors import InvalidArgument
from degviz.core.types import ToolType

__all__ = ['DESeqAdapter', 'DESEQ_RESULT_COLUMNS']

logger = logging.getLogger(__name__)

DESEQ_RESULT_COLUMNS = ["baseMean", "log2FoldChange", "padj"]


class DESeqAdapter(Adapter):
    """Adapter for fitted pydeseq2 ``DeseqDataSet`` objects."""

    tool = ToolType.DESEQ
    requires_factor = True

    def to_frame(
        self,
        data: Any,
        x: str,
        y: str,
        d_factor: Optional[str],
    ) -> pd.DataFrame:
        levels = self.factor_levels(data, d_factor)
        missing = [label for label in (x, y) if label not in levels]
        if missing:
            raise InvalidArgument(
                f"Conditions {missing} are not levels of '{d_factor}' "
                f"(levels: {sorted(levels)})"
            )

        results = self.contrast_results(data, d_factor, x, y)
        self.require_columns(results, DESEQ_RESULT_COLUMNS, "DESeq2 results")

        lfc = pd.to_numeric(results["log2FoldChange"], errors="coerce")
        mean_x, mean_y = self.condition_means(data, results, d_factor, x, y)

        return pd.DataFrame({
            "feature_id": results.index.astype(str),
            "mean_x": mean_x,
            "mean_y": mean_y,
            "log_fold_change": lfc.to_numpy(),
            "adjusted_p_value": pd.to_numeric(results["padj"], errors="coerce").to_numpy(),
        })

    @staticmethod
    def factor_levels(data: Any, d_factor: str) -> set[str]:
        """Levels of the grouping factor in the sample metadata."""
        obs = getattr(data, "obs", None)
        if not isinstance(obs, pd.DataFrame):
            raise InvalidArgument(
                "deseq data must be a fitted DeseqDataSet (AnnData with sample metadata in .obs), "
                f"got {type(data).__name__}"
            )
        if d_factor not in obs.columns:
            raise InvalidArgument(
                f"d_factor '{d_factor}' not found in sample metadata columns {list(obs.columns)}"
            )
        return set(obs[d_factor].astype(str))

    def contrast_results(
        self,
        data: Any,
        d_factor: str,
        x: str,
        y: str,
    ) -> pd.DataFrame:
        """Run DESeq2's Wald test summary for the contrast y vs. x."""
        try:
            from pydeseq2.ds import DeseqStats
        except ImportError as e:
            raise ImportError(
                "DESeq2 support requires pydeseq2. "
                "Install with: pip install 'degviz[deseq]'"
            ) from e

        logger.info(f"Requesting DESeq2 contrast [{d_factor}, {y}, {x}]")
        stats = DeseqStats(data, contrast=[d_factor, y, x], quiet=True)
        stats.summary()
        return stats.results_df

    @staticmethod
    def condition_means(
        data: Any,
        results: pd.DataFrame,
        d_factor: str,
        x: str,
        y: str,
    ) -> tuple[np.ndarray, np.ndarray]:
        """Per-condition mean normalized counts, aligned to ``results``."""
        layers = getattr(data, "layers", None)
        if layers is not None and "normed_counts" in layers:
            normed = pd.DataFrame(
                np.asarray(layers["normed_counts"], dtype=float),
                index=data.obs_names,
                columns=data.var_names,
            )
            groups = data.obs[d_factor].astype(str)
            mean_x = normed.loc[(groups == x).to_numpy()].mean(axis=0)
            mean_y = normed.loc[(groups == y).to_numpy()].mean(axis=0)
            return (
                mean_x.reindex(results.index).to_numpy(),
                mean_y.reindex(results.index).to_numpy(),
            )

        logger.debug("No normed_counts layer; splitting baseMean by log2FoldChange")
        base = pd.to_numeric(results["baseMean"], errors="coerce").to_numpy(dtype=float)
        lfc = pd.to_numeric(results["log2FoldChange"], errors="coerce").to_numpy(dtype=float)
        ratio = np.exp2(np.where(np.isfinite(lfc), lfc, 0.0))
        mean_x = 2 * base / (1 + ratio)
        mean_y = 2 * base - mean_x
        return mean_x, mean_y
