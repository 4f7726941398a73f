"""
edgeR adapter.

Input is the table of an edgeR ``exactTest``/``glmLRT`` result as returned by
``topTags(..., n = Inf)$table``, indexed by feature:

    logFC  logCPM  PValue  FDR

For ``exactTest(pair = c(x, y))`` edgeR reports logFC = log2(y / x), which is
already the canonical direction. If the table carries the compared pair in
``attrs["comparison"]`` (see degviz.io.loaders.read_edger_table) it is checked
against x and y, and a reversed pair negates logFC.

edgeR does not report per-condition means, so they are reconstructed around
the average abundance A = 2**logCPM as A * 2**(-logFC/2) and A * 2**(logFC/2).
"""

from __future__ import annotations

from typing import Any, Optional
import logging

import numpy as np
import pandas as pd

from degviz.adapters.base import Adapter
from degviz.core.errors import InvalidArgument
from degviz.core.types import ToolType

__all__ = ['EdgeRAdapter', 'EDGER_COLUMNS']

logger = logging.getLogger(__name__)

EDGER_COLUMNS = ["logFC", "logCPM", "FDR"]


class EdgeRAdapter(Adapter):
    """Adapter for edgeR ``topTags`` tables."""

    tool = ToolType.EDGER

    def to_frame(
        self,
        data: Any,
        x: str,
        y: str,
        d_factor: Optional[str],
    ) -> pd.DataFrame:
        if not isinstance(data, pd.DataFrame):
            raise InvalidArgument(
                f"edger data must be a pandas DataFrame (topTags table), got {type(data).__name__}"
            )
        self.require_columns(data, EDGER_COLUMNS, "edgeR table")
        if d_factor is not None:
            logger.debug("d_factor is ignored for edger data")

        lfc = pd.to_numeric(data["logFC"], errors="coerce").to_numpy(dtype=float)
        if self.is_reversed(data, x, y):
            logger.debug(f"edgeR compared {x} to {y}; negating logFC")
            lfc = -lfc

        abundance = np.exp2(pd.to_numeric(data["logCPM"], errors="coerce").to_numpy(dtype=float))
        with np.errstate(over="ignore", invalid="ignore"):
            mean_x = abundance * np.exp2(-lfc / 2)
            mean_y = abundance * np.exp2(lfc / 2)

        return pd.DataFrame({
            "feature_id": data.index.astype(str),
            "mean_x": mean_x,
            "mean_y": mean_y,
            "log_fold_change": lfc,
            "adjusted_p_value": pd.to_numeric(data["FDR"], errors="coerce").to_numpy(),
        })

    @staticmethod
    def is_reversed(data: pd.DataFrame, x: str, y: str) -> bool:
        """
        Whether the table's recorded comparison is (y, x) rather than (x, y).

        Tables without a recorded comparison are taken as (x, y), with a
        warning: the labels cannot be checked against the data.
        """
        comparison = data.attrs.get("comparison")
        if comparison is None:
            logger.warning(
                f"edgeR table has no recorded comparison; assuming logFC = log2({y}/{x}). "
                "Pass comparison=(x, y) to read_edger_table or --comparison to verify"
            )
            return False
        pair = [str(c) for c in comparison]
        if pair == [x, y]:
            return False
        if pair == [y, x]:
            return True
        raise InvalidArgument(
            f"edgeR table compares {pair}, which does not match conditions [{x!r}, {y!r}]"
        )
