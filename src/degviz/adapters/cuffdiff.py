"""
Cuffdiff adapter.

Cuffdiff writes one row per feature and sample pair to ``gene_exp.diff``
(or ``isoform_exp.diff``, ``cds_exp.diff``, ...):

    test_id  gene_id  gene  locus  sample_1  sample_2  status
    value_1  value_2  log2(fold_change)  test_stat  p_value  q_value  significant

``log2(fold_change)`` is log2(value_2 / value_1). Rows for the requested pair
are taken in either orientation; when Cuffdiff compared (y, x) the fold-change
is negated and the values swapped so the result is always log2(y / x).
"""

from __future__ import annotations

from typing import Any, Optional
import logging

import numpy as np
import pandas as pd

from degviz.adapters.base import Adapter
from degviz.core.errors import InvalidArgument
from degviz.core.types import ToolType

__all__ = ['CuffdiffAdapter', 'CUFFDIFF_COLUMNS']

logger = logging.getLogger(__name__)

CUFFDIFF_COLUMNS = [
    "test_id",
    "sample_1",
    "sample_2",
    "value_1",
    "value_2",
    "log2(fold_change)",
    "q_value",
]


class CuffdiffAdapter(Adapter):
    """Adapter for Cuffdiff ``*_exp.diff`` tables."""

    tool = ToolType.CUFFDIFF

    def to_frame(
        self,
        data: Any,
        x: str,
        y: str,
        d_factor: Optional[str],
    ) -> pd.DataFrame:
        if not isinstance(data, pd.DataFrame):
            raise InvalidArgument(
                f"cuffdiff data must be a pandas DataFrame (gene_exp.diff), got {type(data).__name__}"
            )
        self.require_columns(data, CUFFDIFF_COLUMNS, "Cuffdiff table")
        if d_factor is not None:
            logger.debug("d_factor is ignored for cuffdiff data")

        sample_1 = data["sample_1"].astype(str)
        sample_2 = data["sample_2"].astype(str)
        samples = set(sample_1) | set(sample_2)
        missing = [label for label in (x, y) if label not in samples]
        if missing:
            raise InvalidArgument(
                f"Conditions {missing} not found in Cuffdiff samples {sorted(samples)}"
            )

        forward = (sample_1 == x) & (sample_2 == y)
        reverse = (sample_1 == y) & (sample_2 == x)
        if not (forward.any() or reverse.any()):
            raise InvalidArgument(f"Cuffdiff table has no comparison between {x!r} and {y!r}")

        lfc = pd.to_numeric(data["log2(fold_change)"], errors="coerce")
        value_1 = pd.to_numeric(data["value_1"], errors="coerce")
        value_2 = pd.to_numeric(data["value_2"], errors="coerce")
        q_value = pd.to_numeric(data["q_value"], errors="coerce")

        if reverse.any():
            logger.debug(f"Cuffdiff compared {y} to {x}; negating log2(fold_change)")

        # positional selection keeps file order whatever the caller's index is
        keep = (forward | reverse).to_numpy()
        flip = reverse.to_numpy()[keep]
        v1 = value_1.to_numpy(dtype=float)[keep]
        v2 = value_2.to_numpy(dtype=float)[keep]
        selected_lfc = lfc.to_numpy(dtype=float)[keep]

        return pd.DataFrame({
            "feature_id": data["test_id"].to_numpy()[keep],
            "mean_x": np.where(flip, v2, v1),
            "mean_y": np.where(flip, v1, v2),
            "log_fold_change": np.where(flip, -selected_lfc, selected_lfc),
            "adjusted_p_value": q_value.to_numpy(dtype=float)[keep],
        })
