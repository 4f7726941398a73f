"""
Adapters from tool-specific results to the canonical ExpressionTable.

Examples
--------
>>> from degviz.adapters import get_adapter
>>> adapter = get_adapter("cuffdiff")
>>> table = adapter.extract(diff_df, x="hESC", y="iPS")
"""

from degviz.adapters.base import Adapter
from degviz.adapters.cuffdiff import CuffdiffAdapter
from degviz.adapters.deseq import DESeqAdapter
from degviz.adapters.edger import EdgeRAdapter
from degviz.core.types import ToolType

__all__ = [
    "Adapter",
    "CuffdiffAdapter",
    "DESeqAdapter",
    "EdgeRAdapter",
    "ADAPTERS",
    "get_adapter",
]

ADAPTERS: dict[ToolType, type[Adapter]] = {
    ToolType.CUFFDIFF: CuffdiffAdapter,
    ToolType.DESEQ: DESeqAdapter,
    ToolType.EDGER: EdgeRAdapter,
}


def get_adapter(tool: ToolType | str | None) -> Adapter:
    """Return the adapter for a tool tag; raises InvalidArgument if unknown."""
    return ADAPTERS[ToolType.parse(tool)]()
