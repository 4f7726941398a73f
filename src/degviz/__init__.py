"""
degviz: visualization of differential gene expression results.

Draws volcano, MA, scatter and box plots from the output of Cuffdiff, DESeq2
(pydeseq2) and edgeR, with a shared classification of features into
up-regulated, down-regulated and non-significant buckets.

Examples
--------
>>> import pandas as pd
>>> from degviz import vs_volcano, read_cuffdiff
>>>
>>> diff = read_cuffdiff("cuffdiff_out/gene_exp.diff")
>>> fig = vs_volcano("hESC", "iPS", diff, type="cuffdiff")
>>> fig.save("volcano.png")
"""

__version__ = "0.1.0"

from degviz.api import vs_volcano, vs_ma_plot, vs_scatter_plot, vs_box_plot, prepare_table
from degviz.config import PlotConfig
from degviz.core import InvalidArgument, ToolType, Bucket, ExpressionTable
from degviz.io import read_cuffdiff, read_edger_table

__all__ = [
    "__version__",
    "vs_volcano",
    "vs_ma_plot",
    "vs_scatter_plot",
    "vs_box_plot",
    "prepare_table",
    "PlotConfig",
    "InvalidArgument",
    "ToolType",
    "Bucket",
    "ExpressionTable",
    "read_cuffdiff",
    "read_edger_table",
]
