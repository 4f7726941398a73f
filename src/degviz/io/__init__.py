"""
I/O module for reading differential expression tool output from disk.

Key Functions:
    - read_cuffdiff: Load a Cuffdiff ``*_exp.diff`` table
    - read_edger_table: Load an exported edgeR ``topTags`` table

DESeq2 results are not read from disk: the DESeq2 adapter needs the fitted
pydeseq2 ``DeseqDataSet`` to request a contrast.

Examples:
    >>> from degviz.io import read_cuffdiff, read_edger_table
    >>>
    >>> diff = read_cuffdiff("cuffdiff_out/gene_exp.diff")
    >>> tags = read_edger_table("toptags.csv", comparison=("WT", "KO"))
"""

from degviz.io.loaders import read_cuffdiff, read_edger_table, sniff_delimiter

__all__ = [
    'read_cuffdiff',
    'read_edger_table',
    'sniff_delimiter',
]
