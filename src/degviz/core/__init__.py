"""
Core data structures: canonical expression table, enums, transforms, errors.
"""

from degviz.core.errors import InvalidArgument
from degviz.core.types import ToolType, Bucket, PointShape
from degviz.core.palette import Palette, PALETTES
from degviz.core.table import ExpressionRecord, ExpressionTable, CANONICAL_COLUMNS
from degviz.core.transform import Transform

__all__ = [
    "InvalidArgument",
    "ToolType",
    "Bucket",
    "PointShape",
    "Palette",
    "PALETTES",
    "ExpressionRecord",
    "ExpressionTable",
    "CANONICAL_COLUMNS",
    "Transform",
]
