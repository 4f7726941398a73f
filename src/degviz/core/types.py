"""
Closed enumerations used across the plotting pipeline.

The tool tag, the classification bucket and the point shape are explicit
enums rather than free strings, so every mapping (adapter lookup, colors,
markers) is checked against a fixed set of members.

Examples:
    >>> from degviz.core.types import ToolType, Bucket, PointShape
    >>> ToolType.parse("DESeq")
    <ToolType.DESEQ: 'deseq'>
    >>> Bucket.UP.label
    'up'
    >>> PointShape.TRIANGLE_DOWN.marker
    'v'
"""

from __future__ import annotations

from enum import Enum

from degviz.core.errors import InvalidArgument

__all__ = ['ToolType', 'Bucket', 'PointShape']


class ToolType(Enum):
    """
    Differential expression tool that produced the input data.

    Attributes:
        CUFFDIFF: Cuffdiff ``gene_exp.diff`` style table
        DESEQ: fitted DESeq2 dataset (pydeseq2 ``DeseqDataSet``)
        EDGER: edgeR ``topTags``/``exactTest`` table
    """

    CUFFDIFF = "cuffdiff"
    DESEQ = "deseq"
    EDGER = "edger"

    @classmethod
    def parse(cls, value: ToolType | str | None) -> ToolType:
        """
        Resolve a tool tag from an enum member or a case-insensitive string.

        Raises:
            InvalidArgument: If the tag is missing or not one of the
                supported tools.
        """
        if isinstance(value, cls):
            return value
        if value is None:
            raise InvalidArgument(
                'Please specify analysis type ("cuffdiff", "deseq", or "edger")'
            )
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise InvalidArgument(
            f'Unrecognized analysis type {value!r}; '
            f'must be one of "cuffdiff", "deseq", or "edger"'
        )


class Bucket(Enum):
    """Classification of a record for color encoding."""

    UP = "up"
    DOWN = "down"
    NONE = "none"

    @property
    def label(self) -> str:
        return self.value


class PointShape(Enum):
    """
    Marker shape of a plotted point.

    Triangles mark points whose log-fold-change lies beyond the axis limits
    and was clamped to the boundary.
    """

    CIRCLE = "circle"
    TRIANGLE_UP = "triangle-up"
    TRIANGLE_DOWN = "triangle-down"

    @property
    def marker(self) -> str:
        """Matplotlib marker code."""
        return _MARKERS[self]


_MARKERS = {
    PointShape.CIRCLE: "o",
    PointShape.TRIANGLE_UP: "^",
    PointShape.TRIANGLE_DOWN: "v",
}
