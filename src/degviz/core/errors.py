"""
Exception types raised by degviz.

All argument validation failures surface as ``InvalidArgument`` before any
data is processed. It subclasses ``ValueError`` so callers that already catch
``ValueError`` keep working.
"""

from __future__ import annotations

__all__ = ['InvalidArgument']


class InvalidArgument(ValueError):
    """Raised when a plot call is given an argument it cannot use."""
    pass
