"""
Base transformation framework for canonical expression tables.

Classification and encoding are pure transformations: they take an
ExpressionTable plus parameters and return a new table with derived columns
appended. The input table is never modified, so the same adapter output can
be classified with different cutoffs side by side.

Examples:
    >>> from degviz.core.transform import Transform
    >>>
    >>> class AbsoluteLFC(Transform):
    ...     def __init__(self):
    ...         super().__init__(name="AbsoluteLFC", params={})
    ...
    ...     def apply(self, table):
    ...         return table.with_columns(
    ...             abs_lfc=table.column("log_fold_change").abs()
    ...         )
    >>>
    >>> annotated = AbsoluteLFC().apply(table)  # table is unchanged
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, TYPE_CHECKING

from degviz.core.errors import InvalidArgument

if TYPE_CHECKING:
    from degviz.core.table import ExpressionTable

__all__ = ['Transform']


class Transform(ABC):
    """
    Abstract base class for table transformations.

    Subclasses validate their parameters in ``__init__`` and raise
    InvalidArgument there, so a bad call fails before any data is touched.

    Attributes:
        name: Human-readable transformation name (e.g., "Classifier")
        params: Parameters used for this transformation
    """

    def __init__(self, name: str, params: dict[str, Any]) -> None:
        self.name = name
        self.params = params

    @abstractmethod
    def apply(self, table: ExpressionTable) -> ExpressionTable:
        """
        Execute the transformation and return a new table.

        Must never modify the input table.
        """
        pass

    def validate(self, table: ExpressionTable) -> list[str]:
        """
        Check preconditions before applying the transformation.

        Subclasses should override and call super().validate() first.

        Returns:
            List of error messages (empty list = valid)
        """
        return []

    def __call__(self, table: ExpressionTable) -> ExpressionTable:
        errors = self.validate(table)
        if errors:
            raise InvalidArgument(
                f"{self.name} cannot be applied:\n" + "\n".join(f"  - {e}" for e in errors)
            )
        return self.apply(table)

    def __repr__(self) -> str:
        """
        String representation for logging, e.g.
        ``Classifier(significance_cutoff=0.05, fold_change_cutoff=1.0)``.
        """
        params_str = ", ".join(f"{k}={v}" for k, v in self.params.items())
        return f"{self.name}({params_str})"
