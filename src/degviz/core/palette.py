"""
Color palettes for differential expression plots.

Domain Conventions
------------------
- Up-regulated = Red (#dc2626), Down-regulated = Blue (#2563eb)
- Not significant / unchanged = Gray (#9ca3af)
- Threshold guides = Slate dashed lines (#64748b)
- Reference condition (x) = Teal, compared condition (y) = Violet
"""

from __future__ import annotations

from dataclasses import dataclass

from degviz.core.types import Bucket

__all__ = ['Palette', 'PALETTES', 'resolve_palette']


@dataclass(frozen=True)
class Palette:
    """
    Color palette for differential expression plots.

    Attributes
    ----------
    up : str
        Color for significant, up-regulated records
    down : str
        Color for significant, down-regulated records
    none : str
        Color for records in no bucket
    guide : str
        Color for threshold guide lines
    reference : str
        Color for the reference condition (x) in box plots
    compared : str
        Color for the compared condition (y) in box plots
    label : str
        Color for highlighted feature labels
    """
    up: str = "#dc2626"          # Red-600
    down: str = "#2563eb"        # Blue-600
    none: str = "#9ca3af"        # Gray-400
    guide: str = "#64748b"       # Slate-500
    reference: str = "#0d9488"   # Teal-600
    compared: str = "#7c3aed"    # Violet-600
    label: str = "#1e293b"       # Slate-800

    @property
    def buckets(self) -> dict[str, str]:
        """Color mapping keyed by Bucket value."""
        return {
            Bucket.UP.value: self.up,
            Bucket.DOWN.value: self.down,
            Bucket.NONE.value: self.none,
        }

    def for_bucket(self, bucket: Bucket | str) -> str:
        key = bucket.value if isinstance(bucket, Bucket) else bucket
        return self.buckets[key]


# Predefined palettes
PALETTES = {
    "default": Palette(),
    "colorblind": Palette(
        up="#ee7733",        # Orange
        down="#0077bb",      # Blue
        none="#bbbbbb",
        guide="#555555",
        reference="#009988", # Teal
        compared="#aa3377",  # Purple
    ),
    "print": Palette(
        up="#1a1a1a",        # Near-black
        down="#666666",      # Dark gray
        none="#cccccc",
        guide="#333333",
        reference="#4d4d4d",
        compared="#999999",
        label="#000000",
    ),
}


def resolve_palette(palette: str | Palette | None) -> Palette:
    """Look up a palette by name; unknown names fall back to the default."""
    if palette is None:
        return PALETTES["default"]
    if isinstance(palette, Palette):
        return palette
    return PALETTES.get(palette, PALETTES["default"])
