"""
Typography and matplotlib/seaborn settings shared by every renderer.

Palettes live in degviz.core.palette (the Encoder needs them without pulling
in matplotlib) and are re-exported here.

Conventions:
- Gene symbols are italicized through mathtext
- Cutoff guides are dashed lines in the palette's guide color
- Grid lines are switched per axes by the renderers
"""

from __future__ import annotations

from typing import Literal
import matplotlib.pyplot as plt
import seaborn as sns

from degviz.core.palette import PALETTES, Palette, resolve_palette

__all__ = [
    'Palette',
    'PALETTES',
    'resolve_palette',
    'configure_style',
    'italicize_gene',
    'FONT_SIZES',
]

Style = Literal["paper", "presentation", "notebook"]

# Point sizes per text role
FONT_SIZES = {
    "paper": {"title": 12, "label": 10, "tick": 9, "annotation": 8},
    "presentation": {"title": 18, "label": 14, "tick": 12, "annotation": 10},
    "notebook": {"title": 12, "label": 11, "tick": 10, "annotation": 8},
}

# style -> (seaborn context, screen dpi, savefig dpi, axes line width)
_MEDIA = {
    "paper": ("paper", 150, 300, 0.8),
    "presentation": ("talk", 100, 150, 1.5),
    "notebook": ("notebook", 100, 150, 1.0),
}

_INK = "#333333"

# mathtext cannot typeset identifiers containing these
_MATHTEXT_UNSAFE = set("_$^\\{}%#&~ ")


def configure_style(
    style: Style = "paper",
    palette: str | Palette = "default",
    font_scale: float = 1.0
) -> Palette:
    """
    Apply the seaborn theme and rcParams for a target medium.

    Parameters
    ----------
    style : {"paper", "presentation", "notebook"}
        paper: small type, 300 dpi output. presentation: large type for
        slides. notebook: medium type for interactive use. Unknown values
        are treated as paper.
    palette : str or Palette
        Palette name or instance.
    font_scale : float
        Multiplier for every font size.

    Returns
    -------
    Palette
        The resolved palette, for the caller's renderers.
    """
    if style not in _MEDIA:
        style = "paper"
    context, screen_dpi, save_dpi, linewidth = _MEDIA[style]
    sizes = FONT_SIZES[style]

    sns.set_theme(style="ticks", context=context, font_scale=font_scale)
    plt.rcParams.update({
        "figure.facecolor": "white",
        "axes.facecolor": "white",
        "axes.edgecolor": _INK,
        "axes.labelcolor": _INK,
        "text.color": _INK,
        "xtick.color": _INK,
        "ytick.color": _INK,
        "legend.frameon": False,
        "figure.dpi": screen_dpi,
        "savefig.dpi": save_dpi,
        "axes.linewidth": linewidth,
        "font.size": sizes["label"] * font_scale,
        "axes.titlesize": sizes["title"] * font_scale,
        "axes.labelsize": sizes["label"] * font_scale,
        "xtick.labelsize": sizes["tick"] * font_scale,
        "ytick.labelsize": sizes["tick"] * font_scale,
        "legend.fontsize": sizes["annotation"] * font_scale,
    })

    return resolve_palette(palette)


def italicize_gene(gene: str) -> str:
    """
    Mathtext-italic gene symbol, e.g. ``SOD1`` -> ``$\\mathit{SOD1}$``.

    Identifiers mathtext cannot typeset (underscores, spaces, ...) are
    returned unchanged.
    """
    if _MATHTEXT_UNSAFE.intersection(gene):
        return gene
    return f"$\\mathit{{{gene}}}$"
