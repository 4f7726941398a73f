"""
Visualization module for differential expression results.

Static matplotlib/seaborn renderers for the four plot types:
- Volcano: log2 fold-change vs. -log10 adjusted p-value
- MA: log10 mean expression vs. log2 fold-change
- Scatter: log10 mean expression in one condition vs. the other
- Box: log10 mean expression distribution per condition

Examples
--------
>>> from degviz.viz import DifferentialVisualizer
>>>
>>> viz = DifferentialVisualizer(style="paper")
>>> fig = viz.plot_volcano(encoded_table, significance_cutoff=0.05,
...                        fold_change_cutoff=1.0, limits=(-4, 4))
>>> fig.save("figures/volcano.pdf")
"""

from degviz.viz.core import Figure
from degviz.viz.styles import Palette, PALETTES, configure_style
from degviz.viz.plots import DifferentialVisualizer

__all__ = [
    # Core
    "Figure",
    # Styles
    "Palette",
    "PALETTES",
    "configure_style",
    # Visualizers
    "DifferentialVisualizer",
]
