"""
Figure wrapper returned by every plot function.

A Figure bundles the rendered matplotlib figure with a title, a one-line
description of what was drawn and the parameters that produced it. It is
returned rather than displayed, so scripts decide where it goes and notebooks
render it through ``_repr_png_``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from html import escape
from pathlib import Path
from typing import Literal, Optional
import base64
import io

import matplotlib.figure
import matplotlib.pyplot as plt

__all__ = ['Figure', 'OutputFormat']

OutputFormat = Literal["png", "pdf", "svg", "html"]

_SUFFIX_FORMATS = {"png", "pdf", "svg", "html"}

_HTML_PAGE = """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>{title}</title></head>
<body style="font-family:sans-serif;max-width:60em;margin:2em auto;">
<figure>
<img src="data:image/png;base64,{image}" alt="{title}" style="max-width:100%;">
<figcaption>{description}</figcaption>
</figure>
</body>
</html>
"""


@dataclass
class Figure:
    """
    A rendered differential expression plot.

    Attributes
    ----------
    fig : matplotlib.figure.Figure
        The underlying figure
    title : str
        Short title, e.g. ``"Volcano: iPS vs. hESC"``
    description : str
        What the plot shows, including bucket counts
    metadata : dict
        Plot parameters: ``kind``, ``tool``, ``x``, ``y``, ``n_points``,
        ``counts``, cutoffs and ``limits``, plus ``created_at``.

    Examples
    --------
    >>> fig = vs_volcano("hESC", "iPS", diff_df, type="cuffdiff")
    >>> fig.metadata["n_points"]
    1200
    >>> fig.save("figures/volcano.pdf")
    """
    fig: matplotlib.figure.Figure
    title: str
    description: str
    metadata: dict = field(default_factory=dict)

    def __post_init__(self):
        self.metadata.setdefault("created_at", datetime.now().isoformat())

    @property
    def axes(self):
        """The plot's axes."""
        return self.fig.axes[0]

    @property
    def n_points(self) -> int:
        """Number of table rows the plot was drawn from."""
        return int(self.metadata.get("n_points", 0))

    def save(
        self,
        path: Path | str,
        format: Optional[OutputFormat] = None,
        dpi: int = 300,
        **kwargs
    ) -> Path:
        """
        Write the figure to ``path``, creating parent directories.

        Parameters
        ----------
        path : Path or str
            Destination. Without ``format`` the suffix decides; unknown
            suffixes are written as PNG.
        format : {"png", "pdf", "svg", "html"}, optional
            ``html`` writes a standalone page with an embedded PNG and the
            description as caption.
        dpi : int, default 300
            Resolution of raster output.
        **kwargs
            Passed to ``savefig``.

        Returns
        -------
        Path
        """
        path = Path(path)
        if format is None:
            suffix = path.suffix.lstrip(".").lower()
            format = suffix if suffix in _SUFFIX_FORMATS else "png"
        path.parent.mkdir(parents=True, exist_ok=True)

        if format == "html":
            path.write_text(_HTML_PAGE.format(
                title=escape(self.title),
                description=escape(self.description),
                image=self.to_base64(dpi=dpi),
            ))
        else:
            self.fig.savefig(
                path, format=format, dpi=dpi,
                **{"bbox_inches": "tight", "facecolor": "white", **kwargs}
            )
        return path

    def to_bytes(self, format: str = "png", dpi: int = 150) -> bytes:
        buf = io.BytesIO()
        self.fig.savefig(buf, format=format, dpi=dpi, bbox_inches="tight", facecolor="white")
        return buf.getvalue()

    def to_base64(self, format: str = "png", dpi: int = 150) -> str:
        """Image as a base64 string, for embedding in HTML or JSON."""
        return base64.b64encode(self.to_bytes(format=format, dpi=dpi)).decode()

    def _repr_png_(self) -> bytes:
        return self.to_bytes()

    def show(self):
        self.fig.show()

    def close(self):
        """Release the figure; matplotlib keeps open figures alive otherwise."""
        plt.close(self.fig)
