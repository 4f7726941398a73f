"""
Tests for the renderers and the Figure wrapper.
"""

import base64

import numpy as np
import pandas as pd
import pytest

from degviz.classify import Classifier
from degviz.core import ExpressionTable
from degviz.encode import Encoder
from degviz.viz import DifferentialVisualizer, Figure, PALETTES
from degviz.viz.plots import _log10_positive, _neglog10
from degviz.viz.styles import italicize_gene


@pytest.fixture
def encoded():
    rng = np.random.default_rng(11)
    n = 120
    frame = pd.DataFrame({
        "feature_id": [f"Gene{i}" for i in range(n)],
        "mean_x": rng.lognormal(3, 1, n),
        "mean_y": rng.lognormal(3, 1, n),
        "log_fold_change": rng.normal(0, 2, n),
        "adjusted_p_value": rng.uniform(0, 0.2, n),
    })
    table = ExpressionTable(frame, x="ctrl", y="treat", tool="edger")
    return Encoder(limits=(-3, 3))(Classifier(0.05, 1.0)(table))


def test_neglog10_zero_p_value_drawn_at_top():
    y = _neglog10(pd.Series([0.0, 1e-10, 0.5, np.nan]))
    assert y[0] == pytest.approx(10.0)
    assert y[1] == pytest.approx(10.0)
    assert np.isnan(y[3])


def test_log10_positive():
    out = _log10_positive(np.array([100.0, 0.0, -1.0]))
    assert out[0] == 2.0
    assert np.isnan(out[1:]).all()


def test_italicize_gene():
    assert italicize_gene("SOD1") == "$\\mathit{SOD1}$"
    assert italicize_gene("ENSG_1") == "ENSG_1"


class TestDifferentialVisualizer:
    """Renderer output."""

    def test_volcano_guides_and_metadata(self, encoded):
        fig = DifferentialVisualizer().plot_volcano(encoded, 0.05, 1.0, limits=(-3, 3))

        ax = fig.axes
        assert ax.get_xlim() == (-3.0, 3.0)
        assert fig.metadata["n_points"] == len(encoded)
        assert fig.metadata["counts"]["up"] == int((encoded.column("bucket") == "up").sum())
        # two vertical fold-change guides and one significance guide
        assert len(ax.get_lines()) == 3

    def test_clamped_points_get_legend_entry(self, encoded):
        fig = DifferentialVisualizer().plot_ma(encoded, 0.05, 1.0, limits=(-3, 3))
        labels = [t.get_text() for t in fig.axes.get_legend().get_texts()]
        if encoded.column("is_outlier").any():
            assert any(label.startswith(">") or label.startswith("<") for label in labels)

    def test_palette_colors_used(self, encoded):
        palette = PALETTES["print"]
        fig = DifferentialVisualizer(palette="print").plot_scatter(encoded, 0.05, 1.0)
        handles = fig.axes.get_legend().legend_handles
        assert handles[0].get_color() == palette.up

    def test_box_without_legend(self, encoded):
        fig = DifferentialVisualizer(style="presentation").plot_box(encoded, legend=False)
        assert fig.axes.get_legend() is None
        assert fig.metadata["kind"] == "box"


class TestFigure:
    """Saving and embedding."""

    @pytest.fixture
    def figure(self, encoded):
        return DifferentialVisualizer().plot_volcano(encoded, 0.05, 1.0, limits=(-3, 3))

    @pytest.mark.parametrize("suffix", ["png", "pdf", "svg", "html"])
    def test_save_formats(self, figure, tmp_path, suffix):
        path = figure.save(tmp_path / "sub" / f"plot.{suffix}", dpi=50)
        assert path.exists()
        if suffix == "html":
            assert "data:image/png;base64," in path.read_text()

    def test_base64_and_repr_png(self, figure):
        raw = base64.b64decode(figure.to_base64(dpi=50))
        assert raw.startswith(b"\x89PNG")
        assert figure._repr_png_().startswith(b"\x89PNG")

    def test_created_at(self, figure):
        assert isinstance(figure, Figure)
        assert "created_at" in figure.metadata
