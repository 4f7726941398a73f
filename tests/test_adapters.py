"""
Tests for the tool adapters.

Every adapter must return log_fold_change = log2(mean_y / mean_x) for the
requested (x, y) pair, whatever orientation the tool itself used.
"""

import logging
from types import SimpleNamespace

import numpy as np
import pandas as pd
import pytest

from degviz.adapters import (
    ADAPTERS,
    CuffdiffAdapter,
    DESeqAdapter,
    EdgeRAdapter,
    get_adapter,
)
from degviz import vs_volcano
from degviz.core import InvalidArgument, ToolType


class TestToolType:
    """Tool tag parsing and adapter registry."""

    @pytest.mark.parametrize("tag, expected", [
        ("cuffdiff", ToolType.CUFFDIFF),
        ("DESeq", ToolType.DESEQ),
        (" edgeR ", ToolType.EDGER),
        (ToolType.EDGER, ToolType.EDGER),
    ])
    def test_parse(self, tag, expected):
        assert ToolType.parse(tag) is expected

    def test_missing_tag(self):
        with pytest.raises(InvalidArgument, match="Please specify analysis type"):
            ToolType.parse(None)

    @pytest.mark.parametrize("tag", ["bogus", "", 3])
    def test_unknown_tag(self, tag):
        with pytest.raises(InvalidArgument, match="Unrecognized analysis type"):
            ToolType.parse(tag)

    def test_registry_covers_every_tool(self):
        assert set(ADAPTERS) == set(ToolType)
        assert isinstance(get_adapter("edger"), EdgeRAdapter)


class TestArguments:
    """Label checks shared by all adapters."""

    def test_same_conditions(self, cuffdiff_df):
        with pytest.raises(InvalidArgument, match="different conditions"):
            CuffdiffAdapter().extract(cuffdiff_df, "hESC", "hESC")

    @pytest.mark.parametrize("x", ["", None, 5])
    def test_bad_label(self, cuffdiff_df, x):
        with pytest.raises(InvalidArgument):
            CuffdiffAdapter().extract(cuffdiff_df, x, "iPS")


class TestCuffdiffAdapter:
    """Cuffdiff gene_exp.diff tables."""

    def test_forward_pair(self, cuffdiff_df):
        table = CuffdiffAdapter().extract(cuffdiff_df, "hESC", "iPS")
        frame = table.frame

        assert table.tool is ToolType.CUFFDIFF
        assert frame["feature_id"].tolist() == cuffdiff_df["test_id"].tolist()
        np.testing.assert_array_equal(frame["mean_x"], cuffdiff_df["value_1"])
        np.testing.assert_array_equal(frame["mean_y"], cuffdiff_df["value_2"])
        np.testing.assert_array_equal(frame["log_fold_change"], cuffdiff_df["log2(fold_change)"])
        np.testing.assert_array_equal(frame["adjusted_p_value"], cuffdiff_df["q_value"])

    def test_reversed_pair_negates_and_swaps(self, cuffdiff_df):
        table = CuffdiffAdapter().extract(cuffdiff_df, "iPS", "hESC")
        frame = table.frame

        np.testing.assert_array_equal(frame["log_fold_change"], -cuffdiff_df["log2(fold_change)"])
        np.testing.assert_array_equal(frame["mean_x"], cuffdiff_df["value_2"])
        np.testing.assert_array_equal(frame["mean_y"], cuffdiff_df["value_1"])

    def test_orientation_independent(self, cuffdiff_df, reversed_cuffdiff_df):
        forward = CuffdiffAdapter().extract(cuffdiff_df, "hESC", "iPS").frame
        reverse = CuffdiffAdapter().extract(reversed_cuffdiff_df, "hESC", "iPS").frame
        pd.testing.assert_frame_equal(forward, reverse)

    def test_mixed_orientation_keeps_file_order(self, cuffdiff_df, reversed_cuffdiff_df):
        mixed = pd.concat([cuffdiff_df.iloc[:3], reversed_cuffdiff_df.iloc[3:]], ignore_index=True)
        frame = CuffdiffAdapter().extract(mixed, "hESC", "iPS").frame

        assert frame["feature_id"].tolist() == cuffdiff_df["test_id"].tolist()
        np.testing.assert_array_equal(frame["log_fold_change"], cuffdiff_df["log2(fold_change)"])

    def test_string_index_keeps_file_order(self, cuffdiff_df):
        indexed = cuffdiff_df.set_index("gene", drop=False)
        frame = CuffdiffAdapter().extract(indexed, "hESC", "iPS").frame

        assert frame["feature_id"].tolist() == ["SOX2", "NANOG", "GAPDH", "POU5F1", "LIN28A", "ACTB"]
        np.testing.assert_array_equal(frame["log_fold_change"], cuffdiff_df["log2(fold_change)"])

    def test_mixed_index_and_orientation(self, cuffdiff_df, reversed_cuffdiff_df):
        mixed = pd.concat([cuffdiff_df.iloc[:3], reversed_cuffdiff_df.iloc[3:]])
        mixed.index = [0, 1, 2, "a", "b", "c"]
        frame = CuffdiffAdapter().extract(mixed, "hESC", "iPS").frame

        assert frame["feature_id"].tolist() == cuffdiff_df["test_id"].tolist()
        np.testing.assert_array_equal(frame["log_fold_change"], cuffdiff_df["log2(fold_change)"])
        np.testing.assert_array_equal(frame["mean_x"], cuffdiff_df["value_1"])
        np.testing.assert_array_equal(frame["mean_y"], cuffdiff_df["value_2"])

    def test_selects_requested_pair(self, cuffdiff_df):
        other = cuffdiff_df.copy()
        other["sample_2"] = "fibroblast"
        both = pd.concat([cuffdiff_df, other], ignore_index=True)

        table = CuffdiffAdapter().extract(both, "hESC", "fibroblast")
        assert len(table) == len(cuffdiff_df)

    def test_unknown_condition(self, cuffdiff_df):
        with pytest.raises(InvalidArgument, match="not found in Cuffdiff samples"):
            CuffdiffAdapter().extract(cuffdiff_df, "hESC", "neuron")

    def test_no_comparison_between_pair(self, cuffdiff_df):
        other = cuffdiff_df.copy()
        other["sample_1"], other["sample_2"] = "neuron", "glia"
        both = pd.concat([cuffdiff_df, other], ignore_index=True)
        with pytest.raises(InvalidArgument, match="no comparison"):
            CuffdiffAdapter().extract(both, "hESC", "glia")

    def test_missing_columns(self, cuffdiff_df):
        with pytest.raises(InvalidArgument, match="q_value"):
            CuffdiffAdapter().extract(cuffdiff_df.drop(columns="q_value"), "hESC", "iPS")

    def test_drops_rows_missing_required_fields(self, cuffdiff_df):
        df = cuffdiff_df.copy()
        df.loc[1, "value_1"] = np.nan
        table = CuffdiffAdapter().extract(df, "hESC", "iPS")

        assert len(table) == len(df) - 1
        assert "NANOG" not in table.column("feature_id").tolist()

    def test_keeps_undefined_p_values(self, cuffdiff_df):
        table = CuffdiffAdapter().extract(cuffdiff_df, "hESC", "iPS")
        assert table.column("adjusted_p_value").isna().sum() == 1

    def test_does_not_modify_input(self, cuffdiff_df):
        before = cuffdiff_df.copy()
        CuffdiffAdapter().extract(cuffdiff_df, "iPS", "hESC")
        pd.testing.assert_frame_equal(cuffdiff_df, before)


class TestEdgeRAdapter:
    """edgeR topTags tables."""

    def test_fold_change_and_reconstructed_means(self, edger_df):
        frame = EdgeRAdapter().extract(edger_df, "WT", "KO").frame

        assert frame["feature_id"].tolist() == edger_df.index.tolist()
        np.testing.assert_allclose(frame["log_fold_change"], edger_df["logFC"])
        np.testing.assert_allclose(np.log2(frame["mean_y"] / frame["mean_x"]), edger_df["logFC"])
        # geometric mean of the two conditions is the average abundance
        np.testing.assert_allclose(
            np.log2(np.sqrt(frame["mean_x"] * frame["mean_y"])), edger_df["logCPM"]
        )
        np.testing.assert_array_equal(frame["adjusted_p_value"], edger_df["FDR"])

    def test_recorded_comparison_matches(self, edger_df):
        edger_df.attrs["comparison"] = ("WT", "KO")
        frame = EdgeRAdapter().extract(edger_df, "WT", "KO").frame
        np.testing.assert_allclose(frame["log_fold_change"], edger_df["logFC"])

    def test_reversed_comparison_negates(self, edger_df):
        edger_df.attrs["comparison"] = ("KO", "WT")
        frame = EdgeRAdapter().extract(edger_df, "WT", "KO").frame
        np.testing.assert_allclose(frame["log_fold_change"], -edger_df["logFC"])
        np.testing.assert_allclose(np.log2(frame["mean_y"] / frame["mean_x"]), -edger_df["logFC"])

    def test_comparison_mismatch(self, edger_df):
        edger_df.attrs["comparison"] = ("WT", "HET")
        with pytest.raises(InvalidArgument, match="does not match"):
            EdgeRAdapter().extract(edger_df, "WT", "KO")

    def test_unrecorded_comparison_warns(self, edger_df, caplog):
        with caplog.at_level(logging.WARNING, logger="degviz.adapters.edger"):
            EdgeRAdapter().extract(edger_df, "nope", "alsonope")
        assert "no recorded comparison" in caplog.text
        assert "log2(alsonope/nope)" in caplog.text

    def test_recorded_comparison_rejects_unknown_labels(self, edger_df):
        edger_df.attrs["comparison"] = ("WT", "KO")
        with pytest.raises(InvalidArgument, match="does not match"):
            EdgeRAdapter().extract(edger_df, "nope", "alsonope")

    def test_recorded_comparison_does_not_warn(self, edger_df, caplog):
        edger_df.attrs["comparison"] = ("WT", "KO")
        with caplog.at_level(logging.WARNING, logger="degviz.adapters.edger"):
            EdgeRAdapter().extract(edger_df, "WT", "KO")
        assert "no recorded comparison" not in caplog.text

    def test_missing_fdr(self, edger_df):
        with pytest.raises(InvalidArgument, match="FDR"):
            EdgeRAdapter().extract(edger_df.drop(columns="FDR"), "WT", "KO")

    def test_rejects_non_dataframe(self):
        with pytest.raises(InvalidArgument, match="DataFrame"):
            EdgeRAdapter().extract({"logFC": [1.0]}, "WT", "KO")


class TestDESeqAdapter:
    """pydeseq2 datasets; the DESeq2 contrast call is replaced by a fixture."""

    @pytest.fixture
    def contrast_calls(self, monkeypatch, deseq_results):
        calls = []

        def fake_contrast(self, data, d_factor, x, y):
            calls.append((d_factor, y, x))
            return deseq_results

        monkeypatch.setattr(DESeqAdapter, "contrast_results", fake_contrast)
        return calls

    def test_requests_contrast_y_over_x(self, deseq_dataset, contrast_calls):
        DESeqAdapter().extract(deseq_dataset, "A", "B", d_factor="condition")
        assert contrast_calls == [("condition", "B", "A")]

    def test_means_from_normalized_counts(self, deseq_dataset, deseq_results, contrast_calls):
        frame = DESeqAdapter().extract(deseq_dataset, "A", "B", d_factor="condition").frame

        assert frame["feature_id"].tolist() == ["g1", "g2", "g3"]
        np.testing.assert_allclose(frame["mean_x"], [20.0, 100.0, 50.0])
        np.testing.assert_allclose(frame["mean_y"], [80.0, 25.0, 50.0])
        np.testing.assert_allclose(frame["log_fold_change"], deseq_results["log2FoldChange"])
        assert np.isnan(frame["adjusted_p_value"].iloc[2])

    def test_means_from_base_mean_without_counts(self, deseq_dataset, contrast_calls):
        dataset = SimpleNamespace(obs=deseq_dataset.obs, layers={})
        frame = DESeqAdapter().extract(dataset, "A", "B", d_factor="condition").frame

        np.testing.assert_allclose(frame["mean_x"], [20.0, 100.0, 50.0])
        np.testing.assert_allclose(frame["mean_y"], [80.0, 25.0, 50.0])

    def test_requires_factor(self, deseq_dataset, contrast_calls):
        with pytest.raises(InvalidArgument, match="requires d_factor"):
            DESeqAdapter().extract(deseq_dataset, "A", "B")
        assert contrast_calls == []

    def test_unknown_factor(self, deseq_dataset, contrast_calls):
        with pytest.raises(InvalidArgument, match="not found in sample metadata"):
            DESeqAdapter().extract(deseq_dataset, "A", "B", d_factor="batch")

    def test_unknown_level(self, deseq_dataset, contrast_calls):
        with pytest.raises(InvalidArgument, match="not levels of"):
            DESeqAdapter().extract(deseq_dataset, "A", "C", d_factor="condition")
        assert contrast_calls == []

    def test_rejects_plain_table(self, edger_df, contrast_calls):
        with pytest.raises(InvalidArgument, match="DeseqDataSet"):
            DESeqAdapter().extract(edger_df, "A", "B", d_factor="condition")


class TestDESeqFit:
    """A real pydeseq2 fit: the contrast direction must match the data."""

    PLANTED = ["g0", "g1", "g2", "g3", "g4"]

    @pytest.fixture(scope="class")
    def fitted_dataset(self):
        pytest.importorskip("pydeseq2")
        from pydeseq2.dds import DeseqDataSet

        rng = np.random.default_rng(0)
        genes = [f"g{i}" for i in range(40)]
        samples = [f"s{i}" for i in range(6)]
        metadata = pd.DataFrame({"condition": ["A"] * 3 + ["B"] * 3}, index=samples)

        base = rng.integers(100, 1000, size=len(genes)).astype(float)
        scale = np.ones((len(samples), len(genes)))
        # planted genes are 8x higher in B
        scale[3:, :5] = 8.0
        counts = pd.DataFrame(
            rng.poisson(base * scale), index=samples, columns=genes
        )

        dds = DeseqDataSet(counts=counts, metadata=metadata, design="~condition", quiet=True)
        dds.deseq2()
        return dds

    def test_planted_genes_are_up_in_y(self, fitted_dataset):
        frame = DESeqAdapter().extract(fitted_dataset, "A", "B", d_factor="condition").frame
        planted = frame.set_index("feature_id").loc[self.PLANTED]

        assert (planted["log_fold_change"] > 2).all()
        assert (planted["mean_y"] > planted["mean_x"]).all()

    def test_swapped_conditions_negate(self, fitted_dataset):
        forward = DESeqAdapter().extract(fitted_dataset, "A", "B", d_factor="condition").frame
        reverse = DESeqAdapter().extract(fitted_dataset, "B", "A", d_factor="condition").frame

        np.testing.assert_allclose(
            reverse["log_fold_change"], -forward["log_fold_change"], atol=1e-6
        )
        np.testing.assert_allclose(reverse["mean_x"], forward["mean_y"])

    def test_normalized_means_agree_with_fold_change(self, fitted_dataset):
        frame = DESeqAdapter().extract(fitted_dataset, "A", "B", d_factor="condition").frame
        lfc = frame["log_fold_change"].to_numpy()
        observed = np.log2(frame["mean_y"] / frame["mean_x"]).to_numpy()
        clear = np.abs(lfc) > 0.5

        assert clear.sum() >= len(self.PLANTED)
        np.testing.assert_array_equal(np.sign(lfc[clear]), np.sign(observed[clear]))

    def test_planted_genes_classified_up(self, fitted_dataset):
        table, _ = vs_volcano(
            "A", "B", fitted_dataset, type="deseq", d_factor="condition", return_data=True
        )
        buckets = table.set_index("feature_id")["bucket"]
        assert (buckets.loc[self.PLANTED] == "up").all()
