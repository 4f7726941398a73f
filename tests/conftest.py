"""
Pytest configuration and shared fixtures.

Provides small, hand-checkable result tables in the shape each supported tool
produces, plus a stand-in for a fitted pydeseq2 dataset.
"""

from types import SimpleNamespace

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import pytest


@pytest.fixture(autouse=True)
def close_figures():
    """Close every figure a test opened."""
    yield
    plt.close("all")


@pytest.fixture
def cuffdiff_df():
    """
    Cuffdiff gene_exp.diff rows for hESC vs. iPS.

    log2(fold_change) = log2(value_2 / value_1); q_value is the adjusted p-value.
    """
    return pd.DataFrame({
        "test_id": ["SOX2", "NANOG", "GAPDH", "POU5F1", "LIN28A", "ACTB"],
        "gene_id": ["SOX2", "NANOG", "GAPDH", "POU5F1", "LIN28A", "ACTB"],
        "gene": ["SOX2", "NANOG", "GAPDH", "POU5F1", "LIN28A", "ACTB"],
        "locus": ["chr3:1-10"] * 6,
        "sample_1": ["hESC"] * 6,
        "sample_2": ["iPS"] * 6,
        "status": ["OK", "OK", "OK", "OK", "NOTEST", "OK"],
        "value_1": [10.0, 40.0, 100.0, 5.0, 0.0, 50.0],
        "value_2": [40.0, 10.0, 110.0, 80.0, 0.0, 50.0],
        "log2(fold_change)": [2.0, -2.0, np.log2(1.1), 4.0, np.nan, 0.0],
        "test_stat": [3.1, -3.0, 0.2, 5.0, np.nan, 0.0],
        "p_value": [0.001, 0.002, 0.6, 0.0001, 1.0, 0.9],
        "q_value": [0.01, 0.02, 0.7, 0.001, np.nan, 0.95],
        "significant": ["yes", "yes", "no", "yes", "no", "no"],
    })


@pytest.fixture
def reversed_cuffdiff_df(cuffdiff_df):
    """The same comparison written with sample_1 = iPS, sample_2 = hESC."""
    df = cuffdiff_df.copy()
    df["sample_1"], df["sample_2"] = "iPS", "hESC"
    df["value_1"], df["value_2"] = cuffdiff_df["value_2"], cuffdiff_df["value_1"]
    df["log2(fold_change)"] = -cuffdiff_df["log2(fold_change)"]
    return df


@pytest.fixture
def edger_df():
    """edgeR topTags(exactTest(pair = c("WT", "KO")))$table."""
    return pd.DataFrame({
        "logFC": [3.0, -2.5, 0.1, 1.5, -0.2],
        "logCPM": [5.0, 4.0, 8.0, 2.0, 6.0],
        "PValue": [1e-6, 1e-4, 0.8, 0.01, 0.5],
        "FDR": [1e-5, 1e-3, 0.9, 0.04, 0.7],
    }, index=pd.Index(["Gata1", "Klf1", "Actb", "Hbb-b1", "Gapdh"], name="gene"))


@pytest.fixture
def deseq_dataset():
    """
    Stand-in for a fitted pydeseq2 DeseqDataSet: 4 samples x 3 genes.

    Only the attributes the DESeq2 adapter reads are provided.
    """
    obs = pd.DataFrame(
        {"condition": ["A", "A", "B", "B"]},
        index=["s1", "s2", "s3", "s4"],
    )
    normed = np.array([
        [10.0, 100.0, 50.0],
        [30.0, 100.0, 50.0],
        [80.0, 25.0, 50.0],
        [80.0, 25.0, 50.0],
    ])
    return SimpleNamespace(
        obs=obs,
        layers={"normed_counts": normed},
        obs_names=obs.index,
        var_names=pd.Index(["g1", "g2", "g3"]),
    )


@pytest.fixture
def deseq_results():
    """DeseqStats.results_df for contrast [condition, B, A]."""
    return pd.DataFrame({
        "baseMean": [50.0, 62.5, 50.0],
        "log2FoldChange": [2.0, -2.0, 0.0],
        "lfcSE": [0.3, 0.3, 0.3],
        "stat": [6.0, -6.0, 0.0],
        "pvalue": [1e-9, 1e-9, 1.0],
        "padj": [1e-8, 1e-8, np.nan],
    }, index=pd.Index(["g1", "g2", "g3"]))
