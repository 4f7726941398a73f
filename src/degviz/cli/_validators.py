"""Shared argparse type validators for CLI parameter bounds checking.

These validators produce clear error messages when users pass invalid
values (e.g., ``--alpha 2.0``, ``--lfc -1``).  They are intended to be
used as the ``type=`` argument in ``add_argument()``.
"""

from __future__ import annotations

import argparse


def _positive_int(value: str) -> int:
    """argparse type for positive integers (> 0)."""
    ivalue = int(value)
    if ivalue <= 0:
        raise argparse.ArgumentTypeError(f"{value} is not a positive integer")
    return ivalue


def _cutoff_probability(value: str) -> float:
    """argparse type for significance cutoffs in the interval (0, 1]."""
    fvalue = float(value)
    if not (0 < fvalue <= 1):
        raise argparse.ArgumentTypeError(
            f"{value} is not a valid significance cutoff (must be in (0, 1])"
        )
    return fvalue


def _non_negative_float(value: str) -> float:
    """argparse type for finite floats >= 0."""
    fvalue = float(value)
    if not (0 <= fvalue < float("inf")):
        raise argparse.ArgumentTypeError(f"{value} is not a non-negative number")
    return fvalue
