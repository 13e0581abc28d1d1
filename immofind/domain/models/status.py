"""Calculation outcome states shared by the engines."""

from __future__ import annotations

from enum import Enum


class CalculationStatus(str, Enum):
    """Outcome of a calculation.

    Only ``OK`` results carry a value that may be displayed. The other states
    tell the caller to hide the figure instead of showing a misleading 0.
    """

    OK = "ok"
    INSUFFICIENT_INPUTS = "insufficient_inputs"
    NEGATIVE_RETURN = "negative_return"
