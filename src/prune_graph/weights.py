"""
Weight field parsing.

Every weight column is read as a float and rounded to a fixed number of decimals
before it is used for filtering or summing, so that e.g. r2 values printed with
slightly different precision by upstream tools compare equal.

Rounding is scale -> round half away from zero -> unscale (not numpy's
half-to-even). Exact half-boundaries depend on the binary value of the input.
"""

from __future__ import annotations

import math

import numpy as np

from .errors import FatalInputError


def parse_weight(raw: str) -> float:
    try:
        return float(raw)
    except ValueError:
        raise FatalInputError(f"cannot convert weight '{raw}' to float") from None


def round_weights(x: np.ndarray, decimals: int) -> np.ndarray:
    x = np.asarray(x, dtype=np.float64)
    scale = 10.0 ** int(decimals)
    with np.errstate(invalid="ignore", over="ignore"):
        y = x * scale
        t = np.trunc(y)
        # y - t is exact, so values just below a half stay down
        return (t + np.sign(y) * (np.abs(y - t) >= 0.5)) / scale


def round_weight(x: float, decimals: int) -> float:
    return float(round_weights(np.asarray([x]), decimals)[0])


def is_nan(x: float) -> bool:
    return bool(math.isnan(x))
