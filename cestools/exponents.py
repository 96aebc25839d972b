# cestools/exponents.py
# Exponent convention and float coercion shared by every CES layer.

from __future__ import annotations

from typing import Tuple

import numpy as np

__all__ = ["ces_exponents", "as_float_array"]


def ces_exponents(sigma: float) -> Tuple[np.float64, np.float64]:
    """
    Return the pair ``(1 − σ, 1 / (1 − σ))`` used by all price and revenue
    formulas.

    σ = 1 (Cobb–Douglas) is *not* special-cased: the second exponent comes
    back as ``inf`` instead of raising ``ZeroDivisionError`` and the caller
    gets whatever IEEE arithmetic produces downstream.
    """
    one_minus = np.float64(1.0) - np.float64(sigma)
    with np.errstate(divide="ignore"):
        inverse = np.divide(np.float64(1.0), one_minus)
    return one_minus, inverse


def as_float_array(x) -> np.ndarray:
    """View *x* as an ndarray; integer / bool data is promoted to float64."""
    arr = np.asarray(x)
    if not np.issubdtype(arr.dtype, np.floating):
        arr = arr.astype(np.float64)
    return arr
