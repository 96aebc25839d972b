# cestools/scalar.py
# CES price index and demand split over a small tuple of named inputs.

from __future__ import annotations

import operator
from functools import reduce
from typing import Sequence, Tuple

import numpy as np

from .exceptions import DimensionMismatchError
from .exponents import as_float_array, ces_exponents
from .layers import ScalarCESLayer

__all__ = [
    "solve_pout_scalar",
    "solve_revenue_scalar",
    "solve_pout",
    "solve_revenue",
]


def _check_arity(p_in: Sequence, weights: Sequence[float]) -> None:
    if len(p_in) != len(weights):
        raise DimensionMismatchError(
            f"got {len(p_in)} input prices for {len(weights)} weights"
        )


# 1.  Price index

def solve_pout_scalar(
    p_in: Sequence,
    weights: Sequence[float],
    sigma: float,
) -> np.ndarray:
    """
    CES price index over k named inputs:

        p_out = ( Σ_i α_i · p_in_i^(1−σ) )^(1/(1−σ))

    Parameters
    ----------
    p_in : sequence of float | np.ndarray
        One price (or price array) per input; arrays are broadcast together.
    weights : sequence[float]
        α_i, same length as *p_in*.
    sigma : float
        Elasticity of substitution σ.  σ = 1 is left undefined.

    Returns
    -------
    np.ndarray | np.float64
        Aggregate price with the broadcast shape of the inputs.
    """
    _check_arity(p_in, weights)
    one_minus, inverse = ces_exponents(sigma)
    # left fold over the k weighted power terms
    p_out = reduce(
        operator.add,
        (alpha * as_float_array(p) ** one_minus for alpha, p in zip(weights, p_in)),
    )
    return p_out ** inverse


# 2.  Expenditure split

def solve_revenue_scalar(
    budget,
    p_in: Sequence,
    p_out,
    weights: Sequence[float],
    sigma: float,
) -> Tuple[np.ndarray, ...]:
    """
    Cost-minimising CES demand (in expenditure terms) for each input:

        y_in_i = α_i · budget · (p_in_i / p_out)^(1−σ)

    *p_out* must be the price index solved on the same prices, weights and
    σ; only then do the k expenditures add up to *budget*.
    *budget* must have exactly the shape of *p_out*; it is not broadcast.
    """
    _check_arity(p_in, weights)
    one_minus, _ = ces_exponents(sigma)
    budget = as_float_array(budget)
    p_out = as_float_array(p_out)
    if budget.shape != p_out.shape:
        raise DimensionMismatchError(
            f"budget shape {budget.shape} != p_out shape {p_out.shape}"
        )
    return tuple(
        alpha * budget * (as_float_array(p) / p_out) ** one_minus
        for alpha, p in zip(weights, p_in)
    )


def solve_pout(p_in: Sequence, layer: ScalarCESLayer) -> np.ndarray:
    return solve_pout_scalar(p_in, layer.alpha, layer.sigma)


def solve_revenue(budget, p_in: Sequence, p_out,
                  layer: ScalarCESLayer) -> Tuple[np.ndarray, ...]:
    return solve_revenue_scalar(budget, p_in, p_out, layer.alpha, layer.sigma)
