# cestools/vector.py
# Matrix form of the CES price index / demand split for many homogeneous
# inputs.  The weighted sum of the scalar layer becomes a matrix product.

from __future__ import annotations

from typing import Optional

import numpy as np

from .exceptions import DimensionMismatchError
from .exponents import as_float_array, ces_exponents
from .layers import VectorCESLayer

__all__ = [
    "solve_pout_vector",
    "solve_revenue_vector",
    "solve_pout",
    "solve_revenue",
]


# helpers

def _as_weight_matrix(weights) -> np.ndarray:
    alpha = as_float_array(weights)
    if alpha.ndim == 1:
        alpha = alpha.reshape(1, -1)
    if alpha.ndim != 2:
        raise DimensionMismatchError(
            f"weights must be a (n_outputs, n_inputs) matrix; got shape {alpha.shape}"
        )
    return alpha


def _check_out(out: Optional[np.ndarray], expected: tuple, what: str) -> None:
    if out is not None and out.shape != expected:
        raise DimensionMismatchError(
            f"{what}: out buffer has shape {out.shape}, expected {expected}"
        )


def _contract(matrix: np.ndarray, arr: np.ndarray,
              out: Optional[np.ndarray] = None) -> np.ndarray:
    """``matrix @ arr`` over the leading axis of *arr*, any trailing batch shape."""
    if arr.ndim <= 2:
        return np.matmul(matrix, arr, out=out)
    flat = np.matmul(matrix, arr.reshape(arr.shape[0], -1))
    res = flat.reshape((matrix.shape[0],) + arr.shape[1:])
    if out is None:
        return res
    out[...] = res
    return out


# 1.  Price index

def solve_pout_vector(
    p_in,
    weights,
    sigma: float,
    *,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Vectorised CES price index.

        p_out = ( α · p_in^(1−σ) )^(1/(1−σ))

    Parameters
    ----------
    p_in : array-like, shape (n_inputs, *batch)
        Input prices; a 1-D array is a single market.
    weights : array-like, shape (n_outputs, n_inputs)
        Weight matrix α.
    sigma : float
        Elasticity of substitution σ.
    out : np.ndarray, optional
        Destination of shape (n_outputs, *batch).  The matrix product and
        the final power are written straight into it.

    Returns
    -------
    np.ndarray, shape (n_outputs, *batch)

    Raises
    ------
    DimensionMismatchError
        If α's column count differs from the leading dimension of *p_in*,
        or *out* has the wrong shape.
    """
    alpha = _as_weight_matrix(weights)
    p_in = as_float_array(p_in)
    if p_in.ndim == 0 or p_in.shape[0] != alpha.shape[1]:
        raise DimensionMismatchError(
            f"weights expect {alpha.shape[1]} inputs; p_in has shape {p_in.shape}"
        )
    _check_out(out, (alpha.shape[0],) + p_in.shape[1:], "solve_pout_vector")

    one_minus, inverse = ces_exponents(sigma)
    p_in_pow = p_in ** one_minus
    p_out = _contract(alpha, p_in_pow, out=out)
    return np.power(p_out, inverse, out=p_out)


# 2.  Expenditure split

def solve_revenue_vector(
    budget,
    p_in,
    p_out,
    weights,
    sigma: float,
    *,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Vectorised CES demand, the dual of :func:`solve_pout_vector`.

        y_out_div = budget / p_out^(1−σ)
        y_in      = α' · y_out_div  ⊙  p_in^(1−σ)

    *budget* and *p_out* are (n_outputs, *batch), *p_in* is
    (n_inputs, *batch); the result is (n_inputs, *batch).
    """
    alpha = _as_weight_matrix(weights)
    n_outputs, n_inputs = alpha.shape
    budget = as_float_array(budget)
    p_in = as_float_array(p_in)
    p_out = as_float_array(p_out)

    if budget.shape != p_out.shape:
        raise DimensionMismatchError(
            f"budget shape {budget.shape} != p_out shape {p_out.shape}"
        )
    if budget.ndim == 0 or budget.shape[0] != n_outputs:
        raise DimensionMismatchError(
            f"weights have {n_outputs} outputs; budget has shape {budget.shape}"
        )
    if p_in.ndim == 0 or p_in.shape[0] != n_inputs:
        raise DimensionMismatchError(
            f"weights expect {n_inputs} inputs; p_in has shape {p_in.shape}"
        )
    if p_in.shape[1:] != budget.shape[1:]:
        raise DimensionMismatchError(
            f"batch shapes differ: p_in {p_in.shape[1:]} vs budget {budget.shape[1:]}"
        )
    _check_out(out, p_in.shape, "solve_revenue_vector")

    one_minus, _ = ces_exponents(sigma)
    y_out_div = budget / p_out ** one_minus
    y_in = _contract(alpha.T, y_out_div, out=out)
    y_in *= p_in ** one_minus
    return y_in


def solve_pout(p_in, layer: VectorCESLayer, *,
               out: Optional[np.ndarray] = None) -> np.ndarray:
    return solve_pout_vector(p_in, layer.alpha, layer.sigma, out=out)


def solve_revenue(budget, p_in, p_out, layer: VectorCESLayer, *,
                  out: Optional[np.ndarray] = None) -> np.ndarray:
    return solve_revenue_vector(budget, p_in, p_out, layer.alpha, layer.sigma,
                                out=out)
