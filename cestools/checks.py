# cestools/checks.py
# Runtime assertion for the price/revenue duality.

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np

__all__ = ["budget_residual", "assert_budget_balance"]

Revenue = Union[np.ndarray, Sequence[np.ndarray]]


def _spent_and_budget(budget, revenue: Revenue, axis: int) -> Tuple[np.ndarray, np.ndarray]:
    budget = np.asarray(budget)
    if isinstance(revenue, tuple):          # scalar layer: one array per input
        return sum(np.asarray(r) for r in revenue), budget
    spent = np.sum(revenue, axis=axis)
    # several outputs: expenditures balance against the summed budget
    if budget.ndim == np.ndim(revenue):
        budget = np.sum(budget, axis=axis)
    return spent, budget


def budget_residual(budget, revenue: Revenue, *, axis: int = 0) -> np.ndarray:
    """
    ``Σ_inputs revenue − budget``.

    *revenue* is either the k-tuple returned by a scalar layer or an array
    whose input dimension is *axis* (vector and stacked layers).
    """
    spent, budget = _spent_and_budget(budget, revenue, axis)
    return spent - budget


def assert_budget_balance(
    budget,
    revenue: Revenue,
    *,
    axis: int = 0,
    rtol: float = 1e-9,
    atol: float = 1e-12,
) -> None:
    """
    Assert the expenditures add back up to the budget.

    Holds whenever the revenue solve was fed the price index solved on the
    same layer and the weights sum to one along the input dimension.

    Raises
    ------
    AssertionError
        With the largest absolute deviation.
    """
    spent, budget = _spent_and_budget(budget, revenue, axis)
    if not np.allclose(spent, budget, rtol=rtol, atol=atol):
        max_err = np.max(np.abs(spent - budget))
        raise AssertionError(f"Expenditures do not sum to budget, max error: {max_err}")
