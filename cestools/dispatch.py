# cestools/dispatch.py
# Uniform price / revenue entry points for every layer topology.

from __future__ import annotations

from typing import Any, Tuple

from . import scalar, stacked, vector
from .layers import LayerKind, layer_kind

__all__ = ["solve_price", "solve_revenue", "solve"]


def solve_price(p_in, layer, **kwargs: Any):
    """
    Aggregate input prices into the output price of *layer*.

    * ScalarCESLayer          → tuple of k prices in, one price out
    * VectorCESLayer          → (n_inputs, *batch) in, (n_outputs, *batch) out
    * list[VectorCESLayer]    → (n_inputs, n_markets) in, (n_outputs, n_markets) out

    Extra keyword arguments go to the selected solver (``out=`` for vector
    layers, ``config=`` for stacked layers).
    """
    kind = layer_kind(layer)
    if kind is LayerKind.SCALAR:
        return scalar.solve_pout(p_in, layer, **kwargs)
    if kind is LayerKind.VECTOR:
        return vector.solve_pout(p_in, layer, **kwargs)
    return stacked.solve_pout_stacked(p_in, layer, **kwargs)


def solve_revenue(budget, p_in, p_out, layer, **kwargs: Any):
    """Split *budget* across the inputs of *layer*; dual of :func:`solve_price`."""
    kind = layer_kind(layer)
    if kind is LayerKind.SCALAR:
        return scalar.solve_revenue(budget, p_in, p_out, layer, **kwargs)
    if kind is LayerKind.VECTOR:
        return vector.solve_revenue(budget, p_in, p_out, layer, **kwargs)
    return stacked.solve_revenue_stacked(budget, p_in, p_out, layer, **kwargs)


def solve(budget, p_in, layer, **kwargs: Any) -> Tuple[Any, Any]:
    """
    Price solve followed by the revenue solve on the same layer.

    Returns ``(p_out, y_in)``.  Keyword arguments are passed to both calls,
    so ``out=`` is not accepted here.
    """
    if "out" in kwargs:
        raise TypeError("solve() does not take an out buffer; call the "
                        "price and revenue solvers separately")
    p_out = solve_price(p_in, layer, **kwargs)
    return p_out, solve_revenue(budget, p_in, p_out, layer, **kwargs)
