# cestools/stacked.py
# Batched evaluation of independent vector CES layers, one per market.
#
# Key points
# 1.  Market i reads column i of every input array and writes column i of a
#     single output buffer.  Columns never overlap, so the buffer needs no
#     lock; it is allocated once, before the first task starts, and never
#     resized while the workers run.
# 2.  Workers are joblib *threads*: they share the parent's memory, and
#     numpy drops the GIL inside matmul / power, so the markets really run
#     side by side.  Process backends are refused by SolverConfig.
# 3.  A failure in one market surfaces as MarketSolveError(market=i); joblib
#     cancels whatever is still queued and the caller gets no buffer back.
# --------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple

import numpy as np
from joblib import Parallel, delayed
from tqdm import tqdm

from . import vector
from .config import SolverConfig
from .exceptions import DimensionMismatchError, MarketSolveError
from .exponents import as_float_array
from .layers import LayerKind, StackedLayer, layer_kind

__all__ = ["solve_pout_stacked", "solve_revenue_stacked"]

_LOG = logging.getLogger(__name__)


# 1.  Pre-flight shape checks

def _check_layers(layers: StackedLayer, p_in: np.ndarray) -> int:
    """Validate the market list against *p_in*; return the shared n_outputs."""
    if layer_kind(layers) is not LayerKind.STACKED:
        raise TypeError("layers must be a list of VectorCESLayer")
    if len(layers) == 0:
        raise DimensionMismatchError("stacked layer holds no markets")
    if p_in.ndim != 2:
        raise DimensionMismatchError(
            f"p_in must be (n_inputs, n_markets); got shape {p_in.shape}"
        )
    n_inputs, n_markets = p_in.shape
    if n_markets != len(layers):
        raise DimensionMismatchError(
            f"{len(layers)} layers for {n_markets} market columns"
        )

    bad = [i for i, lay in enumerate(layers) if lay.n_inputs != n_inputs]
    if bad:
        raise DimensionMismatchError(
            f"markets {bad} expect a different number of inputs than "
            f"p_in's {n_inputs} rows"
        )
    n_outputs = {lay.n_outputs for lay in layers}
    if len(n_outputs) != 1:
        raise DimensionMismatchError(
            f"layers disagree on n_outputs {sorted(n_outputs)}; "
            f"one shared buffer cannot hold them"
        )
    return n_outputs.pop()


# 2.  Worker pool

# a task reports (market, None) on success or (market, exc) on failure
Outcome = Tuple[int, Optional[BaseException]]


def _run_markets(task: Callable[[int], Outcome], n_markets: int,
                 config: SolverConfig, desc: str) -> None:
    """
    Feed every market index to *task* and collect the outcomes here, in the
    calling thread.  The progress bar ticks as markets finish; the first
    failure is raised as MarketSolveError chained to the task's exception.
    """
    if config.sequential:
        outcomes = (task(i) for i in range(n_markets))
    else:
        outcomes = Parallel(n_jobs=config.n_jobs, backend="threading",
                            batch_size=config.batch_size,
                            return_as="generator_unordered")(
            delayed(task)(i) for i in range(n_markets)
        )

    with tqdm(total=n_markets, desc=desc, disable=not config.progress) as bar:
        try:
            for market, exc in outcomes:
                if exc is not None:
                    raise MarketSolveError(market) from exc
                bar.update()
        finally:
            outcomes.close()                # drops whatever is still queued


# 3.  Public solvers

def solve_pout_stacked(
    p_in,
    layers: StackedLayer,
    *,
    config: Optional[SolverConfig] = None,
) -> np.ndarray:
    """
    Price index for every market: ``out[:, i] = solve_pout(p_in[:, i], layers[i])``.

    Parameters
    ----------
    p_in : array-like, shape (n_inputs, n_markets)
    layers : sequence[VectorCESLayer]
        One layer per market column; all share n_inputs and n_outputs.
    config : SolverConfig, optional
        Worker-pool settings; defaults to ``SolverConfig()``.

    Returns
    -------
    np.ndarray, shape (n_outputs, n_markets)
    """
    config = config or SolverConfig()
    p_in = as_float_array(p_in)
    n_outputs = _check_layers(layers, p_in)
    n_markets = len(layers)

    dtype = np.result_type(p_in, *(lay.alpha for lay in layers))
    res = np.zeros((n_outputs, n_markets), dtype=dtype)

    _LOG.debug("stacked price: %d markets, p_in %s -> out %s, backend=%s n_jobs=%d",
               n_markets, p_in.shape, res.shape, config.backend, config.n_jobs)

    def _price_column(i: int) -> Outcome:
        try:
            vector.solve_pout(p_in[:, i], layers[i], out=res[:, i])
        except Exception as exc:
            return i, exc
        return i, None

    _run_markets(_price_column, n_markets, config, desc="CES prices")
    return res


def solve_revenue_stacked(
    budget,
    p_in,
    p_out,
    layers: StackedLayer,
    *,
    config: Optional[SolverConfig] = None,
) -> np.ndarray:
    """
    Expenditure split for every market:
    ``out[:, i] = solve_revenue(budget[:, i], p_in[:, i], p_out[:, i], layers[i])``.

    *budget* and *p_out* are (n_outputs, n_markets), *p_in* is
    (n_inputs, n_markets); the result is (n_inputs, n_markets).
    """
    config = config or SolverConfig()
    budget = as_float_array(budget)
    p_in = as_float_array(p_in)
    p_out = as_float_array(p_out)
    n_outputs = _check_layers(layers, p_in)
    n_markets = len(layers)

    expected = (n_outputs, n_markets)
    if budget.shape != expected or p_out.shape != expected:
        raise DimensionMismatchError(
            f"budget {budget.shape} and p_out {p_out.shape} must both be {expected}"
        )

    dtype = np.result_type(budget, p_in, p_out, *(lay.alpha for lay in layers))
    res = np.zeros(p_in.shape, dtype=dtype)

    _LOG.debug("stacked revenue: %d markets, p_in %s -> out %s, backend=%s n_jobs=%d",
               n_markets, p_in.shape, res.shape, config.backend, config.n_jobs)

    def _revenue_column(i: int) -> Outcome:
        try:
            vector.solve_revenue(budget[:, i], p_in[:, i], p_out[:, i], layers[i],
                                 out=res[:, i])
        except Exception as exc:
            return i, exc
        return i, None

    _run_markets(_revenue_column, n_markets, config, desc="CES revenue")
    return res


"""
1. What the module does

Both public functions take a list of VectorCESLayer objects, one per market,
and arrays whose columns are markets.  They check every shape first, size
one zero-filled output buffer from the shared layer dimensions, then hand
each market index to a worker.  The worker calls the single-market vector
solver with out=res[:, i], so the matrix product and the final power land
directly in that column.

2. Choosing the pool

SolverConfig(n_jobs=1) or backend="sequential" runs a plain for-loop, which
is the easiest mode to step through in a debugger.  Anything else goes to
joblib.Parallel(backend="threading").  -1 means one thread per core.

3. When a market fails

Workers never raise: each returns (market, exception-or-None) and the calling
thread inspects the outcomes as they arrive.  The first failure to come back
is wrapped in MarketSolveError with the column index and raised there; the original error stays available as __cause__.
Columns already written are discarded together with the buffer.

4. Numeric edge cases

σ = 1 in any market is not an error.  That column simply comes back as
inf / NaN / 1 while the other columns are unaffected.
"""
