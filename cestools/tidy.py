# cestools/tidy.py
# Long-format view of stacked results plus the data contract it must meet.

from __future__ import annotations

from typing import Final, Optional, Sequence

import numpy as np
import pandas as pd
import pandera.pandas as pa
from pandera.pandas import Check, Column

from .exceptions import DimensionMismatchError

__all__ = ["RESULT_SCHEMA", "RESULT_KINDS", "stacked_to_frame"]

RESULT_KINDS: Final = ("price", "revenue")

RESULT_SCHEMA = pa.DataFrameSchema(
    {
        "market": Column(str, nullable=False),
        "unit":   Column(str, nullable=False),      # output row (price) or input row (revenue)
        "kind":   Column(str, Check.isin(RESULT_KINDS), nullable=False),
        "value":  Column(float, Check.ge(0), nullable=False),
    },
    coerce=True,
    strict=True,
    ordered=True,
    name="StackedResult",
)


def stacked_to_frame(
    values,
    *,
    kind: str,
    market_ids: Optional[Sequence] = None,
    unit_ids: Optional[Sequence] = None,
) -> pd.DataFrame:
    """
    Flatten a (n_units, n_markets) stacked result into one row per
    (market, unit) cell.

    Parameters
    ----------
    values : array-like, shape (n_units, n_markets)
        Output of ``solve_pout_stacked`` (units = outputs) or
        ``solve_revenue_stacked`` (units = inputs).
    kind : {"price", "revenue"}
    market_ids, unit_ids : sequence, optional
        Labels for the columns / rows; default to positional indices.

    Returns
    -------
    pandas.DataFrame
        Columns ``market, unit, kind, value`` validated against
        ``RESULT_SCHEMA``.  NaN values (e.g. from σ = 1) fail validation.
    """
    arr = np.asarray(values)
    if arr.ndim != 2:
        raise DimensionMismatchError(
            f"expected a (n_units, n_markets) array; got shape {arr.shape}"
        )
    n_units, n_markets = arr.shape
    market_ids = list(range(n_markets)) if market_ids is None else list(market_ids)
    unit_ids = list(range(n_units)) if unit_ids is None else list(unit_ids)
    if len(market_ids) != n_markets or len(unit_ids) != n_units:
        raise DimensionMismatchError(
            f"{len(unit_ids)} unit / {len(market_ids)} market labels for an "
            f"array of shape {arr.shape}"
        )

    # C-order ravel: unit-major, market-minor
    df = pd.DataFrame(
        {
            "market": np.tile(np.asarray(market_ids, dtype=object), n_units),
            "unit":   np.repeat(np.asarray(unit_ids, dtype=object), n_markets),
            "kind":   kind,
            "value":  arr.ravel(),
        }
    )
    return RESULT_SCHEMA.validate(df)
