"""Budget-balance helper and the long-format result frame."""

import numpy as np
import pandas as pd
from pandera.errors import SchemaError
import pytest

from cestools.checks import assert_budget_balance, budget_residual
from cestools.exceptions import DimensionMismatchError
from cestools.stacked import solve_pout_stacked, solve_revenue_stacked
from cestools.tidy import RESULT_SCHEMA, stacked_to_frame


class TestBudgetBalance:

    def test_scalar_tuple(self):
        assert_budget_balance(10.0, (np.float64(4.0), np.float64(6.0)))
        assert budget_residual(10.0, (4.0, 5.0)) == pytest.approx(-1.0)

    def test_vector_array(self):
        revenue = np.array([[1.0, 2.0], [3.0, 4.0]])
        assert_budget_balance(np.array([[4.0, 6.0]]), revenue)
        np.testing.assert_allclose(budget_residual(np.array([4.0, 5.0]), revenue),
                                   [0.0, 1.0])

    def test_failure_reports_max_error(self):
        with pytest.raises(AssertionError, match="max error: 2.5"):
            assert_budget_balance(np.array([[1.0, 1.0]]), np.array([[1.0, 3.5]]))


class TestStackedToFrame:

    def test_layout(self):
        values = np.array([[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]])
        df = stacked_to_frame(values, kind="revenue",
                              market_ids=["a", "b", "c"], unit_ids=["x", "y"])
        assert list(df.columns) == ["market", "unit", "kind", "value"]
        assert len(df) == 6
        cell = df[(df["market"] == "b") & (df["unit"] == "y")]
        assert cell["value"].item() == 5.0
        assert set(df["kind"]) == {"revenue"}

    def test_default_labels_are_positions(self):
        df = stacked_to_frame(np.ones((1, 3)), kind="price")
        assert list(df["market"]) == ["0", "1", "2"]
        assert list(df["unit"]) == ["0", "0", "0"]

    def test_from_stacked_solve(self, market_layers, rng):
        p_in = rng.uniform(0.5, 5.0, size=(4, 5))
        budget = np.full((1, 5), 10.0)
        p_out = solve_pout_stacked(p_in, market_layers)
        y_in = solve_revenue_stacked(budget, p_in, p_out, market_layers)
        frame = pd.concat([
            stacked_to_frame(p_out, kind="price"),
            stacked_to_frame(y_in, kind="revenue"),
        ], ignore_index=True)
        RESULT_SCHEMA.validate(frame)
        totals = frame[frame["kind"] == "revenue"].groupby("market")["value"].sum()
        np.testing.assert_allclose(totals.to_numpy(), 10.0, rtol=1e-12)

    def test_label_count_mismatch(self):
        with pytest.raises(DimensionMismatchError):
            stacked_to_frame(np.ones((2, 3)), kind="price", market_ids=["a", "b"])

    def test_needs_2d(self):
        with pytest.raises(DimensionMismatchError):
            stacked_to_frame(np.ones(3), kind="price")

    @pytest.mark.parametrize("values, kind", [
        (np.array([[1.0, np.nan]]), "price"),
        (np.array([[1.0, -1.0]]), "price"),
        (np.array([[1.0, 2.0]]), "quantity"),
    ])
    def test_schema_violations(self, values, kind):
        with pytest.raises(SchemaError):
            stacked_to_frame(values, kind=kind)
