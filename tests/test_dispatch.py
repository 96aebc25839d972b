"""Dispatch layer: one price / revenue interface for every topology."""

import numpy as np
import pytest

from cestools import scalar, stacked, vector
from cestools.checks import assert_budget_balance
from cestools.config import SolverConfig
from cestools.dispatch import solve, solve_price, solve_revenue
from cestools.layers import LayerKind, ScalarCESLayer, VectorCESLayer, layer_kind


class TestLayerKind:

    def test_tags(self, two_input_layer, market_layers):
        assert layer_kind(two_input_layer) is LayerKind.SCALAR
        assert layer_kind(market_layers[0]) is LayerKind.VECTOR
        assert layer_kind(market_layers) is LayerKind.STACKED
        assert layer_kind(tuple(market_layers)) is LayerKind.STACKED

    @pytest.mark.parametrize("bad", [
        np.eye(2),
        {"alpha": (0.5, 0.5), "sigma": 2.0},
        [ScalarCESLayer(alpha=(1.0,), sigma=2.0)],
    ])
    def test_unknown_layer(self, bad):
        with pytest.raises(TypeError):
            layer_kind(bad)


class TestDispatch:

    def test_scalar(self, two_input_layer):
        p_in = (1.0, 2.0)
        p_out = solve_price(p_in, two_input_layer)
        assert p_out == pytest.approx(scalar.solve_pout(p_in, two_input_layer))
        y_in = solve_revenue(100.0, p_in, p_out, two_input_layer)
        assert y_in == pytest.approx(scalar.solve_revenue(100.0, p_in, p_out,
                                                          two_input_layer))

    def test_vector_forwards_out(self, market_layers, rng):
        layer = market_layers[1]
        p_in = rng.uniform(0.5, 5.0, size=4)
        buf = np.zeros(1)
        solve_price(p_in, layer, out=buf)
        np.testing.assert_allclose(buf, vector.solve_pout(p_in, layer))

    def test_stacked_forwards_config(self, market_layers, rng):
        p_in = rng.uniform(0.5, 5.0, size=(4, 5))
        res = solve_price(p_in, market_layers, config=SolverConfig(n_jobs=1))
        np.testing.assert_allclose(res, stacked.solve_pout_stacked(p_in, market_layers))

    def test_unknown_layer(self):
        with pytest.raises(TypeError):
            solve_price((1.0, 2.0), (0.5, 0.5))
        with pytest.raises(TypeError):
            solve_revenue(1.0, (1.0, 2.0), 1.0, "layer")


class TestSolve:

    def test_scalar_round(self, two_input_layer):
        p_out, y_in = solve(100.0, (1.0, 2.0), two_input_layer)
        assert p_out == pytest.approx(1.5385, abs=1e-4)
        assert_budget_balance(100.0, y_in)

    def test_vector_round(self, simplex, rng):
        layer = VectorCESLayer(alpha=simplex(2, 5), sigma=0.6)
        budget = rng.uniform(1.0, 10.0, size=(2, 3))
        p_out, y_in = solve(budget, rng.uniform(0.5, 5.0, size=(5, 3)), layer)
        assert p_out.shape == (2, 3) and y_in.shape == (5, 3)
        assert_budget_balance(budget, y_in)

    def test_stacked_round(self, market_layers, rng):
        budget = rng.uniform(1.0, 10.0, size=(1, 5))
        p_in = rng.uniform(0.5, 5.0, size=(4, 5))
        p_out, y_in = solve(budget, p_in, market_layers,
                            config=SolverConfig(n_jobs=2))
        assert y_in.shape == (4, 5)
        assert_budget_balance(budget, y_in)

    def test_rejects_out(self, market_layers):
        with pytest.raises(TypeError):
            solve(np.ones(1), np.ones(4), market_layers[0], out=np.zeros(1))
