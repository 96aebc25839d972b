"""Shared fixtures for the CES solver tests."""

import numpy as np
import pytest

from cestools.layers import ScalarCESLayer, VectorCESLayer


def _simplex_matrix(rng, n_outputs, n_inputs):
    w = rng.uniform(0.1, 1.0, size=(n_outputs, n_inputs))
    return w / w.sum(axis=1, keepdims=True)


@pytest.fixture
def rng():
    return np.random.default_rng(2025)


@pytest.fixture
def simplex(rng):
    """Factory for weight matrices whose rows sum to one."""
    return lambda n_outputs, n_inputs: _simplex_matrix(rng, n_outputs, n_inputs)


@pytest.fixture
def two_input_layer():
    return ScalarCESLayer(alpha=(0.3, 0.7), sigma=2.0)


@pytest.fixture
def market_layers(rng):
    """Five markets over four inputs, each with its own weights and sigma."""
    sigmas = [0.5, 1.5, 2.0, 3.0, 0.25]
    return [
        VectorCESLayer(alpha=_simplex_matrix(rng, 1, 4), sigma=s)
        for s in sigmas
    ]
