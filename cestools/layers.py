# cestools/layers.py
# Immutable parameter bundles for the three CES layer topologies.

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Tuple

import numpy as np

from .exponents import as_float_array

__all__ = [
    "ScalarCESLayer",
    "VectorCESLayer",
    "StackedLayer",
    "LayerKind",
    "layer_kind",
]

_LOG = logging.getLogger(__name__)


def _check_sigma(sigma: float, owner: str) -> None:
    if not math.isfinite(sigma):
        raise ValueError(f"{owner}: sigma must be finite; got {sigma}")
    if sigma == 1.0:
        # Cobb–Douglas limit: every CES formula divides by (1 − σ)
        _LOG.warning("%s built with sigma=1 – CES formulas are singular, "
                     "results will be inf/NaN", owner)


# 1.  Scalar layer: a few named inputs

@dataclass(frozen=True, slots=True)
class ScalarCESLayer:
    """
    CES aggregator over a small, fixed tuple of named inputs.

        p_out = ( Σ_i α_i · p_i^(1−σ) )^(1/(1−σ))

    ``alpha`` holds one weight per input, in the same order the prices are
    passed at call time.  Weights are expected to sum to one but this is
    left to the caller.
    """
    alpha: Tuple[float, ...]
    sigma: float

    def __post_init__(self) -> None:
        alpha = tuple(float(a) for a in self.alpha)
        if not alpha:
            raise ValueError("ScalarCESLayer needs at least one weight")
        if not all(math.isfinite(a) for a in alpha):
            raise ValueError(f"weights must be finite; got {alpha}")
        object.__setattr__(self, "alpha", alpha)
        object.__setattr__(self, "sigma", float(self.sigma))
        _check_sigma(self.sigma, "ScalarCESLayer")

    @property
    def n_inputs(self) -> int:
        return len(self.alpha)


# 2.  Vector layer: weight matrix over homogeneous inputs

@dataclass(frozen=True, slots=True, eq=False)
class VectorCESLayer:
    """
    CES aggregator over ``n_inputs`` homogeneous inputs feeding
    ``n_outputs`` aggregates.

    Parameters
    ----------
    alpha : array-like, shape (n_outputs, n_inputs)
        Weight matrix.  A 1-D weight row is read as a single output.
        Stored as a read-only private copy.
    sigma : float
        Elasticity of substitution shared by every output row.
    """
    alpha: np.ndarray
    sigma: float

    def __post_init__(self) -> None:
        alpha = np.array(as_float_array(self.alpha), copy=True)
        if alpha.ndim == 1:
            alpha = alpha.reshape(1, -1)
        if alpha.ndim != 2 or alpha.size == 0:
            raise ValueError(
                f"alpha must be a non-empty (n_outputs, n_inputs) matrix; "
                f"got shape {alpha.shape}"
            )
        if not np.all(np.isfinite(alpha)):
            raise ValueError("weights must be finite")
        alpha.setflags(write=False)
        object.__setattr__(self, "alpha", alpha)
        object.__setattr__(self, "sigma", float(self.sigma))
        _check_sigma(self.sigma, "VectorCESLayer")

    @property
    def n_inputs(self) -> int:
        return self.alpha.shape[1]

    @property
    def n_outputs(self) -> int:
        return self.alpha.shape[0]


# 3.  Stacked layer: one vector layer per market column
StackedLayer = Sequence[VectorCESLayer]


class LayerKind(Enum):
    """Explicit tag used by the dispatch layer."""

    SCALAR = "scalar"
    VECTOR = "vector"
    STACKED = "stacked"


def layer_kind(layer) -> LayerKind:
    """
    Classify *layer* as scalar, vector or stacked.

    A stacked layer is a list or tuple whose every element is a
    ``VectorCESLayer``; anything else raises ``TypeError``.
    """
    if isinstance(layer, ScalarCESLayer):
        return LayerKind.SCALAR
    if isinstance(layer, VectorCESLayer):
        return LayerKind.VECTOR
    if isinstance(layer, (list, tuple)) and all(
        isinstance(item, VectorCESLayer) for item in layer
    ):
        return LayerKind.STACKED
    raise TypeError(
        f"expected ScalarCESLayer, VectorCESLayer or a list of "
        f"VectorCESLayer; got {type(layer).__name__}"
    )
