# cestools/config.py
"""
SolverConfig

Container for the knobs that govern how the stacked solvers spread their
markets over a worker pool.  Defaults reproduce the behaviour of calling
the solvers with no configuration at all, so a missing ``solver:`` block in
*cestools.yaml* changes nothing.

The dataclass is *frozen* so a configuration cannot drift while a batch is
running.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Final, Union

import yaml

__all__ = ["SolverConfig", "load_solver_config", "THREAD_BACKENDS"]

_LOG = logging.getLogger(__name__)

# only backends whose workers share the parent's memory can fill one buffer
THREAD_BACKENDS: Final = {"threading", "sequential"}


@dataclass(slots=True, frozen=True)
class SolverConfig:
    n_jobs:     int = -1                      # joblib semantics: -1 ⇒ all cores
    backend:    str = "threading"             # "threading" | "sequential"
    batch_size: Union[int, str] = "auto"      # markets handed to a worker at once
    progress:   bool = False                  # tqdm bar over markets

    def __post_init__(self) -> None:          # lightweight validation
        if self.n_jobs == 0:
            raise ValueError("n_jobs must be non-zero (-1 = all cores)")
        if self.backend not in THREAD_BACKENDS:
            raise ValueError(
                f"backend must be one of {sorted(THREAD_BACKENDS)}; got "
                f"'{self.backend}' (process pools cannot share the output buffer)"
            )
        if self.batch_size != "auto" and (
            not isinstance(self.batch_size, int) or self.batch_size <= 0
        ):
            raise ValueError("batch_size must be 'auto' or a positive int")

    @property
    def sequential(self) -> bool:
        return self.n_jobs == 1 or self.backend == "sequential"


def load_solver_config(yaml_path: str | Path = "cestools.yaml") -> SolverConfig:
    """
    Parse the ``solver:`` block of *yaml_path* into a ``SolverConfig``.

    A missing file or block falls back to the defaults; unknown keys are
    logged and ignored.
    """
    path = Path(yaml_path)
    if not path.exists():
        _LOG.debug("%s not found – using default solver config", path)
        return SolverConfig()

    raw = yaml.safe_load(path.read_text()) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"{path} must hold a YAML mapping at top level")
    block: Dict[str, Any] = raw.get("solver") or {}

    allowed = {f.name for f in fields(SolverConfig)}
    unknown = sorted(set(block) - allowed)
    if unknown:
        _LOG.warning("Ignoring unknown solver keys in %s: %s", path, unknown)
    return SolverConfig(**{k: v for k, v in block.items() if k in allowed})
