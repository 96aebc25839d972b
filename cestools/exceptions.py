# cestools/exceptions.py
# Central place for the small custom exceptions raised by the CES solvers.

__all__ = ["CESError", "DimensionMismatchError", "MarketSolveError"]


class CESError(Exception):
    """Base class for every error raised by cestools."""
    pass


class DimensionMismatchError(CESError, ValueError):
    """
    Raised when array shapes, tuple arities or the number of markets do not
    line up with the layer(s) being solved.  Always raised *before* any
    arithmetic happens, so no partially computed result ever escapes.
    """
    pass


class MarketSolveError(CESError, RuntimeError):
    """
    Raised by the stacked solvers when the computation for a single market
    column fails.  The original exception is chained as ``__cause__`` and the
    offending column index is kept in ``market``.
    """

    def __init__(self, market: int, message: str = "") -> None:
        self.market = market
        super().__init__(message or f"CES solve failed for market {market}")
