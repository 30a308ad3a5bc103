"""ToyAMM - two-asset constant-product pool with a deposit ledger."""

from toyamm.pool import SwapQuote, ToyAMM

__version__ = "0.1.0"
__all__ = ["SwapQuote", "ToyAMM", "__version__"]
