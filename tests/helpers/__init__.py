"""Test helpers module for shared test utilities.

- constants: Account ids, asset ids and common amounts
- factories: Pool builders in common states
- client: Shortcuts for driving the HTTP API
"""

from tests.helpers.client import as_account, deposit, seed_liquidity
from tests.helpers.constants import ALICE, BOB, FT0, FT1, NDENOM, OWNER, UNLISTED
from tests.helpers.factories import FailingTransferService, make_liquid_pool, make_pool

__all__ = [
    # Constants
    "OWNER",
    "ALICE",
    "BOB",
    "FT0",
    "FT1",
    "UNLISTED",
    "NDENOM",
    # API client
    "as_account",
    "deposit",
    "seed_liquidity",
    # Factories
    "make_pool",
    "make_liquid_pool",
    "FailingTransferService",
]
