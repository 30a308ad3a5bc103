"""ToyAMM error classes.

Every error carries a stable ``code`` so the HTTP layer and logs can
report it without parsing messages. All of them are raised before any
state mutation.
"""

from typing import ClassVar


class AmmError(Exception):
    """Base error for pool operations."""

    code: ClassVar[str] = "AMM_ERROR"

    def __str__(self) -> str:
        message = super().__str__()
        return f"ToyAMM: {self.code}" + (f" ({message})" if message else "")


class Unauthorized(AmmError):
    """Caller is not allowed to run an owner-only operation."""

    code = "ONLY_OWNER_ALLOWED"


class UnknownAsset(AmmError):
    """Asset identity is not one of the two pool assets."""

    code = "INVALID_TOKEN_ID"


class InsufficientBalance(AmmError):
    """Ledger debit exceeds the account's deposited balance."""

    code = "INSUFFICIENT_DEPOSIT"


class InsufficientLiquidity(AmmError):
    """Swap attempted while a reserve is zero."""

    code = "INSUFFICIENT_LIQUIDITY"


class AlreadyInitialized(AmmError):
    """Pool was initialized twice."""

    code = "ALREADY_INITIALIZED"


class InvalidOwner(AmmError):
    """Owner account identity is malformed."""

    code = "OWNER_ACCOUNT_ID_INVALID"


class NotInitialized(AmmError):
    """Operation attempted before initialize()."""

    code = "NOT_INITIALIZED"


class InvalidAmount(AmmError):
    """Amount is not an unsigned 128-bit integer."""

    code = "INVALID_AMOUNT"


class BalanceOverflow(AmmError):
    """Credit would push a balance or reserve past 2^128-1."""

    code = "BALANCE_OVERFLOW"


class UnknownTransfer(AmmError):
    """No outbound transfer was recorded under this id."""

    code = "UNKNOWN_TRANSFER"


class TransferAlreadyResolved(AmmError):
    """Outbound transfer outcome was already reported."""

    code = "TRANSFER_ALREADY_RESOLVED"
