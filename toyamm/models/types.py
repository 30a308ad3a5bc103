"""Shared type definitions for pool identities and amounts.

Account and asset identities follow the host chain's account-id rules:
2 to 64 characters of lowercase letters and digits, with parts joined by
single ``-``, ``_`` or ``.`` separators.
"""

import re
from typing import Annotated, Any

from pydantic import AfterValidator, BeforeValidator, Field

from toyamm.constants import MAX_ACCOUNT_ID_LEN, MAX_BALANCE, MIN_ACCOUNT_ID_LEN
from toyamm.errors import InvalidAmount

_ACCOUNT_ID_RE = re.compile(r"^(([a-z\d]+[\-_])*[a-z\d]+\.)*([a-z\d]+[\-_])*[a-z\d]+$")


def is_valid_account_id(account_id: str) -> bool:
    """Check if a string is a well-formed account identity.

    Args:
        account_id: String to validate

    Returns:
        True if the string satisfies the account-id rules
    """
    if not isinstance(account_id, str):
        return False
    if not MIN_ACCOUNT_ID_LEN <= len(account_id) <= MAX_ACCOUNT_ID_LEN:
        return False
    return _ACCOUNT_ID_RE.match(account_id) is not None


def validate_account_id(value: str) -> str:
    """Pydantic validator wrapper around is_valid_account_id."""
    if not is_valid_account_id(value):
        raise ValueError(f"Invalid account id: '{value}'")
    return value


def validate_u128(value: Any) -> str:
    """Validate that a value is a u128 decimal string.

    Args:
        value: Value to validate (string or int)

    Returns:
        Valid u128 as decimal string

    Raises:
        ValueError: If value is not a non-negative integer within u128 range
    """
    if isinstance(value, bool):
        raise ValueError("U128 must be string or int, got bool")
    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        if not value.isdigit():
            raise ValueError(f"U128 must be a decimal integer string: '{value}'")
        int_value = int(value)
    else:
        raise ValueError(f"U128 must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"U128 cannot be negative: {value}")
    if int_value > MAX_BALANCE:
        raise ValueError(f"U128 overflow: {value} > 2^128-1")
    return str(int_value)


def require_u128(amount: Any, name: str = "amount") -> int:
    """Check an amount handed to the core.

    Raises:
        InvalidAmount: If amount is not an int in [0, 2^128-1]
    """
    if not isinstance(amount, int) or isinstance(amount, bool):
        raise InvalidAmount(f"{name} must be int, got {type(amount).__name__}")
    if not 0 <= amount <= MAX_BALANCE:
        raise InvalidAmount(f"{name} out of u128 range: {amount}")
    return amount


# Account identity (owner, depositor, trader)
AccountId = Annotated[str, AfterValidator(validate_account_id)]

# Asset identity (the fungible token's own account id)
AssetId = Annotated[str, AfterValidator(validate_account_id)]

# 128-bit unsigned integer as decimal string (validated)
U128 = Annotated[
    str,
    BeforeValidator(validate_u128),
    Field(description="128-bit unsigned integer as decimal string"),
]
