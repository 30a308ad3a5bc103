"""Constant-product pricing.

Formula: amount_out = (amount_in * 997 * reserve_out) / (reserve_in * 1000 + amount_in * 997)

The 997/1000 factor takes a 0.3% fee from the input. Output rounds down,
so the pool never pays out more than the curve allows.
"""

from __future__ import annotations

from toyamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from toyamm.models.types import require_u128
from toyamm.safe_int import S


class ConstantProduct:
    """Constant-product (x * y = k) pricing with an input fee."""

    def __init__(self, config: PoolConfig = DEFAULT_POOL_CONFIG) -> None:
        self.config = config

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        """Calculate output amount for an exact input.

        Intermediate products are unbounded (they can exceed 2^128 when
        balances reach 1e24 and beyond); only the quotient is narrowed.

        Args:
            amount_in: Input asset amount
            reserve_in: Reserve of input asset in pool
            reserve_out: Reserve of output asset in pool

        Returns:
            Output asset amount, rounded down

        Raises:
            InvalidAmount: If any argument is not a u128
            DivisionByZero: If reserve_in and amount_in are both zero
            U128Overflow: If the quotient does not fit in a u128
        """
        require_u128(amount_in, "amount_in")
        require_u128(reserve_in, "reserve_in")
        require_u128(reserve_out, "reserve_out")

        amount_in_with_fee = S(amount_in) * S(self.config.fee_multiplier)
        numerator = amount_in_with_fee * S(reserve_out)
        denominator = S(reserve_in) * S(self.config.fee_base) + amount_in_with_fee

        return (numerator // denominator).to_u128()

