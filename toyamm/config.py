"""Pool configuration."""

from dataclasses import dataclass

from toyamm.constants import FEE_BASE, FEE_MULTIPLIER


@dataclass(frozen=True)
class PoolConfig:
    """Pricing parameters for a pool.

    Balances and reserves are always bounded by MAX_BALANCE (2^128-1);
    only the fee is configurable.

    Attributes:
        fee_multiplier: Numerator applied to amount_in (default: 997)
        fee_base: Denominator applied to reserve_in (default: 1000)
    """

    fee_multiplier: int = FEE_MULTIPLIER
    fee_base: int = FEE_BASE

    def __post_init__(self) -> None:
        if not 0 < self.fee_multiplier <= self.fee_base:
            raise ValueError(
                f"fee_multiplier must be in (0, fee_base], got {self.fee_multiplier}/{self.fee_base}"
            )


# Default configuration instance
DEFAULT_POOL_CONFIG = PoolConfig()
