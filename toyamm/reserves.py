"""Pool reserve state.

A narrow state holder: it stores the two reserves and checks liquidity,
but does not enforce any economic rule on the values it is given.
"""

from __future__ import annotations

from toyamm.errors import InsufficientLiquidity, UnknownAsset
from toyamm.models.types import require_u128


class ReserveState:
    """Reserves of the two pool assets, both starting at zero."""

    def __init__(self, asset0: str, asset1: str) -> None:
        self.asset0 = asset0
        self.asset1 = asset1
        self._reserves: dict[str, int] = {asset0: 0, asset1: 0}

    def reserves(self) -> tuple[int, int]:
        """Current (reserve0, reserve1)."""
        return self._reserves[self.asset0], self._reserves[self.asset1]

    def reserve_of(self, asset: str) -> int:
        """Reserve held for a single asset.

        Raises:
            UnknownAsset: If asset is not one of the pool assets
        """
        try:
            return self._reserves[asset]
        except KeyError:
            raise UnknownAsset(f"asset {asset!r} is not in the pool") from None

    def set_reserves(self, asset_a: str, amount_a: int, asset_b: str, amount_b: int) -> None:
        """Overwrite the stored reserve of each named asset.

        Both assets and amounts are checked before either reserve is written.

        Raises:
            UnknownAsset: If either asset is not one of the pool assets
            InvalidAmount: If either amount is not a u128
        """
        for asset in (asset_a, asset_b):
            if asset not in self._reserves:
                raise UnknownAsset(f"asset {asset!r} is not in the pool")
        require_u128(amount_a, "amount_a")
        require_u128(amount_b, "amount_b")
        self._reserves[asset_a] = amount_a
        self._reserves[asset_b] = amount_b

    @property
    def is_liquid(self) -> bool:
        """True when both reserves are strictly positive."""
        reserve0, reserve1 = self.reserves()
        return reserve0 > 0 and reserve1 > 0

    def assert_liquidity(self) -> None:
        """Raise InsufficientLiquidity unless both reserves are positive."""
        if not self.is_liquid:
            reserve0, reserve1 = self.reserves()
            raise InsufficientLiquidity(f"reserves are ({reserve0}, {reserve1})")
