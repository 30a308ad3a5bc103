"""Per-asset deposit ledger.

Funds a user has made available to the pool but not yet committed to it
or withdrawn. Balances are lazily created and read as zero when absent.
"""

from __future__ import annotations

from toyamm.constants import MAX_BALANCE
from toyamm.errors import BalanceOverflow, InsufficientBalance, UnknownAsset
from toyamm.models.types import require_u128
from toyamm.safe_int import S


class Ledger:
    """Account balances for each of the two pool assets."""

    def __init__(self, asset0: str, asset1: str) -> None:
        self._deposits: dict[str, dict[str, int]] = {asset0: {}, asset1: {}}

    def _book(self, asset: str) -> dict[str, int]:
        try:
            return self._deposits[asset]
        except KeyError:
            raise UnknownAsset(f"asset {asset!r} is not in the pool") from None

    def balance_of(self, account: str, asset: str) -> int:
        """Current balance of account for asset (zero if never credited).

        Raises:
            UnknownAsset: If asset is not one of the pool assets
        """
        return self._book(asset).get(account, 0)

    def check_debit(self, account: str, asset: str, amount: int) -> None:
        """Validate a debit without applying it.

        Raises:
            UnknownAsset: If asset is not one of the pool assets
            InvalidAmount: If amount is not a u128
            InsufficientBalance: If the balance is below amount
        """
        book = self._book(asset)
        require_u128(amount)
        balance = book.get(account, 0)
        if balance < amount:
            raise InsufficientBalance(
                f"{account} holds {balance} of {asset}, needs {amount}"
            )

    def check_credit(self, account: str, asset: str, amount: int) -> int:
        """Validate a credit without applying it and return the would-be balance.

        Raises:
            UnknownAsset: If asset is not one of the pool assets
            InvalidAmount: If amount is not a u128
            BalanceOverflow: If the new balance would not fit in a u128
        """
        book = self._book(asset)
        require_u128(amount)
        new_balance = S(book.get(account, 0)) + S(amount)
        if new_balance > MAX_BALANCE:
            raise BalanceOverflow(f"{account} balance of {asset} would exceed u128")
        return new_balance.value

    def credit(self, account: str, asset: str, amount: int) -> int:
        """Add amount (zero allowed) to the account's balance and return the new balance.

        Raises:
            UnknownAsset: If asset is not one of the pool assets
            InvalidAmount: If amount is not a u128
            BalanceOverflow: If the new balance would not fit in a u128
        """
        new_balance = self.check_credit(account, asset, amount)
        self._deposits[asset][account] = new_balance
        return new_balance

    def debit(self, account: str, asset: str, amount: int) -> int:
        """Subtract amount from the account's balance and return the new balance.

        All-or-nothing: a debit past the balance is rejected, never clamped.

        Raises:
            UnknownAsset: If asset is not one of the pool assets
            InvalidAmount: If amount is not a u128
            InsufficientBalance: If the balance is below amount
        """
        self.check_debit(account, asset, amount)
        book = self._deposits[asset]
        new_balance = (S(book.get(account, 0)) - S(amount)).value
        book[account] = new_balance
        return new_balance

