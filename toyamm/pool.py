"""Two-asset constant-product pool.

ToyAMM ties the deposit ledger and the reserve state together:

- users fund their ledger balance through the transfer service (deposit),
- the owner moves ledger funds into the reserves (add_liquidity),
- anyone swaps ledger funds against the reserves (swap),
- outbound value is handed to the transfer service as a pending transfer
  whose outcome comes back through resolve_transfer().

Only the owner can add liquidity, there is no LP share accounting, and
traders cannot set a minimum output.

Operations are expected to run one at a time; the class holds no locks.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from toyamm.config import DEFAULT_POOL_CONFIG, PoolConfig
from toyamm.constants import MAX_BALANCE
from toyamm.errors import (
    AlreadyInitialized,
    BalanceOverflow,
    InvalidOwner,
    NotInitialized,
    Unauthorized,
    UnknownAsset,
)
from toyamm.ledger import Ledger
from toyamm.models.metadata import AssetMetadata, MetadataLookup
from toyamm.models.types import is_valid_account_id, require_u128
from toyamm.pricing import ConstantProduct
from toyamm.reserves import ReserveState
from toyamm.safe_int import S
from toyamm.settlement import (
    PendingTransfer,
    RecordingTransferService,
    SettlementBook,
    TransferService,
    TransferStatus,
)

logger = structlog.get_logger()


@dataclass(frozen=True)
class SwapQuote:
    """Outcome of pricing a swap against the current reserves."""

    asset_in: str
    asset_out: str
    amount_in: int
    amount_out: int
    reserve_in_after: int
    reserve_out_after: int


class ToyAMM:
    """Market engine for a pool of two fungible assets.

    Args:
        transfer_service: Moves outbound value to receivers. Defaults to an
            in-process RecordingTransferService.
        config: Pricing parameters (default 0.3% fee).
    """

    def __init__(
        self,
        transfer_service: TransferService | None = None,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
    ) -> None:
        self.transfer_service: TransferService = (
            transfer_service if transfer_service is not None else RecordingTransferService()
        )
        self.config = config
        self.pricing = ConstantProduct(config)
        self.settlement = SettlementBook()

        self._owner: str | None = None
        self._ledger: Ledger | None = None
        self._reserves: ReserveState | None = None
        self._metadata: tuple[AssetMetadata, AssetMetadata] | None = None

    # --- Lifecycle ---

    @property
    def is_initialized(self) -> bool:
        return self._reserves is not None

    def initialize(
        self,
        owner: str,
        asset0: str,
        asset1: str,
        metadata_lookup: MetadataLookup | None = None,
    ) -> None:
        """Set the owner and the two pool assets. Reserves start at (0, 0).

        Args:
            owner: Sole account allowed to add liquidity
            asset0: First pool asset
            asset1: Second pool asset
            metadata_lookup: Optional source of display metadata for the assets

        Raises:
            InvalidOwner: If owner is not a well-formed account identity
            AlreadyInitialized: If the pool was already initialized
            UnknownAsset: If an asset identity is malformed or both are the same
        """
        if not is_valid_account_id(owner):
            raise InvalidOwner(f"owner {owner!r} is not a valid account id")
        if self.is_initialized:
            raise AlreadyInitialized(f"pool already owned by {self._owner}")
        for asset in (asset0, asset1):
            if not is_valid_account_id(asset):
                raise UnknownAsset(f"asset {asset!r} is not a valid account id")
        if asset0 == asset1:
            raise UnknownAsset(f"pool assets must differ, got {asset0!r} twice")

        self._metadata = (
            _lookup_metadata(metadata_lookup, asset0),
            _lookup_metadata(metadata_lookup, asset1),
        )
        self._owner = owner
        self._ledger = Ledger(asset0, asset1)
        self._reserves = ReserveState(asset0, asset1)

        logger.info(
            "pool_initialized",
            owner=owner,
            asset0=asset0,
            asset1=asset1,
            decimals0=self._metadata[0].decimals,
            decimals1=self._metadata[1].decimals,
        )

    def _state(self) -> tuple[Ledger, ReserveState]:
        if self._ledger is None or self._reserves is None:
            raise NotInitialized("call initialize() first")
        return self._ledger, self._reserves

    # --- Views ---

    @property
    def owner(self) -> str:
        self._state()
        assert self._owner is not None
        return self._owner

    @property
    def assets(self) -> tuple[str, str]:
        _, reserves = self._state()
        return reserves.asset0, reserves.asset1

    def get_reserves(self) -> tuple[int, int]:
        """Current (reserve0, reserve1)."""
        _, reserves = self._state()
        return reserves.reserves()

    def get_user_deposit(self, asset: str, account: str) -> int:
        """Ledger balance of account for asset (zero if never credited)."""
        ledger, _ = self._state()
        return ledger.balance_of(account, asset)

    def get_metadata(self) -> tuple[AssetMetadata, AssetMetadata]:
        """Display metadata of (asset0, asset1)."""
        self._state()
        assert self._metadata is not None
        return self._metadata

    def pending_transfers(self) -> list[PendingTransfer]:
        """Outbound transfers whose outcome has not been reported."""
        return self.settlement.pending()

    def quote(self, asset_in: str, asset_out: str, amount_in: int) -> SwapQuote:
        """Price a swap without changing any state.

        Raises:
            InsufficientLiquidity: If either reserve is zero
            UnknownAsset: If an asset is not in the pool, or asset_in == asset_out
            InvalidAmount: If amount_in is not a u128
            BalanceOverflow: If reserve_in + amount_in would not fit in a u128
            Underflow: If the priced output exceeds reserve_out
        """
        _, reserves = self._state()
        reserves.assert_liquidity()

        reserve_in = reserves.reserve_of(asset_in)
        reserve_out = reserves.reserve_of(asset_out)
        if asset_in == asset_out:
            raise UnknownAsset(f"cannot swap {asset_in!r} for itself")
        require_u128(amount_in, "amount_in")

        amount_out = self.pricing.get_amount_out(amount_in, reserve_in, reserve_out)

        reserve_in_after = S(reserve_in) + S(amount_in)
        if reserve_in_after > MAX_BALANCE:
            raise BalanceOverflow(f"reserve of {asset_in} would exceed u128")
        # The formula keeps amount_out < reserve_out; Underflow here means it did not
        reserve_out_after = S(reserve_out) - S(amount_out)

        return SwapQuote(
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=amount_out,
            reserve_in_after=reserve_in_after.value,
            reserve_out_after=reserve_out_after.value,
        )

    # --- Mutations ---

    def deposit(self, asset: str, sender: str, amount: int) -> int:
        """Credit funds that arrived through the transfer service.

        Called by the asset's transfer service when sender moved amount of
        asset to the pool.

        Returns:
            The amount the service should hand back to sender (always 0)
        """
        ledger, _ = self._state()
        balance = ledger.credit(sender, asset, amount)
        logger.info("deposit_received", asset=asset, sender=sender, amount=amount, balance=balance)
        return 0

    def add_liquidity(
        self,
        asset_a: str,
        amount_a: int,
        asset_b: str,
        amount_b: int,
        *,
        caller: str,
    ) -> tuple[int, int]:
        """Move the owner's deposited funds into the reserves.

        Both debits and both reserve sums are checked before anything is
        written, so a failure leaves ledger and reserves unchanged.

        Returns:
            The new (reserve0, reserve1)

        Raises:
            Unauthorized: If caller is not the owner
            UnknownAsset: If an asset is not in the pool, or asset_a == asset_b
            InsufficientBalance: If the owner's deposit of either asset is short
            BalanceOverflow: If a reserve would exceed u128
        """
        ledger, reserves = self._state()
        if caller != self._owner:
            raise Unauthorized(f"{caller} is not the pool owner")

        reserve_a = reserves.reserve_of(asset_a)
        reserve_b = reserves.reserve_of(asset_b)
        if asset_a == asset_b:
            raise UnknownAsset(f"liquidity needs both pool assets, got {asset_a!r} twice")

        ledger.check_debit(caller, asset_a, amount_a)
        ledger.check_debit(caller, asset_b, amount_b)
        new_reserve_a = S(reserve_a) + S(amount_a)
        new_reserve_b = S(reserve_b) + S(amount_b)
        if new_reserve_a > MAX_BALANCE or new_reserve_b > MAX_BALANCE:
            raise BalanceOverflow("reserve would exceed u128")

        ledger.debit(caller, asset_a, amount_a)
        ledger.debit(caller, asset_b, amount_b)
        reserves.set_reserves(asset_a, new_reserve_a.value, asset_b, new_reserve_b.value)

        logger.info(
            "liquidity_added",
            owner=caller,
            asset_a=asset_a,
            amount_a=amount_a,
            asset_b=asset_b,
            amount_b=amount_b,
            reserves=reserves.reserves(),
        )
        return reserves.reserves()

    def swap(self, asset_in: str, asset_out: str, amount_in: int, *, caller: str) -> int:
        """Swap caller's deposited asset_in for asset_out at the pool price.

        The output is credited to the caller's ledger and immediately
        debited again into a pending outbound transfer, so the ledger
        records what is owed until the transfer service settles it.

        Returns:
            amount_out handed to the transfer service

        Raises:
            InsufficientLiquidity: If either reserve is zero
            UnknownAsset: If an asset is not in the pool, or asset_in == asset_out
            InsufficientBalance: If caller's deposit of asset_in is below amount_in
        """
        ledger, reserves = self._state()
        quote = self.quote(asset_in, asset_out, amount_in)

        ledger.check_debit(caller, asset_in, amount_in)
        ledger.check_credit(caller, asset_out, quote.amount_out)

        ledger.debit(caller, asset_in, amount_in)
        ledger.credit(caller, asset_out, quote.amount_out)
        ledger.debit(caller, asset_out, quote.amount_out)
        transfer = self._dispatch(caller, asset_out, quote.amount_out)

        reserves.set_reserves(
            asset_in, quote.reserve_in_after, asset_out, quote.reserve_out_after
        )

        logger.info(
            "swap_executed",
            trader=caller,
            asset_in=asset_in,
            asset_out=asset_out,
            amount_in=amount_in,
            amount_out=quote.amount_out,
            transfer_id=transfer.transfer_id,
            reserves=reserves.reserves(),
        )
        return quote.amount_out

    def withdraw(self, asset: str, amount: int, *, caller: str) -> PendingTransfer:
        """Hand part of the caller's deposit back to them.

        Raises:
            UnknownAsset: If asset is not in the pool
            InsufficientBalance: If the caller's deposit is below amount
        """
        ledger, _ = self._state()
        balance = ledger.debit(caller, asset, amount)
        transfer = self._dispatch(caller, asset, amount)
        logger.info(
            "withdrawal_dispatched",
            account=caller,
            asset=asset,
            amount=amount,
            balance=balance,
            transfer_id=transfer.transfer_id,
        )
        return transfer

    def resolve_transfer(self, transfer_id: int, succeeded: bool) -> PendingTransfer:
        """Record the outcome of an outbound transfer.

        A failed transfer is credited back to the receiver's ledger, so the
        value stays claimable. Reserves are never touched.

        Raises:
            UnknownTransfer: If no transfer has this id
            TransferAlreadyResolved: If the outcome was already reported
        """
        ledger, _ = self._state()
        pending = self.settlement.get(transfer_id)
        if not succeeded:
            ledger.check_credit(pending.receiver, pending.asset, pending.amount)
        pending = self.settlement.resolve(transfer_id, succeeded)

        if pending.status is TransferStatus.FAILED:
            balance = ledger.credit(pending.receiver, pending.asset, pending.amount)
            logger.warning(
                "transfer_failed_refunded",
                transfer_id=transfer_id,
                receiver=pending.receiver,
                asset=pending.asset,
                amount=pending.amount,
                balance=balance,
            )
        else:
            logger.info("transfer_confirmed", transfer_id=transfer_id)
        return pending

    def _dispatch(self, receiver: str, asset: str, amount: int) -> PendingTransfer:
        """Open a pending transfer and hand it to the transfer service.

        The service is not awaited. If it raises while accepting the
        handoff, the transfer is resolved as failed right away.
        """
        pending = self.settlement.open(receiver, asset, amount)
        try:
            self.transfer_service.transfer(pending.transfer_id, receiver, asset, amount)
        except Exception:
            logger.exception(
                "transfer_dispatch_failed",
                transfer_id=pending.transfer_id,
                receiver=receiver,
                asset=asset,
                amount=amount,
            )
            self.resolve_transfer(pending.transfer_id, succeeded=False)
        else:
            logger.debug(
                "transfer_dispatched",
                transfer_id=pending.transfer_id,
                receiver=receiver,
                asset=asset,
                amount=amount,
            )
        return pending


def _lookup_metadata(lookup: MetadataLookup | None, asset: str) -> AssetMetadata:
    """Fetch metadata for asset, falling back to the default record."""
    if lookup is not None:
        metadata = lookup.metadata(asset)
        if metadata is not None:
            return metadata
        logger.warning("metadata_lookup_failed", asset=asset, using_default=True)
    return AssetMetadata()
