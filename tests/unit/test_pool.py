"""Tests for the ToyAMM market engine."""

import pytest

from toyamm.errors import (
    AlreadyInitialized,
    BalanceOverflow,
    InsufficientBalance,
    InsufficientLiquidity,
    InvalidOwner,
    NotInitialized,
    Unauthorized,
    UnknownAsset,
)
from toyamm.models.metadata import AssetMetadata
from toyamm.pool import ToyAMM
from toyamm.pricing import ConstantProduct
from toyamm.safe_int import U128_MAX, Underflow
from toyamm.settlement import RecordingTransferService, TransferStatus

from tests.helpers import (
    ALICE,
    BOB,
    FT0,
    FT1,
    NDENOM,
    OWNER,
    UNLISTED,
    FailingTransferService,
    make_liquid_pool,
    make_pool,
)


class StaticMetadata:
    """Metadata lookup backed by a dict."""

    def __init__(self, records: dict[str, AssetMetadata]) -> None:
        self.records = records

    def metadata(self, asset: str) -> AssetMetadata | None:
        return self.records.get(asset)


class OverpayingPricing(ConstantProduct):
    """Pricing that quotes one more than the whole output reserve."""

    def get_amount_out(self, amount_in: int, reserve_in: int, reserve_out: int) -> int:
        return reserve_out + 1


class TestInitialize:
    """Tests for pool initialization."""

    def test_reserves_start_at_zero(self, pool):
        assert pool.get_reserves() == (0, 0)
        assert pool.owner == OWNER
        assert pool.assets == (FT0, FT1)

    def test_second_initialize_raises(self, pool):
        with pytest.raises(AlreadyInitialized):
            pool.initialize(OWNER, FT0, FT1)

    @pytest.mark.parametrize("owner", ["", "a", "Owner.testnet", "owner..testnet", "-owner", "x" * 65])
    def test_malformed_owner_raises(self, owner):
        amm = ToyAMM()
        with pytest.raises(InvalidOwner):
            amm.initialize(owner, FT0, FT1)
        assert not amm.is_initialized

    def test_identical_assets_raise(self):
        with pytest.raises(UnknownAsset):
            ToyAMM().initialize(OWNER, FT0, FT0)

    def test_operations_before_initialize_raise(self):
        amm = ToyAMM()
        with pytest.raises(NotInitialized):
            amm.get_reserves()
        with pytest.raises(NotInitialized):
            amm.deposit(FT0, ALICE, 1)
        with pytest.raises(NotInitialized):
            amm.swap(FT0, FT1, 1, caller=ALICE)

    def test_default_metadata(self, pool):
        meta0, meta1 = pool.get_metadata()
        assert meta0.decimals == 24
        assert meta1.spec == "ft-1.0.0"

    def test_metadata_from_lookup(self):
        """Metadata comes from the lookup, with the default for missing assets."""
        lookup = StaticMetadata({FT0: AssetMetadata(name="Token Zero", symbol="FT0", decimals=20)})
        amm = ToyAMM()
        amm.initialize(OWNER, FT0, FT1, metadata_lookup=lookup)
        meta0, meta1 = amm.get_metadata()
        assert meta0.symbol == "FT0"
        assert meta0.decimals == 20
        assert meta1 == AssetMetadata()


class TestDeposit:
    """Tests for the deposit entry point."""

    def test_deposit_credits_ledger(self, pool):
        assert pool.deposit(FT0, ALICE, 5 * NDENOM) == 0
        assert pool.get_user_deposit(FT0, ALICE) == 5 * NDENOM

    def test_deposit_unknown_asset_raises(self, pool):
        with pytest.raises(UnknownAsset):
            pool.deposit(UNLISTED, ALICE, 1)

    def test_get_user_deposit_unknown_asset_raises(self, pool):
        with pytest.raises(UnknownAsset):
            pool.get_user_deposit(UNLISTED, ALICE)


class TestAddLiquidity:
    """Tests for add_liquidity."""

    def test_owner_adds_liquidity(self, pool):
        pool.deposit(FT0, OWNER, 100 * NDENOM)
        pool.deposit(FT1, OWNER, 300 * NDENOM)

        assert pool.add_liquidity(FT0, 100 * NDENOM, FT1, 300 * NDENOM, caller=OWNER) == (
            100 * NDENOM,
            300 * NDENOM,
        )
        assert pool.get_user_deposit(FT0, OWNER) == 0
        assert pool.get_user_deposit(FT1, OWNER) == 0

    def test_assets_in_either_order(self, pool):
        pool.deposit(FT0, OWNER, 100)
        pool.deposit(FT1, OWNER, 300)
        pool.add_liquidity(FT1, 300, FT0, 100, caller=OWNER)
        assert pool.get_reserves() == (100, 300)

    def test_liquidity_accumulates(self, liquid_pool):
        liquid_pool.deposit(FT0, OWNER, 10)
        liquid_pool.deposit(FT1, OWNER, 30)
        liquid_pool.add_liquidity(FT0, 10, FT1, 30, caller=OWNER)
        assert liquid_pool.get_reserves() == (100 * NDENOM + 10, 300 * NDENOM + 30)

    def test_without_deposit_raises(self, pool):
        """Liquidity only comes from funds already in the owner's ledger."""
        with pytest.raises(InsufficientBalance):
            pool.add_liquidity(FT0, 100 * NDENOM, FT1, 300 * NDENOM, caller=OWNER)
        assert pool.get_reserves() == (0, 0)

    def test_non_owner_raises_and_leaves_reserves(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, 10)
        liquid_pool.deposit(FT1, ALICE, 10)
        before = liquid_pool.get_reserves()

        with pytest.raises(Unauthorized):
            liquid_pool.add_liquidity(FT0, 10, FT1, 10, caller=ALICE)

        assert liquid_pool.get_reserves() == before
        assert liquid_pool.get_user_deposit(FT0, ALICE) == 10

    def test_second_leg_short_is_all_or_nothing(self, pool):
        """A shortfall on asset_b leaves the asset_a deposit untouched."""
        pool.deposit(FT0, OWNER, 100)
        pool.deposit(FT1, OWNER, 299)

        with pytest.raises(InsufficientBalance):
            pool.add_liquidity(FT0, 100, FT1, 300, caller=OWNER)

        assert pool.get_user_deposit(FT0, OWNER) == 100
        assert pool.get_user_deposit(FT1, OWNER) == 299
        assert pool.get_reserves() == (0, 0)

    def test_reserve_overflow_is_all_or_nothing(self, pool):
        """A reserve sum past u128 is rejected before the owner is debited."""
        pool.deposit(FT0, OWNER, U128_MAX)
        pool.deposit(FT1, OWNER, 5)
        pool.add_liquidity(FT0, U128_MAX, FT1, 5, caller=OWNER)
        pool.deposit(FT0, OWNER, 1)
        pool.deposit(FT1, OWNER, 5)

        with pytest.raises(BalanceOverflow):
            pool.add_liquidity(FT0, 1, FT1, 5, caller=OWNER)

        assert pool.get_reserves() == (U128_MAX, 5)
        assert pool.get_user_deposit(FT0, OWNER) == 1
        assert pool.get_user_deposit(FT1, OWNER) == 5

    def test_same_asset_twice_raises(self, pool):
        pool.deposit(FT0, OWNER, 200)
        with pytest.raises(UnknownAsset):
            pool.add_liquidity(FT0, 100, FT0, 100, caller=OWNER)
        assert pool.get_user_deposit(FT0, OWNER) == 200

    def test_unknown_asset_raises(self, pool):
        with pytest.raises(UnknownAsset):
            pool.add_liquidity(FT0, 0, UNLISTED, 0, caller=OWNER)


class TestSwap:
    """Tests for swap."""

    def test_no_liquidity_raises(self, pool):
        pool.deposit(FT0, ALICE, NDENOM)
        with pytest.raises(InsufficientLiquidity):
            pool.swap(FT0, FT1, NDENOM, caller=ALICE)
        assert pool.get_user_deposit(FT0, ALICE) == NDENOM

    def test_one_sided_liquidity_raises(self, pool):
        pool.deposit(FT0, OWNER, 100)
        pool.add_liquidity(FT0, 100, FT1, 0, caller=OWNER)
        pool.deposit(FT0, ALICE, 1)
        with pytest.raises(InsufficientLiquidity):
            pool.swap(FT0, FT1, 1, caller=ALICE)

    def test_liquidity_checked_before_assets(self, pool):
        """An illiquid pool rejects even a swap naming an unknown asset."""
        with pytest.raises(InsufficientLiquidity):
            pool.swap(UNLISTED, FT1, 1, caller=ALICE)

    def test_reserves_shift_by_exact_amounts(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        reserve0, reserve1 = liquid_pool.get_reserves()

        amount_out = liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)

        new_reserve0, new_reserve1 = liquid_pool.get_reserves()
        assert new_reserve1 + amount_out == reserve1
        assert new_reserve0 - NDENOM == reserve0

    def test_amount_out_matches_formula(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        expected = (NDENOM * 997 * 300 * NDENOM) // (100 * NDENOM * 1000 + NDENOM * 997)
        assert liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE) == expected

    def test_swap_reverse_direction(self, liquid_pool):
        liquid_pool.deposit(FT1, ALICE, 3 * NDENOM)
        amount_out = liquid_pool.swap(FT1, FT0, 3 * NDENOM, caller=ALICE)
        assert liquid_pool.get_reserves() == (100 * NDENOM - amount_out, 303 * NDENOM)

    def test_ledger_after_swap(self, liquid_pool, transfers):
        """Input is consumed; output is owed through a pending transfer, not the ledger."""
        liquid_pool.deposit(FT0, ALICE, 2 * NDENOM)

        amount_out = liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)

        assert liquid_pool.get_user_deposit(FT0, ALICE) == NDENOM
        assert liquid_pool.get_user_deposit(FT1, ALICE) == 0
        [call] = transfers.calls
        assert (call.receiver, call.asset, call.amount) == (ALICE, FT1, amount_out)
        assert [t.transfer_id for t in liquid_pool.pending_transfers()] == [call.transfer_id]

    def test_insufficient_deposit_raises_without_mutation(self, liquid_pool, transfers):
        liquid_pool.deposit(FT0, ALICE, NDENOM - 1)
        before = liquid_pool.get_reserves()

        with pytest.raises(InsufficientBalance):
            liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)

        assert liquid_pool.get_reserves() == before
        assert liquid_pool.get_user_deposit(FT0, ALICE) == NDENOM - 1
        assert not transfers.calls

    def test_zero_amount_in(self, liquid_pool):
        """Zero input prices to zero output without dividing by zero."""
        before = liquid_pool.get_reserves()
        assert liquid_pool.swap(FT0, FT1, 0, caller=ALICE) == 0
        assert liquid_pool.get_reserves() == before

    def test_output_past_reserve_raises_without_mutation(self, liquid_pool, transfers):
        """An output larger than the reserve underflows before any write."""
        liquid_pool.pricing = OverpayingPricing()
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        before = liquid_pool.get_reserves()

        with pytest.raises(Underflow):
            liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)

        assert liquid_pool.get_reserves() == before
        assert liquid_pool.get_user_deposit(FT0, ALICE) == NDENOM
        assert liquid_pool.get_user_deposit(FT1, ALICE) == 0
        assert liquid_pool.pending_transfers() == []
        assert not transfers.calls

    def test_swap_reserve_overflow_raises_without_mutation(self, pool, transfers):
        pool.deposit(FT0, OWNER, U128_MAX)
        pool.deposit(FT1, OWNER, 5)
        pool.add_liquidity(FT0, U128_MAX, FT1, 5, caller=OWNER)
        pool.deposit(FT0, ALICE, 1)

        with pytest.raises(BalanceOverflow):
            pool.swap(FT0, FT1, 1, caller=ALICE)

        assert pool.get_reserves() == (U128_MAX, 5)
        assert pool.get_user_deposit(FT0, ALICE) == 1
        assert not transfers.calls

    def test_unknown_asset_raises(self, liquid_pool):
        with pytest.raises(UnknownAsset):
            liquid_pool.swap(FT0, UNLISTED, 1, caller=ALICE)

    def test_same_asset_raises(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, 1)
        with pytest.raises(UnknownAsset):
            liquid_pool.swap(FT0, FT0, 1, caller=ALICE)
        assert liquid_pool.get_reserves() == (100 * NDENOM, 300 * NDENOM)

    def test_output_never_drains_reserve(self):
        """Even the largest possible input leaves the output reserve positive."""
        pool = make_liquid_pool(1, 1000)
        pool.deposit(FT0, ALICE, U128_MAX - 1)
        amount_out = pool.swap(FT0, FT1, U128_MAX - 1, caller=ALICE)
        assert amount_out < 1000
        assert pool.get_reserves() == (U128_MAX, 1000 - amount_out)

    def test_swaps_by_different_traders(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        liquid_pool.deposit(FT0, BOB, NDENOM)
        first = liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)
        second = liquid_pool.swap(FT0, FT1, NDENOM, caller=BOB)
        # Price moves against the second trader
        assert second < first


class TestQuote:
    """Tests for quote."""

    def test_quote_matches_swap_and_changes_nothing(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        before = liquid_pool.get_reserves()

        quote = liquid_pool.quote(FT0, FT1, NDENOM)

        assert liquid_pool.get_reserves() == before
        assert liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE) == quote.amount_out
        assert liquid_pool.get_reserves() == (quote.reserve_in_after, quote.reserve_out_after)

    def test_quote_needs_liquidity(self, pool):
        with pytest.raises(InsufficientLiquidity):
            pool.quote(FT0, FT1, 1)


class TestWithdraw:
    """Tests for withdraw."""

    def test_withdraw_debits_and_dispatches(self, pool, transfers):
        pool.deposit(FT1, ALICE, 50)
        transfer = pool.withdraw(FT1, 20, caller=ALICE)

        assert pool.get_user_deposit(FT1, ALICE) == 30
        assert transfer.status is TransferStatus.PENDING
        assert transfers.calls[0].amount == 20

    def test_withdraw_past_balance_raises(self, pool, transfers):
        pool.deposit(FT1, ALICE, 50)
        with pytest.raises(InsufficientBalance):
            pool.withdraw(FT1, 51, caller=ALICE)
        assert pool.get_user_deposit(FT1, ALICE) == 50
        assert not transfers.calls

    def test_withdraw_does_not_touch_reserves(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, 5)
        liquid_pool.withdraw(FT0, 5, caller=ALICE)
        assert liquid_pool.get_reserves() == (100 * NDENOM, 300 * NDENOM)


class TestSettlement:
    """Tests for resolving outbound transfers."""

    def test_confirmed_transfer_keeps_ledger(self, liquid_pool):
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)
        [pending] = liquid_pool.pending_transfers()

        resolved = liquid_pool.resolve_transfer(pending.transfer_id, succeeded=True)

        assert resolved.status is TransferStatus.CONFIRMED
        assert liquid_pool.get_user_deposit(FT1, ALICE) == 0
        assert liquid_pool.pending_transfers() == []

    def test_failed_transfer_is_refunded_to_ledger(self, liquid_pool):
        """A failed swap payout stays claimable; reserves keep the swap's result."""
        liquid_pool.deposit(FT0, ALICE, NDENOM)
        amount_out = liquid_pool.swap(FT0, FT1, NDENOM, caller=ALICE)
        reserves_after_swap = liquid_pool.get_reserves()
        [pending] = liquid_pool.pending_transfers()

        resolved = liquid_pool.resolve_transfer(pending.transfer_id, succeeded=False)

        assert resolved.status is TransferStatus.FAILED
        assert liquid_pool.get_user_deposit(FT1, ALICE) == amount_out
        assert liquid_pool.get_reserves() == reserves_after_swap

    def test_pool_keeps_a_falsy_transfer_service(self):
        """A service that is empty, and so falsy, is still the one used."""

        class SizedTransferService(RecordingTransferService):
            def __len__(self) -> int:
                return len(self.calls)

        service = SizedTransferService()
        assert not service
        pool = make_pool(service)
        pool.deposit(FT0, ALICE, 3)
        pool.withdraw(FT0, 3, caller=ALICE)
        assert pool.transfer_service is service
        assert len(service) == 1

    def test_synchronous_dispatch_failure_refunds(self):
        """A transfer service that raises on handoff leaves the output in the ledger."""
        service = FailingTransferService()
        pool = make_liquid_pool(100, 300, service)
        pool.deposit(FT0, ALICE, 1)

        amount_out = pool.swap(FT0, FT1, 1, caller=ALICE)

        assert service.attempts == 1
        assert amount_out == 2
        assert pool.get_user_deposit(FT1, ALICE) == 2
        assert pool.get_reserves() == (101, 298)
        assert pool.pending_transfers() == []
