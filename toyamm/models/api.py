"""Pydantic models for the pool HTTP API.

Amounts travel as decimal strings so that u128 values survive JSON
clients that parse numbers as doubles.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from toyamm.models.metadata import AssetMetadata
from toyamm.models.types import U128, AccountId, AssetId

if TYPE_CHECKING:
    from toyamm.pool import SwapQuote
    from toyamm.settlement import PendingTransfer


class InitializeRequest(BaseModel):
    """One-time pool setup."""

    owner: str = Field(description="Sole liquidity provider (validated by the pool).")
    asset0: AssetId
    asset1: AssetId


class DepositRequest(BaseModel):
    """Funds arrival reported by an asset's transfer service."""

    asset: AssetId = Field(description="Asset that was transferred to the pool.")
    sender: AccountId = Field(description="Account whose ledger is credited.")
    amount: U128


class DepositResponse(BaseModel):
    """Unused amount the transfer service should return to the sender."""

    refund: U128 = "0"


class LiquidityRequest(BaseModel):
    """Owner moves deposited funds into the reserves."""

    asset_a: AssetId = Field(alias="assetA")
    amount_a: U128 = Field(alias="amountA")
    asset_b: AssetId = Field(alias="assetB")
    amount_b: U128 = Field(alias="amountB")

    model_config = {"populate_by_name": True}


class SwapRequest(BaseModel):
    """Exact-input swap against the pool."""

    asset_in: AssetId = Field(alias="assetIn")
    asset_out: AssetId = Field(alias="assetOut")
    amount_in: U128 = Field(alias="amountIn")

    model_config = {"populate_by_name": True}


class SwapResponse(BaseModel):
    """Output amount handed to the transfer service."""

    amount_out: U128 = Field(alias="amountOut")

    model_config = {"populate_by_name": True}


class QuoteResponse(BaseModel):
    """Priced swap and the reserves it would leave."""

    asset_in: str = Field(alias="assetIn")
    asset_out: str = Field(alias="assetOut")
    amount_in: U128 = Field(alias="amountIn")
    amount_out: U128 = Field(alias="amountOut")
    reserve_in_after: U128 = Field(alias="reserveInAfter")
    reserve_out_after: U128 = Field(alias="reserveOutAfter")

    model_config = {"populate_by_name": True}

    @classmethod
    def from_quote(cls, quote: SwapQuote) -> QuoteResponse:
        return cls(
            asset_in=quote.asset_in,
            asset_out=quote.asset_out,
            amount_in=quote.amount_in,
            amount_out=quote.amount_out,
            reserve_in_after=quote.reserve_in_after,
            reserve_out_after=quote.reserve_out_after,
        )


class WithdrawRequest(BaseModel):
    """Caller takes part of their deposit back out."""

    asset: AssetId
    amount: U128


class ResolveRequest(BaseModel):
    """Outcome of an outbound transfer reported by the transfer service."""

    succeeded: bool


class TransferResponse(BaseModel):
    """An outbound transfer and its status."""

    transfer_id: int = Field(alias="transferId")
    receiver: str
    asset: str
    amount: U128
    status: str

    model_config = {"populate_by_name": True}

    @classmethod
    def from_transfer(cls, transfer: PendingTransfer) -> TransferResponse:
        return cls(
            transfer_id=transfer.transfer_id,
            receiver=transfer.receiver,
            asset=transfer.asset,
            amount=transfer.amount,
            status=transfer.status.value,
        )


class ReservesResponse(BaseModel):
    """Current reserves, keyed by position and by asset."""

    reserve0: U128
    reserve1: U128
    asset0: str
    asset1: str


class BalanceResponse(BaseModel):
    """Ledger balance of one account for one asset."""

    asset: str
    account: str
    balance: U128


class MetadataResponse(BaseModel):
    """Display metadata of both pool assets."""

    asset0: AssetMetadata
    asset1: AssetMetadata


class ErrorResponse(BaseModel):
    """Body returned for every rejected pool operation."""

    error: str = Field(description="Stable error code, e.g. INSUFFICIENT_DEPOSIT.")
    detail: str
