"""Pydantic models and identity types for the pool."""

from toyamm.models.api import (
    BalanceResponse,
    DepositRequest,
    DepositResponse,
    ErrorResponse,
    InitializeRequest,
    LiquidityRequest,
    MetadataResponse,
    QuoteResponse,
    ReservesResponse,
    ResolveRequest,
    SwapRequest,
    SwapResponse,
    TransferResponse,
    WithdrawRequest,
)
from toyamm.models.metadata import AssetMetadata, MetadataLookup
from toyamm.models.types import U128, AccountId, AssetId, is_valid_account_id

__all__ = [
    # Types
    "AccountId",
    "AssetId",
    "U128",
    "is_valid_account_id",
    # Metadata
    "AssetMetadata",
    "MetadataLookup",
    # API requests
    "InitializeRequest",
    "DepositRequest",
    "LiquidityRequest",
    "SwapRequest",
    "WithdrawRequest",
    "ResolveRequest",
    # API responses
    "BalanceResponse",
    "DepositResponse",
    "ErrorResponse",
    "MetadataResponse",
    "QuoteResponse",
    "ReservesResponse",
    "SwapResponse",
    "TransferResponse",
]
