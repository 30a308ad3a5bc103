"""API endpoints for the pool service."""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, Header, HTTPException, Query

from toyamm.api.service import PoolService, get_default_service
from toyamm.constants import MAX_BALANCE
from toyamm.models.api import (
    BalanceResponse,
    DepositRequest,
    DepositResponse,
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
from toyamm.models.types import is_valid_account_id

logger = structlog.get_logger()

router = APIRouter()


def get_service() -> PoolService:
    """Dependency provider for the pool service.

    Override this in tests to inject a fresh pool:
        app.dependency_overrides[get_service] = lambda: PoolService(ToyAMM())
    """
    return get_default_service()


def get_caller(x_account_id: Annotated[str, Header(alias="X-Account-Id")]) -> str:
    """Identity of the account making the call.

    The host's authentication layer is expected to set this header.
    """
    if not is_valid_account_id(x_account_id):
        logger.warning("invalid_caller_header", account_id=x_account_id)
        raise HTTPException(status_code=422, detail=f"Invalid X-Account-Id: '{x_account_id}'")
    return x_account_id


Service = Annotated[PoolService, Depends(get_service)]
Caller = Annotated[str, Depends(get_caller)]


@router.post("/initialize", status_code=201)
def initialize(request: InitializeRequest, service: Service) -> ReservesResponse:
    """Initialize a pool started without AMM_OWNER."""
    with service.locked() as pool:
        pool.initialize(request.owner, request.asset0, request.asset1)
        return _reserves_response(pool.assets, pool.get_reserves())


@router.get("/reserves")
def get_reserves(service: Service) -> ReservesResponse:
    """Current reserves of both assets."""
    with service.locked() as pool:
        return _reserves_response(pool.assets, pool.get_reserves())


@router.get("/deposits/{asset}/{account}")
def get_user_deposit(asset: str, account: str, service: Service) -> BalanceResponse:
    """Ledger balance of account for asset."""
    with service.locked() as pool:
        balance = pool.get_user_deposit(asset, account)
    return BalanceResponse(asset=asset, account=account, balance=balance)


@router.get("/metadata")
def get_metadata(service: Service) -> MetadataResponse:
    """Display metadata of both pool assets."""
    with service.locked() as pool:
        meta0, meta1 = pool.get_metadata()
    return MetadataResponse(asset0=meta0, asset1=meta1)


@router.get("/quote")
def quote(
    asset_in: Annotated[str, Query(alias="assetIn")],
    asset_out: Annotated[str, Query(alias="assetOut")],
    amount_in: Annotated[int, Query(alias="amountIn", ge=0, le=MAX_BALANCE)],
    service: Service,
) -> QuoteResponse:
    """Price a swap without executing it."""
    with service.locked() as pool:
        result = pool.quote(asset_in, asset_out, amount_in)
    return QuoteResponse.from_quote(result)


@router.post("/deposits")
def deposit(request: DepositRequest, service: Service) -> DepositResponse:
    """Credit funds reported by an asset's transfer service."""
    with service.locked() as pool:
        refund = pool.deposit(request.asset, request.sender, int(request.amount))
    return DepositResponse(refund=refund)


@router.post("/liquidity")
def add_liquidity(request: LiquidityRequest, service: Service, caller: Caller) -> ReservesResponse:
    """Owner moves deposited funds into the reserves."""
    with service.locked() as pool:
        pool.add_liquidity(
            request.asset_a,
            int(request.amount_a),
            request.asset_b,
            int(request.amount_b),
            caller=caller,
        )
        return _reserves_response(pool.assets, pool.get_reserves())


@router.post("/swap")
def swap(request: SwapRequest, service: Service, caller: Caller) -> SwapResponse:
    """Swap the caller's deposited asset_in for asset_out."""
    with service.locked() as pool:
        amount_out = pool.swap(
            request.asset_in, request.asset_out, int(request.amount_in), caller=caller
        )
    return SwapResponse(amount_out=amount_out)


@router.post("/withdrawals")
def withdraw(request: WithdrawRequest, service: Service, caller: Caller) -> TransferResponse:
    """Hand part of the caller's deposit back to them."""
    with service.locked() as pool:
        transfer = pool.withdraw(request.asset, int(request.amount), caller=caller)
    return TransferResponse.from_transfer(transfer)


@router.get("/transfers/pending")
def pending_transfers(service: Service) -> list[TransferResponse]:
    """Outbound transfers awaiting an outcome."""
    with service.locked() as pool:
        return [TransferResponse.from_transfer(t) for t in pool.pending_transfers()]


@router.post("/transfers/{transfer_id}/resolve")
def resolve_transfer(
    transfer_id: int, request: ResolveRequest, service: Service
) -> TransferResponse:
    """Transfer service reports the outcome of an outbound transfer."""
    with service.locked() as pool:
        transfer = pool.resolve_transfer(transfer_id, request.succeeded)
    return TransferResponse.from_transfer(transfer)


def _reserves_response(assets: tuple[str, str], reserves: tuple[int, int]) -> ReservesResponse:
    return ReservesResponse(
        reserve0=reserves[0], reserve1=reserves[1], asset0=assets[0], asset1=assets[1]
    )
