"""Outbound settlement.

Value leaving the pool (swap outputs, withdrawals) is debited from the
ledger and handed to an external transfer service. The handoff is
fire-and-forget: the service reports the outcome later through
ToyAMM.resolve_transfer(), and a failed transfer is credited back to the
receiver's ledger.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Protocol, runtime_checkable

from toyamm.errors import TransferAlreadyResolved, UnknownTransfer

# Handoffs kept by RecordingTransferService; older ones are dropped
RECENT_CALLS = 1024


class TransferStatus(str, Enum):
    """Lifecycle of an outbound transfer."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    FAILED = "failed"


@dataclass
class PendingTransfer:
    """An amount handed to the transfer service."""

    transfer_id: int
    receiver: str
    asset: str
    amount: int
    status: TransferStatus = TransferStatus.PENDING


@runtime_checkable
class TransferService(Protocol):
    """External service that moves assets out of the pool."""

    def transfer(self, transfer_id: int, receiver: str, asset: str, amount: int) -> None:
        """Start moving amount of asset to receiver.

        Must not block on the outcome; report it via ToyAMM.resolve_transfer().
        """
        ...


@dataclass
class RecordingTransferService:
    """In-process transfer service that records recent handoffs.

    Stands in for the token contracts when the pool runs as a standalone
    service; outcomes are reported through the resolve endpoint. Only the
    last RECENT_CALLS handoffs are kept.
    """

    calls: deque[PendingTransfer] = field(default_factory=lambda: deque(maxlen=RECENT_CALLS))

    def transfer(self, transfer_id: int, receiver: str, asset: str, amount: int) -> None:
        self.calls.append(PendingTransfer(transfer_id, receiver, asset, amount))


class SettlementBook:
    """Tracks unresolved outbound transfers by id.

    A transfer is dropped from the book once its outcome is reported. Ids
    are allocated in increasing order, so any id below the next one that is
    no longer held has already been resolved.
    """

    def __init__(self) -> None:
        self._transfers: dict[int, PendingTransfer] = {}
        self._next_id = 1

    def open(self, receiver: str, asset: str, amount: int) -> PendingTransfer:
        """Record a new pending transfer and allocate its id."""
        pending = PendingTransfer(self._next_id, receiver, asset, amount)
        self._transfers[pending.transfer_id] = pending
        self._next_id += 1
        return pending

    def get(self, transfer_id: int) -> PendingTransfer:
        """Look up an unresolved transfer.

        Raises:
            UnknownTransfer: If no transfer has this id
            TransferAlreadyResolved: If the outcome was already reported
        """
        try:
            return self._transfers[transfer_id]
        except KeyError:
            if 0 < transfer_id < self._next_id:
                raise TransferAlreadyResolved(
                    f"transfer {transfer_id} was already resolved"
                ) from None
            raise UnknownTransfer(f"transfer {transfer_id} was never dispatched") from None

    def resolve(self, transfer_id: int, succeeded: bool) -> PendingTransfer:
        """Mark a transfer confirmed or failed and drop it from the book.

        Raises:
            UnknownTransfer: If no transfer has this id
            TransferAlreadyResolved: If the outcome was already reported
        """
        pending = self.get(transfer_id)
        pending.status = TransferStatus.CONFIRMED if succeeded else TransferStatus.FAILED
        del self._transfers[transfer_id]
        return pending

    def pending(self) -> list[PendingTransfer]:
        """Unresolved transfers in dispatch order."""
        return list(self._transfers.values())

    def __len__(self) -> int:
        return len(self._transfers)
