"""Shared pool instance behind the HTTP API.

FastAPI runs sync endpoints on a thread pool, while ToyAMM expects one
operation at a time. Every call goes through PoolService.locked(), a
single coarse lock around the whole pool.
"""

from __future__ import annotations

import os
import threading
from collections.abc import Iterator
from contextlib import contextmanager

import structlog

from toyamm.pool import ToyAMM
from toyamm.settlement import RecordingTransferService

logger = structlog.get_logger()


class PoolService:
    """A ToyAMM plus the lock that serializes access to it."""

    def __init__(self, pool: ToyAMM | None = None) -> None:
        self.pool = pool if pool is not None else ToyAMM(RecordingTransferService())
        self._lock = threading.Lock()

    @contextmanager
    def locked(self) -> Iterator[ToyAMM]:
        with self._lock:
            yield self.pool


def pool_service_from_env() -> PoolService:
    """Build the service, initializing the pool when AMM_OWNER is set.

    Configuration via environment variables:
    - AMM_OWNER: Owner account id (pool stays uninitialized if unset)
    - AMM_ASSET0 / AMM_ASSET1: The two pool assets (required with AMM_OWNER)
    """
    service = PoolService()
    owner = os.environ.get("AMM_OWNER")
    if owner:
        asset0 = os.environ.get("AMM_ASSET0", "")
        asset1 = os.environ.get("AMM_ASSET1", "")
        service.pool.initialize(owner, asset0, asset1)
    else:
        logger.info("pool_awaiting_initialize", message="AMM_OWNER not set")
    return service


_default_service: PoolService | None = None
_default_service_lock = threading.Lock()


def get_default_service() -> PoolService:
    """Return the process-wide service, creating it on first use.

    Creation runs under a module lock so concurrent first requests share
    one pool.
    """
    global _default_service
    if _default_service is None:
        with _default_service_lock:
            if _default_service is None:
                _default_service = pool_service_from_env()
    return _default_service
