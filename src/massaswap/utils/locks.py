"""Concurrency control for on-chain execution.

Provides per-account locking so that two swaps sent from the same address
never have dependent operations outstanding at the same time.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Optional

from massaswap.exceptions import SwapError

logger = logging.getLogger(__name__)

# Global lock registry: address -> asyncio.Lock
_account_locks: dict[str, asyncio.Lock] = {}
_registry_lock = asyncio.Lock()


class LockTimeoutError(SwapError):
    """Raised when a lock cannot be acquired within the timeout period."""

    default_message = "Another swap is already running for this account"


async def get_account_lock(address: str) -> asyncio.Lock:
    """Get or create the lock for an account address."""
    async with _registry_lock:
        if address not in _account_locks:
            _account_locks[address] = asyncio.Lock()
        return _account_locks[address]


@asynccontextmanager
async def account_lock(
    address: str,
    timeout: Optional[float] = None,
    operation: str = "swap",
):
    """Hold exclusive execution rights for an account.

    Args:
        address: Sender address
        timeout: Maximum time to wait for the lock (None = wait forever)
        operation: Description for logging

    Example:
        async with account_lock(signer.address, operation="swap"):
            # approve, swap, poll
            ...
    """
    lock = await get_account_lock(address)

    try:
        if timeout:
            await asyncio.wait_for(lock.acquire(), timeout=timeout)
        else:
            await lock.acquire()
    except asyncio.TimeoutError:
        logger.warning(f"Lock timeout for {address} after {timeout}s: {operation}")
        raise LockTimeoutError(f"Could not acquire lock for {address} within {timeout}s")

    logger.debug(f"Lock acquired for {address}: {operation}")
    try:
        yield
    finally:
        lock.release()
        logger.debug(f"Lock released for {address}: {operation}")


def clear_account_locks() -> None:
    """Clear all account locks (useful for testing)."""
    _account_locks.clear()
