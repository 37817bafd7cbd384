"""Utility modules for massaswap."""

from massaswap.utils.locks import LockTimeoutError, account_lock, get_account_lock

__all__ = ["LockTimeoutError", "account_lock", "get_account_lock"]
