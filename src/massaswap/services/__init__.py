"""Services for blockchain interaction."""

from massaswap.services.balance_sync import BalanceReader, max_spendable

__all__ = [
    "BalanceReader",
    "max_spendable",
]
