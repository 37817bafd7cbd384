"""Balance reading for swap affordability checks.

Native MAS comes from ``get_addresses``; tokens from their ``balanceOf``
read-only function. Reads are independent and may run concurrently.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Iterable, Optional

from massaswap.exceptions import InsufficientBalanceError
from massaswap.node.client import MassaNodeClient
from massaswap.tokens import DEFAULT_REGISTRY, Token, TokenRegistry

logger = logging.getLogger(__name__)

# MAS kept back for fees when spending the native balance
WRAP_RESERVE = Decimal("0.5")
SWAP_RESERVE = Decimal("0.1")


class BalanceReader:
    """Reads native and token balances for an address."""

    def __init__(self, node: MassaNodeClient, registry: TokenRegistry = DEFAULT_REGISTRY):
        self.node = node
        self.registry = registry

    async def get_balance_units(self, address: str, token: Token) -> int:
        """Balance in the token's smallest unit."""
        if token.is_native:
            balance = await self.node.get_balance(address)
            return token.to_units(balance)
        return await self.node.get_token_balance(token.address, address)

    async def get_balance(self, address: str, token: Token) -> Decimal:
        """Human-readable balance."""
        return token.from_units(await self.get_balance_units(address, token))

    async def get_balances(self, address: str, tokens: Optional[Iterable[Token]] = None) -> dict[str, Decimal]:
        """Balances for several tokens, read concurrently.

        Tokens whose read fails are omitted.
        """
        tokens = list(tokens) if tokens is not None else self.registry.all()
        results = await asyncio.gather(
            *(self.get_balance(address, t) for t in tokens),
            return_exceptions=True,
        )

        balances = {}
        for token, result in zip(tokens, results):
            if isinstance(result, Exception):
                logger.warning(f"Failed to read {token.symbol} balance for {address}: {result}")
                continue
            balances[token.symbol] = result
        return balances

    async def ensure_affordable(self, address: str, token: Token, required_units: int) -> int:
        """Raise InsufficientBalanceError unless the balance covers the amount.

        Returns:
            The available balance in smallest units
        """
        available = await self.get_balance_units(address, token)
        if available < required_units:
            raise InsufficientBalanceError(
                token.symbol,
                required=token.from_units(required_units),
                available=token.from_units(available),
            )
        return available


def max_spendable(balance: Decimal, from_token: Token, to_token: Token) -> Decimal:
    """Largest amount worth offering as "max" for a swap.

    Spending native MAS keeps a reserve for fees: 0.5 MAS when wrapping,
    0.1 MAS for router swaps. Token balances are spendable in full.
    """
    if not from_token.is_native:
        return max(Decimal(0), balance)
    reserve = WRAP_RESERVE if to_token.is_wrapped_native else SWAP_RESERVE
    return max(Decimal(0), balance - reserve)
