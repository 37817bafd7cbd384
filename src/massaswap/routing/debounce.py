"""Debounced, supersedable quoting for as-you-type amount input.

Each ``submit`` cancels the outstanding quote task and bumps a generation
counter. A finished task only publishes its result if its generation is
still the latest, so a slow answer for "12" can never overwrite "123".
"""

import asyncio
import logging
from decimal import Decimal
from typing import Callable, Optional

from massaswap.config import get_settings
from massaswap.exceptions import SwapError
from massaswap.routing.base import Quote, parse_amount
from massaswap.routing.quoter import QuoteResolver

logger = logging.getLogger(__name__)

QuoteCallback = Callable[[Quote], None]
ErrorCallback = Callable[[Exception], None]


def sanitize_amount_text(text: str) -> str:
    """Keep only digits and the decimal point."""
    return "".join(ch for ch in (text or "") if ch.isdigit() or ch == ".")


class DebouncedQuoter:
    """At most one quote in flight; only the latest input is observed."""

    def __init__(
        self,
        resolver: QuoteResolver,
        delay: Optional[float] = None,
        on_quote: Optional[QuoteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
    ):
        self.resolver = resolver
        self.delay = get_settings().quote_debounce if delay is None else delay
        self.on_quote = on_quote
        self.on_error = on_error

        self.current: Optional[Quote] = None
        self.last_error: Optional[Exception] = None
        self._generation = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def submit(self, from_symbol: str, to_symbol: str, amount_text: str) -> Optional[int]:
        """Schedule a quote for the given input, superseding any earlier one.

        Returns:
            The generation of the scheduled quote, or None when the input
            was empty or not a positive amount (state is cleared)
        """
        self._supersede()

        text = sanitize_amount_text(amount_text)
        amount = self._parse(text)
        if amount is None:
            return None

        generation = self._generation
        self._task = asyncio.create_task(self._run(generation, from_symbol, to_symbol, amount))
        return generation

    def invalidate(self) -> None:
        """Cancel outstanding work and forget the current quote.

        Call when the token pair changes.
        """
        self._supersede()

    async def wait(self) -> Optional[Quote]:
        """Wait until the latest scheduled quote has settled."""
        while self._task is not None:
            task = self._task
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
            if task is self._task:
                break
        return self.current

    def _supersede(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
            logger.debug(f"Cancelled quote generation {self._generation}")
        self._generation += 1
        self.current = None
        self.last_error = None

    @staticmethod
    def _parse(text: str) -> Optional[Decimal]:
        if not text or text == ".":
            return None
        try:
            amount = parse_amount(text)
        except ValueError:
            return None
        return amount if amount > 0 else None

    async def _run(self, generation: int, from_symbol: str, to_symbol: str, amount: Decimal) -> None:
        await asyncio.sleep(self.delay)

        try:
            quote = await self.resolver.resolve(from_symbol, to_symbol, amount)
        except (SwapError, ValueError) as e:
            if generation != self._generation:
                return
            logger.info(f"Quote {from_symbol}->{to_symbol} for {amount} failed: {e}")
            self.last_error = e
            if self.on_error:
                self.on_error(e)
            return

        if generation != self._generation:
            logger.debug(f"Discarding stale quote generation {generation}")
            return

        self.current = quote
        if self.on_quote:
            self.on_quote(quote)
