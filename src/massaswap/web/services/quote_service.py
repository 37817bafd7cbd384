"""Quote service for fetching swap quotes.

This service reads prices from the Dusa quoter but does NOT execute swaps.
"""

import logging

from massaswap.exceptions import SwapError
from massaswap.routing.base import Quote
from massaswap.routing.quoter import QuoteResolver
from massaswap.web.contracts.quotes import QuoteRequest, QuoteResponse, RouteInfo

logger = logging.getLogger(__name__)


def quote_to_response(quote: Quote) -> QuoteResponse:
    """Convert a resolved quote to its API form."""
    return QuoteResponse(
        success=True,
        from_token=quote.from_symbol,
        to_token=quote.to_symbol,
        amount_in=quote.amount_in,
        amount_out=quote.amount_out,
        amount_out_units=str(quote.amount_out_units),
        rate=quote.rate,
        price_impact=quote.price_impact,
        route=RouteInfo(
            tokens=list(quote.route.tokens),
            bin_steps=list(quote.route.bin_steps),
            is_legacy=list(quote.route.is_legacy),
        ),
    )


class QuoteService:
    """Read-only quoting for the web layer."""

    def __init__(self, resolver: QuoteResolver):
        self.resolver = resolver

    async def get_quote(self, request: QuoteRequest) -> QuoteResponse:
        """Get a swap quote.

        Args:
            request: Quote request parameters

        Returns:
            QuoteResponse with quote details, or success=False with a
            user-facing error
        """
        try:
            quote = await self.resolver.resolve(request.from_token, request.to_token, request.amount)
        except SwapError as e:
            logger.info(f"Quote {request.from_token}->{request.to_token} failed: {e}")
            error = e.user_message
        except ValueError as e:
            error = str(e)
        else:
            return quote_to_response(quote)

        return QuoteResponse(
            success=False,
            from_token=request.from_token,
            to_token=request.to_token,
            amount_in=request.amount,
            error=error,
        )
