"""Quote API endpoints."""

from fastapi import APIRouter, Depends

from massaswap.web.contracts.quotes import QuoteRequest, QuoteResponse
from massaswap.web.dependencies import get_quote_service
from massaswap.web.services.quote_service import QuoteService

router = APIRouter(prefix="/quotes", tags=["quotes"])


@router.post("", response_model=QuoteResponse)
async def get_quote(
    request: QuoteRequest,
    service: QuoteService = Depends(get_quote_service),
) -> QuoteResponse:
    """Get a swap quote.

    Tries the direct pool first, then routes through WMAS and USDC.e.
    This is a READ-ONLY operation - no transactions are executed.
    """
    return await service.get_quote(request)
