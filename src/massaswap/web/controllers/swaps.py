"""Swap API endpoints for non-custodial clients.

NO execution happens server-side - clients sign and submit themselves.
"""

from fastapi import APIRouter, Depends

from massaswap.web.contracts.swaps import SwapPlanRequest, SwapPlanResponse
from massaswap.web.dependencies import get_swap_service
from massaswap.web.services.swap_service import SwapService

router = APIRouter(prefix="/swaps", tags=["swaps"])


@router.post("/plan", response_model=SwapPlanResponse)
async def plan_swap(
    request: SwapPlanRequest,
    service: SwapService = Depends(get_swap_service),
) -> SwapPlanResponse:
    """Get the ordered unsigned calls for a swap.

    The client must:
    1. If approval_required is True, sign and submit the first call and
       wait for it to be final and successful
    2. Sign and submit the swap call
    """
    return await service.plan_swap(request)
