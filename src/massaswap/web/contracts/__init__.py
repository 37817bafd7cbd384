"""Request and response contracts for the web layer.

All contracts are for read-only or non-custodial operations.
"""

from massaswap.web.contracts.quotes import QuoteRequest, QuoteResponse, RouteInfo
from massaswap.web.contracts.swaps import SwapPlanRequest, SwapPlanResponse, UnsignedCall
from massaswap.web.contracts.tokens import TokenInfo, TokenListResponse

__all__ = [
    "QuoteRequest",
    "QuoteResponse",
    "RouteInfo",
    "SwapPlanRequest",
    "SwapPlanResponse",
    "TokenInfo",
    "TokenListResponse",
    "UnsignedCall",
]
