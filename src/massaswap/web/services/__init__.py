"""Web layer services (read-only / non-custodial)."""

from massaswap.web.services.quote_service import QuoteService
from massaswap.web.services.swap_service import SwapService

__all__ = ["QuoteService", "SwapService"]
