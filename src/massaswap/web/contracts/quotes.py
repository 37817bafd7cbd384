"""Quote request and response contracts."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field


class QuoteRequest(BaseModel):
    """Request for a swap quote."""

    from_token: str = Field(..., description="Source token symbol (e.g., MAS, USDC.e)")
    to_token: str = Field(..., description="Destination token symbol")
    amount: Decimal = Field(..., gt=0, description="Amount to swap, in human units")


class RouteInfo(BaseModel):
    """Resolved route with per-hop pool parameters."""

    tokens: list[str] = Field(..., description="Token contract path")
    bin_steps: list[int] = Field(default_factory=list, description="Bin step per hop")
    is_legacy: list[bool] = Field(default_factory=list, description="Legacy pool flag per hop")


class QuoteResponse(BaseModel):
    """Response containing swap quote details."""

    success: bool = Field(..., description="Whether quote was successful")
    from_token: str = Field(..., description="Source token")
    to_token: str = Field(..., description="Destination token")
    amount_in: Decimal = Field(..., description="Input amount")
    amount_out: Optional[Decimal] = Field(None, description="Expected output amount")
    amount_out_units: Optional[str] = Field(None, description="Expected output in smallest units")
    rate: Optional[Decimal] = Field(None, description="Exchange rate (output per input)")
    price_impact: Optional[Decimal] = Field(None, description="Price impact in percent")
    route: Optional[RouteInfo] = Field(None, description="Resolved route")
    error: Optional[str] = Field(None, description="Error message if failed")
