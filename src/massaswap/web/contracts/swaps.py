"""Swap plan contracts with unsigned call data.

A plan lists the contract calls a client must sign and submit, in order.
Nothing is signed or broadcast server-side.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, Field

from massaswap.web.contracts.quotes import QuoteResponse


class SwapPlanRequest(BaseModel):
    """Request for an executable swap plan."""

    from_token: str = Field(..., description="Source token symbol")
    to_token: str = Field(..., description="Destination token symbol")
    amount: Decimal = Field(..., gt=0, description="Amount to swap, in human units")
    sender: str = Field(..., description="Sending account address (AU...)")
    slippage: Optional[Decimal] = Field(
        default=None,
        ge=0,
        lt=1,
        description="Slippage tolerance as a fraction (0.005 = 0.5%); configured default when omitted",
    )
    deadline_minutes: Optional[int] = Field(
        default=None, ge=1, le=1440, description="Deadline from now; configured default when omitted"
    )


class UnsignedCall(BaseModel):
    """One unsigned CallSC operation."""

    target_address: str = Field(..., description="Contract to call")
    target_function: str = Field(..., description="Function name")
    parameter: list[int] = Field(default_factory=list, description="Serialized Args bytes")
    coins: str = Field(..., description="nanoMAS attached to the call")
    max_gas: int = Field(..., description="Gas ceiling")
    fee: str = Field(..., description="Operation fee in nanoMAS")
    description: str = Field(default="", description="What the call does")


class SwapPlanResponse(BaseModel):
    """Ordered calls implementing a swap."""

    success: bool = Field(..., description="Whether a plan was produced")
    kind: Optional[str] = Field(None, description="wrap, unwrap, swap_native_in, ...")
    quote: Optional[QuoteResponse] = Field(None, description="Quote the plan was built from")
    calls: list[UnsignedCall] = Field(default_factory=list, description="Calls in submission order")
    approval_required: bool = Field(default=False, description="First call is a token approval")
    min_amount_out_units: Optional[str] = Field(None, description="Minimum output enforced on-chain")
    deadline_ms: Optional[int] = Field(None, description="Router deadline (Unix ms)")
    error: Optional[str] = Field(None, description="Error message if failed")
