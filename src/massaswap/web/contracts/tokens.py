"""Token listing contracts."""

from typing import Optional

from pydantic import BaseModel, Field


class TokenInfo(BaseModel):
    """A supported token."""

    symbol: str = Field(..., description="Token symbol")
    name: str = Field(..., description="Token name")
    decimals: int = Field(..., description="Decimal precision")
    kind: str = Field(..., description="native, wrapped_native or token")
    address: Optional[str] = Field(None, description="Contract address (None for MAS)")


class TokenListResponse(BaseModel):
    """Response listing supported tokens."""

    success: bool = True
    tokens: list[TokenInfo] = Field(default_factory=list)
    total: int = 0
