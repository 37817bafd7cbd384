"""Token listing endpoint."""

from fastapi import APIRouter

from massaswap.tokens import DEFAULT_REGISTRY
from massaswap.web.contracts.tokens import TokenInfo, TokenListResponse

router = APIRouter(prefix="/tokens", tags=["tokens"])


@router.get("", response_model=TokenListResponse)
async def list_tokens() -> TokenListResponse:
    """List swappable tokens in catalog order."""
    tokens = [
        TokenInfo(
            symbol=t.symbol,
            name=t.name,
            decimals=t.decimals,
            kind=t.kind.value,
            address=t.address,
        )
        for t in DEFAULT_REGISTRY.all()
    ]
    return TokenListResponse(tokens=tokens, total=len(tokens))
