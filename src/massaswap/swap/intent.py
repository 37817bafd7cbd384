"""Swap intents and operation classification."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from massaswap.config import Settings, get_settings
from massaswap.routing.base import AmountLike, parse_amount
from massaswap.tokens import Token


class OperationKind(str, Enum):
    """What the executor has to submit for a token pair."""

    WRAP = "wrap"                                    # MAS -> WMAS
    UNWRAP = "unwrap"                                # WMAS -> MAS
    SWAP_NATIVE_IN = "swap_native_in"                # MAS -> token
    SWAP_TOKEN_FOR_NATIVE = "swap_token_for_native"  # token -> MAS
    SWAP_TOKEN_FOR_TOKEN = "swap_token_for_token"

    @property
    def needs_approval(self) -> bool:
        """Token-sourced router swaps need an allowance first."""
        return self in (OperationKind.SWAP_TOKEN_FOR_NATIVE, OperationKind.SWAP_TOKEN_FOR_TOKEN)


def classify(from_token: Token, to_token: Token) -> OperationKind:
    """Classify a trade; rules are checked in order."""
    if from_token.is_native and to_token.is_wrapped_native:
        return OperationKind.WRAP
    if from_token.is_wrapped_native and to_token.is_native:
        return OperationKind.UNWRAP
    if from_token.is_native:
        return OperationKind.SWAP_NATIVE_IN
    if to_token.is_native:
        return OperationKind.SWAP_TOKEN_FOR_NATIVE
    return OperationKind.SWAP_TOKEN_FOR_TOKEN


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _default_deadline() -> datetime:
    return _utcnow() + timedelta(minutes=get_settings().deadline_minutes)


@dataclass(frozen=True)
class SwapIntent:
    """One user swap request, consumed by a single execution attempt.

    Slippage and deadline default to the configured ``default_slippage``
    and ``deadline_minutes``.

    Attributes:
        from_symbol: Source token symbol
        to_symbol: Destination token symbol
        amount_in: Human-readable input amount
        slippage: Tolerated fraction in [0, 1)
        deadline: Absolute, timezone-aware expiry for the router call
    """

    from_symbol: str
    to_symbol: str
    amount_in: Decimal
    slippage: Decimal = field(default_factory=lambda: get_settings().default_slippage)
    deadline: datetime = field(default_factory=_default_deadline)

    def __post_init__(self):
        object.__setattr__(self, "amount_in", parse_amount(self.amount_in))
        object.__setattr__(self, "slippage", parse_amount(self.slippage))

        if self.amount_in <= 0:
            raise ValueError(f"Amount must be positive, got {self.amount_in}")
        if not 0 <= self.slippage < 1:
            raise ValueError(f"Slippage must be in [0, 1), got {self.slippage}")
        if self.deadline.tzinfo is None:
            raise ValueError("Deadline must be timezone-aware")

    @classmethod
    def create(
        cls,
        from_symbol: str,
        to_symbol: str,
        amount_in: AmountLike,
        slippage: Optional[AmountLike] = None,
        deadline_minutes: Optional[int] = None,
        settings: Optional[Settings] = None,
    ) -> "SwapIntent":
        """Build an intent with a deadline relative to now.

        Omitted slippage and deadline come from ``settings`` (defaults to
        cached settings).
        """
        settings = settings or get_settings()
        if slippage is None:
            slippage = settings.default_slippage
        if deadline_minutes is None:
            deadline_minutes = settings.deadline_minutes
        return cls(
            from_symbol=from_symbol,
            to_symbol=to_symbol,
            amount_in=amount_in,
            slippage=slippage,
            deadline=_utcnow() + timedelta(minutes=deadline_minutes),
        )

    @property
    def deadline_ms(self) -> int:
        """Deadline as Unix milliseconds, as the router expects."""
        return int(self.deadline.timestamp() * 1000)

    @property
    def is_expired(self) -> bool:
        return self.deadline <= _utcnow()
