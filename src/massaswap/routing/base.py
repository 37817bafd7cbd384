"""Route and quote value types."""

import math
from dataclasses import dataclass, field
from decimal import Decimal
from fractions import Fraction
from typing import Union

AmountLike = Union[Decimal, str, int]


@dataclass(frozen=True)
class Route:
    """Ordered token contract references plus per-hop pool parameters.

    A route of n > 1 tokens has exactly n - 1 bin steps and n - 1 legacy
    flags. A single-token route (wrap/unwrap) has none.
    """

    tokens: tuple[str, ...]
    bin_steps: tuple[int, ...] = ()
    is_legacy: tuple[bool, ...] = ()

    def __post_init__(self):
        # Accept lists from decoders and callers
        object.__setattr__(self, "tokens", tuple(self.tokens))
        object.__setattr__(self, "bin_steps", tuple(self.bin_steps))
        object.__setattr__(self, "is_legacy", tuple(self.is_legacy))

        if not self.tokens:
            raise ValueError("Route must contain at least one token")

        hops = len(self.tokens) - 1
        if len(self.bin_steps) != hops or len(self.is_legacy) != hops:
            raise ValueError(
                f"Route of {len(self.tokens)} tokens needs {hops} bin steps and legacy flags, "
                f"got {len(self.bin_steps)} and {len(self.is_legacy)}"
            )

    @property
    def hops(self) -> int:
        return len(self.tokens) - 1

    @property
    def is_direct_call(self) -> bool:
        """True for a single-token route (wrap/unwrap, no router)."""
        return self.hops == 0


@dataclass(frozen=True)
class Quote:
    """A resolved price quote.

    A quote belongs to the exact (from, to, amount) request that produced
    it; use ``matches`` before acting on it.
    """

    from_symbol: str
    to_symbol: str
    amount_in: Decimal
    amount_in_units: int
    amount_out: Decimal
    amount_out_units: int
    rate: Decimal
    price_impact: Decimal  # percent, >= 0
    route: Route
    details: dict = field(default_factory=dict, compare=False)

    def matches(self, from_symbol: str, to_symbol: str, amount_in: AmountLike) -> bool:
        """Check that this quote was produced for the given request."""
        try:
            amount = parse_amount(amount_in)
        except ValueError:
            return False
        return (
            self.from_symbol.upper() == from_symbol.strip().upper()
            and self.to_symbol.upper() == to_symbol.strip().upper()
            and self.amount_in == amount
        )

    def min_amount_out_units(self, slippage: AmountLike) -> int:
        """Minimum acceptable output: floor(out * (1 - slippage)).

        Args:
            slippage: Fraction in [0, 1), e.g. 0.005 for 0.5%
        """
        tolerance = Fraction(str(slippage))
        if not 0 <= tolerance < 1:
            raise ValueError(f"Slippage must be in [0, 1), got {slippage}")
        return math.floor(self.amount_out_units * (1 - tolerance))


def parse_amount(amount: AmountLike) -> Decimal:
    """Parse a human amount into a finite Decimal."""
    try:
        value = Decimal(str(amount).strip())
    except ArithmeticError as e:
        raise ValueError(f"Invalid amount: {amount!r}") from e
    if not value.is_finite():
        raise ValueError(f"Invalid amount: {amount!r}")
    return value
