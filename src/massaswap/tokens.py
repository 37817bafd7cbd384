"""Token catalog for swaps on Dusa (Massa mainnet).

The chain's native asset (MAS) has no contract; whenever a route or a call
needs an on-chain reference, MAS is replaced by the wrapped WMAS contract,
since the exchange only trades the wrapped form.
"""

from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal, localcontext
from enum import Enum
from typing import Iterable, Optional

from massaswap.exceptions import UnknownTokenError


class TokenKind(str, Enum):
    """Native vs. wrapped-native vs. ordinary token."""

    NATIVE = "native"
    WRAPPED_NATIVE = "wrapped_native"
    TOKEN = "token"


@dataclass(frozen=True)
class Token:
    """A swappable asset."""

    symbol: str
    name: str
    decimals: int
    kind: TokenKind = TokenKind.TOKEN
    address: Optional[str] = None  # None only for the native asset

    def __post_init__(self):
        if self.decimals < 0:
            raise ValueError(f"decimals must be >= 0 for {self.symbol}")
        if self.kind == TokenKind.NATIVE and self.address is not None:
            raise ValueError("native asset has no contract address")
        if self.kind != TokenKind.NATIVE and not self.address:
            raise ValueError(f"{self.symbol} requires a contract address")

    @property
    def is_native(self) -> bool:
        return self.kind == TokenKind.NATIVE

    @property
    def is_wrapped_native(self) -> bool:
        return self.kind == TokenKind.WRAPPED_NATIVE

    def to_units(self, amount: Decimal) -> int:
        """Convert a human amount to the smallest unit, rounding down."""
        amount = Decimal(amount)
        with localcontext() as ctx:
            ctx.prec = len(amount.as_tuple().digits) + self.decimals + 2
            scaled = amount.scaleb(self.decimals)
            return int(scaled.to_integral_value(rounding=ROUND_DOWN))

    def from_units(self, units: int) -> Decimal:
        """Convert smallest units to a human amount."""
        with localcontext() as ctx:
            ctx.prec = len(str(abs(int(units)))) + self.decimals + 2
            return Decimal(int(units)) / (Decimal(10) ** self.decimals)


MAS = Token(symbol="MAS", name="Massa", decimals=9, kind=TokenKind.NATIVE)
WMAS = Token(
    symbol="WMAS",
    name="Wrapped Massa",
    decimals=9,
    kind=TokenKind.WRAPPED_NATIVE,
    address="AS12U4TZfNK7qoLyEERBBRDMu8nm5MKoRzPXDXans4v9wdATZedz9",
)
USDC = Token(
    symbol="USDC.e",
    name="USD Coin (Bridged)",
    decimals=6,
    address="AS1hCJXjndR4c9vekLWsXGnrdigp4AaZ7uYG3UKFzzKnWVsrNLPJ",
)
WETH = Token(
    symbol="WETH.e",
    name="Wrapped Ether (Bridged)",
    decimals=18,
    address="AS124vf3YfAJCSCQVYKczzuWWpXrximFpbTmX4rheLs5uNSftiiRY",
)
DAI = Token(
    symbol="DAI.e",
    name="Dai Stablecoin (Bridged)",
    decimals=18,
    address="AS1ZGF1upwp9kPRvDKLxFAKRebgg7b3RWDnhgV7VvdZkZsUL7Nuv",
)
DUSA = Token(
    symbol="DUSA",
    name="Dusa Token",
    decimals=18,
    address="AS12HT1JQUne9nkHevS9Q7HcsoAaYLXWPNgoWPuruV7Gw6Mb92ACL",
)
PUR = Token(
    symbol="PUR",
    name="Purrfect Universe",
    decimals=9,
    address="AS133eqPPaPttJ6hJnk3sfoG5cjFFqBDi1VGxdo2wzWkq8AfZnan",
)

MAINNET_TOKENS = (MAS, WMAS, USDC, WETH, DAI, DUSA, PUR)


class TokenRegistry:
    """Immutable symbol -> Token catalog.

    Exactly one native and one wrapped-native token are required. The
    stable hub (used as the second routing hub) defaults to USDC.e.
    """

    def __init__(self, tokens: Iterable[Token], stable_symbol: str = "USDC.e"):
        self._tokens: dict[str, Token] = {}
        for token in tokens:
            key = token.symbol.upper()
            if key in self._tokens:
                raise ValueError(f"Duplicate token symbol: {token.symbol}")
            self._tokens[key] = token

        natives = [t for t in self._tokens.values() if t.is_native]
        wrapped = [t for t in self._tokens.values() if t.is_wrapped_native]
        if len(natives) != 1 or len(wrapped) != 1:
            raise ValueError("Registry needs exactly one native and one wrapped-native token")

        self.native = natives[0]
        self.wrapped_native = wrapped[0]
        self.stable = self.resolve(stable_symbol)

    def resolve(self, symbol: str) -> Token:
        """Look up a token by symbol (case-insensitive)."""
        token = self._tokens.get((symbol or "").strip().upper())
        if token is None:
            raise UnknownTokenError(symbol)
        return token

    def all(self) -> list[Token]:
        return list(self._tokens.values())

    @property
    def symbols(self) -> list[str]:
        return [t.symbol for t in self._tokens.values()]

    def onchain_ref(self, token: Token) -> str:
        """Contract reference used in routes, with native -> wrapped."""
        if token.is_native:
            return self.wrapped_native.address
        return token.address

    def is_wrap_pair(self, from_token: Token, to_token: Token) -> bool:
        """True for native <-> wrapped-native in either direction."""
        return {from_token.kind, to_token.kind} == {
            TokenKind.NATIVE,
            TokenKind.WRAPPED_NATIVE,
        }

    def __contains__(self, symbol: str) -> bool:
        return (symbol or "").strip().upper() in self._tokens

    def __len__(self) -> int:
        return len(self._tokens)


DEFAULT_REGISTRY = TokenRegistry(MAINNET_TOKENS)


def resolve(symbol: str) -> Token:
    """Resolve a symbol against the mainnet registry."""
    return DEFAULT_REGISTRY.resolve(symbol)
