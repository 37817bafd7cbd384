"""Quote resolution against the Dusa quoter contract.

Candidate routes are tried in priority order; the first one returning a
positive output wins. A failing candidate (node error, undecodable answer,
inconsistent route, zero output) is skipped, never retried.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal, localcontext
from typing import Optional

from massaswap.codec.args import Args, ArgsReader
from massaswap.config import Settings, get_settings
from massaswap.exceptions import CodecError, NetworkError, NoRouteError
from massaswap.node.client import MassaNodeClient
from massaswap.routing.base import AmountLike, Quote, Route, parse_amount
from massaswap.routing.paths import candidate_routes
from massaswap.tokens import DEFAULT_REGISTRY, Token, TokenRegistry

logger = logging.getLogger(__name__)

QUOTE_FUNCTION = "findBestPathFromAmountIn"
RATE_DECIMALS = 18
ZERO_VIRTUAL_IMPACT = Decimal("0.1")  # placeholder when the pool reports no virtual amount


@dataclass
class QuoterResponse:
    """Decoded ``findBestPathFromAmountIn`` return value."""

    route: list[str]
    pairs: list[str]
    bin_steps: list[int]
    amounts: list[int]
    virtual_amounts_without_slippage: list[int]
    fees: list[int]
    is_legacy: list[bool]

    @property
    def amount_out(self) -> int:
        return self.amounts[-1] if self.amounts else 0

    @property
    def virtual_amount_out(self) -> int:
        if not self.virtual_amounts_without_slippage:
            return 0
        return self.virtual_amounts_without_slippage[-1]


def encode_quote_request(route: list[str], amount_in_units: int, include_legacy: bool = True) -> bytes:
    """Parameter for ``findBestPathFromAmountIn``."""
    return (
        Args()
        .add_string_array(route)
        .add_u256(amount_in_units)
        .add_bool(include_legacy)
        .serialize()
    )


def decode_quote_response(data: bytes) -> QuoterResponse:
    """Decode the quoter's answer; all seven arrays are required."""
    reader = ArgsReader(data)
    return QuoterResponse(
        route=reader.next_string_array(),
        pairs=reader.next_string_array(),
        bin_steps=reader.next_u64_array(),
        amounts=reader.next_u256_array(),
        virtual_amounts_without_slippage=reader.next_u256_array(),
        fees=reader.next_u256_array(),
        is_legacy=reader.next_bool_array(),
    )


def price_impact_percent(amount_out: int, virtual_amount_out: int) -> Decimal:
    """Price impact in percent, clamped at zero."""
    if virtual_amount_out == 0:
        return ZERO_VIRTUAL_IMPACT
    impact = (Decimal(virtual_amount_out) - Decimal(amount_out)) / Decimal(virtual_amount_out)
    return max(Decimal(0), impact) * 100


def exchange_rate(amount_in: Decimal, amount_out: Decimal) -> Decimal:
    """amount_out / amount_in with 18 decimal places."""
    with localcontext() as ctx:
        ctx.prec = 100
        return (amount_out / amount_in).quantize(Decimal(1).scaleb(-RATE_DECIMALS))


def wrap_quote(from_token: Token, to_token: Token, amount: Decimal, registry: TokenRegistry) -> Quote:
    """1:1 quote for MAS <-> WMAS, no remote call."""
    units = from_token.to_units(amount)
    return Quote(
        from_symbol=from_token.symbol,
        to_symbol=to_token.symbol,
        amount_in=amount,
        amount_in_units=units,
        amount_out=to_token.from_units(units),
        amount_out_units=units,
        rate=Decimal(1),
        price_impact=Decimal(0),
        route=Route(tokens=(registry.wrapped_native.address,)),
    )


class QuoteResolver:
    """Resolves quotes by trying candidate routes in order."""

    def __init__(
        self,
        node: MassaNodeClient,
        registry: TokenRegistry = DEFAULT_REGISTRY,
        settings: Optional[Settings] = None,
    ):
        self.node = node
        self.registry = registry
        self.settings = settings or get_settings()

    async def resolve(self, from_symbol: str, to_symbol: str, amount: AmountLike) -> Quote:
        """Get a quote for swapping ``amount`` of one token into another.

        Args:
            from_symbol: Source token symbol
            to_symbol: Destination token symbol
            amount: Human-readable input amount (> 0)

        Returns:
            Quote carrying its resolved route

        Raises:
            UnknownTokenError: Unknown symbol
            ValueError: Non-positive amount or identical tokens
            NoRouteError: Every candidate route failed
        """
        from_token = self.registry.resolve(from_symbol)
        to_token = self.registry.resolve(to_symbol)
        amount_in = parse_amount(amount)

        if amount_in <= 0:
            raise ValueError(f"Amount must be positive, got {amount}")
        if from_token == to_token:
            raise ValueError(f"Cannot swap {from_token.symbol} for itself")

        amount_in_units = from_token.to_units(amount_in)
        if amount_in_units <= 0:
            raise ValueError(f"Amount {amount} is below 1 unit of {from_token.symbol}")

        if self.registry.is_wrap_pair(from_token, to_token):
            return wrap_quote(from_token, to_token, amount_in, self.registry)

        candidates = candidate_routes(from_token, to_token, self.registry)
        for index, candidate in enumerate(candidates, start=1):
            quote = await self._try_route(candidate, from_token, to_token, amount_in, amount_in_units)
            if quote is not None:
                logger.info(
                    f"Quote {from_token.symbol}->{to_token.symbol} via route {index}/{len(candidates)}: "
                    f"{amount_in} -> {quote.amount_out} (impact {quote.price_impact:.2f}%)"
                )
                return quote

        logger.warning(f"No route for {from_token.symbol}->{to_token.symbol} after {len(candidates)} candidates")
        raise NoRouteError(from_token.symbol, to_token.symbol, attempted=len(candidates))

    async def _try_route(
        self,
        candidate: list[str],
        from_token: Token,
        to_token: Token,
        amount_in: Decimal,
        amount_in_units: int,
    ) -> Optional[Quote]:
        """Quote a single candidate; None if it failed."""
        try:
            raw = await self.node.read_only_call(
                target=self.settings.dusa_quoter,
                function=QUOTE_FUNCTION,
                parameter=encode_quote_request(candidate, amount_in_units),
                max_gas=self.settings.quote_max_gas,
            )
            response = decode_quote_response(raw)
            out_units = response.amount_out
            if out_units <= 0:
                logger.debug(f"Route {candidate} returned no output")
                return None

            route = Route(
                tokens=response.route or candidate,
                bin_steps=response.bin_steps,
                is_legacy=response.is_legacy,
            )
        except (NetworkError, CodecError, ValueError) as e:
            logger.debug(f"Route {candidate} failed: {e}")
            return None

        amount_out = to_token.from_units(out_units)
        return Quote(
            from_symbol=from_token.symbol,
            to_symbol=to_token.symbol,
            amount_in=amount_in,
            amount_in_units=amount_in_units,
            amount_out=amount_out,
            amount_out_units=out_units,
            rate=exchange_rate(amount_in, amount_out),
            price_impact=price_impact_percent(out_units, response.virtual_amount_out),
            route=route,
            details={"pairs": response.pairs, "candidate": list(candidate)},
        )
