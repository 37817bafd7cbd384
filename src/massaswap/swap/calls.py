"""Contract call builders for wraps, approvals and router swaps.

Router parameter layouts (Args encoding):

    swapExactMASForTokens      u256 minOut, u64[] binSteps, bool[] isLegacy,
                               string[] path, string to, u64 deadline,
                               u64 storageCost                (coins = amountIn)
    swapExactTokensForMAS      u256 amountIn + the layout above (coins = 0)
    swapExactTokensForTokens   u256 amountIn, u256 minOut, u64[] binSteps,
                               bool[] isLegacy, string[] path, string to,
                               u64 deadline                   (coins = 0)
"""

import logging
from dataclasses import dataclass
from typing import Optional

from massaswap.codec.args import U256_MAX, Args
from massaswap.config import Settings, get_settings
from massaswap.exceptions import QuoteMismatchError
from massaswap.node.models import ContractCall
from massaswap.routing.base import Quote, Route
from massaswap.swap.intent import OperationKind, SwapIntent, classify
from massaswap.tokens import DEFAULT_REGISTRY, Token, TokenRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SwapPlan:
    """Ordered calls for one intent: optional approval, then the main call."""

    kind: OperationKind
    main: ContractCall
    route: Route
    min_amount_out_units: int
    approval: Optional[ContractCall] = None

    @property
    def calls(self) -> list[ContractCall]:
        return [c for c in (self.approval, self.main) if c is not None]


class SwapCallBuilder:
    """Builds unsigned contract calls for the Dusa router and WMAS."""

    def __init__(self, registry: TokenRegistry = DEFAULT_REGISTRY, settings: Optional[Settings] = None):
        self.registry = registry
        self.settings = settings or get_settings()

    @property
    def wmas_address(self) -> str:
        return self.registry.wrapped_native.address

    def _call(self, target: str, function: str, parameter: bytes, coins: int, max_gas: int, description: str) -> ContractCall:
        return ContractCall(
            target=target,
            function=function,
            parameter=parameter,
            coins=coins,
            max_gas=max_gas,
            fee=self.settings.operation_fee,
            description=description,
        )

    # ======================
    # WMAS
    # ======================

    def wrap(self, amount_units: int) -> ContractCall:
        """WMAS.deposit with the MAS attached as coins."""
        return self._call(
            self.wmas_address, "deposit", b"", amount_units,
            self.settings.wrap_max_gas, "Wrap MAS to WMAS",
        )

    def unwrap(self, amount_units: int, recipient: str) -> ContractCall:
        """WMAS.withdraw(u64 amount, string recipient)."""
        parameter = Args().add_u64(amount_units).add_string(recipient).serialize()
        return self._call(
            self.wmas_address, "withdraw", parameter, 0,
            self.settings.wrap_max_gas, "Unwrap WMAS to MAS",
        )

    # ======================
    # Allowance
    # ======================

    def approve(self, token: Token) -> ContractCall:
        """increaseAllowance(router, 2^256 - 1) on the source token."""
        parameter = Args().add_string(self.settings.dusa_router).add_u256(U256_MAX).serialize()
        return self._call(
            token.address, "increaseAllowance", parameter, 0,
            self.settings.router_max_gas, f"Approve {token.symbol}",
        )

    # ======================
    # Router swaps
    # ======================

    def _route_args(self, args: Args, route: Route, recipient: str, deadline_ms: int) -> Args:
        return (
            args.add_u64_array(route.bin_steps)
            .add_bool_array(route.is_legacy)
            .add_string_array(route.tokens)
            .add_string(recipient)
            .add_u64(deadline_ms)
        )

    def swap_native_in(self, amount_in_units: int, min_out: int, route: Route, recipient: str, deadline_ms: int) -> ContractCall:
        args = self._route_args(Args().add_u256(min_out), route, recipient, deadline_ms)
        args.add_u64(self.settings.swap_storage_cost)
        return self._call(
            self.settings.dusa_router, "swapExactMASForTokens", args.serialize(), amount_in_units,
            self.settings.router_max_gas, "Swap MAS for tokens",
        )

    def swap_tokens_for_native(self, amount_in_units: int, min_out: int, route: Route, recipient: str, deadline_ms: int) -> ContractCall:
        args = self._route_args(Args().add_u256(amount_in_units).add_u256(min_out), route, recipient, deadline_ms)
        args.add_u64(self.settings.swap_storage_cost)
        return self._call(
            self.settings.dusa_router, "swapExactTokensForMAS", args.serialize(), 0,
            self.settings.router_max_gas, "Swap tokens for MAS",
        )

    def swap_tokens_for_tokens(self, amount_in_units: int, min_out: int, route: Route, recipient: str, deadline_ms: int) -> ContractCall:
        args = self._route_args(Args().add_u256(amount_in_units).add_u256(min_out), route, recipient, deadline_ms)
        return self._call(
            self.settings.dusa_router, "swapExactTokensForTokens", args.serialize(), 0,
            self.settings.router_max_gas, "Swap tokens for tokens",
        )

    # ======================
    # Plans
    # ======================

    def plan(self, intent: SwapIntent, quote: Quote, recipient: str) -> SwapPlan:
        """Build the ordered calls for an intent from its quote.

        Raises:
            QuoteMismatchError: Quote was produced for a different request
            UnknownTokenError: Unknown symbol in the intent
        """
        if not quote.matches(intent.from_symbol, intent.to_symbol, intent.amount_in):
            raise QuoteMismatchError(
                f"Quote {quote.from_symbol}->{quote.to_symbol} {quote.amount_in} does not match "
                f"intent {intent.from_symbol}->{intent.to_symbol} {intent.amount_in}"
            )

        from_token = self.registry.resolve(intent.from_symbol)
        to_token = self.registry.resolve(intent.to_symbol)
        kind = classify(from_token, to_token)
        amount_in_units = quote.amount_in_units

        if kind == OperationKind.WRAP:
            route = Route(tokens=(self.wmas_address,))
            return SwapPlan(kind, self.wrap(amount_in_units), route, amount_in_units)

        if kind == OperationKind.UNWRAP:
            # unwrap never uses hop parameters, whatever the quote carried
            route = Route(tokens=(self.wmas_address,))
            return SwapPlan(kind, self.unwrap(amount_in_units, recipient), route, amount_in_units)

        route = quote.route
        if route.is_direct_call:
            raise QuoteMismatchError(f"Quote route has no hops for {kind.value}")

        min_out = quote.min_amount_out_units(intent.slippage)
        deadline_ms = intent.deadline_ms

        if kind == OperationKind.SWAP_NATIVE_IN:
            main = self.swap_native_in(amount_in_units, min_out, route, recipient, deadline_ms)
            return SwapPlan(kind, main, route, min_out)

        approval = self.approve(from_token)
        if kind == OperationKind.SWAP_TOKEN_FOR_NATIVE:
            main = self.swap_tokens_for_native(amount_in_units, min_out, route, recipient, deadline_ms)
        else:
            main = self.swap_tokens_for_tokens(amount_in_units, min_out, route, recipient, deadline_ms)

        logger.debug(f"Planned {kind.value}: {len(route.tokens)}-token route, minOut={min_out}")
        return SwapPlan(kind, main, route, min_out, approval=approval)
