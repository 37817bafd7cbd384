"""Swap plan service for non-custodial clients.

Resolves a quote and turns it into the ordered unsigned calls (approval,
then swap) that the client signs and submits itself.
"""

import logging

from massaswap.codec.operation import address_to_bytes
from massaswap.exceptions import CodecError, SwapError
from massaswap.node.models import ContractCall
from massaswap.routing.quoter import QuoteResolver
from massaswap.swap.calls import SwapCallBuilder
from massaswap.swap.intent import SwapIntent
from massaswap.web.contracts.swaps import SwapPlanRequest, SwapPlanResponse, UnsignedCall
from massaswap.web.services.quote_service import quote_to_response

logger = logging.getLogger(__name__)


def call_to_contract(call: ContractCall) -> UnsignedCall:
    return UnsignedCall(
        target_address=call.target,
        target_function=call.function,
        parameter=list(call.parameter),
        coins=str(call.coins),
        max_gas=call.max_gas,
        fee=str(call.fee),
        description=call.description,
    )


def validate_sender(address: str) -> None:
    """Raise CodecError unless ``address`` is a well-formed user (AU) address."""
    if not address.startswith("AU"):
        raise CodecError(f"Sender must be a user address, got {address[:4]}...")
    address_to_bytes(address)


class SwapService:
    """Builds swap plans; never signs or broadcasts."""

    def __init__(self, resolver: QuoteResolver, builder: SwapCallBuilder):
        self.resolver = resolver
        self.builder = builder

    async def plan_swap(self, request: SwapPlanRequest) -> SwapPlanResponse:
        """Quote and plan a swap for ``request.sender``."""
        try:
            validate_sender(request.sender)
        except CodecError as e:
            logger.info(f"Rejected swap plan for sender {request.sender}: {e}")
            return SwapPlanResponse(success=False, error="Invalid sender address")

        try:
            intent = SwapIntent.create(
                request.from_token,
                request.to_token,
                request.amount,
                slippage=request.slippage,
                deadline_minutes=request.deadline_minutes,
                settings=self.builder.settings,
            )
            quote = await self.resolver.resolve(intent.from_symbol, intent.to_symbol, intent.amount_in)
            plan = self.builder.plan(intent, quote, recipient=request.sender)
        except SwapError as e:
            logger.info(f"Swap plan {request.from_token}->{request.to_token} failed: {e}")
            return SwapPlanResponse(success=False, error=e.user_message)
        except ValueError as e:
            return SwapPlanResponse(success=False, error=str(e))

        logger.info(f"Planned {plan.kind.value} for {request.sender}: {len(plan.calls)} call(s)")
        return SwapPlanResponse(
            success=True,
            kind=plan.kind.value,
            quote=quote_to_response(quote),
            calls=[call_to_contract(c) for c in plan.calls],
            approval_required=plan.approval is not None,
            min_amount_out_units=str(plan.min_amount_out_units),
            deadline_ms=intent.deadline_ms,
        )
