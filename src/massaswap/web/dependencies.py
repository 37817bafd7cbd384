"""FastAPI dependencies wiring services to the app's node client."""

from fastapi import Depends, Request

from massaswap.node.client import MassaNodeClient
from massaswap.routing.quoter import QuoteResolver
from massaswap.swap.calls import SwapCallBuilder
from massaswap.web.services.quote_service import QuoteService
from massaswap.web.services.swap_service import SwapService


def get_node(request: Request) -> MassaNodeClient:
    return request.app.state.node


def get_resolver(node: MassaNodeClient = Depends(get_node)) -> QuoteResolver:
    return QuoteResolver(node, settings=node.settings)


def get_quote_service(resolver: QuoteResolver = Depends(get_resolver)) -> QuoteService:
    return QuoteService(resolver)


def get_swap_service(resolver: QuoteResolver = Depends(get_resolver)) -> SwapService:
    return SwapService(resolver, SwapCallBuilder(resolver.registry, resolver.settings))
