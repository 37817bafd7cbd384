"""Routing and quoting on Dusa.

- paths: bounded candidate route enumeration through the WMAS and USDC.e hubs
- quoter: first-positive-output quote resolution via the Dusa quoter contract
- debounce: supersedable quoting for typed amounts
"""

from massaswap.routing.base import Quote, Route, parse_amount
from massaswap.routing.debounce import DebouncedQuoter
from massaswap.routing.paths import candidate_routes, enumerate_routes
from massaswap.routing.quoter import QuoteResolver

__all__ = [
    "DebouncedQuoter",
    "Quote",
    "QuoteResolver",
    "Route",
    "candidate_routes",
    "enumerate_routes",
    "parse_amount",
]
