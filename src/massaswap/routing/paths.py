"""Candidate route enumeration.

Only two hubs carry reliably deep liquidity on Dusa (WMAS and USDC.e), so
routing is a fixed, bounded enumeration of at most five candidates instead
of a graph search:

1. [from, to]
2. [from, hubA, to]
3. [from, hubB, to]
4. [from, hubA, hubB, to]
5. [from, hubB, hubA, to]
"""

from massaswap.tokens import DEFAULT_REGISTRY, Token, TokenRegistry


def enumerate_routes(from_ref: str, to_ref: str, hub_a: str, hub_b: str) -> list[list[str]]:
    """Enumerate candidate routes in priority order.

    References must already have native MAS replaced by WMAS.

    Args:
        from_ref: Source token contract
        to_ref: Destination token contract
        hub_a: First hub (wrapped native)
        hub_b: Second hub (stable)

    Returns:
        Non-empty, duplicate-free list of routes
    """
    if hub_a == hub_b:
        raise ValueError("Routing hubs must differ")

    if from_ref == to_ref:
        return [[from_ref]]

    hubs = {hub_a, hub_b}
    candidates = [[from_ref, to_ref]]

    if hub_a not in (from_ref, to_ref):
        candidates.append([from_ref, hub_a, to_ref])
    if hub_b not in (from_ref, to_ref):
        candidates.append([from_ref, hub_b, to_ref])
    if from_ref not in hubs and to_ref not in hubs:
        candidates.append([from_ref, hub_a, hub_b, to_ref])
        candidates.append([from_ref, hub_b, hub_a, to_ref])

    return candidates


def candidate_routes(
    from_token: Token,
    to_token: Token,
    registry: TokenRegistry = DEFAULT_REGISTRY,
) -> list[list[str]]:
    """Candidate routes between two registry tokens."""
    return enumerate_routes(
        registry.onchain_ref(from_token),
        registry.onchain_ref(to_token),
        hub_a=registry.wrapped_native.address,
        hub_b=registry.stable.address,
    )
