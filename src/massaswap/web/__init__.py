"""Web boundary layer for non-custodial operations.

This layer never signs or submits operations. It can:
- quote swaps (read-only calls)
- list tokens
- prepare unsigned calls for client-side signing
"""

__all__ = [
    "contracts",
    "services",
    "controllers",
]
