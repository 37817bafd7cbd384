"""Operation signing interface."""

from massaswap.signing.base import OperationSigner, SignatureResult, SigningError, SigningRequest

__all__ = [
    "OperationSigner",
    "SignatureResult",
    "SigningError",
    "SigningRequest",
]
