"""Base interface for operation signing.

Signing flow:
1. Serialize the operation content (see ``massaswap.codec.operation``)
2. Hand it to the signer together with the chain id
3. Signer returns the signature and its public key (never key material)
4. Node client submits content + public key + signature

Key custody lives outside this package; the executor only ever sees the
``OperationSigner`` interface.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from massaswap.exceptions import SwapError

logger = logging.getLogger(__name__)


@dataclass
class SigningRequest:
    """Request to sign operation content.

    Attributes:
        chain_id: Network chain id from ``get_status`` (mainnet is 77658377)
        content: Serialized operation content
        description: Short human-readable label for audit logging
    """
    chain_id: int
    content: bytes
    description: Optional[str] = None


@dataclass
class SignatureResult:
    """Result of a signing operation.

    Attributes:
        success: Whether signing succeeded
        signature: Base58 signature string as expected by ``send_operations``
        public_key: Public key that created the signature (``P...``)
        error: Error message if signing failed
    """
    success: bool
    signature: Optional[str] = None
    public_key: Optional[str] = None
    error: Optional[str] = None


class OperationSigner(ABC):
    """Abstract signer for Massa operations.

    Implementations should NEVER expose raw private keys.
    """

    @property
    @abstractmethod
    def address(self) -> str:
        """Address (``AU...``) the signer's operations are sent from."""

    @property
    @abstractmethod
    def public_key(self) -> str:
        """Public key (``P...``) matching the signatures this signer produces."""

    @abstractmethod
    async def sign(self, request: SigningRequest) -> SignatureResult:
        """Sign serialized operation content.

        Args:
            request: Content and chain id to sign

        Returns:
            SignatureResult with signature and public key
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(address={self.address})"


class SigningError(SwapError):
    """Exception raised when signing fails."""

    default_message = "Could not sign the transaction"
