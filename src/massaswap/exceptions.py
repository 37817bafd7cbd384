"""Error taxonomy for quoting and swap execution.

Every error carries a short ``user_message`` that is safe to show to an end
user. Internal details (byte offsets, layout mismatches) stay in ``str(exc)``
and the logs.
"""

from typing import Optional


class SwapError(Exception):
    """Base class for all swap errors."""

    default_message = "Swap failed"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)

    @property
    def user_message(self) -> str:
        return self.default_message


class UnknownTokenError(SwapError):
    """Raised when a token symbol is not in the registry."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"Unknown token: {symbol}")

    @property
    def user_message(self) -> str:
        return f"Token {self.symbol} is not supported"


class NoRouteError(SwapError):
    """Raised when every candidate route failed or returned no output."""

    def __init__(self, from_symbol: str, to_symbol: str, attempted: int = 0):
        self.from_symbol = from_symbol
        self.to_symbol = to_symbol
        self.attempted = attempted
        super().__init__(
            f"No swap route found for {from_symbol} -> {to_symbol} "
            f"({attempted} candidate route(s) tried)"
        )

    @property
    def user_message(self) -> str:
        return f"No swap route found for {self.from_symbol} → {self.to_symbol}"


class CodecError(SwapError):
    """Malformed or truncated binary payload."""

    default_message = "Invalid contract data"

    @property
    def user_message(self) -> str:
        return "Received invalid data from the exchange. Please try again."


class InsufficientBalanceError(SwapError):
    """Requested amount exceeds the available balance."""

    def __init__(self, symbol: str, required, available):
        self.symbol = symbol
        self.required = required
        self.available = available
        super().__init__(f"Insufficient {symbol} balance: need {required}, have {available}")

    @property
    def user_message(self) -> str:
        return f"Insufficient {self.symbol} balance"


class ApprovalFailedError(SwapError):
    """On-chain allowance increase did not succeed."""

    def __init__(self, reason: Optional[str] = None, operation_id: Optional[str] = None):
        self.reason = reason or "unknown error"
        self.operation_id = operation_id
        super().__init__(f"Approval failed on-chain: {self.reason}")

    @property
    def user_message(self) -> str:
        return f"Approval failed: {self.reason}"


class SwapExecutionFailedError(SwapError):
    """On-chain swap (or wrap/unwrap) execution failed."""

    def __init__(self, reason: Optional[str] = None, operation_id: Optional[str] = None):
        self.reason = reason or "Transaction execution failed"
        self.operation_id = operation_id
        super().__init__(f"Swap failed on-chain: {self.reason}")

    @property
    def user_message(self) -> str:
        return self.reason


class NetworkError(SwapError):
    """RPC call failed, timed out, or returned an error envelope."""

    default_message = "Network request failed"

    @property
    def user_message(self) -> str:
        return "Network error. Please check your connection and try again."


class ConfirmationTimeoutError(SwapError):
    """Operation did not reach finality in time (strict timeout policy)."""

    def __init__(self, operation_id: str, timeout: float):
        self.operation_id = operation_id
        self.timeout = timeout
        super().__init__(f"Operation {operation_id} not final after {timeout:.0f}s")

    @property
    def user_message(self) -> str:
        return "Transaction sent but not yet confirmed. Check its status later."


class QuoteMismatchError(SwapError):
    """Quote was produced for a different token pair or amount."""

    default_message = "Quote does not match the swap request"

    @property
    def user_message(self) -> str:
        return "Quote is out of date. Please refresh the quote."
