"""Pytest configuration and fixtures."""

import os
from typing import Optional

import base58
import pytest

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["DEBUG"] = "true"

from massaswap.codec.args import Args
from massaswap.config import Settings
from massaswap.exceptions import NetworkError
from massaswap.node.models import ContractCall, OperationState, OperationStatus
from massaswap.signing.base import OperationSigner, SignatureResult, SigningRequest
from massaswap.utils.locks import clear_account_locks


def make_address(prefix: str = "AU", seed: int = 1) -> str:
    """Valid base58check Massa address with a recognizable hash."""
    return prefix + base58.b58encode_check(bytes([0]) + bytes([seed]) * 32).decode()


def quoter_payload(
    route: list[str],
    amounts: list[int],
    virtual_amounts: Optional[list[int]] = None,
    bin_steps: Optional[list[int]] = None,
    is_legacy: Optional[list[bool]] = None,
    pairs: Optional[list[str]] = None,
) -> bytes:
    """Encode a findBestPathFromAmountIn answer."""
    hops = max(len(route) - 1, 0)
    return (
        Args()
        .add_string_array(route)
        .add_string_array(pairs if pairs is not None else [make_address("AS", 90 + i) for i in range(hops)])
        .add_u64_array(bin_steps if bin_steps is not None else [20] * hops)
        .add_u256_array(amounts)
        .add_u256_array(virtual_amounts if virtual_amounts is not None else amounts)
        .add_u256_array([0] * hops)
        .add_bool_array(is_legacy if is_legacy is not None else [False] * hops)
        .serialize()
    )


class FakeSigner(OperationSigner):
    """Signer returning a fixed signature and recording requests."""

    def __init__(self, address: Optional[str] = None, fail: bool = False):
        self._address = address or make_address("AU", 7)
        self.fail = fail
        self.requests: list[SigningRequest] = []

    @property
    def address(self) -> str:
        return self._address

    @property
    def public_key(self) -> str:
        return "P1testpublickey"

    async def sign(self, request: SigningRequest) -> SignatureResult:
        self.requests.append(request)
        if self.fail:
            return SignatureResult(success=False, error="key locked")
        return SignatureResult(success=True, signature="1testsignature", public_key=self.public_key)


class FakeNode:
    """In-memory node double.

    ``quotes`` maps a route tuple to the quoter's raw answer (bytes) or an
    exception to raise. ``statuses`` maps an operation id to a sequence of
    statuses returned on successive polls (the last one repeats).
    """

    def __init__(self, settings: Settings):
        self.settings = settings
        self.rpc_url = "memory://node"
        self.quotes: dict[tuple, object] = {}
        self.read_calls: list[dict] = []
        self.submitted: list[ContractCall] = []
        self.statuses: dict[str, list] = {}
        self.default_state = OperationState.FINAL_SUCCESS
        self.submit_error: Optional[Exception] = None
        self.native_balance = None
        self.token_balances: dict[str, int] = {}

    async def read_only_call(self, target, function, parameter, max_gas, caller=None):
        from massaswap.codec.args import ArgsReader

        route = tuple(ArgsReader(parameter).next_string_array())
        self.read_calls.append({"target": target, "function": function, "route": route, "max_gas": max_gas})
        answer = self.quotes.get(route)
        if answer is None:
            raise NetworkError(f"no pool for {route}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    async def call_smart_contract(self, call: ContractCall, signer: OperationSigner) -> str:
        if self.submit_error is not None:
            raise self.submit_error
        self.submitted.append(call)
        return f"O1op{len(self.submitted)}"

    async def get_operation_status(self, operation_id: str) -> OperationStatus:
        sequence = self.statuses.get(operation_id)
        if not sequence:
            return OperationStatus(operation_id, self.default_state)
        item = sequence.pop(0) if len(sequence) > 1 else sequence[0]
        if isinstance(item, Exception):
            raise item
        if isinstance(item, OperationStatus):
            return item
        state, error = item if isinstance(item, tuple) else (item, None)
        return OperationStatus(operation_id, state, error)

    async def get_balance(self, address, final=True):
        if self.native_balance is None:
            raise NetworkError("balance unavailable")
        return self.native_balance

    async def get_token_balance(self, token_address, owner, max_gas=None):
        if token_address not in self.token_balances:
            raise NetworkError("balanceOf failed")
        return self.token_balances[token_address]


@pytest.fixture(autouse=True)
def reset_locks():
    """Locks bind to an event loop; start each test with a fresh registry."""
    clear_account_locks()
    yield
    clear_account_locks()


@pytest.fixture
def settings() -> Settings:
    """Settings with fast polling for tests."""
    return Settings(
        _env_file=None,
        poll_interval=0.01,
        confirmation_timeout=0.1,
        approval_timeout=0.1,
        quote_debounce=0.01,
    )


@pytest.fixture
def node(settings) -> FakeNode:
    return FakeNode(settings)


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()
