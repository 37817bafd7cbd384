"""Tests for swap classification, call building and execution."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from conftest import quoter_payload
from massaswap.codec.args import U256_MAX, ArgsReader
from massaswap.config import Settings, TimeoutPolicy, get_settings
from massaswap.exceptions import (
    ApprovalFailedError,
    ConfirmationTimeoutError,
    InsufficientBalanceError,
    NetworkError,
    QuoteMismatchError,
    SwapExecutionFailedError,
)
from massaswap.node.models import OperationState
from massaswap.routing.base import Quote, Route
from massaswap.routing.quoter import QuoteResolver
from massaswap.services.balance_sync import BalanceReader
from massaswap.swap.executor import SwapExecutor, WorkflowState
from massaswap.swap.intent import OperationKind, SwapIntent, classify
from massaswap.tokens import DAI, DUSA, MAS, USDC, WETH, WMAS, resolve

A = WMAS.address
B = USDC.address


def make_quote(from_symbol, to_symbol, amount, out_units, tokens):
    from_token = resolve(from_symbol)
    to_token = resolve(to_symbol)
    hops = len(tokens) - 1
    return Quote(
        from_symbol=from_token.symbol,
        to_symbol=to_token.symbol,
        amount_in=Decimal(amount),
        amount_in_units=from_token.to_units(Decimal(amount)),
        amount_out=to_token.from_units(out_units),
        amount_out_units=out_units,
        rate=Decimal(1),
        price_impact=Decimal(0),
        route=Route(tokens=tokens, bin_steps=[20] * hops, is_legacy=[False] * hops),
    )


@pytest.fixture
def executor(node, signer, settings) -> SwapExecutor:
    return SwapExecutor(node, signer, settings=settings)


class TestClassify:

    @pytest.mark.parametrize("from_token,to_token,kind", [
        (MAS, WMAS, OperationKind.WRAP),
        (WMAS, MAS, OperationKind.UNWRAP),
        (MAS, USDC, OperationKind.SWAP_NATIVE_IN),
        (DUSA, MAS, OperationKind.SWAP_TOKEN_FOR_NATIVE),
        (WMAS, USDC, OperationKind.SWAP_TOKEN_FOR_TOKEN),
        (DAI, WETH, OperationKind.SWAP_TOKEN_FOR_TOKEN),
    ])
    def test_rules(self, from_token, to_token, kind):
        assert classify(from_token, to_token) == kind

    def test_needs_approval(self):
        assert OperationKind.SWAP_TOKEN_FOR_NATIVE.needs_approval
        assert OperationKind.SWAP_TOKEN_FOR_TOKEN.needs_approval
        assert not OperationKind.SWAP_NATIVE_IN.needs_approval
        assert not OperationKind.WRAP.needs_approval


class TestSwapIntent:

    def test_defaults(self):
        intent = SwapIntent.create("MAS", "USDC.e", "10")
        assert intent.amount_in == Decimal("10")
        assert intent.slippage == Decimal("0.005")
        assert not intent.is_expired

    @pytest.mark.parametrize("slippage", ["1", "-0.01"])
    def test_invalid_slippage(self, slippage):
        with pytest.raises(ValueError):
            SwapIntent.create("MAS", "USDC.e", "10", slippage=slippage)

    def test_naive_deadline_rejected(self):
        with pytest.raises(ValueError):
            SwapIntent("MAS", "USDC.e", Decimal("1"), deadline=datetime.now())

    def test_deadline_ms(self):
        deadline = datetime(2030, 1, 1, tzinfo=timezone.utc)
        intent = SwapIntent("MAS", "USDC.e", Decimal("1"), deadline=deadline)
        assert intent.deadline_ms == 1893456000000

    def test_defaults_come_from_settings(self):
        custom = Settings(_env_file=None, default_slippage="0.02", deadline_minutes=5)

        before = datetime.now(timezone.utc)
        intent = SwapIntent.create("MAS", "USDC.e", "1", settings=custom)

        assert intent.slippage == Decimal("0.02")
        assert before + timedelta(minutes=5) <= intent.deadline <= datetime.now(timezone.utc) + timedelta(minutes=5)

    def test_direct_construction_uses_cached_settings(self):
        intent = SwapIntent("MAS", "USDC.e", Decimal("1"))

        assert intent.slippage == get_settings().default_slippage
        assert intent.deadline > datetime.now(timezone.utc) + timedelta(minutes=get_settings().deadline_minutes - 1)


class TestNativeIn:
    """MAS -> token through the router."""

    @pytest.mark.asyncio
    async def test_hub_route_quote_drives_swap_call(self, node, signer, settings, executor):
        """10 MAS -> 42.7 USDC.e over the WMAS pool, submitted as swapExactMASForTokens."""
        node.quotes[(A, B)] = quoter_payload([A, B], [10_000_000_000, 42_700_000], bin_steps=[15])
        intent = SwapIntent.create("MAS", "USDC.e", "10", slippage="0.01")
        quote = await QuoteResolver(node, settings=settings).resolve("MAS", "USDC.e", "10")

        receipt = await executor.execute(intent, quote)

        assert receipt.kind == OperationKind.SWAP_NATIVE_IN
        assert receipt.confirmed is True
        assert receipt.approval_operation_id is None
        assert len(node.submitted) == 1

        call = node.submitted[0]
        assert call.target == settings.dusa_router
        assert call.function == "swapExactMASForTokens"
        assert call.coins == 10_000_000_000
        assert call.fee == settings.operation_fee
        assert call.max_gas == settings.router_max_gas

        reader = ArgsReader(call.parameter)
        assert reader.next_u256() == 42_273_000
        assert reader.next_u64_array() == [15]
        assert reader.next_bool_array() == [False]
        assert reader.next_string_array() == [WMAS.address, USDC.address]
        assert reader.next_string() == signer.address
        assert reader.next_u64() == intent.deadline_ms
        assert reader.next_u64() == settings.swap_storage_cost
        assert reader.remaining == 0
        assert receipt.min_amount_out_units == 42_273_000


class TestTokenSourced:
    """Approval must reach final success before the swap is sent."""

    def _intent_and_quote(self):
        intent = SwapIntent.create("DUSA", "MAS", "2")
        quote = make_quote("DUSA", "MAS", "2", 3_000_000_000, (DUSA.address, A))
        return intent, quote

    @pytest.mark.asyncio
    async def test_approval_failure_never_submits_swap(self, node, executor):
        node.statuses["O1op1"] = [(OperationState.FINAL_FAILURE, "Not enough balance for allowance")]
        intent, quote = self._intent_and_quote()

        with pytest.raises(ApprovalFailedError) as exc:
            await executor.execute(intent, quote)

        assert exc.value.reason == "Not enough balance for allowance"
        assert exc.value.operation_id == "O1op1"
        assert [c.function for c in node.submitted] == ["increaseAllowance"]

    @pytest.mark.asyncio
    async def test_approval_not_final_never_submits_swap(self, node, executor):
        node.statuses["O1op1"] = [OperationState.PENDING]
        intent, quote = self._intent_and_quote()

        with pytest.raises(ApprovalFailedError):
            await executor.execute(intent, quote)

        assert len(node.submitted) == 1

    @pytest.mark.asyncio
    async def test_token_for_native(self, node, signer, settings, executor):
        intent, quote = self._intent_and_quote()

        receipt = await executor.execute(intent, quote)

        assert receipt.approval_operation_id == "O1op1"
        assert receipt.operation_id == "O1op2"
        approval, swap = node.submitted

        assert approval.target == DUSA.address
        assert approval.coins == 0
        reader = ArgsReader(approval.parameter)
        assert reader.next_string() == settings.dusa_router
        assert reader.next_u256() == U256_MAX

        assert swap.function == "swapExactTokensForMAS"
        assert swap.coins == 0
        reader = ArgsReader(swap.parameter)
        assert reader.next_u256() == 2 * 10**18
        assert reader.next_u256() == quote.min_amount_out_units(intent.slippage)
        assert reader.next_u64_array() == [20]
        assert reader.next_bool_array() == [False]
        assert reader.next_string_array() == [DUSA.address, A]
        assert reader.next_string() == signer.address
        assert reader.next_u64() == intent.deadline_ms
        assert reader.next_u64() == settings.swap_storage_cost
        assert reader.remaining == 0

    @pytest.mark.asyncio
    async def test_token_for_token(self, node, executor):
        intent = SwapIntent.create("DAI.e", "WETH.e", "100")
        quote = make_quote("DAI.e", "WETH.e", "100", 4 * 10**16, (DAI.address, A, WETH.address))

        receipt = await executor.execute(intent, quote)

        assert receipt.kind == OperationKind.SWAP_TOKEN_FOR_TOKEN
        approval, swap = node.submitted
        assert approval.function == "increaseAllowance"
        assert swap.function == "swapExactTokensForTokens"

        reader = ArgsReader(swap.parameter)
        assert reader.next_u256() == 100 * 10**18
        reader.next_u256()
        assert reader.next_u64_array() == [20, 20]
        assert reader.next_bool_array() == [False, False]
        assert reader.next_string_array() == [DAI.address, A, WETH.address]
        reader.next_string()
        reader.next_u64()
        assert reader.remaining == 0


class TestWrapUnwrap:
    """Direct WMAS calls with a single-token route."""

    @pytest.mark.asyncio
    async def test_wrap(self, node, settings, executor):
        quote = await QuoteResolver(node, settings=settings).resolve("MAS", "WMAS", "3")

        receipt = await executor.execute(SwapIntent.create("MAS", "WMAS", "3"), quote)

        call, = node.submitted
        assert receipt.kind == OperationKind.WRAP
        assert call.target == WMAS.address
        assert call.function == "deposit"
        assert call.parameter == b""
        assert call.coins == 3_000_000_000
        assert call.max_gas == settings.wrap_max_gas

    @pytest.mark.asyncio
    async def test_unwrap_ignores_quoted_route(self, node, signer, executor):
        quote = make_quote("WMAS", "MAS", "1.5", 1_500_000_000, (A, B, A))

        receipt = await executor.execute(SwapIntent.create("WMAS", "MAS", "1.5"), quote)

        call, = node.submitted
        assert receipt.kind == OperationKind.UNWRAP
        assert call.function == "withdraw"
        assert call.coins == 0
        reader = ArgsReader(call.parameter)
        assert reader.next_u64() == 1_500_000_000
        assert reader.next_string() == signer.address
        assert reader.remaining == 0


class TestConfirmation:
    """Polling outcomes and timeout policy."""

    @pytest.mark.asyncio
    async def test_swap_failure_carries_chain_message(self, node, executor):
        node.statuses["O1op1"] = [OperationState.PENDING, (OperationState.FINAL_FAILURE, "Slippage exceeded")]
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        with pytest.raises(SwapExecutionFailedError) as exc:
            await executor.execute(SwapIntent.create("MAS", "USDC.e", "1"), quote)

        assert exc.value.user_message == "Slippage exceeded"
        assert exc.value.operation_id == "O1op1"

    @pytest.mark.asyncio
    async def test_timeout_is_optimistic_by_default(self, node, executor):
        node.statuses["O1op1"] = [OperationState.PENDING]
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        receipt = await executor.execute(SwapIntent.create("MAS", "USDC.e", "1"), quote)

        assert receipt.confirmed is False
        assert receipt.operation_id == "O1op1"

    @pytest.mark.asyncio
    async def test_timeout_strict_policy_raises(self, node, signer, settings):
        strict = settings.model_copy(update={"timeout_policy": TimeoutPolicy.STRICT})
        executor = SwapExecutor(node, signer, settings=strict)
        node.statuses["O1op1"] = [OperationState.SUBMITTED]
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        with pytest.raises(ConfirmationTimeoutError) as exc:
            await executor.execute(SwapIntent.create("MAS", "USDC.e", "1"), quote)

        assert exc.value.operation_id == "O1op1"

    @pytest.mark.asyncio
    async def test_status_errors_are_retried(self, node, executor):
        node.statuses["O1op1"] = [NetworkError("timeout"), OperationState.FINAL_SUCCESS]
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        receipt = await executor.execute(SwapIntent.create("MAS", "USDC.e", "1"), quote)

        assert receipt.confirmed is True

    @pytest.mark.asyncio
    async def test_submission_failure_is_not_retried(self, node, executor):
        node.submit_error = NetworkError("send_operations failed")
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        with pytest.raises(NetworkError):
            await executor.execute(SwapIntent.create("MAS", "USDC.e", "1"), quote)


class TestPreconditions:
    """Nothing is submitted when validation fails."""

    @pytest.mark.asyncio
    async def test_quote_for_other_amount(self, node, executor):
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        with pytest.raises(QuoteMismatchError):
            await executor.execute(SwapIntent.create("MAS", "USDC.e", "2"), quote)
        assert node.submitted == []

    @pytest.mark.asyncio
    async def test_quote_for_other_pair(self, node, executor):
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))

        with pytest.raises(QuoteMismatchError):
            await executor.execute(SwapIntent.create("MAS", "DUSA", "1"), quote)
        assert node.submitted == []

    @pytest.mark.asyncio
    async def test_expired_deadline(self, node, executor):
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))
        intent = SwapIntent(
            "MAS", "USDC.e", Decimal("1"),
            deadline=datetime.now(timezone.utc) - timedelta(minutes=1),
        )

        with pytest.raises(ValueError):
            await executor.execute(intent, quote)
        assert node.submitted == []

    @pytest.mark.asyncio
    async def test_insufficient_native_balance(self, node, signer, settings):
        node.native_balance = Decimal("5")
        executor = SwapExecutor(node, signer, settings=settings, balance_reader=BalanceReader(node))
        quote = make_quote("MAS", "USDC.e", "10", 40_000_000, (A, B))

        with pytest.raises(InsufficientBalanceError) as exc:
            await executor.execute(SwapIntent.create("MAS", "USDC.e", "10"), quote)

        assert exc.value.symbol == "MAS"
        assert node.submitted == []

    @pytest.mark.asyncio
    async def test_sufficient_token_balance(self, node, signer, settings):
        node.token_balances[DUSA.address] = 5 * 10**18
        executor = SwapExecutor(node, signer, settings=settings, balance_reader=BalanceReader(node))
        quote = make_quote("DUSA", "MAS", "2", 3_000_000_000, (DUSA.address, A))

        receipt = await executor.execute(SwapIntent.create("DUSA", "MAS", "2"), quote)

        assert receipt.confirmed is True


class TestWorkflow:
    """Typed workflow states."""

    def test_prepare_builds_plan(self, executor):
        quote = make_quote("DUSA", "MAS", "2", 3_000_000_000, (DUSA.address, A))

        workflow = executor.prepare(SwapIntent.create("DUSA", "MAS", "2"), quote)

        assert workflow.state == WorkflowState.CLASSIFIED
        assert workflow.plan.approval is not None
        assert [c.function for c in workflow.plan.calls] == ["increaseAllowance", "swapExactTokensForMAS"]

    def test_swap_cannot_skip_approval(self, executor):
        quote = make_quote("DUSA", "MAS", "2", 3_000_000_000, (DUSA.address, A))
        workflow = executor.prepare(SwapIntent.create("DUSA", "MAS", "2"), quote)

        workflow.advance(WorkflowState.APPROVING)
        with pytest.raises(RuntimeError):
            workflow.advance(WorkflowState.SUBMITTED)

    def test_terminal_states(self, executor):
        quote = make_quote("MAS", "USDC.e", "1", 4_000_000, (A, B))
        workflow = executor.prepare(SwapIntent.create("MAS", "USDC.e", "1"), quote)

        workflow.advance(WorkflowState.FAILED)
        with pytest.raises(RuntimeError):
            workflow.advance(WorkflowState.SUBMITTED)
