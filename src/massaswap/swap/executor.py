"""Swap execution: approval, submission and confirmation polling.

Each execution is an explicit ``SwapWorkflow`` moving through typed states:

    CLASSIFIED -> [APPROVING -> APPROVED] -> SUBMITTED -> CONFIRMING -> COMPLETED
                                                                    \\-> FAILED

The main call of a token-sourced swap is only submitted after its approval
reached final success. Submitted operations are never retried or rolled
back; only status polling retries, bounded by a wall-clock timeout.
"""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from massaswap.config import Settings, TimeoutPolicy, get_settings
from massaswap.exceptions import (
    ApprovalFailedError,
    ConfirmationTimeoutError,
    SwapError,
    SwapExecutionFailedError,
)
from massaswap.node.client import MassaNodeClient
from massaswap.node.models import ContractCall, OperationState, OperationStatus
from massaswap.routing.base import Quote
from massaswap.services.balance_sync import BalanceReader
from massaswap.signing.base import OperationSigner
from massaswap.swap.calls import SwapCallBuilder, SwapPlan
from massaswap.swap.intent import OperationKind, SwapIntent
from massaswap.tokens import DEFAULT_REGISTRY, TokenRegistry
from massaswap.utils.locks import account_lock

logger = logging.getLogger(__name__)


class WorkflowState(str, Enum):
    CLASSIFIED = "classified"
    APPROVING = "approving"
    APPROVED = "approved"
    SUBMITTED = "submitted"
    CONFIRMING = "confirming"
    COMPLETED = "completed"
    FAILED = "failed"


_TRANSITIONS = {
    WorkflowState.CLASSIFIED: {WorkflowState.APPROVING, WorkflowState.SUBMITTED, WorkflowState.FAILED},
    WorkflowState.APPROVING: {WorkflowState.APPROVED, WorkflowState.FAILED},
    WorkflowState.APPROVED: {WorkflowState.SUBMITTED, WorkflowState.FAILED},
    WorkflowState.SUBMITTED: {WorkflowState.CONFIRMING, WorkflowState.FAILED},
    WorkflowState.CONFIRMING: {WorkflowState.COMPLETED, WorkflowState.FAILED},
    WorkflowState.COMPLETED: set(),
    WorkflowState.FAILED: set(),
}


@dataclass
class SwapReceipt:
    """Outcome of a completed workflow.

    ``confirmed`` is False when finality was not observed before the
    timeout and the optimistic policy accepted the operation anyway.
    """

    kind: OperationKind
    operation_id: str
    confirmed: bool
    min_amount_out_units: int
    approval_operation_id: Optional[str] = None


@dataclass
class SwapWorkflow:
    """State of one intent's execution."""

    intent: SwapIntent
    quote: Quote
    plan: SwapPlan
    state: WorkflowState = WorkflowState.CLASSIFIED
    history: list[WorkflowState] = field(default_factory=lambda: [WorkflowState.CLASSIFIED])
    approval_operation_id: Optional[str] = None
    operation_id: Optional[str] = None
    error: Optional[SwapError] = None

    @property
    def kind(self) -> OperationKind:
        return self.plan.kind

    def advance(self, state: WorkflowState) -> None:
        if state not in _TRANSITIONS[self.state]:
            raise RuntimeError(f"Illegal workflow transition {self.state.value} -> {state.value}")
        logger.debug(f"Workflow {self.kind.value}: {self.state.value} -> {state.value}")
        self.state = state
        self.history.append(state)

    def fail(self, error: SwapError) -> None:
        self.error = error
        if self.state not in (WorkflowState.COMPLETED, WorkflowState.FAILED):
            self.advance(WorkflowState.FAILED)


class SwapExecutor:
    """Executes swap intents against the Dusa router and WMAS contract."""

    def __init__(
        self,
        node: MassaNodeClient,
        signer: OperationSigner,
        registry: TokenRegistry = DEFAULT_REGISTRY,
        settings: Optional[Settings] = None,
        balance_reader: Optional[BalanceReader] = None,
    ):
        """Initialize the executor.

        Args:
            node: Node client used for submission and polling
            signer: Signs operations for the sending account
            registry: Token catalog
            settings: Settings instance (defaults to cached settings)
            balance_reader: When given, balances are checked before submitting
        """
        self.node = node
        self.signer = signer
        self.registry = registry
        self.settings = settings or get_settings()
        self.balance_reader = balance_reader
        self.calls = SwapCallBuilder(registry, self.settings)

    def prepare(self, intent: SwapIntent, quote: Quote) -> SwapWorkflow:
        """Validate an intent against its quote and build the workflow.

        Raises:
            QuoteMismatchError: Quote belongs to another request
            ValueError: Deadline already passed
        """
        if intent.is_expired:
            raise ValueError("Swap deadline has already passed")
        plan = self.calls.plan(intent, quote, recipient=self.signer.address)
        return SwapWorkflow(intent=intent, quote=quote, plan=plan)

    async def execute(self, intent: SwapIntent, quote: Quote) -> SwapReceipt:
        """Run approval (if needed) and the main call to completion.

        Args:
            intent: The user's swap request
            quote: Quote resolved for exactly this intent

        Returns:
            SwapReceipt for the main operation

        Raises:
            QuoteMismatchError, ValueError: Before anything is submitted
            InsufficientBalanceError: Balance check failed
            ApprovalFailedError: Approval failed or never became final
            SwapExecutionFailedError: Main call failed on-chain
            ConfirmationTimeoutError: Strict policy and no finality in time
            NetworkError: Submission failed
        """
        workflow = self.prepare(intent, quote)
        logger.info(
            f"Executing {workflow.kind.value}: {intent.amount_in} {intent.from_symbol} -> "
            f"{intent.to_symbol} (minOut={workflow.plan.min_amount_out_units})"
        )

        async with account_lock(self.signer.address, operation=workflow.kind.value):
            try:
                await self._check_balance(workflow)
                if workflow.kind.needs_approval:
                    await self._approve(workflow)
                return await self._submit_and_confirm(workflow)
            except SwapError as e:
                workflow.fail(e)
                logger.error(f"{workflow.kind.value} failed in state {workflow.history[-2].value}: {e}")
                raise

    async def _check_balance(self, workflow: SwapWorkflow) -> None:
        if self.balance_reader is None:
            return
        token = self.registry.resolve(workflow.intent.from_symbol)
        required = workflow.quote.amount_in_units
        if token.is_native:
            required += workflow.plan.main.fee
        await self.balance_reader.ensure_affordable(self.signer.address, token, required)

    async def _approve(self, workflow: SwapWorkflow) -> None:
        workflow.advance(WorkflowState.APPROVING)
        approval = workflow.plan.approval

        operation_id = await self.node.call_smart_contract(approval, self.signer)
        workflow.approval_operation_id = operation_id
        logger.info(f"Approval sent for {workflow.intent.from_symbol}: {operation_id}")

        status = await self.wait_for_operation(operation_id, self.settings.approval_timeout)
        if status.state == OperationState.FINAL_FAILURE:
            raise ApprovalFailedError(status.error, operation_id=operation_id)
        if status.state != OperationState.FINAL_SUCCESS:
            raise ApprovalFailedError(
                f"approval not final after {self.settings.approval_timeout:.0f}s",
                operation_id=operation_id,
            )

        workflow.advance(WorkflowState.APPROVED)

    async def _submit_and_confirm(self, workflow: SwapWorkflow) -> SwapReceipt:
        main: ContractCall = workflow.plan.main
        operation_id = await self.node.call_smart_contract(main, self.signer)
        workflow.operation_id = operation_id
        workflow.advance(WorkflowState.SUBMITTED)

        workflow.advance(WorkflowState.CONFIRMING)
        timeout = self.settings.confirmation_timeout
        status = await self.wait_for_operation(operation_id, timeout)

        if status.state == OperationState.FINAL_FAILURE:
            raise SwapExecutionFailedError(status.error, operation_id=operation_id)

        confirmed = status.state == OperationState.FINAL_SUCCESS
        if not confirmed:
            if self.settings.timeout_policy == TimeoutPolicy.STRICT:
                raise ConfirmationTimeoutError(operation_id, timeout)
            logger.warning(
                f"{main.function} {operation_id} not final after {timeout:.0f}s; "
                f"assuming accepted"
            )

        workflow.advance(WorkflowState.COMPLETED)
        logger.info(f"{workflow.kind.value} completed: {operation_id} (confirmed={confirmed})")
        return SwapReceipt(
            kind=workflow.kind,
            operation_id=operation_id,
            confirmed=confirmed,
            min_amount_out_units=workflow.plan.min_amount_out_units,
            approval_operation_id=workflow.approval_operation_id,
        )

    async def wait_for_operation(self, operation_id: str, timeout: float) -> OperationStatus:
        """Poll an operation until it is final or the timeout elapses.

        Status query failures are logged and retried.

        Returns:
            Last observed status (non-final if the timeout elapsed)
        """
        deadline = time.monotonic() + timeout
        last = OperationStatus(operation_id, OperationState.SUBMITTED)

        while True:
            try:
                last = await self.node.get_operation_status(operation_id)
                if last.state.is_final:
                    return last
            except SwapError as e:
                logger.warning(f"Status check for {operation_id} failed, retrying: {e}")

            remaining = deadline - time.monotonic()
            if remaining <= 0:
                return last
            await asyncio.sleep(min(self.settings.poll_interval, remaining))
