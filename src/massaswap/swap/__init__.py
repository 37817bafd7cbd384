"""Swap classification, call building and execution."""

from massaswap.swap.calls import SwapCallBuilder, SwapPlan
from massaswap.swap.executor import SwapExecutor, SwapReceipt, SwapWorkflow, WorkflowState
from massaswap.swap.intent import OperationKind, SwapIntent, classify

__all__ = [
    "OperationKind",
    "SwapCallBuilder",
    "SwapExecutor",
    "SwapIntent",
    "SwapPlan",
    "SwapReceipt",
    "SwapWorkflow",
    "WorkflowState",
    "classify",
]
