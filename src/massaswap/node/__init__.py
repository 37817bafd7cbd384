"""Massa node access."""

from massaswap.node.client import MassaNodeClient
from massaswap.node.models import ContractCall, NodeStatus, OperationState, OperationStatus

__all__ = [
    "ContractCall",
    "MassaNodeClient",
    "NodeStatus",
    "OperationState",
    "OperationStatus",
]
