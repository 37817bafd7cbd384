"""Data types exchanged with a Massa node."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class OperationState(str, Enum):
    """Lifecycle of a submitted operation."""

    SUBMITTED = "submitted"          # accepted by send_operations, not yet seen
    PENDING = "pending"              # in pool or in a block, not final
    FINAL_SUCCESS = "final_success"
    FINAL_FAILURE = "final_failure"

    @property
    def is_final(self) -> bool:
        return self in (OperationState.FINAL_SUCCESS, OperationState.FINAL_FAILURE)


@dataclass(frozen=True)
class OperationStatus:
    """Status of an operation as reported by ``get_operations``."""

    operation_id: str
    state: OperationState
    error: Optional[str] = None

    @classmethod
    def from_node(cls, operation_id: str, info: Optional[dict]) -> "OperationStatus":
        """Build from one ``get_operations`` entry.

        A final operation whose execution status is unknown (``op_exec_status``
        null) is treated as successful, matching how the node reports plain
        transfers.
        """
        if not info:
            return cls(operation_id, OperationState.SUBMITTED)

        if info.get("is_operation_final"):
            if info.get("op_exec_status") is False:
                error = info.get("op_exec_error") or "Transaction execution failed"
                return cls(operation_id, OperationState.FINAL_FAILURE, str(error))
            return cls(operation_id, OperationState.FINAL_SUCCESS)

        return cls(operation_id, OperationState.PENDING)


@dataclass(frozen=True)
class NodeStatus:
    """Subset of ``get_status`` needed to build operations."""

    chain_id: int
    next_period: int


@dataclass(frozen=True)
class ContractCall:
    """An unsigned state-changing smart-contract call (CallSC)."""

    target: str
    function: str
    parameter: bytes
    coins: int
    max_gas: int
    fee: int
    description: str = ""
