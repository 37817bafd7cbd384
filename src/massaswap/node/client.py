"""JSON-RPC client for a Massa node.

Every request opens a short-lived ``httpx.AsyncClient``. Transport failures,
non-200 responses and JSON-RPC error envelopes all surface as NetworkError;
nothing here retries.
"""

import logging
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

import httpx

from massaswap.codec.args import Args, ArgsReader
from massaswap.codec.operation import serialize_call_sc
from massaswap.config import Settings, get_settings
from massaswap.exceptions import CodecError, NetworkError
from massaswap.node.models import ContractCall, NodeStatus, OperationStatus
from massaswap.signing.base import OperationSigner, SigningError, SigningRequest

logger = logging.getLogger(__name__)


class MassaNodeClient:
    """Async client for the Massa public JSON-RPC API."""

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: Optional[float] = None,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            rpc_url: Node endpoint (defaults to settings)
            timeout: HTTP timeout in seconds (defaults to settings)
            settings: Settings instance (defaults to cached settings)
            transport: Custom httpx transport, used by tests
        """
        self.settings = settings or get_settings()
        self.rpc_url = rpc_url or self.settings.node_rpc_url
        self.timeout = timeout or self.settings.http_timeout
        self._transport = transport
        self._request_id = 0

    async def _rpc(self, method: str, params: list) -> Any:
        """Send one JSON-RPC request and return its ``result``."""
        self._request_id += 1
        payload = {
            "jsonrpc": "2.0",
            "id": self._request_id,
            "method": method,
            "params": params,
        }

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(self.rpc_url, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"{method} request failed: {e}")
            raise NetworkError(f"{method} request failed: {e}") from e

        if response.status_code != 200:
            logger.error(f"{method} returned HTTP {response.status_code}")
            raise NetworkError(f"{method} returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise NetworkError(f"{method} returned invalid JSON") from e

        if data.get("error"):
            error = data["error"]
            message = error.get("message") if isinstance(error, dict) else str(error)
            logger.warning(f"{method} error: {message}")
            raise NetworkError(f"{method} error: {message}")

        if "result" not in data:
            raise NetworkError(f"{method} response has no result")

        return data["result"]

    # ======================
    # Read-only
    # ======================

    async def read_only_call(
        self,
        target: str,
        function: str,
        parameter: bytes,
        max_gas: int,
        caller: Optional[str] = None,
    ) -> bytes:
        """Execute a read-only smart-contract call.

        Returns:
            Raw return value bytes

        Raises:
            NetworkError: On transport failure or an ``Error`` result envelope
        """
        result = await self._rpc(
            "execute_read_only_call",
            [[{
                "target_address": target,
                "target_function": function,
                "parameter": list(parameter),
                "max_gas": max_gas,
                "caller_address": caller,
                "coins": None,
                "fee": None,
            }]],
        )

        if not result:
            raise NetworkError(f"Empty read-only result for {function}")

        envelope = result[0].get("result") or {}
        if "Ok" in envelope:
            return bytes(envelope["Ok"])

        error = envelope.get("Error", "unknown error")
        logger.debug(f"Read-only {function} on {target} failed: {error}")
        raise NetworkError(f"Read-only call {function} failed: {error}")

    async def get_status(self) -> NodeStatus:
        """Fetch chain id and the next slot period."""
        result = await self._rpc("get_status", [])
        try:
            return NodeStatus(
                chain_id=int(result["chain_id"]),
                next_period=int(result["next_slot"]["period"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError(f"Malformed get_status response: {e}") from e

    async def get_balance(self, address: str, final: bool = True) -> Decimal:
        """Native MAS balance of an address.

        Args:
            address: ``AU...`` address
            final: Use the final balance (otherwise the candidate balance)
        """
        result = await self._rpc("get_addresses", [[address]])
        if not result:
            raise NetworkError(f"No address info for {address}")

        field = "final_balance" if final else "candidate_balance"
        try:
            return Decimal(str(result[0][field]))
        except (KeyError, InvalidOperation) as e:
            raise NetworkError(f"Malformed balance for {address}") from e

    async def get_token_balance(self, token_address: str, owner: str, max_gas: Optional[int] = None) -> int:
        """Token balance in smallest units via the token's ``balanceOf``."""
        raw = await self.read_only_call(
            target=token_address,
            function="balanceOf",
            parameter=Args().add_string(owner).serialize(),
            max_gas=max_gas or self.settings.balance_max_gas,
        )
        if not raw:
            return 0
        try:
            return ArgsReader(raw).next_u256()
        except CodecError:
            logger.warning(f"Short balanceOf result ({len(raw)} bytes) from {token_address}")
            raise

    # ======================
    # Operations
    # ======================

    async def call_smart_contract(self, call: ContractCall, signer: OperationSigner) -> str:
        """Serialize, sign and submit a CallSC operation.

        Attempted once. Failures surface immediately.

        Returns:
            Operation id
        """
        status = await self.get_status()
        expire_period = status.next_period + self.settings.expire_period_offset

        content = serialize_call_sc(
            fee=call.fee,
            expire_period=expire_period,
            max_gas=call.max_gas,
            coins=call.coins,
            target_address=call.target,
            function=call.function,
            parameter=call.parameter,
        )

        signature = await signer.sign(SigningRequest(
            chain_id=status.chain_id,
            content=content,
            description=call.description or call.function,
        ))
        if not signature.success or not signature.signature:
            raise SigningError(f"Signing {call.function} failed: {signature.error}")

        result = await self._rpc(
            "send_operations",
            [[{
                "creator_public_key": signature.public_key or signer.public_key,
                "signature": signature.signature,
                "serialized_content": list(content),
            }]],
        )
        if not result:
            raise NetworkError(f"send_operations returned no id for {call.function}")

        operation_id = result[0]
        logger.info(f"Submitted {call.function} on {call.target}: {operation_id}")
        return operation_id

    async def get_operation_status(self, operation_id: str) -> OperationStatus:
        """Look up an operation's finality and execution result.

        Raises:
            NetworkError: On transport failure or a malformed entry
        """
        result = await self._rpc("get_operations", [[operation_id]])
        if result is not None and not isinstance(result, list):
            raise NetworkError(f"Malformed get_operations response for {operation_id}")

        info = result[0] if result else None
        if info is not None and not isinstance(info, dict):
            raise NetworkError(f"Malformed get_operations entry for {operation_id}: {info!r}")
        return OperationStatus.from_node(operation_id, info)
