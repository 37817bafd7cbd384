"""Application configuration using pydantic-settings.

All values can be overridden with environment variables (or a .env file),
e.g. ``NODE_RPC_URL=https://buildnet.massa.net/api/v2``.
"""

from decimal import Decimal
from enum import Enum
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class TimeoutPolicy(str, Enum):
    """How to resolve a confirmation poll that never reaches finality."""

    OPTIMISTIC = "optimistic"  # report success, operation assumed accepted
    STRICT = "strict"          # raise ConfirmationTimeoutError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ======================
    # Node
    # ======================
    node_rpc_url: str = Field(
        default="https://mainnet.massa.net/api/v2", description="Massa JSON-RPC endpoint"
    )
    http_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    expire_period_offset: int = Field(
        default=10, description="Periods after the next slot before an operation expires"
    )

    # ======================
    # Dusa contracts
    # ======================
    dusa_router: str = Field(
        default="AS1gUwVGA3A5Dnmev8c2BjBR2wC8y9hb7CFZXVzLb1iwASFHUZ1p",
        description="Dusa router contract",
    )
    dusa_quoter: str = Field(
        default="AS1d3DvZeqTo3Uq7mfAAUmNggjFXqEfGGpSUv6uTYvikVVW8EybN",
        description="Dusa quoter contract",
    )

    # ======================
    # Fees and gas (nanoMAS / gas units)
    # ======================
    operation_fee: int = Field(default=10_000_000, description="Operation fee (0.01 MAS)")
    quote_max_gas: int = Field(default=500_000_000, description="Gas ceiling for quote calls")
    router_max_gas: int = Field(default=100_000_000, description="Gas ceiling for router and approval calls")
    wrap_max_gas: int = Field(default=50_000_000, description="Gas ceiling for deposit/withdraw")
    balance_max_gas: int = Field(default=100_000_000, description="Gas ceiling for balanceOf")
    swap_storage_cost: int = Field(
        default=100_000_000, description="Storage cost passed to router swaps (0.1 MAS)"
    )

    # ======================
    # Execution
    # ======================
    poll_interval: float = Field(default=2.0, description="Seconds between status polls")
    confirmation_timeout: float = Field(default=60.0, description="Swap confirmation timeout")
    approval_timeout: float = Field(default=45.0, description="Approval confirmation timeout")
    timeout_policy: TimeoutPolicy = Field(
        default=TimeoutPolicy.OPTIMISTIC,
        description="Outcome when confirmation polling times out",
    )
    deadline_minutes: int = Field(default=20, ge=1, description="Default swap deadline")
    default_slippage: Decimal = Field(
        default=Decimal("0.005"), ge=0, lt=1, description="Default slippage tolerance (0.5%)"
    )
    quote_debounce: float = Field(default=0.3, description="Delay before a typed amount is quoted")

    # ======================
    # API
    # ======================
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")

    # ======================
    # Environment
    # ======================
    environment: str = Field(default="development", description="Runtime environment")
    debug: bool = Field(default=True, description="Enable debug mode")

    def get_safe_dict(self) -> dict:
        """Return a settings summary suitable for health output."""
        return {
            "environment": self.environment,
            "debug": self.debug,
            "node": self.node_rpc_url,
            "contracts": {
                "router": self.dusa_router,
                "quoter": self.dusa_quoter,
            },
            "execution": {
                "poll_interval": self.poll_interval,
                "confirmation_timeout": self.confirmation_timeout,
                "approval_timeout": self.approval_timeout,
                "timeout_policy": self.timeout_policy.value,
                "deadline_minutes": self.deadline_minutes,
                "default_slippage": str(self.default_slippage),
            },
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
