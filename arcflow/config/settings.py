# arcflow/config/settings.py

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from arcflow.domain.models.policy import PolicyConfiguration


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Application ---
    app_name: str = "arcflow"
    environment: Literal["dev", "test", "prod"] = "dev"
    debug: bool = False
    version: str = "0.1.0"

    # --- Settlement (Arc testnet) ---
    arc_rpc_url: str = Field(..., min_length=1)
    arc_private_key: str = Field(..., min_length=1)
    usdc_contract_address: str = "0x3600000000000000000000000000000000000000"
    usdc_decimals: int = 6
    confirmation_timeout_seconds: float = 180.0
    explorer_tx_url: str | None = "https://explorer.testnet.arc.network/tx/{tx_hash}"
    settlement_max_queued: int = 100

    # --- Reasoning providers ---
    gemini_api_key: str = Field(..., min_length=1)
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    provider_candidates: tuple[str, ...] = ("gemini-3-flash", "gemini-2.5-flash")
    provider_timeout_seconds: float = 30.0
    provider_failure_threshold: int = 3
    provider_recovery_timeout_seconds: float = 60.0

    # --- Policy ---
    hard_cap: Decimal = Decimal("50.0")
    high_volume_threshold: Decimal = Decimal("20")
    critical_risk_threshold: int = 80
    policy_risk_threshold: int = 40
    trusted_recipients: list[str] = Field(
        default_factory=lambda: [
            "0x937402b657c91d9e74fcf373187f1758c0d8e933",
            "0xd8da6bf26964af9d7eed9e03e53415d37aa96045",
        ]
    )

    # --- Deadlines ---
    execution_timeout_seconds: float | None = 240.0
    turn_timeout_seconds: float | None = 360.0

    # --- Observability ---
    enable_metrics: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # --- HTTP ---
    cors_allow_origins: list[str] = Field(default_factory=lambda: ["*"])

    @model_validator(mode="after")
    def _turn_deadline_covers_settlement(self) -> "AppSettings":
        """A turn must outlive one execution plus the tool call and its follow-up."""
        if self.turn_timeout_seconds is None or self.execution_timeout_seconds is None:
            return self
        budget = self.execution_timeout_seconds + 2 * self.provider_timeout_seconds
        if self.turn_timeout_seconds <= budget:
            raise ValueError(
                f"turn_timeout_seconds ({self.turn_timeout_seconds}) must exceed "
                f"execution_timeout_seconds + 2 * provider_timeout_seconds ({budget})"
            )
        return self

    def to_policy_configuration(self) -> PolicyConfiguration:
        """Freeze the policy section into the read-only object the kernel consumes."""
        return PolicyConfiguration(
            hard_cap=self.hard_cap,
            high_volume_threshold=self.high_volume_threshold,
            critical_risk_threshold=self.critical_risk_threshold,
            policy_risk_threshold=self.policy_risk_threshold,
            trusted_recipients=frozenset(r.strip().lower() for r in self.trusted_recipients),
        )


@lru_cache
def get_settings() -> AppSettings:
    return AppSettings()
