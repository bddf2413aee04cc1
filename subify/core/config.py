import os
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv


class Settings:
    """Centralised application configuration sourced from environment variables."""

    def __init__(self) -> None:
        load_dotenv()
        self.database_path = Path(os.getenv("DATABASE_PATH", "data/subify.db")).resolve()
        catalog_path = os.getenv("PLAN_CATALOG_PATH")
        self.plan_catalog_path: Optional[Path] = Path(catalog_path).resolve() if catalog_path else None
        self.payment_provider = os.getenv("PAYMENT_PROVIDER", "simulated").strip().lower()
        self.payment_timeout_seconds = self._get_float("PAYMENT_TIMEOUT_SECONDS", default=10.0)
        self.stripe_secret_key = os.getenv("STRIPE_SECRET_KEY")
        self.stripe_statement_descriptor = os.getenv("STRIPE_STATEMENT_DESCRIPTOR")
        self.simulated_payment_latency_ms = self._get_int("SIMULATED_PAYMENT_LATENCY_MS", default=0)
        self.simulated_decline_tokens = self._get_list(
            "SIMULATED_DECLINE_TOKENS", default=["pm_card_declined"]
        )
        self.simulated_unavailable_tokens = self._get_list(
            "SIMULATED_UNAVAILABLE_TOKENS", default=["pm_provider_down"]
        )
        self.cors_allow_origins = self._get_list("CORS_ALLOW_ORIGINS", default=["*"])

        if self.payment_timeout_seconds <= 0:
            raise RuntimeError("Environment variable PAYMENT_TIMEOUT_SECONDS must be positive")

    @staticmethod
    def _get_list(key: str, default: List[str]) -> List[str]:
        value = os.getenv(key)
        if not value:
            return list(default)
        return [item.strip() for item in value.split(",") if item.strip()]

    @staticmethod
    def _get_int(key: str, default: Optional[int] = None) -> int:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return int(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be an integer") from exc

    @staticmethod
    def _get_float(key: str, default: Optional[float] = None) -> float:
        value = os.getenv(key)
        if value is None:
            if default is None:
                raise RuntimeError(f"Missing required environment variable: {key}")
            return default
        try:
            return float(value)
        except ValueError as exc:
            raise RuntimeError(f"Environment variable {key} must be a number") from exc
