"""OTP Verifier — configuration loaded from environment."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application-wide settings, loaded from .env or environment variables."""

    # ── Verification codes ────────────────────────────────
    otp_ttl_seconds: float = Field(300.0, gt=0, description="Code validity period")
    otp_max_attempts: int = Field(3, ge=1, description="Failed checks before lockout")
    otp_sweep_interval_seconds: float = Field(60.0, gt=0, description="Reaper period")
    otp_code_length: int = Field(6, ge=1, le=12)

    # ── Delivery ──────────────────────────────────────────
    otp_delivery: Literal["log", "email"] = "log"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    email_from: str = "no-reply@example.com"

    # ── App ───────────────────────────────────────────────
    app_name: str = "OTP Verifier"
    debug: bool = True
    otp_debug_endpoint: bool = False

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


# Singleton settings instance
settings = Settings()
