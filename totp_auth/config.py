"""Configuration settings for the TOTP service."""
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict

from .schemas import TotpConfig


class Settings(BaseSettings):
    """Application settings, read from TOTP_* environment variables or .env."""

    model_config = SettingsConfigDict(env_prefix="TOTP_", env_file=".env", case_sensitive=False)

    # Algorithm parameters
    hash_algorithm: str = "sha1"
    step_seconds: int = 30
    digits: int = 6
    window: int = 1

    # Secrets
    secret_length: int = 10
    issuer: Optional[str] = None

    # Provisioning
    qr_size: int = 350

    # App config
    debug: bool = False
    log_level: str = "INFO"

    def totp_config(self) -> TotpConfig:
        return TotpConfig.build(
            hash_algorithm=self.hash_algorithm,
            step_seconds=self.step_seconds,
            digits=self.digits,
            window=self.window,
        )


@lru_cache
def get_settings() -> Settings:
    return Settings()
