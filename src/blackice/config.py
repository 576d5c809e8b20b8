import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env(name: str, default: Optional[str] = None):
    return lambda: os.getenv(name, default)


class Settings(BaseModel):
    aws_region: str = Field(default_factory=_env("BLACKICE_AWS_REGION", "eu-central-1"))
    aws_profile: Optional[str] = Field(default_factory=_env("BLACKICE_AWS_PROFILE"))
    # PEM of the identity the server answers for on GET /fingerprint and GET /scan
    identity_key: Optional[str] = Field(default_factory=_env("BLACKICE_IDENTITY_KEY"))

    host: str = Field(default_factory=_env("BLACKICE_HOST", "127.0.0.1"))
    port: int = Field(default_factory=lambda: int(os.getenv("BLACKICE_PORT", "8080")))
    log_level: str = Field(default_factory=_env("BLACKICE_LOG_LEVEL", "INFO"))


def load_settings() -> Settings:
    # Re-read on every call so env overrides (tests, .env reloads) take effect
    return Settings()
