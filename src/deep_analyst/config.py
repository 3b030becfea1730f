"""
Configuration utilities for Deep Analyst.

Central place to configure:
- Backend base URL (used by the Streamlit UI)
- Gemini endpoint, model and sampling temperature
- Local report storage
- Logging
"""

import logging
import os
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _env_float(name: str) -> Optional[float]:
    value = os.getenv(name)
    return float(value) if value else None


class Settings(BaseModel):
    # Base URL where the FastAPI backend is running.
    api_base_url: str = Field(
        default_factory=lambda: os.getenv("DEEP_ANALYST_API_URL", "http://localhost:8000")
    )

    # Gemini configuration
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_model: str = Field(
        default_factory=lambda: os.getenv("DEEP_ANALYST_MODEL", "gemini-3-flash-preview")
    )
    temperature: float = 0.2
    # None disables the client timeout; report generation can take minutes.
    request_timeout: Optional[float] = Field(
        default_factory=lambda: _env_float("DEEP_ANALYST_TIMEOUT")
    )
    api_key_env: str = "API_KEY"

    # Local storage for the report history
    storage_path: str = Field(
        default_factory=lambda: os.getenv("DEEP_ANALYST_STORAGE", ".deep_analyst/storage.json")
    )
    storage_key: str = "deep_analyst_reports"

    log_level: str = Field(default_factory=lambda: os.getenv("DEEP_ANALYST_LOG_LEVEL", "INFO"))

    def get_api_key(self) -> Optional[str]:
        """Read the API key from the environment at call time."""
        return os.getenv(self.api_key_env) or None


settings = Settings()


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
