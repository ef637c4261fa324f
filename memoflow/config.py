"""Simplified configuration management."""

import os
from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel, Field


def _load_env_file() -> None:
    """Load .env from root directory if present."""
    env_path = Path(__file__).parent.parent / ".env"
    if not env_path.is_file():
        return
    try:
        for line in env_path.read_text(encoding="utf-8").splitlines():
            stripped = line.strip()
            if stripped and not stripped.startswith("#") and "=" in stripped:
                key, value = stripped.split("=", 1)
                key, value = key.strip(), value.strip().strip("'\"")
                if key and value and key not in os.environ:
                    os.environ[key] = value
    except OSError:
        pass


_load_env_file()


DEFAULT_APP_NAME = "memoflow"
DEFAULT_APP_VERSION = "0.1.0"
DEFAULT_LLM_BASE_URL = "https://openrouter.ai/api/v1"
_DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"


def _env_int(name: str, fallback: int) -> int:
    try:
        return int(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _env_float(name: str, fallback: float) -> float:
    try:
        return float(os.getenv(name, str(fallback)))
    except (TypeError, ValueError):
        return fallback


def _get_port() -> int:
    """Get server port, checking the platform PORT first, then MEMOFLOW_PORT."""
    port = os.getenv("PORT") or os.getenv("MEMOFLOW_PORT")
    if port:
        try:
            return int(port)
        except ValueError:
            pass
    return 8787


class Settings(BaseModel):
    """Application settings with lightweight env fallbacks."""

    # App metadata
    app_name: str = Field(default=DEFAULT_APP_NAME)
    app_version: str = Field(default=DEFAULT_APP_VERSION)

    # Server runtime
    server_host: str = Field(default=os.getenv("MEMOFLOW_HOST", "0.0.0.0"))
    server_port: int = Field(default_factory=_get_port)

    # Storage
    data_dir: Path = Field(default=Path(os.getenv("MEMOFLOW_DATA_DIR", str(_DEFAULT_DATA_DIR))))
    store_timeout_seconds: float = Field(default=_env_float("STORE_TIMEOUT_SECONDS", 5.0))

    # Inference
    llm_api_key: Optional[str] = Field(default=os.getenv("LLM_API_KEY"))
    llm_base_url: str = Field(default=os.getenv("LLM_BASE_URL", DEFAULT_LLM_BASE_URL))
    chat_model: str = Field(default=os.getenv("CHAT_MODEL", "meta-llama/llama-3.1-8b-instruct"))
    summarizer_model: str = Field(default=os.getenv("SUMMARIZER_MODEL", "meta-llama/llama-3.1-8b-instruct"))
    inference_timeout_seconds: float = Field(default=_env_float("INFERENCE_TIMEOUT_SECONDS", 60.0))

    # Workflows
    workflow_max_concurrency: int = Field(default=_env_int("WORKFLOW_MAX_CONCURRENCY", 4))
    workflow_timeout_seconds: float = Field(default=_env_float("WORKFLOW_TIMEOUT_SECONDS", 300.0))
    fetch_timeout_seconds: float = Field(default=_env_float("FETCH_TIMEOUT_SECONDS", 20.0))
    summary_max_input_chars: int = Field(default=_env_int("SUMMARY_MAX_INPUT_CHARS", 12000))

    # HTTP behaviour
    cors_allow_origins_raw: str = Field(default=os.getenv("MEMOFLOW_CORS_ALLOW_ORIGINS", "*"))
    enable_docs: bool = Field(default=os.getenv("MEMOFLOW_ENABLE_DOCS", "1") != "0")
    docs_url: Optional[str] = Field(default=os.getenv("MEMOFLOW_DOCS_URL", "/docs"))

    @property
    def cors_allow_origins(self) -> List[str]:
        """Parse CORS origins from comma-separated string."""
        if self.cors_allow_origins_raw.strip() in {"", "*"}:
            return ["*"]
        return [origin.strip() for origin in self.cors_allow_origins_raw.split(",") if origin.strip()]

    @property
    def resolved_docs_url(self) -> Optional[str]:
        """Return documentation URL when docs are enabled."""
        return (self.docs_url or "/docs") if self.enable_docs else None

    @property
    def memory_db_path(self) -> Path:
        return self.data_dir / "memory.db"

    @property
    def workflow_db_path(self) -> Path:
        return self.data_dir / "workflows.db"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
