from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class CascadeMergeMode(str, Enum):
    CONCURRENT = "concurrent"       # Roots run together, chains merged as a set
    SEQUENTIAL = "sequential"       # Roots run one by one, chain order kept


class Settings(BaseSettings):
    # LLM Settings
    ollama_host: str = "http://localhost:11434"
    narrator_model: str = "mistral:7b"
    llm_timeout: float = 30.0
    narrator_enabled: bool = False

    # Logging
    log_level: str = "INFO"
    log_file: Path | None = None
    enable_color: bool = True

    # Cascade
    cascade_merge_mode: CascadeMergeMode = CascadeMergeMode.CONCURRENT
    cascade_timeout_seconds: float | None = None

    # Narrator quota
    quota_hourly_limit: int = 100
    quota_reset_minutes: float = 60.0
    quota_backoff_minutes: float = 5.0
    quota_max_consecutive_errors: int = 3

    # Game Settings
    random_seed: int | None = None

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TURNLOOM_", extra="ignore")

settings = Settings()
