from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GOLFSEARCH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Search space
    min_length: int = 0
    max_length: int = 1000
    alphabet: str = "default"  # Preset name, see engine.alphabet.ALPHABETS
    charset: Optional[str] = None  # Literal alphabet, overrides the preset

    # Toolchain
    language: str = "c"
    compile_command: Optional[list[str]] = None  # Overrides the language table
    run_command: Optional[list[str]] = None
    compile_timeout_seconds: float = 30.0

    # Execution
    timeout_seconds: float = 1.0  # Per test vector
    stop_on_first_mismatch: bool = False
    work_dir: str = "/tmp"

    # Output
    verbose: bool = False
    progress_interval: int = 10000  # Candidates between progress log lines

    # Metrics
    metrics_enabled: bool = True
    metrics_file: Optional[str] = None

    @field_validator("min_length", "max_length", mode="after")
    @classmethod
    def check_length(cls, v: int) -> int:
        if v < 0:
            raise ValueError("length must not be negative")
        return v

    @field_validator("timeout_seconds", "compile_timeout_seconds", mode="after")
    @classmethod
    def check_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("language", mode="after")
    @classmethod
    def normalize_language(cls, v: str) -> str:
        return v.strip().lower()


@lru_cache
def get_settings() -> Settings:
    return Settings()

