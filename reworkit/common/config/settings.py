from functools import lru_cache
from pathlib import Path
from typing import Tuple

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reworkit.common.config.constants import (
    CYCLE_INTERVAL_SECONDS,
    MAX_SUBMIT_ATTEMPTS,
    REQUEST_TIMEOUT_SECONDS,
    SUBMIT_RETRY_DELAY_SECONDS,
    TREE_DIR_NAME,
)


VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def _validate_log_level(v: str) -> str:
    upper_v = v.upper()
    if upper_v not in VALID_LOG_LEVELS:
        raise ValueError(f"Invalid log level: {v}. Must be one of {VALID_LOG_LEVELS}")
    return upper_v


class CollectorSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REWORKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    url: str = Field(
        default="127.0.0.1:8000",
        description="Bind address of the collector, host:port"
    )
    secret: SecretStr = Field(description="Shared secret expected in the SECRET header")
    store_url: str = Field(
        default="redis://127.0.0.1:6379/0",
        validation_alias=AliasChoices("REWORKIT_STORE_URL", "REWORKIT_REDIS_URL"),
        description="Result store connection string (redis://, sqlite:///, postgresql://, memory://)"
    )
    log_dir: Path = Field(description="Directory receiving decompressed build logs")
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _validate_log_level(v)

    @field_validator("url")
    @classmethod
    def validate_bind_address(cls, v: str) -> str:
        host, sep, port = v.rpartition(":")
        if not sep or not host or not port.isdigit():
            raise ValueError(f"Invalid bind address: {v}. Expected host:port")
        return v

    def get_bind_address(self) -> Tuple[str, int]:
        host, _, port = self.url.rpartition(":")
        return host.strip("[]"), int(port)

    def get_secret(self) -> str:
        return self.secret.get_secret_value()


class WorkerSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REWORKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    workspace: Path = Field(
        validation_alias="REWORKIT_CIEL_WORKSPACE",
        description="CIEL! workspace path"
    )
    arch: str = Field(description="Instance architecture")
    instance: str = Field(
        default="main",
        validation_alias="REWORKIT_CIEL_INSTANCE",
        description="CIEL! instance name"
    )
    url: str = Field(description="ReworkIt! collector url")
    secret_token: SecretStr = Field(description="ReworkIt! secret token")
    retry_attempts: int = Field(default=MAX_SUBMIT_ATTEMPTS, ge=1)
    retry_delay_seconds: float = Field(default=SUBMIT_RETRY_DELAY_SECONDS, ge=0)
    cycle_interval_seconds: float = Field(default=CYCLE_INTERVAL_SECONDS, ge=0)
    request_timeout_seconds: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)
    log_level: str = Field(default="INFO")
    json_logs: bool = Field(default=True)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return _validate_log_level(v)

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def tree_dir(self) -> Path:
        return self.workspace / TREE_DIR_NAME

    def get_secret_token(self) -> str:
        return self.secret_token.get_secret_value()


@lru_cache()
def get_collector_settings() -> CollectorSettings:
    return CollectorSettings()


@lru_cache()
def get_worker_settings() -> WorkerSettings:
    return WorkerSettings()
