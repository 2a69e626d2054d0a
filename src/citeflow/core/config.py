"""Application configuration using pydantic-settings with grouped env prefixes."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings

from citeflow.core.exceptions import ConfigurationError


class WorkerConfig(BaseSettings):
    """Worker pool and rate limit configuration."""

    model_config = {"env_prefix": "CITEFLOW_WORKER_", "env_file": ".env", "extra": "ignore"}

    count: int = Field(default=4, ge=1)
    min_gap_seconds: float = Field(default=1.0, ge=0)
    strict_rate_limit: bool = False
    visibility_extension_seconds: int = Field(default=30, ge=0, le=43200)
    channel_size: int = Field(default=10, ge=1)
    services: Literal["live", "mock"] = "live"


class S3Config(BaseSettings):
    """S3 document storage configuration."""

    model_config = {"env_prefix": "CITEFLOW_S3_", "env_file": ".env", "extra": "ignore"}

    bucket: str = "citeflow-documents"
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override


class SQSConfig(BaseSettings):
    """SQS work queue configuration."""

    model_config = {"env_prefix": "CITEFLOW_SQS_", "env_file": ".env", "extra": "ignore"}

    queue_url: str = ""
    region: str = "us-east-1"
    endpoint_url: str | None = None  # LocalStack override
    wait_time_seconds: int = Field(default=20, ge=0, le=20)
    max_messages: int = Field(default=10, ge=1, le=10)


class GrobidConfig(BaseSettings):
    """GROBID extraction service configuration."""

    model_config = {"env_prefix": "CITEFLOW_GROBID_", "env_file": ".env", "extra": "ignore"}

    base_url: str = "http://localhost:8070"
    timeout: int = 60
    consolidate_header: bool = False


class CrossRefConfig(BaseSettings):
    """CrossRef REST API configuration."""

    model_config = {"env_prefix": "CITEFLOW_CROSSREF_", "env_file": ".env", "extra": "ignore"}

    base_url: str = "https://api.crossref.org"
    mailto: str = ""  # polite pool contact address
    timeout: int = 20
    cache_ttl: int = 86400


class RedisConfig(BaseSettings):
    """Redis cache configuration for enrichment lookups."""

    model_config = {"env_prefix": "CITEFLOW_REDIS_", "env_file": ".env", "extra": "ignore"}

    enabled: bool = False
    host: str = "localhost"
    port: int = 6379
    db: int = 0


class AppSettings(BaseSettings):
    """Root application settings aggregating all sub-configs."""

    model_config = {"env_prefix": "CITEFLOW_", "env_file": ".env", "extra": "ignore"}

    environment: Literal["dev", "uat", "prod"] = "dev"
    log_level: str = "INFO"

    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    s3: S3Config = Field(default_factory=S3Config)
    sqs: SQSConfig = Field(default_factory=SQSConfig)
    grobid: GrobidConfig = Field(default_factory=GrobidConfig)
    crossref: CrossRefConfig = Field(default_factory=CrossRefConfig)
    redis: RedisConfig = Field(default_factory=RedisConfig)


def load_settings() -> AppSettings:
    """Build settings from the environment, raising ConfigurationError when invalid."""
    try:
        return AppSettings()
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
