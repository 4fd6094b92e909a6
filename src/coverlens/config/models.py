"""Pydantic configuration models with env var support.

Configuration Hierarchy (highest to lowest precedence):
1. Direct kwargs to load_config()
2. Environment variables (COVERLENS__SECTION__KEY)
3. Project YAML (coverlens.yaml)
4. Global YAML (~/.config/coverlens/config.yaml)
5. Built-in defaults (this file)

Environment Variable Format:
    COVERLENS__<SECTION>__<KEY>=<VALUE>

Examples:
    COVERLENS__LOGGING__LEVEL=DEBUG
    COVERLENS__PROVIDER__MAX_WORKERS=2
    COVERLENS__REPORT__SKIP_COMPILER_GENERATED=true
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LogOutputConfig(BaseModel):
    """Single logging output configuration."""

    format: Literal["json", "console"] = "console"
    destination: str = "stderr"  # stderr, stdout, or absolute file path
    level: LogLevel | None = None  # Inherits from parent if None

    @field_validator("destination")
    @classmethod
    def validate_destination(cls, v: str) -> str:
        if v in ("stderr", "stdout"):
            return v
        path = Path(v).expanduser()
        if not path.is_absolute():
            raise ValueError(f"File destination must be absolute path: {v}")
        return str(path)


class LoggingConfig(BaseModel):
    """Logging configuration.

    Env vars:
        COVERLENS__LOGGING__LEVEL: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """

    level: LogLevel = Field(
        default="INFO",
        description="Root log level. DEBUG logs one event per query.",
    )
    outputs: list[LogOutputConfig] = Field(default_factory=lambda: [LogOutputConfig()])


class ProviderConfig(BaseModel):
    """Coverage provider configuration.

    Env vars:
        COVERLENS__PROVIDER__MAX_WORKERS: Worker threads for coverage queries
    """

    max_workers: int = Field(
        default=1,
        description="Worker threads used to compute file coverage and trees off the "
        "caller's event loop.",
    )
    thread_name_prefix: str = Field(
        default="coverlens-query",
        description="Name prefix for query worker threads.",
    )

    @field_validator("max_workers")
    @classmethod
    def validate_max_workers(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_workers must be >= 1, got {v}")
        return v


class ReportConfig(BaseModel):
    """Report loading configuration.

    Env vars:
        COVERLENS__REPORT__SKIP_COMPILER_GENERATED: Drop lambda methods on load
    """

    skip_compiler_generated: bool = Field(
        default=False,
        description="Drop compiler-generated lambda methods (<Outer>b__0) when loading "
        "OpenCover XML.",
    )


class CoverLensConfig(BaseModel):
    """Root configuration model."""

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    provider: ProviderConfig = Field(default_factory=ProviderConfig)
    report: ReportConfig = Field(default_factory=ReportConfig)
