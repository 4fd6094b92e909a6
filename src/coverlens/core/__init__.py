"""Core module exports."""

from coverlens.core.errors import (
    ConfigError,
    CoverLensError,
    ErrorCode,
    InvalidArgumentError,
    ReportError,
)
from coverlens.core.logging import (
    clear_query_id,
    configure_logging,
    get_logger,
    get_query_id,
    set_query_id,
)

__all__ = [
    # Errors
    "ConfigError",
    "CoverLensError",
    "ErrorCode",
    "InvalidArgumentError",
    "ReportError",
    # Logging
    "clear_query_id",
    "configure_logging",
    "get_logger",
    "get_query_id",
    "set_query_id",
]
