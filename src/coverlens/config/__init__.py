"""Config module exports."""

from coverlens.config.loader import load_config
from coverlens.config.models import (
    CoverLensConfig,
    LoggingConfig,
    LogOutputConfig,
    ProviderConfig,
    ReportConfig,
)

__all__ = [
    "load_config",
    "CoverLensConfig",
    "LoggingConfig",
    "LogOutputConfig",
    "ProviderConfig",
    "ReportConfig",
]
