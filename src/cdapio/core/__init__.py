"""Core infrastructure: settings and logging."""

from cdapio.core.config import (
    CdapIOSettings,
    LoggingSettings,
    WriteSettings,
    load_settings,
)
from cdapio.core.logging import (
    configure_logging,
    get_logger,
)

__all__ = [
    "CdapIOSettings",
    "LoggingSettings",
    "WriteSettings",
    "configure_logging",
    "get_logger",
    "load_settings",
]
