"""Shared contracts for cross-boundary types.

This package is a LEAF MODULE: it imports nothing from core, plugins or engine
at runtime.
"""

from cdapio.contracts.backends import (
    FormatConfiguration,
    FormatIOBackend,
    OffsetFn,
    ReceiverIOBackend,
    SinkStage,
    SourceStage,
    SynchronizationGate,
)
from cdapio.contracts.enums import PluginKind, PluginType
from cdapio.contracts.errors import (
    CdapIOError,
    ConfigMappingError,
    ConfigurationMismatchError,
    LockDirectoryConflictError,
    MissingConfigurationError,
    UnsupportedOperationError,
)
from cdapio.contracts.records import Record

__all__ = [
    # Backends
    "FormatConfiguration",
    "FormatIOBackend",
    "OffsetFn",
    "ReceiverIOBackend",
    "SinkStage",
    "SourceStage",
    "SynchronizationGate",
    # Enums
    "PluginKind",
    "PluginType",
    # Errors
    "CdapIOError",
    "ConfigMappingError",
    "ConfigurationMismatchError",
    "LockDirectoryConflictError",
    "MissingConfigurationError",
    "UnsupportedOperationError",
    # Records
    "Record",
]
