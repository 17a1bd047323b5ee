# src/cdapio/engine/write.py
"""WriteAdapter: builds a write stage for a hosted plugin.

Only bounded (batch sink) plugins can be written to. Streaming plugins have
no write path; asking for one is a permanent UnsupportedOperationError.

Write stages are built with partitioned output and a SynchronizationGate
bound to the request's locks directory. Concurrent write tasks of the stage
acquire the gate before committing output and release it afterwards.
"""

import os
from collections.abc import Callable
from pathlib import Path, PurePath
from typing import Any

from cdapio.contracts.backends import FormatIOBackend, SinkStage, SynchronizationGate
from cdapio.contracts.enums import PluginKind, PluginType
from cdapio.contracts.errors import (
    ConfigurationMismatchError,
    LockDirectoryConflictError,
    UnsupportedOperationError,
)
from cdapio.core.logging import get_logger
from cdapio.engine.requests import WriteRequest
from cdapio.engine.synchronization import DirectorySynchronizationGate
from cdapio.plugins.descriptor import PluginDescriptor

logger = get_logger(__name__)

GateFactory = Callable[[str], SynchronizationGate]


def _normalized(path: str | PurePath) -> Path:
    # Lexical only: absolute against the cwd with ".." collapsed, no filesystem access
    return Path(os.path.abspath(path))


def _overlaps(a: str | PurePath, b: str | PurePath) -> bool:
    first, second = _normalized(a), _normalized(b)
    return first == second or first.is_relative_to(second) or second.is_relative_to(first)


class WriteAdapter:
    """Builds write stages against a format backend.

    Usage:
        adapter = WriteAdapter(format_backend)
        stage = adapter.build_write(request)
        stage.write(records)  # run by the host engine

    Args:
        format_backend: Batch backend that produces the write stage
        gate_factory: Builds the gate for a locks directory
        partitioned: Enable output partitioning (default True)
    """

    def __init__(
        self,
        format_backend: FormatIOBackend,
        *,
        gate_factory: GateFactory = DirectorySynchronizationGate,
        partitioned: bool = True,
    ) -> None:
        self._format_backend = format_backend
        self._gate_factory = gate_factory
        self._partitioned = partitioned

    def build_write(self, request: WriteRequest) -> SinkStage[Any, Any]:
        """Build a write stage consuming key/value records.

        Raises:
            MissingConfigurationError: If a required request field is absent.
            UnsupportedOperationError: If the descriptor is unbounded. Never retry.
            ConfigurationMismatchError: If declared types disagree with the
                plugin's format, or a source plugin is used for writing.
            LockDirectoryConflictError: If the locks directory overlaps the
                output directory.
        """
        request.validate()
        descriptor = request.descriptor
        config = request.plugin_config
        key_type = request.key_type
        value_type = request.value_type
        locks_dir_path = request.locks_dir_path
        # validate() guarantees these; narrowing for type checkers
        assert descriptor is not None and config is not None and locks_dir_path is not None
        assert key_type is not None and value_type is not None

        descriptor.with_config(config)

        match descriptor.kind:
            case PluginKind.UNBOUNDED:
                raise UnsupportedOperationError("streaming write not supported")
            case PluginKind.BOUNDED:
                stage = self._build_bounded(descriptor, key_type, value_type, locks_dir_path)

        logger.debug(
            "write_stage_built",
            plugin=descriptor.name,
            key_type=key_type.__qualname__,
            value_type=value_type.__qualname__,
            locks_dir=locks_dir_path,
            partitioned=self._partitioned,
            stage=stage.name,
        )
        return stage

    def _build_bounded(
        self,
        descriptor: PluginDescriptor,
        key_type: type,
        value_type: type,
        locks_dir_path: str,
    ) -> SinkStage[Any, Any]:
        if descriptor.plugin_type is not PluginType.BATCH_SINK:
            raise ConfigurationMismatchError(f"{descriptor.name} is a {descriptor.plugin_type} plugin and cannot be written to")

        descriptor.with_format_configuration(key_type, value_type).prepare_run()

        output_dir = descriptor.output_dir()
        if output_dir is not None and _overlaps(locks_dir_path, output_dir):
            raise LockDirectoryConflictError(locks_dir_path, str(output_dir))

        gate = self._gate_factory(locks_dir_path)
        return self._format_backend.write(
            descriptor.format_configuration,
            partitioned=self._partitioned,
            synchronization=gate,
        )
