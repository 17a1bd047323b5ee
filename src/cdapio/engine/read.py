# src/cdapio/engine/read.py
"""ReadAdapter: builds a read stage for a hosted plugin.

Dispatch is on the descriptor's classification:

    UNBOUNDED -> receiver backend, values wrapped as Record(None, value)
    BOUNDED   -> format backend, configured from the descriptor's
                 derived format configuration

Unbounded plugins carry no key. Their records always have key None; this is
a deliberate narrowing of Record[K, V], not something to hide from callers.

Building a stage performs no I/O against the data source and executes
nothing. All construction errors surface here, before the host engine
commits resources.
"""

from typing import Any

from cdapio.contracts.backends import FormatIOBackend, ReceiverIOBackend, SourceStage
from cdapio.contracts.enums import PluginKind, PluginType
from cdapio.contracts.errors import ConfigurationMismatchError
from cdapio.contracts.records import Record
from cdapio.core.logging import get_logger
from cdapio.engine.requests import ReadRequest
from cdapio.engine.stages import MappedStage, null_key_record
from cdapio.plugins.descriptor import PluginDescriptor
from cdapio.plugins.receiver import get_offset_fn, get_receiver_builder

logger = get_logger(__name__)


class ReadAdapter:
    """Builds read stages against a pair of backends.

    Usage:
        adapter = ReadAdapter(format_backend, receiver_backend)
        stage = adapter.build_read(request)
        for record in stage.read():  # run by the host engine
            ...
    """

    def __init__(self, format_backend: FormatIOBackend, receiver_backend: ReceiverIOBackend) -> None:
        self._format_backend = format_backend
        self._receiver_backend = receiver_backend

    def build_read(self, request: ReadRequest) -> SourceStage[Record[Any, Any]]:
        """Build a read stage yielding key/value records.

        Raises:
            MissingConfigurationError: If a required request field is absent.
                No backend is touched in that case.
            ConfigurationMismatchError: If declared types disagree with the
                plugin's format/receiver, or a sink plugin is used for reading.
        """
        request.validate()
        descriptor = request.descriptor
        config = request.plugin_config
        key_type = request.key_type
        value_type = request.value_type
        # validate() guarantees these; narrowing for type checkers
        assert descriptor is not None and config is not None
        assert key_type is not None and value_type is not None

        descriptor.with_config(config)

        stage: SourceStage[Record[Any, Any]]
        match descriptor.kind:
            case PluginKind.UNBOUNDED:
                stage = self._build_unbounded(descriptor, value_type)
            case PluginKind.BOUNDED:
                stage = self._build_bounded(descriptor, key_type, value_type)

        logger.debug(
            "read_stage_built",
            plugin=descriptor.name,
            kind=str(descriptor.kind),
            key_type=key_type.__qualname__,
            value_type=value_type.__qualname__,
            stage=stage.name,
        )
        return stage

    def _build_unbounded(self, descriptor: PluginDescriptor, value_type: type) -> SourceStage[Record[Any, Any]]:
        offset_fn = get_offset_fn(descriptor.plugin_class, value_type)
        receiver_builder = get_receiver_builder(descriptor.plugin_class, descriptor.config, value_type)
        values = self._receiver_backend.read(offset_fn, receiver_builder)
        return MappedStage(values, null_key_record)

    def _build_bounded(self, descriptor: PluginDescriptor, key_type: type, value_type: type) -> SourceStage[Record[Any, Any]]:
        if descriptor.plugin_type is not PluginType.BATCH_SOURCE:
            raise ConfigurationMismatchError(f"{descriptor.name} is a {descriptor.plugin_type} plugin and cannot be read from")
        descriptor.with_format_configuration(key_type, value_type).prepare_run()
        return self._format_backend.read(descriptor.format_configuration)
