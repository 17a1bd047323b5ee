"""Entry points for building hosted-plugin read and write stages.

Usage:
    import cdapio

    request = (
        cdapio.read()
        .with_descriptor(PluginDescriptor.create_batch(MySource, MyInputFormat, MyInputFormatProvider))
        .with_plugin_config(resolve_config(MySourceConfig, params))
        .with_key_type(str)
        .with_value_type(str)
    )
    stage = cdapio.build_read(request, format_backend=..., receiver_backend=...)
"""

from typing import Any

from cdapio.contracts.backends import FormatIOBackend, ReceiverIOBackend, SinkStage, SourceStage
from cdapio.contracts.records import Record
from cdapio.core.config import WriteSettings
from cdapio.engine.read import ReadAdapter
from cdapio.engine.requests import ReadRequest, WriteRequest
from cdapio.engine.synchronization import DirectorySynchronizationGate
from cdapio.engine.write import GateFactory, WriteAdapter


def read() -> ReadRequest:
    """Start an empty read request."""
    return ReadRequest()


def write() -> WriteRequest:
    """Start an empty write request."""
    return WriteRequest()


def build_read(
    request: ReadRequest,
    *,
    format_backend: FormatIOBackend,
    receiver_backend: ReceiverIOBackend,
) -> SourceStage[Record[Any, Any]]:
    """Build a read stage. See ReadAdapter.build_read()."""
    return ReadAdapter(format_backend, receiver_backend).build_read(request)


def build_write(
    request: WriteRequest,
    *,
    format_backend: FormatIOBackend,
    settings: WriteSettings | None = None,
    gate_factory: GateFactory = DirectorySynchronizationGate,
) -> SinkStage[Any, Any]:
    """Build a write stage. See WriteAdapter.build_write().

    Args:
        settings: Write defaults; partitioning is taken from here when given.
    """
    settings = settings or WriteSettings()
    adapter = WriteAdapter(format_backend, gate_factory=gate_factory, partitioned=settings.partitioned)
    return adapter.build_write(request)
