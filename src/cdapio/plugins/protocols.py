# src/cdapio/plugins/protocols.py
"""Protocols describing hosted plugins as the adapter sees them.

Hosted plugins are classes written for the hosted data-integration platform.
The adapter only relies on the small surface below. These protocols are used
for type checking, not runtime enforcement: descriptors check the few
attributes they depend on when they are created.

Plugin Types:
- Batch source: registers an input format provider in prepare_run()
- Batch sink: registers an output format provider in prepare_run()
- Streaming source: declares the receiver class that pushes its elements
"""

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar, Protocol, runtime_checkable

from cdapio.contracts.enums import PluginType

if TYPE_CHECKING:
    from cdapio.plugins.config_base import PluginConfig
    from cdapio.plugins.context import BatchSinkContext, BatchSourceContext


@runtime_checkable
class FormatProvider(Protocol):
    """Supplies the format class name and format properties for a batch plugin.

    Example:
        class TableInputFormatProvider:
            format_class_name = "example.formats.TableInputFormat"

            def __init__(self, table: str) -> None:
                self.format_configuration = {"example.table": table}
    """

    format_class_name: str
    format_configuration: Mapping[str, Any]


class BatchSourcePlugin(Protocol):
    """Hosted batch source.

    Lifecycle (driven by PluginDescriptor.prepare_run()):
    1. __init__(config) - instantiated with the attached config
    2. prepare_run(ctx) - must call ctx.set_input(provider)
    """

    plugin_type: ClassVar[PluginType]

    def __init__(self, config: "PluginConfig") -> None: ...

    def prepare_run(self, context: "BatchSourceContext") -> None: ...


class BatchSinkPlugin(Protocol):
    """Hosted batch sink.

    Lifecycle (driven by PluginDescriptor.prepare_run()):
    1. __init__(config) - instantiated with the attached config
    2. prepare_run(ctx) - must call ctx.add_output(provider)
    """

    plugin_type: ClassVar[PluginType]

    def __init__(self, config: "PluginConfig") -> None: ...

    def prepare_run(self, context: "BatchSinkContext") -> None: ...


class Receiver(Protocol):
    """Push-based receiver constructed by a ReceiverBuilder.

    The streaming backend calls on_start(), drains whatever the receiver
    stored, and calls on_stop() when the stream ends. See receiver.BaseReceiver.
    """

    def on_start(self) -> None: ...

    def on_stop(self) -> None: ...

    def drain(self) -> Iterator[Any]: ...


class StreamingSourcePlugin(Protocol):
    """Hosted streaming source.

    Declares the receiver that pushes its elements. May declare a get_offset
    static method; otherwise receiver.record_offset is used.
    """

    plugin_type: ClassVar[PluginType]
    receiver_class: ClassVar[type[Receiver]]
