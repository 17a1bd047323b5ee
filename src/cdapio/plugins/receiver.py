"""Receiver construction and offset extraction for streaming plugins.

Streaming plugins do not expose a format; they declare a receiver class that
pushes elements. The streaming backend needs two things to run one:

- a ReceiverBuilder that constructs the receiver on the worker
- an offset function that extracts a position from each element

Both are derived here from the plugin class, the attached config and the
value type witness. Nothing in this module performs I/O.
"""

from collections import deque
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass, replace
from typing import Any, ClassVar

from cdapio.contracts.backends import OffsetFn
from cdapio.contracts.errors import ConfigurationMismatchError
from cdapio.plugins.config_base import PluginConfig
from cdapio.plugins.protocols import Receiver


def record_offset(element: Any) -> int:
    """Default offset function: read ``offset`` from a mapping or an attribute."""
    if isinstance(element, Mapping):
        return int(element["offset"])
    return int(element.offset)


class BaseReceiver:
    """Convenience base class for hosted receivers.

    Subclasses push elements with store() from on_start() (or from a thread
    started there). The streaming backend drains stored elements in order.

    Attributes:
        value_type: Element type this receiver produces. None means undeclared,
            in which case any value type witness is accepted.
    """

    value_type: ClassVar[type | None] = None

    def __init__(self, config: PluginConfig) -> None:
        self.config = config
        self._buffer: deque[Any] = deque()

    def store(self, value: Any) -> None:
        self._buffer.append(value)

    def drain(self) -> Iterator[Any]:
        while self._buffer:
            yield self._buffer.popleft()

    def on_start(self) -> None:  # noqa: B027 - optional hook
        pass

    def on_stop(self) -> None:  # noqa: B027 - optional hook
        pass


@dataclass(frozen=True)
class ReceiverBuilder:
    """Immutable recipe for constructing a receiver.

    Usage:
        builder = ReceiverBuilder(MyReceiver).with_constructor_args(config)
        receiver = builder.build()
    """

    receiver_class: type[Receiver]
    constructor_args: tuple[Any, ...] = ()

    def with_constructor_args(self, *args: Any) -> "ReceiverBuilder":
        return replace(self, constructor_args=args)

    def build(self) -> Receiver:
        return self.receiver_class(*self.constructor_args)


def _receiver_class_of(plugin_class: type) -> type[Receiver]:
    receiver_class = getattr(plugin_class, "receiver_class", None)
    if not isinstance(receiver_class, type):
        raise ConfigurationMismatchError(f"Streaming plugin {plugin_class.__qualname__} does not declare a receiver_class")
    return receiver_class


def _type_name(t: Any) -> str:
    return t.__qualname__ if isinstance(t, type) else repr(t)


def _check_value_type(receiver_class: type, value_type: type) -> None:
    declared = getattr(receiver_class, "value_type", None)
    if declared is None:
        return
    # Parameterized witnesses such as dict[str, object] are not classes
    if not (isinstance(value_type, type) and isinstance(declared, type) and issubclass(value_type, declared)):
        raise ConfigurationMismatchError(
            f"value type {_type_name(value_type)} does not match {receiver_class.__qualname__}.value_type ({_type_name(declared)})"
        )


def get_receiver_builder(plugin_class: type, config: PluginConfig, value_type: type) -> ReceiverBuilder:
    """Build the receiver recipe for a streaming plugin.

    Raises:
        ConfigurationMismatchError: If the plugin declares no receiver class, or
            the receiver's declared value type disagrees with value_type.
    """
    receiver_class = _receiver_class_of(plugin_class)
    _check_value_type(receiver_class, value_type)
    return ReceiverBuilder(receiver_class).with_constructor_args(config)


def get_offset_fn(plugin_class: type, value_type: type) -> OffsetFn:
    """Resolve the offset function for a streaming plugin.

    Lookup order: plugin_class.get_offset, receiver_class.get_offset,
    then record_offset.
    """
    receiver_class = _receiver_class_of(plugin_class)
    _check_value_type(receiver_class, value_type)

    for owner in (plugin_class, receiver_class):
        fn: Callable[[Any], int] | None = getattr(owner, "get_offset", None)
        if fn is not None:
            if not callable(fn):
                raise ConfigurationMismatchError(f"{owner.__qualname__}.get_offset is not callable")
            return fn
    return record_offset
