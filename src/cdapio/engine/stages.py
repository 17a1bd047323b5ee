"""Stage wrappers applied by the adapters on top of backend stages."""

from collections.abc import Callable, Iterator
from typing import Any

from cdapio.contracts.backends import SourceStage
from cdapio.contracts.records import Record


class MappedStage[T, U]:
    """Source stage that applies fn to every element of an inner stage.

    Lazy: nothing is read until read() is iterated.
    """

    def __init__(self, inner: SourceStage[T], fn: Callable[[T], U], *, name: str | None = None) -> None:
        self.inner = inner
        self.fn = fn
        self.name = name or f"{inner.name}/map"

    def read(self) -> Iterator[U]:
        for element in self.inner.read():
            yield self.fn(element)


def null_key_record(value: Any) -> Record[None, Any]:
    """Wrap a keyless streamed value as a record with key None."""
    return Record(None, value)
