"""Protocols for the external collaborators the adapter delegates to.

The adapter never moves data itself. It derives configuration and hands it to
one of two backends, which return stages for the host pipeline engine to run:

- FormatIOBackend: bounded, format-based batch I/O
- ReceiverIOBackend: unbounded, receiver-based push I/O

Write stages coordinate concurrent commits through a SynchronizationGate.

These protocols are used for type checking and for documenting the narrow
contract the adapter relies on. Reference in-memory implementations live in
cdapio.testing.
"""

from collections.abc import Callable, Iterable, Iterator, Mapping
from contextlib import AbstractContextManager
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from cdapio.contracts.records import Record

if TYPE_CHECKING:
    from cdapio.plugins.receiver import ReceiverBuilder

# Flat key/value configuration handed to the format backend, e.g.
# {"key.class": str, "value.class": str, "mapreduce.job.inputformat.class": ...}
FormatConfiguration = Mapping[str, Any]

# Extracts a monotonically increasing offset from a streamed element.
OffsetFn = Callable[[Any], int]


@runtime_checkable
class SourceStage[T](Protocol):
    """A constructed read stage.

    Building a stage performs no I/O. Data is only pulled when the host
    engine iterates read().
    """

    name: str

    def read(self) -> Iterator[T]:
        """Yield elements. Unbounded stages may never terminate."""
        ...


@runtime_checkable
class SinkStage[K, V](Protocol):
    """A constructed write stage consuming key/value records."""

    name: str

    def write(self, records: Iterable[Record[K, V]]) -> None:
        """Write all records, committing output under the stage's gate."""
        ...


@runtime_checkable
class SynchronizationGate(Protocol):
    """Directory-scoped mutual exclusion for concurrent write commits.

    acquire() blocks until the resource key is free. Callers must release()
    the key on success and on failure; hold() does both.
    """

    @property
    def directory(self) -> str:
        """Directory the gate keeps its lock state in."""
        ...

    def acquire(self, resource_key: str) -> None: ...

    def release(self, resource_key: str) -> None: ...

    def hold(self, resource_key: str) -> AbstractContextManager[None]: ...


class FormatIOBackend(Protocol):
    """Generic format-based batch I/O engine."""

    def read(self, configuration: FormatConfiguration) -> SourceStage[Record[Any, Any]]: ...

    def write(
        self,
        configuration: FormatConfiguration,
        *,
        partitioned: bool,
        synchronization: SynchronizationGate,
    ) -> SinkStage[Any, Any]: ...


class ReceiverIOBackend(Protocol):
    """Receiver-based streaming I/O engine. Carries values only, no keys."""

    def read(self, offset_fn: OffsetFn, receiver_builder: "ReceiverBuilder") -> SourceStage[Any]: ...
