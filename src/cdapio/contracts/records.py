"""Key/value element type carried by every read and write stage."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Record[K, V]:
    """Immutable key/value pair.

    Bounded reads yield records whose key and value types match the key/value
    type witnesses of the request. Unbounded reads carry no key: their records
    always have ``key=None`` (see engine.read.ReadAdapter).
    """

    key: K
    value: V

    @classmethod
    def of(cls, key: K, value: V) -> Record[K, V]:
        return cls(key, value)

    def as_tuple(self) -> tuple[K, V]:
        return (self.key, self.value)
