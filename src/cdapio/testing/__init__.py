"""In-memory backends and instrumented gates for exercising adapter-built stages."""

from cdapio.testing.backends import (
    COMMIT_KEY,
    InMemoryFormatBackend,
    InMemoryReceiverBackend,
    InMemoryReceiverStage,
    InMemorySinkStage,
    InMemorySourceStage,
)
from cdapio.testing.gates import InstrumentedGate

__all__ = [
    "COMMIT_KEY",
    "InMemoryFormatBackend",
    "InMemoryReceiverBackend",
    "InMemoryReceiverStage",
    "InMemorySinkStage",
    "InMemorySourceStage",
    "InstrumentedGate",
]
