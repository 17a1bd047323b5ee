"""Stage construction: requests, adapters, synchronization gates."""

from cdapio.engine.read import ReadAdapter
from cdapio.engine.requests import ReadRequest, WriteRequest
from cdapio.engine.stages import MappedStage
from cdapio.engine.synchronization import (
    DirectorySynchronizationGate,
    InMemorySynchronizationGate,
)
from cdapio.engine.write import WriteAdapter

__all__ = [
    "DirectorySynchronizationGate",
    "InMemorySynchronizationGate",
    "MappedStage",
    "ReadAdapter",
    "ReadRequest",
    "WriteAdapter",
    "WriteRequest",
]
