# tests/conftest.py
"""Shared test fixtures.

Hosted plugin fixtures live in tests/helpers/hosted_plugins.py; the fixtures
below wire them into descriptors, requests and in-memory backends.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=debug pytest tests/property/
"""

import logging
import os
from collections.abc import Iterator
from unittest.mock import MagicMock

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from cdapio.contracts.records import Record
from cdapio.engine.requests import ReadRequest, WriteRequest
from cdapio.plugins.descriptor import PluginDescriptor
from cdapio.testing import InMemoryFormatBackend, InMemoryReceiverBackend
from tests.helpers.hosted_plugins import (
    TextBatchSink,
    TextBatchSource,
    TextInputFormat,
    TextInputFormatProvider,
    TextOutputFormat,
    TextOutputFormatProvider,
    TextSinkConfig,
    TextSourceConfig,
    TickerConfig,
    TickerStreamingSource,
)

settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    deadline=None,
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))


@pytest.fixture(autouse=True)
def _reset_logging() -> Iterator[None]:
    """Undo configure_logging() calls made by CLI and logging tests."""
    yield
    structlog.reset_defaults()
    root = logging.getLogger()
    root.handlers = []
    root.setLevel(logging.WARNING)


# === Descriptors ===


@pytest.fixture
def source_descriptor() -> PluginDescriptor:
    return PluginDescriptor.create_batch(TextBatchSource, TextInputFormat, TextInputFormatProvider)


@pytest.fixture
def sink_descriptor() -> PluginDescriptor:
    return PluginDescriptor.create_batch(TextBatchSink, TextOutputFormat, TextOutputFormatProvider)


@pytest.fixture
def streaming_descriptor() -> PluginDescriptor:
    return PluginDescriptor.create_streaming(TickerStreamingSource)


# === Requests ===


@pytest.fixture
def bounded_read_request(source_descriptor: PluginDescriptor) -> ReadRequest:
    return (
        ReadRequest()
        .with_descriptor(source_descriptor)
        .with_plugin_config(TextSourceConfig(path="/data/in.txt"))
        .with_key_type(str)
        .with_value_type(str)
    )


@pytest.fixture
def unbounded_read_request(streaming_descriptor: PluginDescriptor) -> ReadRequest:
    return (
        ReadRequest()
        .with_descriptor(streaming_descriptor)
        .with_plugin_config(TickerConfig(count=3))
        .with_key_type(str)
        .with_value_type(dict)
    )


@pytest.fixture
def bounded_write_request(sink_descriptor: PluginDescriptor, tmp_path) -> WriteRequest:
    return (
        WriteRequest()
        .with_descriptor(sink_descriptor)
        .with_plugin_config(TextSinkConfig(output_dir=str(tmp_path / "out")))
        .with_key_type(str)
        .with_value_type(str)
        .with_locks_dir_path(str(tmp_path / "locks"))
    )


# === Backends ===


@pytest.fixture
def format_backend() -> InMemoryFormatBackend:
    return InMemoryFormatBackend([Record("k1", "v1"), Record("k2", "v2")])


@pytest.fixture
def receiver_backend() -> InMemoryReceiverBackend:
    return InMemoryReceiverBackend()


@pytest.fixture
def mock_format_backend() -> MagicMock:
    return MagicMock(name="format_backend")


@pytest.fixture
def mock_receiver_backend() -> MagicMock:
    return MagicMock(name="receiver_backend")
