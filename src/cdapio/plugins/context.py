"""Contexts handed to hosted batch plugins during prepare_run().

Hosted plugins describe their I/O by registering a format provider with the
context rather than by returning it. The descriptor reads the registered
provider back after prepare_run() returns.
"""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from cdapio.contracts.errors import ConfigurationMismatchError
from cdapio.plugins.protocols import FormatProvider


class _BatchContext:
    """Shared state for batch source/sink contexts.

    Attributes:
        stage_name: Name of the stage being prepared (the plugin's reference name)
        arguments: Read-only runtime arguments visible to the plugin
    """

    def __init__(self, stage_name: str, arguments: Mapping[str, Any] | None = None) -> None:
        self.stage_name = stage_name
        self.arguments: Mapping[str, Any] = MappingProxyType(dict(arguments or {}))
        self._format_provider: FormatProvider | None = None

    @property
    def format_provider(self) -> FormatProvider | None:
        """Provider registered by the plugin, or None if it registered nothing."""
        return self._format_provider

    def _register(self, provider: FormatProvider, verb: str) -> None:
        if self._format_provider is not None:
            raise ConfigurationMismatchError(
                f"Plugin for stage '{self.stage_name}' called {verb}() more than once; only a single format provider is supported"
            )
        self._format_provider = provider


class BatchSourceContext(_BatchContext):
    """Context passed to BatchSourcePlugin.prepare_run()."""

    def set_input(self, provider: FormatProvider) -> None:
        """Register the input format provider for this source."""
        self._register(provider, "set_input")


class BatchSinkContext(_BatchContext):
    """Context passed to BatchSinkPlugin.prepare_run()."""

    def add_output(self, provider: FormatProvider) -> None:
        """Register the output format provider for this sink."""
        self._register(provider, "add_output")
