# src/cdapio/plugins/descriptor.py
"""PluginDescriptor: which hosted plugin to run and how to configure its backend.

A descriptor is built with one of two constructors, and that choice is its
classification for life:

    PluginDescriptor.create_batch(plugin, format, provider)  -> BOUNDED
    PluginDescriptor.create_streaming(plugin)                -> UNBOUNDED

Bounded descriptors derive a flat format configuration for the batch
backend in two steps, both re-run from scratch on every build:

    descriptor.with_config(cfg).with_format_configuration(str, str).prepare_run()
    descriptor.format_configuration  # {"key.class": str, ...} once prepare_run() succeeds

Derived state is owned by the descriptor instance and never shared. A
descriptor is single-owner: re-attaching configuration concurrently is not
supported.
"""

from dataclasses import dataclass
from pathlib import PurePath
from types import MappingProxyType
from typing import Any

from cdapio.contracts.backends import FormatConfiguration
from cdapio.contracts.enums import PluginKind, PluginType
from cdapio.contracts.errors import (
    ConfigurationMismatchError,
    MissingConfigurationError,
    UnsupportedOperationError,
)
from cdapio.core.logging import get_logger
from cdapio.plugins.config_base import PluginConfig
from cdapio.plugins.context import BatchSinkContext, BatchSourceContext

logger = get_logger(__name__)

# Format configuration keys understood by the format backend
INPUT_FORMAT_CLASS = "mapreduce.job.inputformat.class"
INPUT_KEY_CLASS = "key.class"
INPUT_VALUE_CLASS = "value.class"
OUTPUT_FORMAT_CLASS = "mapreduce.job.outputformat.class"
OUTPUT_KEY_CLASS = "mapreduce.job.output.key.class"
OUTPUT_VALUE_CLASS = "mapreduce.job.output.value.class"
OUTPUT_DIR = "mapreduce.output.fileoutputformat.outputdir"


@dataclass(frozen=True, slots=True)
class _FormatKeys:
    format_class: str
    key_class: str
    value_class: str


_FORMAT_KEYS: dict[PluginType, _FormatKeys] = {
    PluginType.BATCH_SOURCE: _FormatKeys(INPUT_FORMAT_CLASS, INPUT_KEY_CLASS, INPUT_VALUE_CLASS),
    PluginType.BATCH_SINK: _FormatKeys(OUTPUT_FORMAT_CLASS, OUTPUT_KEY_CLASS, OUTPUT_VALUE_CLASS),
}


def qualified_name(cls: type) -> str:
    return f"{cls.__module__}.{cls.__qualname__}"


def declared_plugin_type(plugin_class: type) -> PluginType:
    raw = getattr(plugin_class, "plugin_type", None)
    if raw is None:
        raise ConfigurationMismatchError(f"Plugin class {plugin_class.__qualname__} does not declare a plugin_type")
    try:
        return PluginType(raw)
    except ValueError as e:
        raise ConfigurationMismatchError(f"Plugin class {plugin_class.__qualname__} declares unknown plugin_type {raw!r}") from e


def _check_declared_type(side: str, format_class: type, declared: Any, requested: type) -> None:
    """Check a key/value type witness against the format's declared type."""
    if declared is None:
        return
    if not (isinstance(requested, type) and isinstance(declared, type) and issubclass(requested, declared)):
        raise ConfigurationMismatchError(
            f"{side} type {getattr(requested, '__qualname__', requested)!s} does not match "
            f"{format_class.__qualname__}.{side}_type ({getattr(declared, '__qualname__', declared)!s})"
        )


class PluginDescriptor:
    """A hosted plugin plus its classification and derived backend configuration.

    Do not instantiate directly; use create_batch() or create_streaming().

    Attributes:
        plugin_class: Hosted plugin implementation class
        format_class: Input/output format class (bounded only)
        format_provider_class: Format provider class (bounded only)
    """

    __slots__ = (
        "_base_configuration",
        "_config",
        "_format_configuration",
        "_kind",
        "_plugin_type",
        "format_class",
        "format_provider_class",
        "plugin_class",
    )

    def __init__(
        self,
        plugin_class: type,
        plugin_type: PluginType,
        kind: PluginKind,
        format_class: type | None = None,
        format_provider_class: type | None = None,
    ) -> None:
        self.plugin_class = plugin_class
        self.format_class = format_class
        self.format_provider_class = format_provider_class
        self._plugin_type = plugin_type
        self._kind = kind
        self._config: PluginConfig | None = None
        self._base_configuration: dict[str, Any] | None = None
        self._format_configuration: dict[str, Any] | None = None

    # === Constructors ===

    @classmethod
    def create_batch(
        cls,
        plugin_class: type,
        format_class: type,
        format_provider_class: type,
    ) -> "PluginDescriptor":
        """Create a bounded descriptor for a batch source or batch sink.

        Raises:
            ConfigurationMismatchError: If plugin_class is not a batch plugin.
        """
        plugin_type = declared_plugin_type(plugin_class)
        if plugin_type.kind is not PluginKind.BOUNDED:
            raise ConfigurationMismatchError(
                f"{plugin_class.__qualname__} is a {plugin_type} plugin; use PluginDescriptor.create_streaming()"
            )
        return cls(plugin_class, plugin_type, PluginKind.BOUNDED, format_class, format_provider_class)

    @classmethod
    def create_streaming(cls, plugin_class: type) -> "PluginDescriptor":
        """Create an unbounded descriptor for a streaming source.

        Raises:
            ConfigurationMismatchError: If plugin_class is not a streaming source
                or declares no receiver_class.
        """
        plugin_type = declared_plugin_type(plugin_class)
        if plugin_type.kind is not PluginKind.UNBOUNDED:
            raise ConfigurationMismatchError(
                f"{plugin_class.__qualname__} is a {plugin_type} plugin; use PluginDescriptor.create_batch()"
            )
        if not isinstance(getattr(plugin_class, "receiver_class", None), type):
            raise ConfigurationMismatchError(f"Streaming plugin {plugin_class.__qualname__} does not declare a receiver_class")
        return cls(plugin_class, plugin_type, PluginKind.UNBOUNDED)

    # === Classification ===

    @property
    def kind(self) -> PluginKind:
        return self._kind

    @property
    def plugin_type(self) -> PluginType:
        return self._plugin_type

    @property
    def is_unbounded(self) -> bool:
        return self._kind is PluginKind.UNBOUNDED

    @property
    def name(self) -> str:
        return self.plugin_class.__qualname__

    # === Configuration ===

    def with_config(self, config: PluginConfig) -> "PluginDescriptor":
        """Attach the plugin's typed configuration.

        Returns:
            self, for chaining.
        """
        if config is None:
            raise MissingConfigurationError("plugin_config")
        self._config = config
        return self

    @property
    def config(self) -> PluginConfig:
        """Attached configuration.

        Raises:
            MissingConfigurationError: If with_config() was never called.
        """
        if self._config is None:
            raise MissingConfigurationError("plugin_config")
        return self._config

    def with_format_configuration(self, key_type: type, value_type: type) -> "PluginDescriptor":
        """Derive the base format configuration scoped by key/value type witnesses.

        Discards any previously derived configuration; format_configuration
        is available again once prepare_run() succeeds.

        Raises:
            UnsupportedOperationError: If this descriptor is unbounded.
            ConfigurationMismatchError: If the format class declares key/value
                types that the witnesses do not satisfy.
        """
        format_class = self._bounded_format_class()
        _check_declared_type("key", format_class, getattr(format_class, "key_type", None), key_type)
        _check_declared_type("value", format_class, getattr(format_class, "value_type", None), value_type)

        keys = _FORMAT_KEYS[self._plugin_type]
        self._base_configuration = {
            keys.format_class: format_class,
            keys.key_class: key_type,
            keys.value_class: value_type,
        }
        self._format_configuration = None
        return self

    def _bounded_format_class(self) -> type:
        if self.is_unbounded or self.format_class is None:
            raise UnsupportedOperationError(f"{self.name} is unbounded and has no format configuration")
        return self.format_class

    def prepare_run(self, arguments: dict[str, Any] | None = None) -> "PluginDescriptor":
        """Run the hosted plugin's prepare_run() and merge its format properties.

        Instantiates the plugin with the attached config, hands it a fresh
        source/sink context, and validates the format provider it registers.

        Args:
            arguments: Runtime arguments exposed to the plugin via its context.

        Returns:
            self, for chaining.

        Raises:
            MissingConfigurationError: If no config is attached or
                with_format_configuration() has not been called.
            ConfigurationMismatchError: If the plugin registers no provider, a
                provider of the wrong class, a different format class, or
                properties that would override the format class keys.
        """
        format_class = self._bounded_format_class()
        config = self.config
        if self._base_configuration is None:
            raise MissingConfigurationError("format_configuration")

        stage_name = config.reference_name or self.name
        context: BatchSourceContext | BatchSinkContext
        if self._plugin_type is PluginType.BATCH_SOURCE:
            context = BatchSourceContext(stage_name, arguments)
        else:
            context = BatchSinkContext(stage_name, arguments)

        plugin = self.plugin_class(config)
        plugin.prepare_run(context)

        provider = context.format_provider
        if provider is None:
            raise ConfigurationMismatchError(f"{self.name}.prepare_run() did not register a format provider")
        if self.format_provider_class is not None and not isinstance(provider, self.format_provider_class):
            raise ConfigurationMismatchError(
                f"{self.name} registered a {type(provider).__qualname__}, expected {self.format_provider_class.__qualname__}"
            )

        provided_name = getattr(provider, "format_class_name", None)
        if provided_name is not None and provided_name not in (qualified_name(format_class), format_class.__qualname__):
            raise ConfigurationMismatchError(
                f"{self.name} provides format {provided_name!r}, but the descriptor declares {qualified_name(format_class)!r}"
            )

        keys = _FORMAT_KEYS[self._plugin_type]
        reserved = {keys.format_class, keys.key_class, keys.value_class}
        properties = dict(getattr(provider, "format_configuration", None) or {})
        overridden = sorted(reserved & properties.keys())
        if overridden:
            raise ConfigurationMismatchError(f"{self.name} format provider must not set reserved keys: {', '.join(overridden)}")

        # Published only once every provider check has passed
        self._format_configuration = {**self._base_configuration, **properties}
        logger.debug(
            "plugin_prepared",
            plugin=self.name,
            plugin_type=str(self._plugin_type),
            format_properties=len(properties),
        )
        return self

    @property
    def format_configuration(self) -> FormatConfiguration:
        """Read-only view of the configuration derived by the last successful prepare_run().

        Raises:
            MissingConfigurationError: If nothing has been derived yet.
        """
        if self._format_configuration is None:
            raise MissingConfigurationError("format_configuration")
        return MappingProxyType(dict(self._format_configuration))

    def output_dir(self) -> PurePath | None:
        """Output directory from the derived configuration, if the provider set one."""
        if self._format_configuration is None:
            return None
        raw = self._format_configuration.get(OUTPUT_DIR)
        return PurePath(str(raw)) if raw else None

    def __repr__(self) -> str:
        return f"PluginDescriptor({self.name}, kind={self._kind}, plugin_type={self._plugin_type})"
