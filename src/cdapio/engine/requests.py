"""Immutable read/write requests built with with_* methods.

Requests are transient: one is built per stage construction call and dropped
once the stage exists. Every with_* call returns a new request; nothing is
mutated in place.

Usage:
    request = (
        ReadRequest()
        .with_descriptor(descriptor)
        .with_plugin_config(config)
        .with_key_type(str)
        .with_value_type(str)
    )
"""

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any, Self

from cdapio.contracts.errors import MissingConfigurationError
from cdapio.plugins.config_base import PluginConfig
from cdapio.plugins.descriptor import PluginDescriptor

if TYPE_CHECKING:
    from cdapio.plugins.manager import PluginManager


def _require(value: Any, field: str) -> None:
    if value is None:
        raise ValueError(f"{field} can not be None")


@dataclass(frozen=True)
class _StageRequest:
    """Fields shared by read and write requests.

    Field order is validation order: validate() reports the first missing one.
    """

    descriptor: PluginDescriptor | None = None
    plugin_config: PluginConfig | None = None
    key_type: type | None = None
    value_type: type | None = None

    def with_descriptor(self, descriptor: PluginDescriptor) -> Self:
        _require(descriptor, "descriptor")
        return replace(self, descriptor=descriptor)

    def with_plugin_class(self, plugin_class: type, manager: "PluginManager") -> Self:
        """Resolve a registered plugin class to a fresh descriptor."""
        _require(plugin_class, "plugin_class")
        return replace(self, descriptor=manager.get_descriptor_by_class(plugin_class))

    def with_plugin_config(self, plugin_config: PluginConfig) -> Self:
        _require(plugin_config, "plugin_config")
        return replace(self, plugin_config=plugin_config)

    def with_key_type(self, key_type: type) -> Self:
        _require(key_type, "key_type")
        return replace(self, key_type=key_type)

    def with_value_type(self, value_type: type) -> Self:
        _require(value_type, "value_type")
        return replace(self, value_type=value_type)

    def validate(self) -> None:
        """Check every required field is present.

        Raises:
            MissingConfigurationError: Naming the first missing field.
        """
        for f in fields(self):
            if getattr(self, f.name) is None:
                raise MissingConfigurationError(f.name)


@dataclass(frozen=True)
class ReadRequest(_StageRequest):
    """Request for a read stage yielding Record[K, V]."""


@dataclass(frozen=True)
class WriteRequest(_StageRequest):
    """Request for a write stage consuming Record[K, V].

    locks_dir_path must not be (or overlap) any directory used for data output.
    """

    locks_dir_path: str | None = None

    def with_locks_dir_path(self, locks_dir_path: str) -> Self:
        _require(locks_dir_path, "locks_dir_path")
        return replace(self, locks_dir_path=str(locks_dir_path))
