# src/cdapio/plugins/manager.py
"""Plugin manager for hosted plugin registration and lookup.

Uses pluggy for hook-based registration. Lookup is by plugin class, which is
how request builders resolve ReadRequest.with_plugin_class().
"""

from dataclasses import dataclass
from typing import Any

import pluggy

from cdapio.contracts.enums import PluginKind, PluginType
from cdapio.core.logging import get_logger
from cdapio.plugins.descriptor import PluginDescriptor, declared_plugin_type
from cdapio.plugins.hookspecs import PROJECT_NAME, CdapIOPluginSpec

logger = get_logger(__name__)


@dataclass(frozen=True)
class PluginRegistration:
    """Registration record for a hosted plugin.

    Frozen: registrations are shared, descriptors created from them are not.
    """

    plugin_class: type
    kind: PluginKind
    format_class: type | None = None
    format_provider_class: type | None = None

    @classmethod
    def batch(cls, plugin_class: type, format_class: type, format_provider_class: type) -> "PluginRegistration":
        return cls(plugin_class, PluginKind.BOUNDED, format_class, format_provider_class)

    @classmethod
    def streaming(cls, plugin_class: type) -> "PluginRegistration":
        return cls(plugin_class, PluginKind.UNBOUNDED)

    @property
    def name(self) -> str:
        return self.plugin_class.__qualname__

    @property
    def plugin_type(self) -> PluginType | None:
        """Declared plugin type, or None if the class declares none.

        Raises:
            ConfigurationMismatchError: If the declared type is not a known PluginType.
        """
        if getattr(self.plugin_class, "plugin_type", None) is None:
            return None
        return declared_plugin_type(self.plugin_class)

    def create_descriptor(self) -> PluginDescriptor:
        """Create a new descriptor. Each call returns a distinct instance."""
        if self.kind is PluginKind.UNBOUNDED:
            return PluginDescriptor.create_streaming(self.plugin_class)
        if self.format_class is None or self.format_provider_class is None:
            raise ValueError(f"Batch registration for {self.name} requires format_class and format_provider_class")
        return PluginDescriptor.create_batch(self.plugin_class, self.format_class, self.format_provider_class)


class PluginManager:
    """Manages hosted plugin registration and lookup.

    Usage:
        manager = PluginManager()
        manager.register(SalesforcePlugins())

        descriptor = manager.get_descriptor_by_class(SalesforceBatchSource)
    """

    def __init__(self) -> None:
        self._pm = pluggy.PluginManager(PROJECT_NAME)
        self._pm.add_hookspecs(CdapIOPluginSpec)

        # Keyed by plugin class for duplicate detection and lookup
        self._registrations: dict[type, PluginRegistration] = {}

    def register(self, plugin: Any) -> None:
        """Register an object implementing cdapio_get_plugins.

        Raises:
            ValueError: If a plugin class is registered twice
        """
        self._pm.register(plugin)
        try:
            self._refresh_cache()
        except ValueError:
            # Leave the manager as it was before the failed registration
            self._pm.unregister(plugin)
            raise

    def _refresh_cache(self) -> None:
        new_registrations: dict[type, PluginRegistration] = {}
        for registrations in self._pm.hook.cdapio_get_plugins():
            for registration in registrations:
                existing = new_registrations.get(registration.plugin_class)
                if existing is not None:
                    raise ValueError(f"Duplicate plugin registration: '{registration.name}'")
                new_registrations[registration.plugin_class] = registration

        self._registrations = new_registrations
        logger.debug("plugin_registry_refreshed", plugins=len(new_registrations))

    def get_registrations(self) -> list[PluginRegistration]:
        """Get all registrations, sorted by plugin name."""
        return sorted(self._registrations.values(), key=lambda r: r.name)

    def get_registration(self, plugin_class: type) -> PluginRegistration | None:
        return self._registrations.get(plugin_class)

    def get_descriptor_by_class(self, plugin_class: type) -> PluginDescriptor:
        """Create a new descriptor for a registered plugin class.

        Raises:
            ValueError: If plugin_class is not registered.
        """
        registration = self._registrations.get(plugin_class)
        if registration is None:
            raise ValueError(f"No plugin registered for class {plugin_class.__qualname__}")
        return registration.create_descriptor()
