"""pluggy hook specifications for registering hosted plugins.

Hosted plugins are registered explicitly; there is no folder or classpath
scanning. A registration module implements the hook below and is passed to
PluginManager.register().

Usage (registering plugins):
    from cdapio.plugins.hookspecs import hookimpl
    from cdapio.plugins.manager import PluginRegistration

    class SalesforcePlugins:
        @hookimpl
        def cdapio_get_plugins(self):
            return [
                PluginRegistration.batch(SalesforceBatchSource, SalesforceInputFormat, SalesforceInputFormatProvider),
                PluginRegistration.streaming(SalesforceStreamingSource),
            ]

Note: @hookspec defines the hook interface (done here).
      @hookimpl marks plugin implementations of those hooks.
"""

from typing import TYPE_CHECKING

import pluggy

if TYPE_CHECKING:
    from cdapio.plugins.manager import PluginRegistration

# Project name for pluggy
PROJECT_NAME = "cdapio"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)

hookimpl = pluggy.HookimplMarker(PROJECT_NAME)


class CdapIOPluginSpec:
    """Hook specifications for hosted plugin registration."""

    @hookspec
    def cdapio_get_plugins(self) -> list["PluginRegistration"]:  # type: ignore[empty-body]
        """Return hosted plugin registrations.

        Returns:
            List of PluginRegistration records (classes, not instances)
        """
