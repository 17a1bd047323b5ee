"""Kinds and types used across subsystem boundaries.

PluginKind is the adapter's own classification (which backend a plugin is
routed to). PluginType mirrors the hosted platform's plugin type annotation,
which hosted plugin classes declare in their ``plugin_type`` class attribute.
"""

from enum import StrEnum


class PluginKind(StrEnum):
    """Runtime classification of a plugin descriptor.

    Fixed by the constructor used to build the descriptor:
    PluginDescriptor.create_batch() -> BOUNDED,
    PluginDescriptor.create_streaming() -> UNBOUNDED.
    """

    BOUNDED = "bounded"
    UNBOUNDED = "unbounded"


class PluginType(StrEnum):
    """Hosted platform plugin type.

    Values match the hosted platform's type identifiers.
    """

    BATCH_SOURCE = "batchsource"
    BATCH_SINK = "batchsink"
    STREAMING_SOURCE = "streamingsource"

    @property
    def kind(self) -> PluginKind:
        """Backend classification implied by this plugin type."""
        if self is PluginType.STREAMING_SOURCE:
            return PluginKind.UNBOUNDED
        return PluginKind.BOUNDED
