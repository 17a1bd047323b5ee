"""Hosted plugin support: descriptors, configs, registration via pluggy.

- Config base classes: PluginConfig and the parameter resolver
- Descriptor: classification and format configuration derivation
- Contexts: handed to hosted batch plugins in prepare_run()
- Receiver: receiver builders and offset functions for streaming plugins
- Manager/Hookspecs: explicit pluggy-based registration
"""

from cdapio.plugins.config_base import (
    PluginConfig,
    load_params,
    resolve_config,
)
from cdapio.plugins.context import BatchSinkContext, BatchSourceContext
from cdapio.plugins.descriptor import PluginDescriptor
from cdapio.plugins.hookspecs import hookimpl, hookspec
from cdapio.plugins.manager import PluginManager, PluginRegistration
from cdapio.plugins.receiver import (
    BaseReceiver,
    ReceiverBuilder,
    get_offset_fn,
    get_receiver_builder,
    record_offset,
)

__all__ = [  # Grouped by category for readability
    # Config
    "PluginConfig",
    "load_params",
    "resolve_config",
    # Contexts
    "BatchSinkContext",
    "BatchSourceContext",
    # Descriptor
    "PluginDescriptor",
    # Registration
    "PluginManager",
    "PluginRegistration",
    "hookimpl",
    "hookspec",
    # Receivers
    "BaseReceiver",
    "ReceiverBuilder",
    "get_offset_fn",
    "get_receiver_builder",
    "record_offset",
]
