"""
cdapio: run hosted data-integration plugins as pipeline read/write stages.

Batch plugins are routed to a format-based I/O backend, streaming plugins to
a receiver-based backend. The adapter builds stages; it never moves data.
"""

__version__ = "0.1.0"

from cdapio.io import build_read, build_write, read, write  # noqa: E402

__all__ = ["__version__", "build_read", "build_write", "read", "write"]
