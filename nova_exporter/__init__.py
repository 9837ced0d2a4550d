"""Nova team exporter: OpenStack compute metrics with team enrichment."""

from .version import __version__, get_version

__all__ = ["__version__", "get_version"]
