"""OpenStack control-plane access (client, records, error taxonomy)."""
from .client import CloudClient, OpenStackClient
from .errors import ProviderError

__all__ = ["CloudClient", "OpenStackClient", "ProviderError"]
