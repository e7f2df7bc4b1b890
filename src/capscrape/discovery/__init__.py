"""Discovery of provider pages."""

from capscrape.discovery.providers import ProviderIndexDiscovery

__all__ = ["ProviderIndexDiscovery"]
