"""
capscrape - Crawl provider docs into a model capability registry.

Discovers every provider page linked from a provider index, extracts each
page's model capability table, and writes one versioned JSON snapshot.

Usage:
    capscrape crawl
    capscrape crawl -o ./data/data.json
    capscrape providers
"""

__version__ = "0.1.0"

from capscrape.core.interfaces import (
    PageHandler,
    StorageBackend,
    TableLocator,
)
from capscrape.core.models import (
    CrawlConfig,
    CrawlRequest,
    ModelCapability,
    ProviderData,
    ProviderSummary,
    RegistryData,
    RequestLabel,
)

__all__ = [
    "__version__",
    # Models
    "CrawlConfig",
    "CrawlRequest",
    "ModelCapability",
    "ProviderData",
    "ProviderSummary",
    "RegistryData",
    "RequestLabel",
    # Interfaces
    "PageHandler",
    "StorageBackend",
    "TableLocator",
]
