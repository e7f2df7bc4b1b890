"""Core models and interfaces for capscrape."""

from capscrape.core.errors import (
    CapscrapeError,
    DiscoveryError,
    FetchError,
    PageSkipped,
    SnapshotReadError,
    SnapshotWriteError,
)
from capscrape.core.interfaces import PageHandler, StorageBackend, TableLocator
from capscrape.core.models import (
    CrawlConfig,
    CrawlReport,
    CrawlRequest,
    FetchedPage,
    ModelCapability,
    ProviderData,
    ProviderSummary,
    RegistryData,
    RequestLabel,
    ScrapeStatus,
)
from capscrape.core.results import ResultSet

__all__ = [
    "CrawlConfig",
    "CrawlReport",
    "CrawlRequest",
    "FetchedPage",
    "ModelCapability",
    "ProviderData",
    "ProviderSummary",
    "RegistryData",
    "RequestLabel",
    "ScrapeStatus",
    "ResultSet",
    "PageHandler",
    "StorageBackend",
    "TableLocator",
    "CapscrapeError",
    "DiscoveryError",
    "FetchError",
    "PageSkipped",
    "SnapshotReadError",
    "SnapshotWriteError",
]
