"""Abstract interfaces for capscrape."""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from bs4 import BeautifulSoup, Tag

from capscrape.core.models import CrawlRequest, FetchedPage, RegistryData, RequestLabel
from capscrape.core.results import ResultSet


class TableLocator(ABC):
    """A single rule for finding the capability table in a document."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the name of this locator."""
        ...

    @abstractmethod
    def locate(self, soup: BeautifulSoup) -> Optional[Tag]:
        """Find the capability table.

        Args:
            soup: Parsed document.

        Returns:
            The matching table element, or None if this rule does not apply.
        """
        ...


class PageHandler(ABC):
    """Handles fetched pages carrying one request label."""

    @property
    @abstractmethod
    def label(self) -> RequestLabel:
        """Return the label this handler is responsible for."""
        ...

    @abstractmethod
    def handle(self, page: FetchedPage, results: ResultSet) -> list[CrawlRequest]:
        """Process a fetched page.

        Args:
            page: The fetched page.
            results: Shared result set for the current run.

        Returns:
            Follow-up requests to enqueue (possibly empty).
        """
        ...


class StorageBackend(ABC):
    """Abstract base class for snapshot storage."""

    @abstractmethod
    async def save_snapshot(self, data: RegistryData, path: Path) -> None:
        """Persist a snapshot, fully replacing any previous one.

        Args:
            data: Snapshot to save.
            path: Target path.
        """
        ...

    @abstractmethod
    async def load_snapshot(self, path: Path) -> Optional[RegistryData]:
        """Load a snapshot.

        Args:
            path: Snapshot path.

        Returns:
            The snapshot if it exists, None otherwise.
        """
        ...
