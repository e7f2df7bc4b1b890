"""Keyed accumulation of provider results during a crawl."""

import logging
from typing import Iterator

from capscrape.core.models import ProviderData

logger = logging.getLogger(__name__)


class ResultSet:
    """Provider results keyed by slug.

    Handlers write into it while the crawl is running; once the orchestrator
    freezes it, it is read-only and belongs to the snapshot builder.
    """

    def __init__(self) -> None:
        self._items: dict[str, ProviderData] = {}
        self._frozen = False

    def put(self, data: ProviderData) -> None:
        """Store a provider result, replacing any earlier one for the same slug."""
        if self._frozen:
            raise RuntimeError("ResultSet is frozen; the crawl has already finished")
        if data.provider in self._items:
            logger.warning("Provider %r was scraped twice; keeping the later result", data.provider)
        self._items[data.provider] = data

    def get(self, slug: str) -> ProviderData | None:
        return self._items.get(slug)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def values(self) -> list[ProviderData]:
        return list(self._items.values())

    def __contains__(self, slug: object) -> bool:
        return slug in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)
