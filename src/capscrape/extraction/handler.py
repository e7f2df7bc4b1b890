"""Provider-page handler: turns a fetched provider page into ProviderData."""

import logging
from typing import Optional, Sequence

from capscrape.core.errors import PageSkipped
from capscrape.core.interfaces import PageHandler, TableLocator
from capscrape.core.models import (
    CrawlRequest,
    FetchedPage,
    ProviderData,
    RequestLabel,
    utc_now,
)
from capscrape.core.results import ResultSet
from capscrape.extraction.locators import DEFAULT_LOCATORS
from capscrape.extraction.table import extract_capabilities

logger = logging.getLogger(__name__)


class ProviderPageHandler(PageHandler):
    """Extract the capability table from a provider page."""

    def __init__(self, locators: Optional[Sequence[TableLocator]] = None) -> None:
        self._locators = tuple(locators) if locators else DEFAULT_LOCATORS

    @property
    def label(self) -> RequestLabel:
        return RequestLabel.PROVIDER

    def handle(self, page: FetchedPage, results: ResultSet) -> list[CrawlRequest]:
        request = page.request
        display_name = request.display_name

        logger.info("Scraping %s (%s)", display_name, request.url)

        extraction = extract_capabilities(page.html, self._locators)
        if extraction is None:
            raise PageSkipped(f"No capabilities table found for {display_name}")

        if not extraction.models:
            raise PageSkipped(f"No models found for {display_name}")

        logger.info(
            "Found %d models for %s (columns: %s)",
            len(extraction.models),
            display_name,
            ", ".join(extraction.columns) or "-",
        )

        results.put(
            ProviderData(
                provider=request.slug,
                display_name=display_name,
                url=request.url,
                columns=extraction.columns,
                models=extraction.models,
                scraped_at=utc_now(),
            )
        )
        return []

