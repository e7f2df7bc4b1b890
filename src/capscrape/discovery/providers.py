"""Discovery of provider pages from the provider index page."""

import logging
from typing import Optional
from urllib.parse import urljoin, urlparse, urlunparse

from bs4 import BeautifulSoup

from capscrape.core.interfaces import PageHandler
from capscrape.core.models import CrawlRequest, FetchedPage, RequestLabel
from capscrape.core.results import ResultSet

logger = logging.getLogger(__name__)


class ProviderIndexDiscovery(PageHandler):
    """Find provider links on the index page and fan out one request each."""

    def __init__(self, listing_path: Optional[str] = None) -> None:
        """Initialize the discovery handler.

        Args:
            listing_path: Path prefix that provider links live under.
                Defaults to the path of the index page being handled.
        """
        self._listing_path = listing_path.rstrip("/") if listing_path else None

    @property
    def label(self) -> RequestLabel:
        return RequestLabel.DISCOVERY

    def handle(self, page: FetchedPage, results: ResultSet) -> list[CrawlRequest]:
        logger.info("Discovering providers from %s", page.url)

        requests = self.discover(page.html, page.url)

        logger.info(
            "Found %d providers: %s",
            len(requests),
            ", ".join(r.slug for r in requests) or "-",
        )
        return requests

    def discover(self, html: str, index_url: str) -> list[CrawlRequest]:
        """Extract deduplicated provider requests from index HTML.

        Args:
            html: Raw HTML of the index page.
            index_url: URL the index was fetched from; used to resolve links.

        Returns:
            One provider request per unique slug, in document order.
        """
        parsed_index = urlparse(index_url)
        prefix = self._listing_path or parsed_index.path.rstrip("/")

        soup = BeautifulSoup(html, "html.parser")
        seen: set[str] = set()
        requests: list[CrawlRequest] = []

        for a in soup.find_all("a", href=True):
            href = a["href"].strip()
            if href.startswith(("javascript:", "mailto:", "tel:", "#")):
                continue

            target = urlparse(urljoin(index_url, href))
            if target.netloc != parsed_index.netloc:
                continue

            # Only links below the listing path; the listing itself is the self-link.
            if not target.path.startswith(prefix + "/"):
                continue

            slug = target.path.split("/")[-1]
            if not slug:
                continue

            if slug in seen:
                continue
            seen.add(slug)

            display_name = a.get_text().strip() or slug
            url = urlunparse(target._replace(query="", fragment=""))

            requests.append(
                CrawlRequest(
                    url=url,
                    label=RequestLabel.PROVIDER,
                    context={"slug": slug, "display_name": display_name},
                )
            )

        return requests
