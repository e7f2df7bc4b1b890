"""Dispatch of fetched pages to the handler registered for their label."""

from typing import Iterable, Optional

from capscrape.core.interfaces import PageHandler
from capscrape.core.models import CrawlRequest, FetchedPage, RequestLabel
from capscrape.core.results import ResultSet


class PageRouter:
    """Route fetched pages to handlers by request label."""

    def __init__(self, handlers: Optional[Iterable[PageHandler]] = None) -> None:
        self._handlers: dict[RequestLabel, PageHandler] = {}
        for handler in handlers or ():
            self.register(handler)

    @classmethod
    def default(cls) -> "PageRouter":
        """Router wired with the standard discovery and provider handlers."""
        # Lazy imports keep the engine free of extraction dependencies.
        from capscrape.discovery.providers import ProviderIndexDiscovery
        from capscrape.extraction.handler import ProviderPageHandler

        return cls([ProviderIndexDiscovery(), ProviderPageHandler()])

    def register(self, handler: PageHandler) -> None:
        """Register a handler, replacing any existing one for its label."""
        self._handlers[handler.label] = handler

    def route(self, page: FetchedPage, results: ResultSet) -> list[CrawlRequest]:
        """Hand a page to its handler.

        Args:
            page: Fetched page.
            results: Shared result set for the current run.

        Returns:
            Follow-up requests produced by the handler.

        Raises:
            KeyError: If no handler is registered for the page's label.
        """
        label = page.request.label
        handler = self._handlers.get(label)
        if handler is None:
            raise KeyError(f"No handler registered for label {label.value!r}")
        return handler.handle(page, results)
