"""Rules for finding the capability table on a provider page.

Provider pages are written independently, so there is no single reliable
selector. Each rule below is tried in order and the first one that finds a
table wins.
"""

from typing import Optional, Sequence

from bs4 import BeautifulSoup, Tag

from capscrape.core.interfaces import TableLocator


class HeadingTableLocator(TableLocator):
    """Find the first table after a heading mentioning model capabilities."""

    def __init__(
        self,
        phrase: str = "Model Capabilities",
        heading_levels: Sequence[str] = ("h2", "h3"),
    ) -> None:
        """Initialize the locator.

        Args:
            phrase: Text the heading must contain.
            heading_levels: Heading tags to consider.
        """
        self._phrase = phrase
        self._heading_levels = list(heading_levels)

    @property
    def name(self) -> str:
        return "heading"

    def locate(self, soup: BeautifulSoup) -> Optional[Tag]:
        heading = None
        for candidate in soup.find_all(self._heading_levels):
            if self._phrase in candidate.get_text():
                heading = candidate
                break

        if heading is None:
            return None

        # Nearest following table in document order, not just siblings.
        return heading.find_next("table")


class FirstTableLocator(TableLocator):
    """Fall back to the first table in the document."""

    @property
    def name(self) -> str:
        return "first_table"

    def locate(self, soup: BeautifulSoup) -> Optional[Tag]:
        return soup.find("table")


DEFAULT_LOCATORS: tuple[TableLocator, ...] = (
    HeadingTableLocator(),
    FirstTableLocator(),
)


def find_capabilities_table(
    soup: BeautifulSoup,
    locators: Sequence[TableLocator] = DEFAULT_LOCATORS,
) -> Optional[Tag]:
    """Return the first table any locator finds, or None."""
    for locator in locators:
        table = locator.locate(soup)
        if table is not None:
            return table
    return None
