"""Capability table location and decoding."""

from capscrape.extraction.handler import ProviderPageHandler
from capscrape.extraction.locators import (
    DEFAULT_LOCATORS,
    FirstTableLocator,
    HeadingTableLocator,
    find_capabilities_table,
)
from capscrape.extraction.table import (
    TableExtraction,
    extract_capabilities,
    parse_capabilities_table,
)

__all__ = [
    "DEFAULT_LOCATORS",
    "FirstTableLocator",
    "HeadingTableLocator",
    "ProviderPageHandler",
    "TableExtraction",
    "extract_capabilities",
    "find_capabilities_table",
    "parse_capabilities_table",
]
