"""Decoding of model capability tables.

Expected shape:

- The first column holds the model name, usually inside a ``<code>`` tag.
- Every other column is a capability.
- A supported capability is drawn as an icon, so a cell counts as ``True``
  when it contains an ``<svg>`` element.
"""

from dataclasses import dataclass, field
from typing import Optional, Sequence

from bs4 import BeautifulSoup, Tag

from capscrape.core.interfaces import TableLocator
from capscrape.core.models import ModelCapability
from capscrape.extraction.locators import DEFAULT_LOCATORS, find_capabilities_table


@dataclass
class TableExtraction:
    """Columns and model rows decoded from one table."""

    columns: list[str] = field(default_factory=list)
    models: list[ModelCapability] = field(default_factory=list)


def parse_capabilities_table(table: Tag) -> TableExtraction:
    """Decode a located capability table.

    Args:
        table: The ``<table>`` element.

    Returns:
        TableExtraction; zero models means the table held nothing usable.
    """
    columns = _parse_columns(table)
    models: list[ModelCapability] = []

    # Only body rows count. A table without <tbody> yields no models.
    for body in table.find_all("tbody"):
        for row in body.find_all("tr", recursive=False):
            model = _parse_row(row, columns)
            if model is not None:
                models.append(model)

    return TableExtraction(columns=columns, models=models)


def extract_capabilities(
    html: str,
    locators: Sequence[TableLocator] = DEFAULT_LOCATORS,
) -> Optional[TableExtraction]:
    """Locate and decode the capability table in an HTML document.

    Args:
        html: Raw HTML.
        locators: Table location rules, tried in order.

    Returns:
        TableExtraction, or None if the document has no table at all.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = find_capabilities_table(soup, locators)
    if table is None:
        return None
    return parse_capabilities_table(table)


def _parse_columns(table: Tag) -> list[str]:
    columns: list[str] = []

    thead = table.find("thead")
    if thead is not None:
        columns = _header_names(thead.find_all("th"))

    if not columns:
        first_row = table.find("tr")
        if first_row is not None:
            columns = _header_names(first_row.find_all(["td", "th"], recursive=False))

    return columns


def _header_names(cells: list[Tag]) -> list[str]:
    # The first cell labels the model column.
    names = []
    for cell in cells[1:]:
        text = cell.get_text().strip()
        if text:
            names.append(text)
    return names


def _parse_row(row: Tag, columns: list[str]) -> Optional[ModelCapability]:
    cells = row.find_all("td", recursive=False)
    if not cells:
        return None

    first = cells[0]
    model_name = "".join(code.get_text() for code in first.find_all("code")).strip()
    if not model_name:
        model_name = first.get_text().strip()
    if not model_name:
        return None

    capabilities: dict[str, bool] = {}
    for offset, cell in enumerate(cells[1:]):
        if offset >= len(columns):
            break
        capabilities[columns[offset]] = cell.find("svg") is not None

    return ModelCapability(model=model_name, capabilities=capabilities)
