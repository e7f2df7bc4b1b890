"""Assembly of the versioned registry snapshot."""

from datetime import datetime
from functools import lru_cache
from typing import Iterable, Optional

from pyuca import Collator

from capscrape.core.models import SNAPSHOT_VERSION, ProviderData, RegistryData, utc_now
from capscrape.core.results import ResultSet


@lru_cache(maxsize=1)
def _collator() -> Collator:
    # Parsing the collation table is slow; do it once per process.
    return Collator()


def display_name_key(provider: ProviderData) -> tuple[tuple[int, ...], str]:
    """Sort key: display name under Unicode collation ignoring case, then slug.

    Collation follows the Unicode Collation Algorithm rather than the process
    locale, so accented names sort next to their base letters regardless of
    LC_COLLATE.
    """
    return (_collator().sort_key(provider.display_name.casefold()), provider.provider)


def sort_providers(providers: Iterable[ProviderData]) -> list[ProviderData]:
    return sorted(providers, key=display_name_key)


def build_snapshot(
    results: ResultSet,
    updated_at: Optional[datetime] = None,
) -> RegistryData:
    """Build the snapshot from a finished crawl.

    Args:
        results: Frozen result set from the orchestrator.
        updated_at: Snapshot timestamp; defaults to now.

    Returns:
        RegistryData with providers sorted by display name.

    Raises:
        RuntimeError: If the crawl that owns the result set is still running.
    """
    if not results.frozen:
        raise RuntimeError("Cannot build a snapshot while the crawl is still running")

    return RegistryData(
        version=SNAPSHOT_VERSION,
        updated_at=updated_at or utc_now(),
        providers=sort_providers(results.values()),
    )
