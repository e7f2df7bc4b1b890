"""Read-only views over a loaded registry snapshot."""

from typing import Optional

from capscrape.core.models import ProviderData, ProviderSummary, RegistryData


def get_provider(data: RegistryData, slug: str) -> Optional[ProviderData]:
    """Look up a provider by slug."""
    for provider in data.providers:
        if provider.provider == slug:
            return provider
    return None


def available_providers(data: RegistryData) -> list[str]:
    """Slugs of all providers, in snapshot order."""
    return [p.provider for p in data.providers]


def summarize(data: RegistryData) -> list[ProviderSummary]:
    """Per-provider summary without model rows, in snapshot order."""
    return [
        ProviderSummary(
            provider=p.provider,
            display_name=p.display_name,
            model_count=len(p.models),
            columns=list(p.columns),
            scraped_at=p.scraped_at,
        )
        for p in data.providers
    ]
