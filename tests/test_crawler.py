"""Tests for the crawl orchestrator."""

import asyncio
import json

import httpx
import pytest

from capscrape.core.errors import DiscoveryError
from capscrape.core.models import ModelCapability, ProviderData
from capscrape.engine.crawler import CrawlOrchestrator
from conftest import INDEX_URL, FakeSite, capability_page, index_page, provider_url


def _run(config, site):
    crawler = CrawlOrchestrator(config, transport=site.transport)
    snapshot = asyncio.run(crawler.crawl())
    return crawler, snapshot


class TestCrawl:
    """End-to-end crawls against a fake site."""

    def test_full_crawl(self, config, site):
        """Test that every provider ends up in the snapshot, sorted."""
        crawler, snapshot = _run(config, site)

        assert [p.provider for p in snapshot.providers] == ["anthropic", "mistral", "openai"]
        assert [p.display_name for p in snapshot.providers] == ["Anthropic", "mistral", "OpenAI"]

        openai = snapshot.providers[2]
        assert openai.url == provider_url("openai")
        assert openai.columns == ["Vision", "Tools"]
        assert [m.model for m in openai.models] == ["gpt-4o", "gpt-3.5-turbo"]
        assert openai.models[1].capabilities == {"Vision": False, "Tools": True}

        assert crawler.report.requests_total == 4
        assert crawler.report.succeeded == 4
        assert crawler.report.failed == 0

    def test_snapshot_written(self, config, site):
        """Test the persisted JSON shape."""
        _run(config, site)

        data = json.loads(config.output_path.read_text(encoding="utf-8"))
        assert data["version"] == 1
        assert data["updatedAt"].endswith("Z")
        first = data["providers"][0]
        assert set(first) == {
            "provider",
            "displayName",
            "url",
            "columns",
            "models",
            "scrapedAt",
        }
        assert first["models"][0] == {
            "model": "claude-3-opus",
            "capabilities": {"Vision": True, "Tools": True},
        }

    def test_duplicate_links_fetched_once(self, config, site):
        """Test that a provider linked twice is only fetched once."""
        _run(config, site)
        assert site.hits[provider_url("openai")] == 1

    def test_discovery_before_providers(self, config, site):
        """Test that the index is fetched before any provider page."""
        _run(config, site)
        assert site.order[0] == INDEX_URL
        assert site.order.count(INDEX_URL) == 1

    def test_idempotent_apart_from_timestamps(self, config, site):
        """Test that two runs over the same pages give the same data."""

        def strip(snapshot):
            data = snapshot.to_dict()
            data.pop("updatedAt")
            for provider in data["providers"]:
                provider.pop("scrapedAt")
            return data

        _, first = _run(config, site)
        _, second = _run(config, site)
        assert strip(first) == strip(second)

    def test_results_frozen_after_run(self, config, site):
        """Test that the result set refuses writes once the crawl is done."""
        crawler = CrawlOrchestrator(config, transport=site.transport)
        results = asyncio.run(crawler.run())

        assert results.frozen
        with pytest.raises(RuntimeError):
            results.put(ProviderData(provider="late", display_name="Late", url="x"))


class TestFailures:
    """Tests for retry and failure isolation."""

    def test_unreachable_provider_isolated(self, config, site):
        """Test that one dead provider does not affect the others."""
        site.statuses[provider_url("mistral")] = 500

        crawler, snapshot = _run(config, site)

        assert [p.provider for p in snapshot.providers] == ["anthropic", "openai"]
        assert site.hits[provider_url("mistral")] == 3
        assert crawler.report.failed == 1
        assert crawler.report.failures[0]["url"] == provider_url("mistral")
        assert crawler.report.failures[0]["label"] == "provider"

    def test_transient_failure_retried(self, config, site):
        """Test that a request succeeding on retry is kept."""
        site.flaky[provider_url("anthropic")] = 2

        crawler, snapshot = _run(config, site)

        assert "anthropic" in [p.provider for p in snapshot.providers]
        assert site.hits[provider_url("anthropic")] == 3
        assert crawler.report.failed == 0

    def test_retry_count_configurable(self, config, site):
        """Test that max_retries bounds the number of attempts."""
        config.max_retries = 0
        site.statuses[provider_url("openai")] = 503

        _run(config, site)
        assert site.hits[provider_url("openai")] == 1

    def test_missing_table_skipped(self, config, site):
        """Test that a page without a table is left out of the snapshot."""
        site.pages[provider_url("mistral")] = "<html><body><p>Docs coming soon</p></body></html>"

        crawler, snapshot = _run(config, site)

        assert "mistral" not in [p.provider for p in snapshot.providers]
        assert crawler.report.skipped == 1
        assert crawler.report.failed == 0
        assert site.hits[provider_url("mistral")] == 1

    def test_timeout_is_retryable_failure(self, config, site):
        """Test that a hanging request times out and the crawl continues."""
        config.timeout = 0.05
        attempts = 0

        async def handler(request):
            nonlocal attempts
            if str(request.url) == provider_url("openai"):
                attempts += 1
                await asyncio.sleep(1)
            return site.handler(request)

        crawler = CrawlOrchestrator(config, transport=httpx.MockTransport(handler))
        snapshot = asyncio.run(crawler.crawl())

        assert [p.provider for p in snapshot.providers] == ["anthropic", "mistral"]
        assert attempts == 3
        assert "TimeoutError" in crawler.report.failures[0]["error"]

    def test_malformed_links_recorded_without_stalling(self, config):
        """Test that more bad links than workers still let the crawl finish."""
        bad = [(f"/providers/ai-sdk-providers/bad\x7f{i}", f"Bad {i}") for i in range(6)]
        site = FakeSite(
            {
                INDEX_URL: index_page(bad + [("/providers/ai-sdk-providers/openai", "OpenAI")]),
                provider_url("openai"): capability_page([("gpt-4o", True, True)], "OpenAI"),
            }
        )
        crawler = CrawlOrchestrator(config, transport=site.transport)

        snapshot = asyncio.run(asyncio.wait_for(crawler.crawl(), timeout=10))

        assert [p.provider for p in snapshot.providers] == ["openai"]
        assert crawler.report.requests_total == 8
        assert crawler.report.failed == 6
        assert all("InvalidURL" in f["error"] for f in crawler.report.failures)

    def test_unexpected_fetch_error_recorded(self, config, site):
        """Test that a non-HTTP error while fetching fails only that page."""

        def handler(request):
            if str(request.url) == provider_url("anthropic"):
                raise RuntimeError("transport exploded")
            return site.handler(request)

        crawler = CrawlOrchestrator(config, transport=httpx.MockTransport(handler))
        snapshot = asyncio.run(crawler.crawl())

        assert [p.provider for p in snapshot.providers] == ["mistral", "openai"]
        assert crawler.report.failed == 1
        assert crawler.report.failures[0]["url"] == provider_url("anthropic")
        assert "transport exploded" in crawler.report.failures[0]["error"]

    def test_discovery_failure_is_fatal(self, config, site):
        """Test that an unreachable index aborts without writing a snapshot."""
        site.statuses[INDEX_URL] = 503
        crawler = CrawlOrchestrator(config, transport=site.transport)

        with pytest.raises(DiscoveryError, match="could not be crawled"):
            asyncio.run(crawler.crawl())

        assert site.hits[INDEX_URL] == 3
        assert not config.output_path.exists()

    def test_no_providers_is_fatal(self, config):
        """Test that an index without provider links aborts."""
        site = FakeSite({INDEX_URL: index_page([])})
        crawler = CrawlOrchestrator(config, transport=site.transport)

        with pytest.raises(DiscoveryError, match="No providers found"):
            asyncio.run(crawler.crawl())
        assert not config.output_path.exists()

    def test_previous_snapshot_kept_on_discovery_failure(self, config, site):
        """Test that a failed run leaves the last snapshot in place."""
        _run(config, site)
        before = config.output_path.read_text(encoding="utf-8")

        site.statuses[INDEX_URL] = 500
        crawler = CrawlOrchestrator(config, transport=site.transport)
        with pytest.raises(DiscoveryError):
            asyncio.run(crawler.crawl())

        assert config.output_path.read_text(encoding="utf-8") == before


class TestConcurrency:
    """Tests for the worker pool bounds."""

    def test_in_flight_requests_bounded(self, config):
        """Test that no more than max_concurrency requests run at once."""
        slugs = [f"provider-{i:02d}" for i in range(12)]
        pages = {INDEX_URL: index_page([(f"/providers/ai-sdk-providers/{s}", s) for s in slugs])}
        for slug in slugs:
            pages[provider_url(slug)] = capability_page([(f"{slug}-model", True, False)])
        site = FakeSite(pages)

        in_flight = 0
        peak = 0

        async def handler(request):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            try:
                await asyncio.sleep(0.01)
                return site.handler(request)
            finally:
                in_flight -= 1

        crawler = CrawlOrchestrator(config, transport=httpx.MockTransport(handler))
        snapshot = asyncio.run(crawler.crawl())

        assert len(snapshot.providers) == 12
        assert peak == config.max_concurrency == 5

    def test_custom_concurrency(self, config, site):
        """Test that a single worker still drains the frontier."""
        config.max_concurrency = 1
        _, snapshot = _run(config, site)
        assert len(snapshot.providers) == 3


class TestModelCapabilitySupports:
    """Tests for consumers of capability maps."""

    def test_missing_capability_is_false(self):
        """Test that unknown columns read as unsupported."""
        model = ModelCapability("m", {"Vision": True})
        assert model.supports("Vision") is True
        assert model.supports("Audio") is False
