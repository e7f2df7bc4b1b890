"""Pytest configuration and fixtures."""

import tempfile
from collections import Counter
from datetime import datetime, timezone
from pathlib import Path

import httpx
import pytest

from capscrape.core.models import (
    CrawlConfig,
    ModelCapability,
    ProviderData,
    RegistryData,
)

BASE_URL = "https://docs.test"
INDEX_URL = f"{BASE_URL}/providers/ai-sdk-providers"


def provider_url(slug: str) -> str:
    return f"{INDEX_URL}/{slug}"


def capability_page(rows: list[tuple[str, bool, bool]], title: str = "Provider") -> str:
    """Provider page with a Vision/Tools capability table."""
    icon = '<svg viewBox="0 0 24 24"><path d="M5 13l4 4L19 7"></path></svg>'
    body = "".join(
        f"<tr><td><code>{model}</code></td>"
        f"<td>{icon if vision else ''}</td>"
        f"<td>{icon if tools else ''}</td></tr>"
        for model, vision, tools in rows
    )
    return f"""
    <html>
    <body>
        <h1>{title}</h1>
        <h2>Model Capabilities</h2>
        <table>
            <thead><tr><th>Model</th><th>Vision</th><th>Tools</th></tr></thead>
            <tbody>{body}</tbody>
        </table>
    </body>
    </html>
    """


def index_page(links: list[tuple[str, str]]) -> str:
    """Index page linking to the given (href, text) pairs."""
    anchors = "\n".join(f'<li><a href="{href}">{text}</a></li>' for href, text in links)
    return f"""
    <html>
    <body>
        <nav>
            <a href="/providers/ai-sdk-providers">AI SDK Providers</a>
            <a href="/docs/introduction">Introduction</a>
        </nav>
        <ul>
        {anchors}
        </ul>
    </body>
    </html>
    """


class FakeSite:
    """In-memory website served through httpx.MockTransport."""

    def __init__(self, pages: dict[str, str]) -> None:
        self.pages = dict(pages)
        self.statuses: dict[str, int] = {}
        self.flaky: dict[str, int] = {}
        self.hits: Counter[str] = Counter()
        self.order: list[str] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.hits[url] += 1
        self.order.append(url)

        if self.flaky.get(url, 0) > 0:
            self.flaky[url] -= 1
            raise httpx.ConnectError("connection reset", request=request)

        if url in self.statuses:
            return httpx.Response(self.statuses[url], text="error")

        if url not in self.pages:
            return httpx.Response(404, text="not found")

        return httpx.Response(
            200,
            text=self.pages[url],
            headers={"content-type": "text/html; charset=utf-8"},
        )

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_dir):
    """Crawl configuration pointing at the fake site."""
    return CrawlConfig(
        base_url=BASE_URL,
        output_path=temp_dir / "data" / "data.json",
        timeout=5.0,
        retry_delay=0.0,
    )


@pytest.fixture
def site():
    """Fake site with three providers, one linked twice."""
    pages = {
        INDEX_URL: index_page(
            [
                ("/providers/ai-sdk-providers/openai", "OpenAI"),
                ("/providers/ai-sdk-providers/anthropic", "Anthropic"),
                ("/providers/ai-sdk-providers/openai", "OpenAI (again)"),
                ("/providers/ai-sdk-providers/mistral", "  mistral  "),
            ]
        ),
        provider_url("openai"): capability_page(
            [("gpt-4o", True, True), ("gpt-3.5-turbo", False, True)], "OpenAI"
        ),
        provider_url("anthropic"): capability_page(
            [("claude-3-opus", True, True)], "Anthropic"
        ),
        provider_url("mistral"): capability_page(
            [("mistral-large", False, True), ("pixtral", True, False)], "Mistral"
        ),
    }
    return FakeSite(pages)


@pytest.fixture
def sample_snapshot():
    """A small snapshot with two providers."""
    scraped = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    return RegistryData(
        version=1,
        updated_at=datetime(2024, 1, 1, 12, 5, 0, tzinfo=timezone.utc),
        providers=[
            ProviderData(
                provider="anthropic",
                display_name="Anthropic",
                url=provider_url("anthropic"),
                columns=["Vision", "Tools"],
                models=[
                    ModelCapability("claude-3-opus", {"Vision": True, "Tools": True}),
                ],
                scraped_at=scraped,
            ),
            ProviderData(
                provider="openai",
                display_name="OpenAI",
                url=provider_url("openai"),
                columns=["Vision", "Tools"],
                models=[
                    ModelCapability("gpt-4o", {"Vision": True, "Tools": True}),
                    ModelCapability("gpt-3.5-turbo", {"Vision": False, "Tools": True}),
                ],
                scraped_at=scraped,
            ),
        ],
    )
