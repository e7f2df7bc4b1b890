"""Data models for capscrape."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional
from urllib.parse import urljoin

SNAPSHOT_VERSION = 1


def utc_now() -> datetime:
    """Return the current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: str) -> datetime:
    """Parse a timestamp written by format_timestamp."""
    if value.endswith("Z"):
        value = value[:-1] + "+00:00"
    return datetime.fromisoformat(value)


class RequestLabel(Enum):
    """Which phase should handle a fetched page."""

    DISCOVERY = "discovery"
    PROVIDER = "provider"


class ScrapeStatus(Enum):
    """Outcome of processing a single crawl request."""

    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class CrawlConfig:
    """Configuration for a crawl run."""

    base_url: str = "https://ai-sdk.dev"
    index_path: str = "/providers/ai-sdk-providers"
    output_path: Path = Path("data/data.json")
    max_concurrency: int = 5
    max_retries: int = 2
    timeout: float = 30.0
    retry_delay: float = 0.5
    user_agent: str = "capscrape"
    verbose: bool = False
    quiet: bool = False

    @property
    def index_url(self) -> str:
        """Absolute URL of the provider index page."""
        return urljoin(self.base_url.rstrip("/") + "/", self.index_path.lstrip("/"))


@dataclass(frozen=True)
class CrawlRequest:
    """A page waiting in the frontier."""

    url: str
    label: RequestLabel
    context: dict[str, str] = field(default_factory=dict, hash=False, compare=False)

    @property
    def unique_key(self) -> str:
        return self.url

    @property
    def slug(self) -> str:
        return self.context.get("slug", "")

    @property
    def display_name(self) -> str:
        return self.context.get("display_name") or self.slug


@dataclass
class FetchedPage:
    """A successfully fetched page, ready for routing."""

    request: CrawlRequest
    url: str
    status_code: int
    html: str


@dataclass
class ModelCapability:
    """Capability flags for a single model (one table row)."""

    model: str
    capabilities: dict[str, bool] = field(default_factory=dict)

    def supports(self, capability: str) -> bool:
        """Return the flag for a capability, treating missing columns as False."""
        return self.capabilities.get(capability, False)

    def to_dict(self) -> dict[str, Any]:
        return {"model": self.model, "capabilities": dict(self.capabilities)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ModelCapability":
        return cls(
            model=data["model"],
            capabilities={k: bool(v) for k, v in data.get("capabilities", {}).items()},
        )


@dataclass
class ProviderData:
    """Everything scraped from one provider page."""

    provider: str
    display_name: str
    url: str
    columns: list[str] = field(default_factory=list)
    models: list[ModelCapability] = field(default_factory=list)
    scraped_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "provider": self.provider,
            "displayName": self.display_name,
            "url": self.url,
            "columns": list(self.columns),
            "models": [m.to_dict() for m in self.models],
            "scrapedAt": format_timestamp(self.scraped_at),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderData":
        """Create from dictionary (loaded from JSON)."""
        return cls(
            provider=data["provider"],
            display_name=data.get("displayName") or data["provider"],
            url=data.get("url", ""),
            columns=list(data.get("columns", [])),
            models=[ModelCapability.from_dict(m) for m in data.get("models", [])],
            scraped_at=parse_timestamp(data["scrapedAt"]),
        )


@dataclass
class ProviderSummary:
    """Aggregate view of a provider without its model rows."""

    provider: str
    display_name: str
    model_count: int
    columns: list[str]
    scraped_at: datetime


@dataclass
class RegistryData:
    """The persisted snapshot: every provider from one complete run."""

    version: int = SNAPSHOT_VERSION
    updated_at: datetime = field(default_factory=utc_now)
    providers: list[ProviderData] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "version": self.version,
            "updatedAt": format_timestamp(self.updated_at),
            "providers": [p.to_dict() for p in self.providers],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RegistryData":
        """Create from dictionary (loaded from JSON)."""
        return cls(
            version=int(data["version"]),
            updated_at=parse_timestamp(data["updatedAt"]),
            providers=[ProviderData.from_dict(p) for p in data.get("providers", [])],
        )


@dataclass
class CrawlReport:
    """Statistics and outcomes of a crawl run."""

    started_at: datetime = field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    requests_total: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    failures: list[dict[str, Any]] = field(default_factory=list)
    warnings: list[dict[str, Any]] = field(default_factory=list)

    def record(
        self,
        request: CrawlRequest,
        status: ScrapeStatus,
        reason: Optional[str] = None,
    ) -> None:
        """Record the final outcome of a request."""
        if status == ScrapeStatus.SUCCESS:
            self.succeeded += 1
        elif status == ScrapeStatus.SKIPPED:
            self.skipped += 1
            self.warnings.append({"url": request.url, "reason": reason})
        else:
            self.failed += 1
            self.failures.append(
                {"url": request.url, "label": request.label.value, "error": reason}
            )

    def failed_labels(self) -> set[RequestLabel]:
        return {RequestLabel(f["label"]) for f in self.failures}
