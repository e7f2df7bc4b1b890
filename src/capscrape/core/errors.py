"""Exceptions raised by capscrape."""


class CapscrapeError(Exception):
    """Base class for all capscrape errors."""


class FetchError(CapscrapeError):
    """A page could not be fetched after all attempts."""

    def __init__(self, url: str, attempts: int, cause: BaseException) -> None:
        self.url = url
        self.attempts = attempts
        self.cause = cause
        super().__init__(f"{url} failed after {attempts} attempt(s): {_describe(cause)}")


class PageSkipped(CapscrapeError):
    """A fetched page held nothing usable.

    Raised by page handlers; the orchestrator records the page as skipped
    and logs a warning. Never retried.
    """


class DiscoveryError(CapscrapeError):
    """The provider index could not be crawled, so there is nothing to scrape."""


class SnapshotWriteError(CapscrapeError):
    """The snapshot could not be persisted."""


class SnapshotReadError(CapscrapeError):
    """A snapshot file exists but is not a valid snapshot."""


def _describe(exc: BaseException) -> str:
    message = str(exc)
    return f"{type(exc).__name__}: {message}" if message else type(exc).__name__
