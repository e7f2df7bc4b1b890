"""Two-phase capability crawler using httpx and an asyncio worker pool.

The crawl starts from a single discovery request for the provider index.
Its handler returns one request per provider, which a bounded pool of
workers then fetches and hands to the provider handler. Once the frontier
drains, the result set is frozen and turned into a snapshot.
"""

import asyncio
import logging
import time
from typing import Optional

import httpx

from capscrape import __version__
from capscrape.core.errors import DiscoveryError, FetchError, PageSkipped
from capscrape.core.interfaces import StorageBackend
from capscrape.core.models import (
    CrawlConfig,
    CrawlReport,
    CrawlRequest,
    FetchedPage,
    RegistryData,
    RequestLabel,
    ScrapeStatus,
    utc_now,
)
from capscrape.core.results import ResultSet
from capscrape.engine.router import PageRouter
from capscrape.storage.snapshot import build_snapshot

logger = logging.getLogger(__name__)


class CrawlOrchestrator:
    """Drive the frontier until it is empty, then build the snapshot."""

    def __init__(
        self,
        config: CrawlConfig,
        router: Optional[PageRouter] = None,
        storage: Optional[StorageBackend] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            config: Crawl configuration.
            router: Page router; defaults to discovery plus provider handlers.
            storage: Snapshot storage; defaults to the local filesystem.
            transport: Optional httpx transport, mainly for tests.
        """
        self._config = config
        self._router = router or PageRouter.default()
        if storage is None:
            from capscrape.storage.filesystem import FilesystemStorage

            storage = FilesystemStorage()
        self._storage = storage
        self._transport = transport

        self._queue: Optional[asyncio.Queue[CrawlRequest]] = None
        self._seen: set[str] = set()
        self._results = ResultSet()
        self._report = CrawlReport()
        self._provider_requests = 0

    @property
    def report(self) -> CrawlReport:
        return self._report

    async def crawl(self) -> RegistryData:
        """Run the full crawl and persist the snapshot.

        Returns:
            The snapshot that was written.

        Raises:
            DiscoveryError: If the provider index could not be crawled.
            SnapshotWriteError: If the snapshot could not be written.
        """
        results = await self.run()
        snapshot = build_snapshot(results)
        await self._storage.save_snapshot(snapshot, self._config.output_path)

        logger.info(
            "Crawl complete: %d providers written to %s",
            len(snapshot.providers),
            self._config.output_path,
        )
        return snapshot

    async def run(self, results: Optional[ResultSet] = None) -> ResultSet:
        """Drain the frontier, starting from the discovery request.

        Args:
            results: Result set to fill; a fresh one is created if omitted.

        Returns:
            The frozen result set.

        Raises:
            DiscoveryError: If discovery failed or found no providers.
        """
        self._results = results if results is not None else ResultSet()
        self._report = CrawlReport()
        self._queue = asyncio.Queue()
        self._seen.clear()
        self._provider_requests = 0

        logger.info(
            "Starting crawl of %s (concurrency=%d, retries=%d, timeout=%.0fs)",
            self._config.index_url,
            self._config.max_concurrency,
            self._config.max_retries,
            self._config.timeout,
        )

        self._enqueue(
            CrawlRequest(url=self._config.index_url, label=RequestLabel.DISCOVERY)
        )

        async with httpx.AsyncClient(
            timeout=self._config.timeout,
            follow_redirects=True,
            headers={"User-Agent": f"{self._config.user_agent}/{__version__}"},
            limits=httpx.Limits(max_connections=self._config.max_concurrency),
            transport=self._transport,
        ) as client:
            workers = [
                asyncio.create_task(self._worker(client))
                for _ in range(max(1, self._config.max_concurrency))
            ]
            try:
                await self._queue.join()
            finally:
                for worker in workers:
                    worker.cancel()
                await asyncio.gather(*workers, return_exceptions=True)

        self._results.freeze()
        self._report.completed_at = utc_now()

        logger.info(
            "Frontier drained: %d requests, %d succeeded, %d failed, %d skipped",
            self._report.requests_total,
            self._report.succeeded,
            self._report.failed,
            self._report.skipped,
        )

        if RequestLabel.DISCOVERY in self._report.failed_labels():
            errors = "; ".join(
                f["error"]
                for f in self._report.failures
                if f["label"] == RequestLabel.DISCOVERY.value
            )
            raise DiscoveryError(f"Provider index could not be crawled: {errors}")

        if self._provider_requests == 0:
            raise DiscoveryError(
                f"No providers found on {self._config.index_url}; refusing to "
                "replace the snapshot with an empty one"
            )

        return self._results

    def _enqueue(self, request: CrawlRequest) -> bool:
        """Add a request to the frontier unless it was already seen this run."""
        assert self._queue is not None
        if request.unique_key in self._seen:
            logger.debug("Skipping duplicate request %s", request.url)
            return False

        self._seen.add(request.unique_key)
        if request.label == RequestLabel.PROVIDER:
            self._provider_requests += 1
        self._report.requests_total += 1
        self._queue.put_nowait(request)
        return True

    async def _worker(self, client: httpx.AsyncClient) -> None:
        """Pull requests from the frontier until cancelled."""
        assert self._queue is not None
        while True:
            request = await self._queue.get()
            try:
                await self._process(client, request)
            finally:
                self._queue.task_done()

    async def _process(self, client: httpx.AsyncClient, request: CrawlRequest) -> None:
        start_time = time.time()

        try:
            page = await self._fetch(client, request)
        except FetchError as e:
            logger.error("Failed to scrape %s: %s", request.url, e)
            self._report.record(request, ScrapeStatus.FAILED, str(e))
            return
        except Exception as e:
            logger.exception("Fetching %s raised", request.url)
            self._report.record(request, ScrapeStatus.FAILED, f"{type(e).__name__}: {e}")
            return

        try:
            follow_ups = self._router.route(page, self._results)
        except PageSkipped as e:
            logger.warning("%s (%s)", e, request.url)
            self._report.record(request, ScrapeStatus.SKIPPED, str(e))
            return
        except Exception as e:
            logger.exception("Handler for %s raised", request.url)
            self._report.record(request, ScrapeStatus.FAILED, f"{type(e).__name__}: {e}")
            return

        # Follow-ups are enqueued only after the handler has returned.
        for follow_up in follow_ups:
            self._enqueue(follow_up)

        self._report.record(request, ScrapeStatus.SUCCESS)
        logger.debug(
            "Processed %s in %.0f ms", request.url, (time.time() - start_time) * 1000
        )

    async def _fetch(self, client: httpx.AsyncClient, request: CrawlRequest) -> FetchedPage:
        """Fetch a request's URL, retrying on failure.

        Args:
            client: HTTP client.
            request: Request to fetch.

        Returns:
            The fetched page.

        Raises:
            FetchError: If every attempt failed or the URL is malformed.
        """
        attempts = self._config.max_retries + 1
        last_error: Optional[BaseException] = None

        for attempt in range(1, attempts + 1):
            try:
                response = await asyncio.wait_for(
                    client.get(request.url), timeout=self._config.timeout
                )
                response.raise_for_status()
                return FetchedPage(
                    request=request,
                    url=str(response.url),
                    status_code=response.status_code,
                    html=response.text,
                )

            except httpx.InvalidURL as e:
                # Malformed URLs fail the same way on every attempt.
                raise FetchError(request.url, attempt, e) from e

            except (httpx.HTTPError, asyncio.TimeoutError) as e:
                last_error = e
                logger.warning(
                    "Attempt %d/%d for %s failed: %s",
                    attempt,
                    attempts,
                    request.url,
                    type(e).__name__ if not str(e) else e,
                )

            if attempt < attempts:
                await asyncio.sleep(self._config.retry_delay * attempt)

        assert last_error is not None
        raise FetchError(request.url, attempts, last_error)
