import asyncio
from typing import Awaitable, Callable, Iterable, List, Optional, Sequence

from techprobe.core.constants import DEFAULT_BATCH_CONCURRENCY, DEFAULT_FETCH_TIMEOUT
from techprobe.core.logging import log
from techprobe.engine.artifact import page_metadata
from techprobe.engine.fingerprinter import Fingerprinter
from techprobe.engine.models import AnalysisResult, FeatureFlags, PageMetadata
from techprobe.recon.fetcher import FetchedPage
from techprobe.utils.security import SecurityManager

FetchFn = Callable[[str], Awaitable[FetchedPage]]


class BatchAnalyzer:
    """
    Fans fetch+analyze units out over a bounded worker pool.

    Every unit has its own timeout. A failed or timed-out unit becomes a
    ``failed`` result for that URL only; siblings keep running. Results come
    back in input order.
    """

    def __init__(
        self,
        fingerprinter: Fingerprinter,
        fetch: FetchFn,
        concurrency: int = DEFAULT_BATCH_CONCURRENCY,
        timeout: float = DEFAULT_FETCH_TIMEOUT,
        flags: Optional[FeatureFlags] = None,
        custom_patterns: Sequence[str] = (),
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.fingerprinter = fingerprinter
        self.fetch = fetch
        self.concurrency = concurrency
        self.timeout = timeout
        self.flags = flags or FeatureFlags()
        self.custom_patterns = list(custom_patterns)

    async def analyze(self, urls: Iterable[str]) -> List[AnalysisResult]:
        urls = list(urls)
        semaphore = asyncio.Semaphore(self.concurrency)

        async def bounded(url: str) -> AnalysisResult:
            async with semaphore:
                return await self._run_unit(url)

        log(f"Analyzing {len(urls)} URLs", level="info", url_count=len(urls), concurrency=self.concurrency)
        return list(await asyncio.gather(*(bounded(url) for url in urls)))

    async def _run_unit(self, url: str) -> AnalysisResult:
        try:
            return await asyncio.wait_for(self._analyze_url(url), timeout=self.timeout)
        except asyncio.TimeoutError:
            log(f"Analysis timed out for {url}", level="warning", url=url)
            return AnalysisResult(url=url, status="failed", error=f"Timed out after {self.timeout}s")
        except Exception as e:
            log(f"Analysis failed for {url}: {type(e).__name__}: {e}", level="warning", url=url)
            return AnalysisResult(url=url, status="failed", error=str(e) or type(e).__name__)

    async def _analyze_url(self, url: str) -> AnalysisResult:
        page = await self.fetch(url)
        artifact = page.artifact
        # The engine is synchronous and thread-safe
        report = await asyncio.to_thread(
            self.fingerprinter.analyze, artifact, self.flags, self.custom_patterns
        )
        meta = page_metadata(artifact.html)
        return AnalysisResult(
            url=artifact.url or url,
            status="completed",
            technologies=list(report.technologies),
            social=list(report.social),
            metadata=PageMetadata(
                title=meta["title"],
                description=meta["description"],
                response_time=page.response_time,
                status_code=page.status_code,
                headers=SecurityManager.redact_headers(dict(artifact.headers)),
            ),
        )
