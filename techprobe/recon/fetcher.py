import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

from playwright.async_api import async_playwright
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from techprobe.core.constants import DEFAULT_NAVIGATION_TIMEOUT, DEFAULT_USER_AGENT
from techprobe.core.logging import log
from techprobe.engine.artifact import PageArtifact


class FetchError(Exception):
    pass


@dataclass(frozen=True)
class FetchedPage:
    artifact: PageArtifact
    status_code: Optional[int] = None
    response_time: int = 0


class PageFetcher:
    """
    Loads pages with Playwright and captures their raw materials.

    Each fetch runs in a fresh browser context so no cookies or storage leak
    between analyzed URLs. The HTML is the main document's response body, not
    the rendered DOM.
    """

    def __init__(self, headless: bool = True, proxy: Optional[Dict] = None,
                 navigation_timeout: int = DEFAULT_NAVIGATION_TIMEOUT, attempts: int = 2):
        self.headless = headless
        self.proxy = proxy
        self.navigation_timeout = navigation_timeout
        self.attempts = attempts
        self.playwright = None
        self.browser = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def start(self) -> None:
        self.playwright = await async_playwright().start()
        launch_args = {"headless": self.headless}
        if self.proxy:
            launch_args["proxy"] = self.proxy
        self.browser = await self.playwright.chromium.launch(**launch_args)

    async def close(self) -> None:
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()
        self.browser = None
        self.playwright = None

    async def fetch(self, url: str) -> FetchedPage:
        """Fetch ``url``, retrying transient navigation failures."""
        if not self.browser:
            raise FetchError("PageFetcher not started")

        @retry(
            wait=wait_exponential(multiplier=1, min=1, max=8),
            stop=stop_after_attempt(self.attempts),
            retry=retry_if_exception_type(Exception),
            reraise=True,
        )
        async def do_fetch():
            return await self._fetch_once(url)

        return await do_fetch()

    async def _fetch_once(self, url: str) -> FetchedPage:
        log(f"Fetching {url}", level="debug")
        loop = asyncio.get_running_loop()
        context = await self.browser.new_context(user_agent=DEFAULT_USER_AGENT)
        try:
            page = await context.new_page()
            started = loop.time()
            response = await page.goto(url, wait_until="domcontentloaded", timeout=self.navigation_timeout * 1000)
            if response is None:
                raise FetchError(f"No response for {url}")

            html = await response.text()
            elapsed = int((loop.time() - started) * 1000)
            headers = await response.all_headers()
            cookies = await context.cookies()

            artifact = PageArtifact.from_response(
                html,
                headers=headers,
                url=page.url,
                cookie_names=[c["name"] for c in cookies if c.get("name")],
            )
            return FetchedPage(artifact=artifact, status_code=response.status, response_time=elapsed)
        finally:
            await context.close()
