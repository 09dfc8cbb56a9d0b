import asyncio

import pytest

from techprobe.engine.artifact import PageArtifact
from techprobe.engine.fingerprinter import Fingerprinter
from techprobe.engine.models import FeatureFlags
from techprobe.recon.batch import BatchAnalyzer
from techprobe.recon.fetcher import FetchError, FetchedPage

WORDPRESS_HTML = (
    '<html><head><meta name="generator" content="WordPress 6.3">'
    '<title>My Blog</title></head><body></body></html>'
)


class FakeFetcher:
    def __init__(self, delay=0.0):
        self.delay = delay
        self.active = 0
        self.max_active = 0

    async def fetch(self, url):
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            await asyncio.sleep(self.delay)
            if "broken" in url:
                raise FetchError(f"net::ERR_NAME_NOT_RESOLVED at {url}")
            if "slow" in url:
                await asyncio.sleep(10)
            artifact = PageArtifact.from_response(WORDPRESS_HTML, headers={"X-Powered-By": "PHP/8.1"}, url=url)
            return FetchedPage(artifact=artifact, status_code=200, response_time=42)
        finally:
            self.active -= 1


def run(batch, urls):
    return asyncio.run(batch.analyze(urls))


def test_results_in_input_order_with_metadata():
    batch = BatchAnalyzer(Fingerprinter(), FakeFetcher().fetch)
    urls = ["https://a.example", "https://b.example", "https://c.example"]
    results = run(batch, urls)

    assert [r.url for r in results] == urls
    first = results[0]
    assert first.status == "completed"
    assert first.technologies[0].name == "WordPress"
    assert first.metadata.title == "My Blog"
    assert first.metadata.status_code == 200
    assert first.metadata.response_time == 42
    assert first.metadata.headers["x-powered-by"] == "PHP/8.1"


def test_failed_unit_does_not_affect_siblings():
    batch = BatchAnalyzer(Fingerprinter(), FakeFetcher().fetch)
    results = run(batch, ["https://ok.example", "https://broken.example", "https://ok2.example"])

    assert [r.status for r in results] == ["completed", "failed", "completed"]
    assert "ERR_NAME_NOT_RESOLVED" in results[1].error
    assert results[1].technologies == []


def test_timed_out_unit_is_marked_failed():
    batch = BatchAnalyzer(Fingerprinter(), FakeFetcher().fetch, timeout=0.2)
    results = run(batch, ["https://slow.example", "https://fast.example"])

    assert results[0].status == "failed"
    assert "Timed out" in results[0].error
    assert results[1].status == "completed"


def test_concurrency_is_bounded():
    fetcher = FakeFetcher(delay=0.02)
    batch = BatchAnalyzer(Fingerprinter(), fetcher.fetch, concurrency=2)
    results = run(batch, [f"https://site{i}.example" for i in range(6)])

    assert len(results) == 6
    assert fetcher.max_active == 2


def test_flags_and_patterns_forwarded():
    flags = FeatureFlags().disable("analyzeMetaTags")
    batch = BatchAnalyzer(Fingerprinter(), FakeFetcher().fetch, flags=flags, custom_patterns=["my blog"])
    (result,) = run(batch, ["https://a.example"])

    names = {t.name: t for t in result.technologies}
    assert "Custom Pattern: my blog" in names
    assert names["WordPress"].confidence == 0.3


def test_rejects_zero_concurrency():
    with pytest.raises(ValueError):
        BatchAnalyzer(Fingerprinter(), FakeFetcher().fetch, concurrency=0)
