"""Tests for the GEO audit orchestration (fetch -> checks + metrics -> analysis)."""

import asyncio

import httpx
import pytest

from app.collectors.base import BaseMetricsProvider, MetricsResult, NullMetricsProvider, RankedKeyword
from app.core.exceptions import PageFetchError
from app.services import geo_audit_service
from app.services.geo_audit_service import analyze_html, get_metrics_provider, run_geo_audit
from app.services.page_fetcher import ACCESS_DENIED, build_client


class StaticProvider(BaseMetricsProvider):
    def __init__(self, result: MetricsResult):
        self.result = result
        self.urls: list[str] = []

    async def fetch_metrics(self, url: str) -> MetricsResult:
        self.urls.append(url)
        await asyncio.sleep(0)
        return self.result


class ExplodingProvider(BaseMetricsProvider):
    async def fetch_metrics(self, url: str) -> MetricsResult:
        raise RuntimeError("provider bug")


def _client(handler) -> httpx.AsyncClient:
    return build_client(transport=httpx.MockTransport(handler))


class TestAnalyzeHtml:
    async def test_without_metrics(self, rich_page):
        analysis = await analyze_html(rich_page, "https://example.com/", NullMetricsProvider())
        assert len(analysis.checks) == 21
        assert analysis.overall_score == 100
        assert analysis.percentage == 100
        assert analysis.grade == "A+"
        assert analysis.title == "What Is GEO? A Practical Guide to AI Search"
        assert analysis.seo_metrics is None

    async def test_with_metrics(self, bare_page):
        provider = StaticProvider(
            MetricsResult(
                available=True,
                domain_rank=1000,
                organic_keywords=5,
                top_keywords=[RankedKeyword("geo", 1, 100)],
            )
        )
        analysis = await analyze_html(bare_page, "https://example.com/", provider)
        assert [c.name for c in analysis.checks[21:]] == ["Domain Authority", "Organic Visibility"]
        assert analysis.max_score == 110
        assert analysis.overall_score == 2 + 2 + 5 + 1
        assert analysis.seo_metrics.domain_rank == 1000
        assert analysis.seo_metrics.top_keywords[0].keyword == "geo"
        assert analysis.title == "Untitled Page"

    async def test_provider_exception_is_contained(self, bare_page):
        analysis = await analyze_html(bare_page, "https://example.com/", ExplodingProvider())
        assert len(analysis.checks) == 21
        assert analysis.seo_metrics is None


class TestRunGeoAudit:
    async def test_normalizes_and_fetches(self, rich_page):
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, text=rich_page)

        provider = StaticProvider(MetricsResult(available=True))
        async with _client(handler) as client:
            analysis = await run_geo_audit("  example.com/post ", provider=provider, client=client)

        assert seen == ["https://example.com/post"]
        assert provider.urls == ["https://example.com/post"]
        assert analysis.url == "https://example.com/post"
        assert analysis.percentage == 100

    async def test_classified_fetch_error(self):
        async with _client(lambda r: httpx.Response(403)) as client:
            with pytest.raises(PageFetchError) as exc_info:
                await run_geo_audit("example.com", provider=NullMetricsProvider(), client=client)
        assert exc_info.value.message == ACCESS_DENIED
        assert exc_info.value.status_code == 400

    async def test_unclassified_fetch_error_propagates(self):
        async with _client(lambda r: httpx.Response(502)) as client:
            with pytest.raises(httpx.HTTPStatusError):
                await run_geo_audit("example.com", provider=NullMetricsProvider(), client=client)


class TestGetMetricsProvider:
    def test_null_without_credentials(self, monkeypatch):
        monkeypatch.setattr(geo_audit_service.settings, "dataforseo_login", "")
        assert isinstance(get_metrics_provider(), NullMetricsProvider)

    def test_dataforseo_with_credentials(self, monkeypatch):
        from app.collectors.dataforseo import DataForSeoCollector

        monkeypatch.setattr(geo_audit_service.settings, "dataforseo_login", "user")
        monkeypatch.setattr(geo_audit_service.settings, "dataforseo_password", "pass")
        provider = get_metrics_provider()
        assert isinstance(provider, DataForSeoCollector)
        assert provider.configured
