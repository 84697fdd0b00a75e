"""Tests for the DataForSEO metrics provider."""

from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.collectors.base import MetricsResult, NullMetricsProvider
from app.collectors.dataforseo import (
    NOT_CONFIGURED,
    ON_PAGE_ENDPOINT,
    RANK_OVERVIEW_ENDPOINT,
    RANKED_KEYWORDS_ENDPOINT,
    DataForSeoCollector,
    bare_domain,
    parse_ranked_keywords,
)


@pytest.fixture
def collector():
    return DataForSeoCollector(login="user", password="secret", api_url="https://dfs.test/v3/")


def _resp(data=None, status_code=200):
    resp = MagicMock()
    resp.status_code = status_code
    resp.json.return_value = data or {}
    return resp


def _task(result):
    return {"tasks": [{"result": [result]}]}


def _keyword(keyword, volume, position):
    return {
        "keyword_data": {"keyword": keyword, "keyword_info": {"search_volume": volume}},
        "ranked_serp_element": {"serp_item": {"rank_group": position}},
    }


RANK_DATA = _task({"rank": 1000, "metrics": {"organic": {"etv": 5321.7, "count": 1200}}})
ON_PAGE_DATA = _task(
    {"items": [{"onpage_score": 88.5, "page_timing": {"time_to_interactive": 1500, "dom_complete": 2100}}]}
)
KEYWORDS_DATA = _task({"items": [_keyword("geo audit", 900, 3), _keyword("ai seo", 2400, 7)]})


def _mock_client(responses: dict):
    """AsyncClient mock answering each endpoint with the given response (or raising it)."""

    async def post(url, json=None):
        for endpoint, resp in responses.items():
            if url.endswith(endpoint):
                if isinstance(resp, Exception):
                    raise resp
                return resp
        raise AssertionError(f"unexpected url {url}")

    mock_client = AsyncMock()
    mock_client.post = AsyncMock(side_effect=post)
    mock_client.__aenter__ = AsyncMock(return_value=mock_client)
    mock_client.__aexit__ = AsyncMock(return_value=False)
    return mock_client


class TestBareDomain:
    def test_strips_www(self):
        assert bare_domain("https://www.Example.com/path?q=1") == "example.com"

    def test_keeps_subdomain(self):
        assert bare_domain("https://blog.example.com/") == "blog.example.com"

    def test_no_host(self):
        with pytest.raises(ValueError):
            bare_domain("not a url")


class TestParseRankedKeywords:
    def test_sorted_by_volume_and_limited(self):
        items = [_keyword(f"kw{i}", i * 10, 1 + i % 10) for i in range(8)]
        keywords = parse_ranked_keywords(items)
        assert len(keywords) == 5
        assert [k.search_volume for k in keywords] == [70, 60, 50, 40, 30]

    def test_drops_blank_and_out_of_range(self):
        items = [
            _keyword("", 500, 1),
            _keyword("deep", 500, 11),
            _keyword("unranked", 500, 0),
            _keyword("ok", 10, 10),
            "garbage",
        ]
        keywords = parse_ranked_keywords(items)
        assert [(k.keyword, k.position) for k in keywords] == [("ok", 10)]

    def test_missing_volume_is_zero(self):
        item = {"keyword_data": {"keyword": "x"}, "ranked_serp_element": {"serp_item": {"rank_group": 2}}}
        assert parse_ranked_keywords([item])[0].search_volume == 0


class TestFetchMetrics:
    async def test_not_configured(self):
        result = await DataForSeoCollector(login="", password="").fetch_metrics("https://example.com")
        assert result.available is False
        assert result.error == NOT_CONFIGURED

    async def test_all_facets(self, collector):
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp(RANK_DATA),
                ON_PAGE_ENDPOINT: _resp(ON_PAGE_DATA),
                RANKED_KEYWORDS_ENDPOINT: _resp(KEYWORDS_DATA),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://www.example.com/page")

        assert result.available is True
        assert result.domain_rank == 1000
        assert result.organic_traffic == 5321.7
        assert result.organic_keywords == 1200
        assert result.on_page_score == 88.5
        assert result.page_load_time == 1500
        assert [k.keyword for k in result.top_keywords] == ["ai seo", "geo audit"]

        assert MockClient.call_args.kwargs["auth"] == ("user", "secret")
        urls = [c.args[0] for c in mock_client.post.call_args_list]
        assert f"https://dfs.test/v3{RANK_OVERVIEW_ENDPOINT}" in urls
        rank_call = next(c for c in mock_client.post.call_args_list if c.args[0].endswith(RANK_OVERVIEW_ENDPOINT))
        assert rank_call.kwargs["json"][0]["target"] == "example.com"
        on_page_call = next(c for c in mock_client.post.call_args_list if c.args[0].endswith(ON_PAGE_ENDPOINT))
        assert on_page_call.kwargs["json"][0]["url"] == "https://www.example.com/page"

    async def test_facet_failure_is_isolated(self, collector):
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp(status_code=500),
                ON_PAGE_ENDPOINT: httpx.ConnectError("boom"),
                RANKED_KEYWORDS_ENDPOINT: _resp(KEYWORDS_DATA),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://example.com")

        assert result.available is True
        assert result.domain_rank is None
        assert result.on_page_score is None
        assert len(result.top_keywords) == 2

    async def test_malformed_on_page_keeps_other_facets(self, collector):
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp(RANK_DATA),
                ON_PAGE_ENDPOINT: _resp(_task({"items": ["oops"]})),
                RANKED_KEYWORDS_ENDPOINT: _resp(KEYWORDS_DATA),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://example.com")

        assert result.available is True
        assert result.domain_rank == 1000
        assert result.organic_keywords == 1200
        assert result.on_page_score is None
        assert result.page_load_time is None
        assert [k.keyword for k in result.top_keywords] == ["ai seo", "geo audit"]

    async def test_malformed_rank_overview_keeps_other_facets(self, collector):
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp(_task({"rank": 1000, "metrics": "oops"})),
                ON_PAGE_ENDPOINT: _resp(ON_PAGE_DATA),
                RANKED_KEYWORDS_ENDPOINT: _resp(KEYWORDS_DATA),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://example.com")

        assert result.available is True
        assert result.domain_rank is None
        assert result.organic_traffic is None
        assert result.on_page_score == 88.5
        assert len(result.top_keywords) == 2

    async def test_malformed_ranked_keywords_keeps_other_facets(self, collector):
        bad_keywords = _task({"items": [_keyword("geo audit", 900, "first")]})
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp(RANK_DATA),
                ON_PAGE_ENDPOINT: _resp(ON_PAGE_DATA),
                RANKED_KEYWORDS_ENDPOINT: _resp(bad_keywords),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://example.com")

        assert result.available is True
        assert result.domain_rank == 1000
        assert result.on_page_score == 88.5
        assert result.top_keywords == []

    async def test_no_data_is_available_but_empty(self, collector):
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp({"tasks": [{"result": None}]}),
                ON_PAGE_ENDPOINT: _resp({"tasks": []}),
                RANKED_KEYWORDS_ENDPOINT: _resp(_task({"items": None})),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://example.com")

        assert result == MetricsResult(available=True)
        assert result.to_schema() is not None

    async def test_dom_complete_fallback(self, collector):
        on_page = _task({"items": [{"onpage_score": 70, "page_timing": {"dom_complete": 3200}}]})
        mock_client = _mock_client(
            {
                RANK_OVERVIEW_ENDPOINT: _resp({}),
                ON_PAGE_ENDPOINT: _resp(on_page),
                RANKED_KEYWORDS_ENDPOINT: _resp({}),
            }
        )
        with patch("app.collectors.dataforseo.httpx.AsyncClient") as MockClient:
            MockClient.return_value = mock_client
            result = await collector.fetch_metrics("https://example.com")

        assert result.page_load_time == 3200

    async def test_bad_url_is_unavailable(self, collector):
        result = await collector.fetch_metrics("nonsense")
        assert result.available is False
        assert "hostname" in result.error


class TestNullProvider:
    async def test_reports_reason(self):
        result = await NullMetricsProvider("off").fetch_metrics("https://example.com")
        assert result.available is False
        assert result.error == "off"
        assert result.to_schema() is None
