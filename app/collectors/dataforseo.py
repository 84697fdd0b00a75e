"""DataForSEO metrics provider (async).

Three sub-requests run concurrently for one audit:
  - domain rank overview      (domain)  → rank, organic traffic, organic keywords
  - on-page instant analysis  (URL)     → on-page score, load time
  - ranked keywords           (domain)  → top 5 keywords ranking in the top 10

Each sub-request soft-fails on its own: a failure yields "no data for this
facet" and never aborts the other two. No retries.
"""

import asyncio
import logging
from typing import Any
from urllib.parse import urlparse

import httpx

from app.collectors.base import (
    BaseMetricsProvider,
    DomainOverview,
    MetricsResult,
    OnPageSummary,
    RankedKeyword,
)
from app.core.config import Settings, settings
from app.core.metrics import PROVIDER_CALLS

logger = logging.getLogger(__name__)

NOT_CONFIGURED = "DataForSEO credentials not configured"

RANK_OVERVIEW_ENDPOINT = "/dataforseo_labs/google/domain_rank_overview/live"
ON_PAGE_ENDPOINT = "/on_page/instant_pages"
RANKED_KEYWORDS_ENDPOINT = "/dataforseo_labs/google/ranked_keywords/live"

TOP_KEYWORDS_LIMIT = 5
TOP_KEYWORDS_MAX_POSITION = 10


class DataForSeoError(RuntimeError):
    pass


def bare_domain(url: str) -> str:
    """Hostname without a leading ``www.``."""
    host = (urlparse(url).hostname or "").lower()
    if not host:
        raise ValueError(f"URL has no hostname: {url!r}")
    return host.removeprefix("www.")


def _first_result(data: dict[str, Any]) -> dict[str, Any] | None:
    """tasks[0].result[0] of a DataForSEO response, if present."""
    tasks = data.get("tasks") or []
    if not tasks or not isinstance(tasks[0], dict):
        return None
    results = tasks[0].get("result") or []
    if not results or not isinstance(results[0], dict):
        return None
    return results[0]


class DataForSeoCollector(BaseMetricsProvider):
    """Collect rank / traffic / on-page metrics from the DataForSEO v3 API."""

    def __init__(
        self,
        login: str,
        password: str,
        api_url: str = "https://api.dataforseo.com/v3",
        language_code: str = "en",
        location_name: str = "United Kingdom",
        timeout: float = 30.0,
    ):
        self.login = login
        self.password = password
        self.api_url = api_url.rstrip("/")
        self.language_code = language_code
        self.location_name = location_name
        self.timeout = timeout

    @classmethod
    def from_settings(cls, cfg: Settings | None = None) -> "DataForSeoCollector":
        cfg = cfg or settings
        return cls(
            login=cfg.dataforseo_login,
            password=cfg.dataforseo_password,
            api_url=cfg.dataforseo_api_url,
            language_code=cfg.dataforseo_language_code,
            location_name=cfg.dataforseo_location_name,
            timeout=cfg.dataforseo_timeout,
        )

    @property
    def configured(self) -> bool:
        return bool(self.login and self.password)

    async def fetch_metrics(self, url: str) -> MetricsResult:
        if not self.configured:
            return MetricsResult.unavailable(NOT_CONFIGURED)

        try:
            domain = bare_domain(url)
            async with httpx.AsyncClient(
                auth=(self.login, self.password),
                timeout=self.timeout,
            ) as client:
                overview, on_page, keywords = await asyncio.gather(
                    self.get_domain_rank_overview(client, domain),
                    self.get_on_page_analysis(client, url),
                    self.get_top_ranked_keywords(client, domain),
                )
        except Exception as e:
            logger.error("DataForSEO metrics error for %s: %s", url, e)
            return MetricsResult.unavailable(str(e) or type(e).__name__)

        logger.info(
            "DataForSEO metrics for %s: rank=%s keywords=%s on_page=%s load_ms=%s top=%d",
            domain,
            overview.rank if overview else None,
            overview.organic_keywords if overview else None,
            on_page.on_page_score if on_page else None,
            on_page.page_load_time if on_page else None,
            len(keywords or []),
        )
        return MetricsResult.from_facets(overview, on_page, keywords)

    async def _post(self, client: httpx.AsyncClient, endpoint: str, body: list[dict]) -> dict[str, Any]:
        resp = await client.post(f"{self.api_url}{endpoint}", json=body)
        if resp.status_code >= 400:
            raise DataForSeoError(f"DataForSEO API error: {resp.status_code}")
        return resp.json()

    async def get_domain_rank_overview(
        self, client: httpx.AsyncClient, domain: str
    ) -> DomainOverview | None:
        try:
            data = await self._post(
                client,
                RANK_OVERVIEW_ENDPOINT,
                [
                    {
                        "target": domain,
                        "language_code": self.language_code,
                        "location_name": self.location_name,
                    }
                ],
            )
            result = _first_result(data)
            overview = None
            if result:
                organic = (result.get("metrics") or {}).get("organic") or {}
                overview = DomainOverview(
                    rank=result.get("rank"),
                    organic_traffic=organic.get("etv"),
                    organic_keywords=organic.get("count"),
                )
        except Exception as e:
            logger.warning("Domain rank overview error for %s: %s", domain, e, extra={"facet": "rank_overview"})
            PROVIDER_CALLS.labels(facet="rank_overview", status="error").inc()
            return None

        PROVIDER_CALLS.labels(facet="rank_overview", status="ok").inc()
        return overview

    async def get_on_page_analysis(
        self, client: httpx.AsyncClient, url: str
    ) -> OnPageSummary | None:
        try:
            data = await self._post(
                client,
                ON_PAGE_ENDPOINT,
                [{"url": url, "enable_javascript": True}],
            )
            items = (_first_result(data) or {}).get("items") or []
            summary = None
            if items:
                timing = items[0].get("page_timing") or {}
                summary = OnPageSummary(
                    on_page_score=items[0].get("onpage_score"),
                    page_load_time=timing.get("time_to_interactive") or timing.get("dom_complete"),
                )
        except Exception as e:
            logger.warning("On-page analysis error for %s: %s", url, e, extra={"facet": "on_page"})
            PROVIDER_CALLS.labels(facet="on_page", status="error").inc()
            return None

        PROVIDER_CALLS.labels(facet="on_page", status="ok").inc()
        return summary

    async def get_top_ranked_keywords(
        self, client: httpx.AsyncClient, domain: str
    ) -> list[RankedKeyword]:
        try:
            data = await self._post(
                client,
                RANKED_KEYWORDS_ENDPOINT,
                [
                    {
                        "target": domain,
                        "language_code": self.language_code,
                        "location_name": self.location_name,
                        "limit": TOP_KEYWORDS_LIMIT,
                        "order_by": ["keyword_data.keyword_info.search_volume,desc"],
                        "filters": [
                            ["ranked_serp_element.serp_item.rank_group", "<=", TOP_KEYWORDS_MAX_POSITION]
                        ],
                    }
                ],
            )
            keywords = parse_ranked_keywords((_first_result(data) or {}).get("items") or [])
        except Exception as e:
            logger.warning("Ranked keywords error for %s: %s", domain, e, extra={"facet": "ranked_keywords"})
            PROVIDER_CALLS.labels(facet="ranked_keywords", status="error").inc()
            return []

        PROVIDER_CALLS.labels(facet="ranked_keywords", status="ok").inc()
        return keywords


def parse_ranked_keywords(items: list[dict[str, Any]]) -> list[RankedKeyword]:
    """Top keywords: position 1–10, highest search volume first, at most 5."""
    keywords: list[RankedKeyword] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        keyword_data = item.get("keyword_data") or {}
        keyword = keyword_data.get("keyword") or ""
        if not keyword:
            continue
        volume = (keyword_data.get("keyword_info") or {}).get("search_volume") or 0
        position = (
            ((item.get("ranked_serp_element") or {}).get("serp_item") or {}).get("rank_group") or 0
        )
        if not 0 < position <= TOP_KEYWORDS_MAX_POSITION:
            continue
        keywords.append(RankedKeyword(keyword=keyword, position=int(position), search_volume=int(volume)))

    keywords.sort(key=lambda k: k.search_volume, reverse=True)
    return keywords[:TOP_KEYWORDS_LIMIT]
