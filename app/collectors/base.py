"""Base metrics-provider interface."""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from app.schemas.geo_audit import SeoMetrics, TopKeyword

logger = logging.getLogger(__name__)


@dataclass
class DomainOverview:
    """Domain-level facet: authority rank and organic footprint."""

    rank: float | None = None
    organic_traffic: float | None = None
    organic_keywords: int | None = None


@dataclass
class OnPageSummary:
    """URL-level facet: technical on-page score and load timing (ms)."""

    on_page_score: float | None = None
    page_load_time: float | None = None


@dataclass
class RankedKeyword:
    keyword: str
    position: int = 0
    search_volume: int = 0


@dataclass
class MetricsResult:
    """Result of one provider run.

    ``available=False`` means the provider was not usable at all (not configured
    or a fatal error, see ``error``). ``available=True`` with every field empty
    means the provider answered but had no data for this site.
    """

    available: bool = False
    error: str = ""
    domain_rank: float | None = None
    organic_traffic: float | None = None
    organic_keywords: int | None = None
    on_page_score: float | None = None
    page_load_time: float | None = None
    top_keywords: list[RankedKeyword] = field(default_factory=list)

    @classmethod
    def unavailable(cls, error: str) -> "MetricsResult":
        return cls(available=False, error=error)

    @classmethod
    def from_facets(
        cls,
        overview: DomainOverview | None,
        on_page: OnPageSummary | None,
        keywords: list[RankedKeyword] | None,
    ) -> "MetricsResult":
        overview = overview or DomainOverview()
        on_page = on_page or OnPageSummary()
        return cls(
            available=True,
            domain_rank=overview.rank,
            organic_traffic=overview.organic_traffic,
            organic_keywords=overview.organic_keywords,
            on_page_score=on_page.on_page_score,
            page_load_time=on_page.page_load_time,
            top_keywords=list(keywords or []),
        )

    def to_schema(self) -> SeoMetrics | None:
        """SeoMetrics for the Analysis, or None when the provider was unavailable."""
        if not self.available:
            return None
        return SeoMetrics(
            domain_rank=self.domain_rank,
            organic_traffic=self.organic_traffic,
            organic_keywords=self.organic_keywords,
            on_page_score=self.on_page_score,
            page_load_time=self.page_load_time,
            top_keywords=[
                TopKeyword(keyword=k.keyword, position=k.position, search_volume=k.search_volume)
                for k in self.top_keywords
            ],
        )


class BaseMetricsProvider(ABC):
    """Abstract base for third-party SEO metrics providers.

    Implementations must never raise: every failure is reported through
    ``MetricsResult`` so the HTML checks are never held back by the provider.
    """

    @abstractmethod
    async def fetch_metrics(self, url: str) -> MetricsResult:
        """Collect metrics for an absolute, normalized URL."""
        ...


class NullMetricsProvider(BaseMetricsProvider):
    """Provider used when no credentials are configured."""

    def __init__(self, reason: str = "Metrics provider not configured"):
        self.reason = reason

    async def fetch_metrics(self, url: str) -> MetricsResult:
        logger.debug("Metrics skipped for %s: %s", url, self.reason)
        return MetricsResult.unavailable(self.reason)
