"""Pydantic models for GEO Audit: checks, analysis and report delivery.

JSON field names are camelCase (``overallScore``, ``seoMetrics`` ...);
Python attributes stay snake_case.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CheckCategory(str, Enum):
    """Closed set of rubric categories, in report order."""

    SCHEMA = "Schema Markup"
    CONTENT = "Content Structure"
    EEAT = "E-E-A-T Signals"
    META = "Meta & Technical"
    AI_SNIPPET = "AI Snippet Optimization"


# ── Checks ───────────────────────────────────────────────────────

class Check(_CamelModel):
    name: str
    category: CheckCategory
    passed: bool
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    details: str
    recommendation: str | None = Field(default=None, description="Only set when score < maxScore")


class Summary(_CamelModel):
    passed: int = Field(default=0, ge=0)
    failed: int = Field(default=0, ge=0, description="Checks with score 0")
    warnings: int = Field(default=0, ge=0, description="Checks with partial credit")


class CategoryScore(_CamelModel):
    name: CheckCategory
    score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    percentage: int = Field(ge=0, le=100)


# ── Third-party SEO metrics ──────────────────────────────────────

class TopKeyword(_CamelModel):
    keyword: str
    position: int = 0
    search_volume: int = 0


class SeoMetrics(_CamelModel):
    domain_rank: float | None = None
    organic_traffic: float | None = None
    organic_keywords: int | None = None
    on_page_score: float | None = None
    page_load_time: float | None = Field(default=None, description="Milliseconds")
    top_keywords: list[TopKeyword] = Field(default_factory=list)


# ── Analysis ─────────────────────────────────────────────────────

class Analysis(_CamelModel):
    url: str
    title: str
    overall_score: int = Field(ge=0)
    max_score: int = Field(ge=0)
    percentage: int | None = Field(default=None, ge=0, le=100)
    grade: str
    rating: str | None = None
    checks: list[Check] = Field(default_factory=list)
    summary: Summary = Field(default_factory=Summary)
    categories: list[CategoryScore] = Field(default_factory=list)
    seo_metrics: SeoMetrics | None = None


# ── Requests / responses ─────────────────────────────────────────

class AnalyzeRequest(BaseModel):
    url: str | None = None


class SendReportRequest(BaseModel):
    email: str | None = None
    analysis: Analysis | None = None


class SendReportResponse(BaseModel):
    success: bool = True
    id: str | None = None
