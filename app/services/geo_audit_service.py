"""GEO Audit Service: fetch a page, score it, aggregate the analysis.

Pure-function architecture (no class wrapper). The fetch layer uses
httpx.AsyncClient; the check layer is pure (no I/O) and runs in a worker
thread while the metrics provider is queried.
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from app.analysis.checks import evaluate_html_checks, evaluate_metrics_checks
from app.analysis.page import PageContext
from app.analysis.scoring import build_analysis
from app.collectors.base import BaseMetricsProvider, MetricsResult, NullMetricsProvider
from app.collectors.dataforseo import NOT_CONFIGURED, DataForSeoCollector
from app.core.config import settings
from app.core.metrics import AUDIT_PERCENTAGE, AUDIT_RUNS
from app.schemas.geo_audit import Analysis, Check
from app.services.page_fetcher import build_client, classify_fetch_error, fetch_page, normalize_url

logger = logging.getLogger(__name__)


def get_metrics_provider() -> BaseMetricsProvider:
    """Provider for the current settings; a null provider when credentials are absent."""
    if not settings.dataforseo_configured:
        return NullMetricsProvider(NOT_CONFIGURED)
    return DataForSeoCollector.from_settings(settings)


async def _safe_fetch_metrics(provider: BaseMetricsProvider, url: str) -> MetricsResult:
    try:
        return await provider.fetch_metrics(url)
    except Exception as exc:
        logger.error("Metrics provider %s raised for %s: %s", type(provider).__name__, url, exc)
        return MetricsResult.unavailable(str(exc) or type(exc).__name__)


def _evaluate_html(html: str, url: str) -> tuple[str, list[Check]]:
    ctx = PageContext.from_html(html, url)
    return ctx.title, evaluate_html_checks(ctx)


async def analyze_html(
    html: str,
    url: str,
    provider: BaseMetricsProvider,
) -> Analysis:
    """Score already-fetched HTML: HTML checks ‖ metrics, then metrics checks, then aggregate."""
    metrics_task = asyncio.create_task(_safe_fetch_metrics(provider, url))

    try:
        title, html_checks = await asyncio.to_thread(_evaluate_html, html, url)
    except BaseException:
        metrics_task.cancel()
        raise

    metrics = await metrics_task
    if not metrics.available:
        logger.info("SEO metrics unavailable for %s: %s", url, metrics.error)

    checks = html_checks + evaluate_metrics_checks(metrics)
    return build_analysis(url, title, checks, metrics.to_schema())


async def run_geo_audit(
    raw_url: str,
    *,
    provider: BaseMetricsProvider | None = None,
    client: httpx.AsyncClient | None = None,
) -> Analysis:
    """Run a full single-page GEO audit.

    Raises ``PageFetchError`` for fetch failures the user can act on (DNS,
    403, 404, timeout); any other fetch error propagates unchanged.
    """
    url = normalize_url(raw_url)
    provider = provider or get_metrics_provider()

    logger.info("GEO audit start: %s", url, extra={"audit_url": url})
    try:
        if client is None:
            async with build_client() as own_client:
                html = await fetch_page(own_client, url)
        else:
            html = await fetch_page(client, url)
    except Exception as exc:
        classified = classify_fetch_error(exc)
        if classified is None:
            AUDIT_RUNS.labels(status="error").inc()
            raise
        AUDIT_RUNS.labels(status="fetch_error").inc()
        logger.warning(
            "GEO audit fetch failed for %s: %s (%s)", url, classified.message, exc, extra={"audit_url": url}
        )
        raise classified from exc

    analysis = await analyze_html(html, url, provider)

    AUDIT_RUNS.labels(status="ok").inc()
    AUDIT_PERCENTAGE.observe(analysis.percentage or 0)
    logger.info(
        "GEO audit done: %s score=%d/%d grade=%s checks=%d metrics=%s",
        url,
        analysis.overall_score,
        analysis.max_score,
        analysis.grade,
        len(analysis.checks),
        analysis.seo_metrics is not None,
        extra={"audit_url": url},
    )
    return analysis
