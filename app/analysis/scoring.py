"""Score Aggregator: reduces check results into an Analysis.

Computes:
  - overallScore / maxScore: plain sums over the evaluated checks
  - percentage = round_half_up(100 × overallScore / maxScore), 0 for an empty list
  - grade: letter bands   ≥90 A+ · ≥80 A · ≥70 B · ≥60 C · ≥50 D · else F
  - rating: display bands ≥90 Excellent · ≥70 Good · ≥40 Needs Work · else Poor
  - summary: passed / warnings / failed partition of the checks
"""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from app.schemas.geo_audit import (
    Analysis,
    CategoryScore,
    Check,
    CheckCategory,
    SeoMetrics,
    Summary,
)

logger = logging.getLogger(__name__)

UNTITLED_PAGE = "Untitled Page"

# (inclusive lower bound, label), evaluated top-down
LETTER_GRADE_BANDS: tuple[tuple[int, str], ...] = (
    (90, "A+"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
    (50, "D"),
)
LETTER_GRADE_FLOOR = "F"

RATING_BANDS: tuple[tuple[int, str], ...] = (
    (90, "Excellent"),
    (70, "Good"),
    (40, "Needs Work"),
)
RATING_FLOOR = "Poor"

# Colour band used by the PDF and email renderers
TONE_BANDS: tuple[tuple[int, str], ...] = (
    (70, "good"),
    (40, "fair"),
)
TONE_FLOOR = "poor"


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positives (2.5 → 3), unlike built-in round()."""
    return int(math.floor(value + 0.5))


def percentage(score: int | float, max_score: int | float) -> int:
    """Whole-number percentage clamped to 0..100; 0 when there is nothing to score."""
    if max_score <= 0:
        return 0
    return max(0, min(100, round_half_up(100 * score / max_score)))


def _band(value: int, bands: tuple[tuple[int, str], ...], floor: str) -> str:
    for threshold, label in bands:
        if value >= threshold:
            return label
    return floor


def letter_grade(pct: int) -> str:
    return _band(pct, LETTER_GRADE_BANDS, LETTER_GRADE_FLOOR)


def rating_label(pct: int) -> str:
    return _band(pct, RATING_BANDS, RATING_FLOOR)


def score_tone(pct: int) -> str:
    return _band(pct, TONE_BANDS, TONE_FLOOR)


def check_status(check: Check) -> str:
    """Bucket a check: ``passed``, ``warning`` (partial credit) or ``failed`` (zero)."""
    if check.passed:
        return "passed"
    if check.score == 0:
        return "failed"
    return "warning"


def summarize(checks: Sequence[Check]) -> Summary:
    summary = Summary()
    for check in checks:
        status = check_status(check)
        if status == "passed":
            summary.passed += 1
        elif status == "failed":
            summary.failed += 1
        else:
            summary.warnings += 1
    return summary


def category_scores(checks: Sequence[Check]) -> list[CategoryScore]:
    """Per-category totals in fixed category order; empty categories are left out."""
    rows: list[CategoryScore] = []
    for category in CheckCategory:
        cat_checks = [c for c in checks if c.category == category]
        if not cat_checks:
            continue
        score = sum(c.score for c in cat_checks)
        max_score = sum(c.max_score for c in cat_checks)
        rows.append(
            CategoryScore(
                name=category,
                score=score,
                max_score=max_score,
                percentage=percentage(score, max_score),
            )
        )
    return rows


def build_analysis(
    url: str,
    title: str,
    checks: Sequence[Check],
    seo_metrics: SeoMetrics | None = None,
) -> Analysis:
    """Aggregate evaluated checks into the Analysis returned to callers."""
    overall = sum(c.score for c in checks)
    max_score = sum(c.max_score for c in checks)
    pct = percentage(overall, max_score)

    analysis = Analysis(
        url=url,
        title=title or UNTITLED_PAGE,
        overall_score=overall,
        max_score=max_score,
        percentage=pct,
        grade=letter_grade(pct),
        rating=rating_label(pct),
        checks=list(checks),
        summary=summarize(checks),
        categories=category_scores(checks),
        seo_metrics=seo_metrics,
    )

    logger.debug(
        "Scoring: url=%s score=%d/%d pct=%d grade=%s passed=%d warnings=%d failed=%d",
        url,
        overall,
        max_score,
        pct,
        analysis.grade,
        analysis.summary.passed,
        analysis.summary.warnings,
        analysis.summary.failed,
    )
    return analysis


def analysis_percentage(analysis: Analysis) -> int:
    """Recompute the percentage; client-supplied analyses may omit or alter it."""
    return percentage(analysis.overall_score, analysis.max_score)
