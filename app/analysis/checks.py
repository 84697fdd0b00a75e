"""Check Evaluator: the GEO readiness rubric.

Every check is a pure function ``(PageContext) -> Check``. ``HTML_CHECKS`` is
the ordered registry (schema → content → E-E-A-T → meta/technical → AI
snippet); metrics-derived checks are appended after it, each only when its
metric is defined.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from urllib.parse import urlparse

from app.analysis import patterns as p
from app.analysis.page import PageContext, clean_text
from app.analysis.scoring import round_half_up
from app.collectors.base import MetricsResult
from app.schemas.geo_audit import Check, CheckCategory

logger = logging.getLogger(__name__)

CheckFn = Callable[[PageContext], Check]


def make_check(
    name: str,
    category: CheckCategory,
    score: int,
    max_score: int,
    details: str,
    recommendation: str,
) -> Check:
    """Build a Check; ``passed`` and the recommendation follow from the score."""
    score = max(0, min(score, max_score))
    full = score == max_score
    return Check(
        name=name,
        category=category,
        passed=full,
        score=score,
        max_score=max_score,
        details=details,
        recommendation=None if full else recommendation,
    )


# ---------------------------------------------------------------------------
# Schema markup
# ---------------------------------------------------------------------------


def check_jsonld_present(ctx: PageContext) -> Check:
    has_schema = ctx.jsonld.has_schema
    return make_check(
        "JSON-LD Schema Present",
        CheckCategory.SCHEMA,
        8 if has_schema else 0,
        8,
        f"Found schema types: {', '.join(ctx.schema_types) or 'Unknown'}"
        if has_schema
        else "No JSON-LD structured data found",
        "Add JSON-LD schema markup to help AI understand your content structure",
    )


def check_faq_schema(ctx: PageContext) -> Check:
    found = any(p.FAQ_TYPE_MARKER in t.lower() for t in ctx.schema_types)
    return make_check(
        "FAQ Schema",
        CheckCategory.SCHEMA,
        7 if found else 0,
        7,
        "FAQPage schema detected - excellent for AI Overviews" if found else "No FAQ schema found",
        "Add FAQPage schema to increase chances of appearing in AI-generated answers",
    )


def check_article_schema(ctx: PageContext) -> Check:
    found = any(t.lower() in p.ARTICLE_TYPES for t in ctx.schema_types)
    return make_check(
        "Article/HowTo Schema",
        CheckCategory.SCHEMA,
        5 if found else 0,
        5,
        "Article or HowTo schema detected" if found else "No Article/HowTo schema found",
        "Add Article or HowTo schema for better content classification",
    )


def check_author_schema(ctx: PageContext) -> Check:
    found = any(t.lower() in p.AUTHOR_TYPES for t in ctx.schema_types)
    return make_check(
        "Author/Organization Schema",
        CheckCategory.SCHEMA,
        5 if found else 0,
        5,
        "Person/Organization schema detected - supports E-E-A-T"
        if found
        else "No author or organization schema found",
        "Add Person or Organization schema to establish authorship and credibility",
    )


# ---------------------------------------------------------------------------
# Content structure
# ---------------------------------------------------------------------------


def is_question_heading(text: str) -> bool:
    text = text.strip()
    return "?" in text or bool(p.QUESTION_HEADING_RE.match(text))


def check_question_headings(ctx: PageContext) -> Check:
    headings = [clean_text(h.get_text(" ")) for h in ctx.soup.find_all(["h1", "h2", "h3"])]
    questions = [h for h in headings if is_question_heading(h)]
    count = len(questions)

    if count >= p.MIN_QUESTION_HEADINGS:
        score = 8
    elif count > 0:
        score = 4
    else:
        score = 0

    details = f"Found {count} question-based headings"
    if questions:
        quoted = '", "'.join(questions[:3])
        details += f': "{quoted}"' + ("..." if count > 3 else "")

    return make_check(
        "Question-Based Headings",
        CheckCategory.CONTENT,
        score,
        8,
        details,
        'Use question-based H2 headings that match user search queries (e.g., "What is GEO?", "How does it work?")',
    )


def check_heading_hierarchy(ctx: PageContext) -> Check:
    h1 = len(ctx.soup.find_all("h1"))
    h2 = len(ctx.soup.find_all("h2"))
    h3 = len(ctx.soup.find_all("h3"))

    if h1 == 1 and h2 >= p.MIN_H2_HEADINGS:
        score = 5
    elif h1 == 1:
        score = 3
    else:
        score = 0

    return make_check(
        "Heading Hierarchy",
        CheckCategory.CONTENT,
        score,
        5,
        f"H1: {h1}, H2: {h2}, H3: {h3}",
        "Use exactly one H1 and multiple H2s to create clear content sections",
    )


def check_structured_lists(ctx: PageContext) -> Check:
    items = len(ctx.soup.select("ul li, ol li"))
    return make_check(
        "Structured Lists",
        CheckCategory.CONTENT,
        5 if items >= p.MIN_LIST_ITEMS else 0,
        5,
        f"Found {items} list items",
        "Use bullet points and numbered lists to make content scannable for AI",
    )


def average_paragraph_length(ctx: PageContext) -> tuple[float, int]:
    """Mean length of paragraphs longer than the minimum, and how many there were."""
    lengths = [
        len(text)
        for text in (clean_text(el.get_text(" ")) for el in ctx.soup.find_all("p"))
        if len(text) > p.PARAGRAPH_MIN_CHARS
    ]
    if not lengths:
        return 0.0, 0
    return sum(lengths) / len(lengths), len(lengths)


def check_paragraph_length(ctx: PageContext) -> Check:
    avg, count = average_paragraph_length(ctx)

    if 0 < avg < p.PARAGRAPH_GOOD_AVG:
        score = 4
    elif avg < p.PARAGRAPH_OK_AVG:
        score = 2
    else:
        score = 0

    return make_check(
        "Paragraph Length",
        CheckCategory.CONTENT,
        score,
        4,
        f"Average paragraph: {round_half_up(avg)} characters ({count} paragraphs)",
        "Keep paragraphs under 3-4 sentences for better AI parsing",
    )


def check_quick_summary(ctx: PageContext) -> Check:
    has_toc = ctx.soup.select_one(p.TOC_SELECTOR) is not None
    text = ctx.document_text.lower()
    has_takeaways = any(phrase in text for phrase in p.SUMMARY_PHRASES)
    found = has_toc or has_takeaways

    return make_check(
        "Quick Summary / Key Takeaways",
        CheckCategory.CONTENT,
        3 if found else 0,
        3,
        "Summary or key takeaways section detected" if found else "No quick summary or key takeaways found",
        'Add a "Key Takeaways" or summary section at the top for AI to extract',
    )


# ---------------------------------------------------------------------------
# E-E-A-T signals
# ---------------------------------------------------------------------------


def check_author_attribution(ctx: PageContext) -> Check:
    found = (
        ctx.soup.select_one(p.AUTHOR_SELECTOR) is not None
        or p.BYLINE_RE.search(ctx.body_text) is not None
    )
    return make_check(
        "Author Attribution",
        CheckCategory.EEAT,
        5 if found else 0,
        5,
        "Author attribution detected" if found else "No clear author attribution found",
        'Add visible author name with "Written by" or author byline',
    )


def check_author_bio(ctx: PageContext) -> Check:
    found = (
        ctx.soup.select_one(p.AUTHOR_BIO_SELECTOR) is not None
        or p.AUTHOR_BIO_RE.search(ctx.body_text) is not None
    )
    return make_check(
        "Author Bio/Credentials",
        CheckCategory.EEAT,
        5 if found else 0,
        5,
        "Author bio or credentials detected" if found else "No author bio found",
        "Add an author bio with credentials and expertise to build trust",
    )


def count_external_links(ctx: PageContext) -> int:
    """Absolute http(s) links whose hostname differs from the page's."""
    page_host = ctx.hostname
    count = 0
    for a in ctx.soup.select('a[href^="http"]'):
        href = (a.get("href") or "").strip()
        try:
            host = urlparse(href).hostname
        except ValueError:
            continue
        if host and host.lower() != page_host:
            count += 1
    return count


def check_external_citations(ctx: PageContext) -> Check:
    links = count_external_links(ctx)

    if links >= p.MIN_EXTERNAL_LINKS:
        score = 5
    elif links > 0:
        score = 2
    else:
        score = 0

    return make_check(
        "External Citations",
        CheckCategory.EEAT,
        score,
        5,
        f"Found {links} external links",
        "Cite reputable external sources to demonstrate research and credibility",
    )


def check_publication_date(ctx: PageContext) -> Check:
    found = (
        ctx.soup.select_one(p.DATE_SELECTOR) is not None
        or p.MONTH_DATE_RE.search(ctx.body_text) is not None
        or p.NUMERIC_DATE_RE.search(ctx.body_text) is not None
    )
    return make_check(
        "Publication Date",
        CheckCategory.EEAT,
        5 if found else 0,
        5,
        "Publication or update date detected" if found else "No visible date found",
        "Add visible publication and last updated dates to show content freshness",
    )


# ---------------------------------------------------------------------------
# Meta & technical
# ---------------------------------------------------------------------------


def _length_score(length: int, bounds: tuple[int, int], full: int, partial: int) -> int:
    low, high = bounds
    if low <= length <= high:
        return full
    return partial if length > 0 else 0


def check_meta_description(ctx: PageContext) -> Check:
    tag = ctx.soup.find("meta", attrs={"name": "description"})
    description = (tag.get("content") or "").strip() if tag else ""
    length = len(description)

    if description:
        details = f'{length} characters: "{description[:80]}..."'
    else:
        details = "No meta description found"

    return make_check(
        "Meta Description",
        CheckCategory.META,
        _length_score(length, p.META_DESCRIPTION_RANGE, 4, 2),
        4,
        details,
        "Add a compelling meta description between 120-160 characters",
    )


def check_title(ctx: PageContext) -> Check:
    title = ctx.title
    length = len(title)
    return make_check(
        "Page Title Optimization",
        CheckCategory.META,
        _length_score(length, p.TITLE_RANGE, 4, 2),
        4,
        f'{length} chars: "{title}"' if title else "No title tag found",
        "Optimize title tag to 30-60 characters with primary keyword",
    )


def check_viewport(ctx: PageContext) -> Check:
    found = ctx.soup.find("meta", attrs={"name": "viewport"}) is not None
    return make_check(
        "Mobile Viewport",
        CheckCategory.META,
        3 if found else 0,
        3,
        "Mobile viewport meta tag present" if found else "No mobile viewport tag found",
        "Add viewport meta tag for mobile responsiveness",
    )


def check_canonical(ctx: PageContext) -> Check:
    found = ctx.soup.select_one('link[rel~="canonical"]') is not None
    return make_check(
        "Canonical URL",
        CheckCategory.META,
        2 if found else 0,
        2,
        "Canonical URL specified" if found else "No canonical URL found",
        "Add canonical URL to prevent duplicate content issues",
    )


def check_https(ctx: PageContext) -> Check:
    secure = urlparse(ctx.url).scheme.lower() == "https"
    return make_check(
        "HTTPS Security",
        CheckCategory.META,
        2 if secure else 0,
        2,
        "Site is served over HTTPS" if secure else "Site is not using HTTPS",
        "Enable HTTPS for security and SEO benefits",
    )


# ---------------------------------------------------------------------------
# AI snippet optimisation
# ---------------------------------------------------------------------------


def check_definitions(ctx: PageContext) -> Check:
    found = p.DEFINITION_RE.search(ctx.body_text) is not None
    return make_check(
        "Definition-Style Content",
        CheckCategory.AI_SNIPPET,
        5 if found else 0,
        5,
        "Definition-style sentences found - good for AI extraction" if found else "No clear definitions found",
        'Include clear definitions that AI can quote (e.g., "GEO is the practice of...")',
    )


def check_step_by_step(ctx: PageContext) -> Check:
    found = (
        p.STEP_RE.search(ctx.body_text) is not None
        or len(ctx.soup.select("ol li")) >= p.MIN_ORDERED_STEPS
    )
    return make_check(
        "Step-by-Step Instructions",
        CheckCategory.AI_SNIPPET,
        5 if found else 0,
        5,
        "Step-by-step or numbered instructions detected" if found else "No step-by-step content found",
        "Structure how-to content with numbered steps for featured snippets",
    )


def check_statistics(ctx: PageContext) -> Check:
    found = p.STATISTICS_RE.search(ctx.body_text) is not None
    return make_check(
        "Statistics & Data Points",
        CheckCategory.AI_SNIPPET,
        5 if found else 0,
        5,
        "Statistics or data points found - quotable by AI" if found else "No statistics or specific data found",
        "Include specific statistics and data points that AI can cite",
    )


HTML_CHECKS: tuple[CheckFn, ...] = (
    check_jsonld_present,
    check_faq_schema,
    check_article_schema,
    check_author_schema,
    check_question_headings,
    check_heading_hierarchy,
    check_structured_lists,
    check_paragraph_length,
    check_quick_summary,
    check_author_attribution,
    check_author_bio,
    check_external_citations,
    check_publication_date,
    check_meta_description,
    check_title,
    check_viewport,
    check_canonical,
    check_https,
    check_definitions,
    check_step_by_step,
    check_statistics,
)


def evaluate_html_checks(ctx: PageContext) -> list[Check]:
    """Run every HTML-only check in registry order."""
    return [check(ctx) for check in HTML_CHECKS]


# ---------------------------------------------------------------------------
# Metrics-derived checks
# ---------------------------------------------------------------------------


def domain_authority_score(rank: float) -> int:
    return max(0, min(5, round_half_up(rank / p.DOMAIN_RANK_DIVISOR)))


def organic_visibility_score(keywords: int | None) -> int:
    if keywords is None:
        return 0
    for threshold, score in p.ORGANIC_KEYWORD_BANDS:
        if keywords > threshold:
            return score
    return p.ORGANIC_KEYWORD_FLOOR


def load_time_score(ms: float) -> int:
    for threshold, score in p.LOAD_TIME_BANDS:
        if ms < threshold:
            return score
    return p.LOAD_TIME_FLOOR


def on_page_score_points(on_page_score: float) -> int:
    return max(0, min(5, round_half_up(on_page_score / p.ON_PAGE_SCORE_DIVISOR)))


def evaluate_metrics_checks(metrics: MetricsResult | None) -> list[Check]:
    """Checks backed by provider data; each one needs its metric to be defined."""
    if metrics is None or not metrics.available:
        return []

    checks: list[Check] = []

    if metrics.domain_rank is not None:
        checks.append(
            make_check(
                "Domain Authority",
                CheckCategory.EEAT,
                domain_authority_score(metrics.domain_rank),
                5,
                f"Domain rank: {metrics.domain_rank:,.0f}",
                "Earn links from authoritative sites in your niche to grow domain authority",
            )
        )

    if metrics.organic_keywords is not None:
        checks.append(
            make_check(
                "Organic Visibility",
                CheckCategory.EEAT,
                organic_visibility_score(metrics.organic_keywords),
                5,
                f"Ranking for {metrics.organic_keywords:,} organic keywords",
                "Broaden topical coverage so the site ranks for more search queries",
            )
        )

    if metrics.page_load_time is not None:
        checks.append(
            make_check(
                "Page Load Performance",
                CheckCategory.META,
                load_time_score(metrics.page_load_time),
                4,
                f"Time to interactive: {metrics.page_load_time / 1000:.1f}s",
                "Reduce page weight and render-blocking resources to load in under 2 seconds",
            )
        )

    if metrics.on_page_score is not None:
        checks.append(
            make_check(
                "On-Page SEO Score",
                CheckCategory.META,
                on_page_score_points(metrics.on_page_score),
                5,
                f"On-page technical score: {metrics.on_page_score:.0f}/100",
                "Fix the technical on-page issues reported by your SEO crawler",
            )
        )

    return checks


def evaluate_page(html: str, url: str, metrics: MetricsResult | None = None) -> list[Check]:
    """Parse a page and run the full rubric, metrics checks last."""
    ctx = PageContext.from_html(html, url)
    return evaluate_html_checks(ctx) + evaluate_metrics_checks(metrics)
