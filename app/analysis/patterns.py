"""Rubric constants: regexes, selectors, keyword tables and thresholds.

Kept apart from the check functions so each pattern can be unit-tested on
plain strings without building a document.
"""

from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Schema markup
# ---------------------------------------------------------------------------

JSONLD_SCRIPT_TYPE = "application/ld+json"

FAQ_TYPE_MARKER = "faq"  # substring match: FAQPage, FAQ ...
ARTICLE_TYPES = frozenset({"article", "newsarticle", "blogposting", "howto"})
AUTHOR_TYPES = frozenset({"person", "author", "organization"})

# ---------------------------------------------------------------------------
# Content structure
# ---------------------------------------------------------------------------

QUESTION_WORDS = (
    "what", "why", "how", "when", "where", "who", "which",
    "can", "do", "does", "is", "are", "should", "will", "would",
)
QUESTION_HEADING_RE = re.compile(
    r"^(?:" + "|".join(QUESTION_WORDS) + r")\b",
    re.IGNORECASE,
)

MIN_QUESTION_HEADINGS = 2
MIN_H2_HEADINGS = 2
MIN_LIST_ITEMS = 3

PARAGRAPH_MIN_CHARS = 20  # shorter <p> blocks (captions, buttons) are ignored
PARAGRAPH_GOOD_AVG = 500  # exclusive
PARAGRAPH_OK_AVG = 700  # exclusive

TOC_SELECTOR = (
    '[class*="toc"], [id*="toc"], [class*="contents"], '
    '[class*="summary"], .table-of-contents'
)
SUMMARY_PHRASES = ("key takeaway", "quick summary", "tldr", "tl;dr")

# ---------------------------------------------------------------------------
# E-E-A-T
# ---------------------------------------------------------------------------

AUTHOR_SELECTOR = '[class*="author"], [rel~="author"], .author, .byline, [itemprop="author"]'
BYLINE_RE = re.compile(r"written\s+by|author:|by\s+[A-Z][a-z]+\s+[A-Z][a-z]+", re.IGNORECASE)

AUTHOR_BIO_SELECTOR = '[class*="author-bio"], [class*="about-author"], .author-description'
AUTHOR_BIO_RE = re.compile(r"about\s+the\s+author|[A-Z][a-z]+ is a", re.IGNORECASE)

MIN_EXTERNAL_LINKS = 2

DATE_SELECTOR = 'time, [class*="date"], [class*="published"], [datetime]'
MONTH_NAMES = (
    "january", "february", "march", "april", "may", "june", "july",
    "august", "september", "october", "november", "december",
)
MONTH_DATE_RE = re.compile(
    r"\b(?:" + "|".join(MONTH_NAMES) + r")\s+\d{1,2},?\s+\d{4}",
    re.IGNORECASE,
)
NUMERIC_DATE_RE = re.compile(r"\b\d{1,2}[/\-]\d{1,2}[/\-]\d{2,4}\b")

# ---------------------------------------------------------------------------
# Meta & technical
# ---------------------------------------------------------------------------

META_DESCRIPTION_RANGE = (120, 160)  # inclusive
TITLE_RANGE = (30, 60)  # inclusive

# ---------------------------------------------------------------------------
# AI snippet optimisation
# ---------------------------------------------------------------------------

DEFINITION_RE = re.compile(
    r"\b(?:is a|refers to|means|defined as|can be described as)\b",
    re.IGNORECASE,
)
STEP_RE = re.compile(
    r"\bstep\s*\d|\bstep\s*one\b|\bfirst,?\s|\bsecond,?\s|\bthird,?\s|\d\.\s+[A-Z]",
    re.IGNORECASE,
)
MIN_ORDERED_STEPS = 3
STATISTICS_RE = re.compile(
    r"\d+%|\d+\s*(?:percent|million|billion|thousand)|\$\d+|\d+x\s",
    re.IGNORECASE,
)

# ---------------------------------------------------------------------------
# Metrics-derived checks
# ---------------------------------------------------------------------------

DOMAIN_RANK_DIVISOR = 200
ON_PAGE_SCORE_DIVISOR = 20

# (exclusive lower bound, score); first match wins
ORGANIC_KEYWORD_BANDS: tuple[tuple[int, int], ...] = (
    (1000, 5),
    (500, 4),
    (100, 3),
    (10, 2),
)
ORGANIC_KEYWORD_FLOOR = 1

# (exclusive upper bound in ms, score); first match wins
LOAD_TIME_BANDS: tuple[tuple[int, int], ...] = (
    (2000, 4),
    (3000, 3),
    (5000, 2),
)
LOAD_TIME_FLOOR = 1
