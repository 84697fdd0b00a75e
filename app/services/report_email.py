"""Report email: subject, HTML body and PDF attachment name for an Analysis."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from urllib.parse import urlparse

from app.analysis.scoring import analysis_percentage, check_status, rating_label, score_tone
from app.core.config import Settings, settings
from app.core.templating import jinja_env
from app.schemas.geo_audit import Analysis, Check

TOP_ISSUES = 3

TONE_COLOURS = {
    "good": "#34d399",
    "fair": "#fbbf24",
    "poor": "#f87171",
}

TONE_SENTENCES = {
    "good": "That's a solid score - you're doing a lot of things right.",
    "fair": "There's definitely room for improvement here.",
    "poor": "There are some important issues that need addressing.",
}

QUICK_WINS = (
    "Make sure your content directly answers questions people are asking",
    "Add structured data (schema markup) to help AI understand your content",
    "Include author information and credentials where relevant",
)


@dataclass
class ReportEmail:
    subject: str
    html: str
    attachment_filename: str


def report_domain(url: str) -> str:
    """Hostname without ``www.`` for subjects and filenames; ``website`` if unparsable."""
    try:
        host = urlparse(url).hostname
    except ValueError:
        host = None
    if not host:
        return "website"
    return host.removeprefix("www.")


def critical_issues(analysis: Analysis, limit: int = TOP_ISSUES) -> list[Check]:
    """First failed (zero-score) checks in evaluation order."""
    return [c for c in analysis.checks if check_status(c) == "failed"][:limit]


def attachment_filename(analysis: Analysis, today: date | None = None) -> str:
    today = today or date.today()
    return f"geo-audit-{report_domain(analysis.url)}-{today.isoformat()}.pdf"


def build_report_email(
    analysis: Analysis,
    cfg: Settings | None = None,
    today: date | None = None,
) -> ReportEmail:
    cfg = cfg or settings
    pct = analysis_percentage(analysis)
    tone = score_tone(pct)
    domain = report_domain(analysis.url)

    html = jinja_env.get_template("email/report.html").render(
        analysis=analysis,
        domain=domain,
        percentage=pct,
        rating=rating_label(pct),
        tone_colour=TONE_COLOURS[tone],
        tone_sentence=TONE_SENTENCES[tone],
        issues=critical_issues(analysis),
        quick_wins=QUICK_WINS,
        brand_name=cfg.brand_name,
        contact_url=cfg.contact_url,
        contact_label=cfg.contact_label or cfg.contact_url,
    )

    return ReportEmail(
        subject=f"Your GEO Audit: {pct}/100 for {domain}",
        html=html,
        attachment_filename=attachment_filename(analysis, today),
    )
