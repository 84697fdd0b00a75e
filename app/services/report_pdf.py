"""PDF report builder (reportlab canvas, A4, dark theme).

Layout, top to bottom: header + URL, big score coloured by tone, grade and
rating, passed / warnings / failed counters, optional "Search Intelligence"
box, then one block per category with a progress bar and every check's score,
details and recommendation. Page breaks are inserted as needed.
"""

from __future__ import annotations

import io
import logging

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from app.analysis.scoring import (
    analysis_percentage,
    category_scores,
    percentage,
    rating_label,
    score_tone,
)
from app.core.config import settings
from app.schemas.geo_audit import Analysis, SeoMetrics

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
WHITE: RGB = (255, 255, 255)
GRAY: RGB = (113, 113, 122)
DIM: RGB = (82, 82, 91)
BAR_BG: RGB = (39, 39, 42)
BOX_BG: RGB = (10, 10, 10)

TONE_RGB: dict[str, RGB] = {
    "good": (52, 211, 153),
    "fair": (251, 191, 36),
    "poor": (248, 113, 113),
}

MAX_URL_CHARS = 60
MAX_DETAIL_LINES = 2


def tone_rgb(pct: int) -> RGB:
    return TONE_RGB[score_tone(pct)]


def _pdf_safe(text: str) -> str:
    """Standard PDF fonts only cover cp1252; replace anything else."""
    return text.replace("→", "->").encode("cp1252", "replace").decode("cp1252")


class _PdfWriter:
    """Thin cursor over a reportlab canvas; ``y`` grows downwards from the top."""

    def __init__(self, buf: io.BytesIO, title: str):
        self.canvas = canvas.Canvas(buf, pagesize=A4, invariant=1)
        self.canvas.setTitle(_pdf_safe(title))
        self.canvas.setAuthor(_pdf_safe(settings.brand_name))
        self.width, self.height = A4
        self.margin = 20 * mm
        self.y = self.margin
        self._paint_background()

    def _paint_background(self) -> None:
        self.canvas.setFillColorRGB(*(v / 255 for v in BLACK))
        self.canvas.rect(0, 0, self.width, self.height, fill=1, stroke=0)

    def new_page(self) -> None:
        self.canvas.showPage()
        self._paint_background()
        self.y = self.margin

    def ensure_space(self, needed: float) -> None:
        if self.y + needed > self.height - self.margin:
            self.new_page()

    def fill(self, colour: RGB) -> None:
        self.canvas.setFillColorRGB(*(v / 255 for v in colour))

    def text(
        self,
        value: str,
        x: float,
        size: float,
        colour: RGB,
        align: str = "left",
        font: str = "Helvetica",
        dy: float = 0,
    ) -> None:
        self.canvas.setFont(font, size)
        self.fill(colour)
        baseline = self.height - self.y - dy
        value = _pdf_safe(value)
        if align == "center":
            self.canvas.drawCentredString(x, baseline, value)
        elif align == "right":
            self.canvas.drawRightString(x, baseline, value)
        else:
            self.canvas.drawString(x, baseline, value)

    def bar(self, x: float, width: float, height: float, colour: RGB) -> None:
        if width <= 0:
            return
        self.fill(colour)
        self.canvas.roundRect(x, self.height - self.y - height, width, height, 1 * mm, fill=1, stroke=0)

    def wrap(self, value: str, size: float, max_width: float) -> list[str]:
        return simpleSplit(_pdf_safe(value), "Helvetica", size, max_width)

    def finish(self) -> None:
        self.canvas.showPage()
        self.canvas.save()


def _metric_cells(metrics: SeoMetrics) -> list[tuple[str, str]]:
    cells: list[tuple[str, str]] = []
    if metrics.domain_rank is not None:
        cells.append(("Domain Rank", f"{metrics.domain_rank:,.0f}"))
    if metrics.organic_traffic is not None:
        cells.append(("Est. Traffic", f"{metrics.organic_traffic:,.0f}"))
    if metrics.organic_keywords is not None:
        cells.append(("Keywords", f"{metrics.organic_keywords:,}"))
    if metrics.on_page_score is not None:
        cells.append(("On-Page Score", f"{metrics.on_page_score:.0f}"))
    return cells


def _draw_header(w: _PdfWriter, analysis: Analysis, pct: int) -> None:
    centre = w.width / 2

    w.text("GEO AUDIT REPORT", centre, 10, GRAY, align="center")
    w.y += 8 * mm
    url = analysis.url if len(analysis.url) <= MAX_URL_CHARS else analysis.url[: MAX_URL_CHARS - 3] + "..."
    w.text(url, centre, 8, DIM, align="center")
    w.y += 25 * mm

    w.text(str(pct), centre - 8 * mm, 64, tone_rgb(pct), align="center", font="Helvetica-Bold")
    w.text("/100", centre + 20 * mm, 24, DIM, align="center")
    w.y += 8 * mm
    w.text(
        f"GEO SCORE  |  GRADE {analysis.grade}  |  {rating_label(pct).upper()}",
        centre,
        8,
        GRAY,
        align="center",
    )
    w.y += 15 * mm


def _draw_summary(w: _PdfWriter, analysis: Analysis) -> None:
    stat_width = (w.width - w.margin * 2) / 3
    stats = (
        ("PASSED", analysis.summary.passed, TONE_RGB["good"]),
        ("WARNINGS", analysis.summary.warnings, TONE_RGB["fair"]),
        ("FAILED", analysis.summary.failed, TONE_RGB["poor"]),
    )
    for i, (label, value, colour) in enumerate(stats):
        x = w.margin + stat_width * (i + 0.5)
        w.text(str(value), x, 20, colour, align="center")
        w.text(label, x, 7, GRAY, align="center", dy=6 * mm)
    w.y += 20 * mm


def _draw_metrics(w: _PdfWriter, metrics: SeoMetrics) -> None:
    cells = _metric_cells(metrics)
    keywords = metrics.top_keywords
    if not cells and not keywords:
        return

    box_height = 35 * mm + (len(keywords) * 5 * mm if keywords else 0)
    w.ensure_space(box_height + 5 * mm)

    w.fill(BOX_BG)
    w.canvas.setStrokeColorRGB(*(v / 255 for v in BAR_BG))
    w.canvas.roundRect(
        w.margin,
        w.height - w.y - box_height,
        w.width - w.margin * 2,
        box_height,
        2 * mm,
        fill=1,
        stroke=1,
    )

    w.y += 10 * mm
    w.text("Search Intelligence", w.margin + 8 * mm, 10, WHITE)
    w.y += 10 * mm

    if cells:
        cell_width = (w.width - w.margin * 2 - 16 * mm) / len(cells)
        for i, (label, value) in enumerate(cells):
            x = w.margin + 8 * mm + cell_width * i + cell_width / 2
            w.text(label.upper(), x, 6, GRAY, align="center")
            w.text(value, x, 14, WHITE, align="center", dy=8 * mm)
    w.y += 15 * mm

    for kw in keywords:
        w.text(kw.keyword, w.margin + 8 * mm, 8, WHITE)
        w.text(
            f"#{kw.position}  ·  {kw.search_volume:,}/mo",
            w.width - w.margin - 8 * mm,
            8,
            GRAY,
            align="right",
        )
        w.y += 5 * mm

    w.y += 10 * mm


def _draw_categories(w: _PdfWriter, analysis: Analysis) -> None:
    content_width = w.width - w.margin * 2
    detail_width = content_width - 10 * mm

    for category in category_scores(analysis.checks):
        cat_checks = [c for c in analysis.checks if c.category == category.name]
        w.ensure_space(25 * mm)
        w.y += 10 * mm

        colour = tone_rgb(category.percentage)
        w.text(category.name.value, w.margin, 11, WHITE)
        w.text(f"{category.percentage}%", w.width - w.margin, 11, colour, align="right")
        w.y += 3 * mm

        w.bar(w.margin, content_width, 3 * mm, BAR_BG)
        w.bar(w.margin, content_width * category.percentage / 100, 3 * mm, colour)
        w.y += 8 * mm

        for check in cat_checks:
            details = w.wrap(check.details, 7, detail_width)[:MAX_DETAIL_LINES]
            rec = (
                w.wrap(f"→ {check.recommendation}", 7, detail_width)[:MAX_DETAIL_LINES]
                if check.recommendation
                else []
            )
            w.ensure_space(8 * mm + (len(details) + len(rec)) * 4 * mm)

            check_colour = tone_rgb(percentage(check.score, check.max_score))
            w.fill(check_colour)
            w.canvas.circle(w.margin + 2 * mm, w.height - w.y - 1 * mm, 1.5 * mm, fill=1, stroke=0)
            w.text(check.name, w.margin + 8 * mm, 9, WHITE, dy=2 * mm)
            w.text(f"{check.score}/{check.max_score}", w.width - w.margin, 9, check_colour, align="right", dy=2 * mm)
            w.y += 6 * mm

            for line in details:
                w.text(line, w.margin + 8 * mm, 7, GRAY)
                w.y += 4 * mm
            for line in rec:
                w.text(line, w.margin + 8 * mm, 7, TONE_RGB["fair"])
                w.y += 4 * mm
            w.y += 3 * mm


def _draw_footer(w: _PdfWriter) -> None:
    w.ensure_space(30 * mm)
    w.y = w.height - 25 * mm
    centre = w.width / 2

    w.canvas.setStrokeColorRGB(*(v / 255 for v in BAR_BG))
    w.canvas.line(w.margin, w.height - w.y, w.width - w.margin, w.height - w.y)
    w.y += 8 * mm
    w.text("Need help improving your GEO score?", centre, 8, GRAY, align="center")
    if settings.contact_url:
        w.y += 6 * mm
        w.text(settings.contact_label or settings.contact_url, centre, 8, WHITE, align="center")
    w.y += 8 * mm
    w.text(f"Powered by {settings.brand_name}", centre, 6, DIM, align="center")


def render_pdf_report(analysis: Analysis) -> bytes:
    """Render the analysis as a PDF document and return its bytes."""
    buf = io.BytesIO()
    pct = analysis_percentage(analysis)

    w = _PdfWriter(buf, title=f"GEO Audit - {analysis.url}")
    _draw_header(w, analysis, pct)
    _draw_summary(w, analysis)
    if analysis.seo_metrics is not None:
        _draw_metrics(w, analysis.seo_metrics)
    _draw_categories(w, analysis)
    _draw_footer(w)
    w.finish()

    data = buf.getvalue()
    logger.debug("PDF report for %s: %d bytes", analysis.url, len(data))
    return data
