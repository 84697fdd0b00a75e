"""Web UI routes: server-rendered audit form and report page."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request
from fastapi.responses import HTMLResponse
from fastapi.templating import Jinja2Templates

from app.analysis.scoring import check_status, score_tone
from app.core.config import settings
from app.core.exceptions import AppError
from app.core.templating import jinja_env
from app.services.geo_audit_service import run_geo_audit

logger = logging.getLogger(__name__)

templates = Jinja2Templates(env=jinja_env)
templates.env.globals["brand_name"] = settings.brand_name
templates.env.globals["contact_url"] = settings.contact_url
templates.env.globals["check_status"] = check_status
templates.env.globals["score_tone"] = score_tone

web_router = APIRouter(tags=["web"])


@web_router.get("/", response_class=HTMLResponse)
async def index(request: Request):
    return templates.TemplateResponse(request, "index.html", {"url": "", "error": None})


@web_router.get("/report", response_class=HTMLResponse)
async def report(request: Request, url: str = Query(default="")):
    """Run an audit and render it; fetch errors are shown inline on the form."""
    if not url.strip():
        return templates.TemplateResponse(
            request, "index.html", {"url": "", "error": "URL is required"}, status_code=400
        )

    try:
        analysis = await run_geo_audit(url)
    except AppError as exc:
        return templates.TemplateResponse(
            request, "index.html", {"url": url, "error": exc.message}, status_code=exc.status_code
        )
    except Exception as exc:
        logger.exception("Report page error for %s: %s", url, exc)
        return templates.TemplateResponse(
            request,
            "index.html",
            {"url": url, "error": "Failed to analyze the URL. Please try again."},
            status_code=500,
        )

    return templates.TemplateResponse(request, "report.html", {"analysis": analysis})
