"""GEO Audit endpoints: single-page analysis and emailed PDF report."""

import logging

from fastapi import APIRouter, Request

from app.core.config import settings
from app.core.exceptions import AppError, BadRequestError, EmailDeliveryError, ServiceNotConfiguredError
from app.core.rate_limit import limiter
from app.notifications.email import EmailAttachment, send_email
from app.schemas.geo_audit import Analysis, AnalyzeRequest, SendReportRequest, SendReportResponse
from app.services.geo_audit_service import run_geo_audit
from app.services.report_email import build_report_email
from app.services.report_pdf import render_pdf_report

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/geo-audit", tags=["geo-audit"])

ANALYZE_FAILED = "Failed to analyze the URL. Please try again."
SEND_FAILED = "Failed to send email"


@router.post("/analyze", response_model=Analysis, response_model_exclude_none=True)
@limiter.limit(settings.analyze_rate_limit)
async def analyze(request: Request, payload: AnalyzeRequest) -> Analysis:
    """Fetch a page and score it against the GEO readiness rubric."""
    if not payload.url or not payload.url.strip():
        raise BadRequestError("URL is required")

    try:
        return await run_geo_audit(payload.url)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Analysis error for %s: %s", payload.url, exc)
        raise AppError(ANALYZE_FAILED, status_code=500) from exc


@router.post("/send-report", response_model=SendReportResponse, response_model_exclude_none=True)
@limiter.limit(settings.send_report_rate_limit)
async def send_report(request: Request, payload: SendReportRequest) -> SendReportResponse:
    """Render the PDF + HTML email for an analysis and deliver it."""
    if not payload.email or not payload.email.strip() or payload.analysis is None:
        raise BadRequestError("Email and analysis data required")

    if not settings.resend_api_key:
        logger.error("Resend API key not configured")
        raise ServiceNotConfiguredError("Email service not configured")

    analysis = payload.analysis
    try:
        pdf = render_pdf_report(analysis)
        email = build_report_email(analysis)
        message_id = await send_email(
            to=payload.email.strip(),
            subject=email.subject,
            html=email.html,
            attachments=[EmailAttachment(filename=email.attachment_filename, content=pdf)],
        )
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Email error for %s: %s", analysis.url, exc)
        raise EmailDeliveryError(SEND_FAILED) from exc

    return SendReportResponse(success=True, id=message_id)
