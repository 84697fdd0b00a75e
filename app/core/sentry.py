"""Sentry error tracking integration.

Initializes the Sentry SDK when SENTRY_DSN is set; a no-op otherwise.
Report delivery payloads carry recipient addresses, so request bodies are
stripped from every event before it leaves the process.
"""

import logging

from app.core.config import settings

logger = logging.getLogger(__name__)


def scrub_event(event: dict, hint: dict) -> dict:
    """Drop request bodies and cookies from a Sentry event."""
    request = event.get("request")
    if isinstance(request, dict):
        request.pop("data", None)
        request.pop("cookies", None)
    return event


def init_sentry() -> None:
    """Initialize Sentry if SENTRY_DSN is configured."""
    if not settings.sentry_dsn:
        logger.debug("Sentry DSN not configured, skipping")
        return

    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1 if settings.app_env == "production" else 1.0,
        send_default_pii=False,
        before_send=scrub_event,
        integrations=[
            FastApiIntegration(transaction_style="endpoint"),
        ],
    )
    logger.info("Sentry initialized (env=%s)", settings.app_env)
