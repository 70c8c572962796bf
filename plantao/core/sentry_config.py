# plantao/core/sentry_config.py
"""
Sentry configuration for error tracking in production.

Non-fatal problems (e.g. a failed cache invalidation sweep) are forwarded as
warning messages so they show up next to real exceptions.
"""

import logging

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.starlette import StarletteIntegration

from plantao.core.config import IS_PRODUCTION, RELEASE_VERSION, SENTRY_DSN, SENTRY_ENVIRONMENT

logger = logging.getLogger(__name__)


def init_sentry() -> bool:
    """
    Initialize Sentry error tracking.

    Returns:
        True if Sentry was initialized successfully, False otherwise.
    """
    if not IS_PRODUCTION:
        logger.info("Sentry disabled in development mode")
        return False

    if not SENTRY_DSN:
        logger.warning(
            "SENTRY_DSN not set. Error tracking disabled. "
            "Set SENTRY_DSN environment variable to enable Sentry in production."
        )
        return False

    try:
        logging_integration = LoggingIntegration(
            level=logging.INFO,  # Breadcrumbs from INFO and above
            event_level=logging.ERROR,  # Send errors and above as events
        )

        sentry_sdk.init(
            dsn=SENTRY_DSN,
            integrations=[
                FastApiIntegration(),
                StarletteIntegration(),
                logging_integration,
            ],
            traces_sample_rate=0.1,
            sample_rate=1.0,
            release=RELEASE_VERSION,
            environment=SENTRY_ENVIRONMENT,
            send_default_pii=False,
            attach_stacktrace=True,
            before_send=before_send_hook,
        )

        logger.info(f"Sentry initialized successfully (environment: {SENTRY_ENVIRONMENT})")
        return True

    except Exception as e:
        logger.error(f"Failed to initialize Sentry: {e}", exc_info=True)
        return False


def before_send_hook(event, hint):
    """
    Filter sensitive data before sending to Sentry.

    Args:
        event: Sentry event data
        hint: Additional context

    Returns:
        Modified event or None to drop the event
    """
    request = event.get("request")
    if not request:
        return event

    headers = request.get("headers")
    if headers:
        for header in ("cookie", "authorization", "x-api-key"):
            if header in headers:
                headers[header] = "[Filtered]"

    query = request.get("query_string")
    if query and ("password" in query.lower() or "token" in query.lower()):
        request["query_string"] = "[Filtered]"

    return event


def capture_message(message: str, level: str = "info", context: dict | None = None):
    """
    Send a message to Sentry.

    A no-op when the SDK was never initialised.

    Args:
        message: Message to send
        level: Severity level (debug, info, warning, error, fatal)
        context: Additional context
    """
    if context:
        with sentry_sdk.new_scope() as scope:
            for key, value in context.items():
                scope.set_context(key, value)
            sentry_sdk.capture_message(message, level=level)
    else:
        sentry_sdk.capture_message(message, level=level)


def add_breadcrumb(message: str, category: str = "default", level: str = "info", data: dict | None = None):
    """
    Add a breadcrumb for debugging.

    Args:
        message: Breadcrumb message
        category: Category (override, invalidation, report, ...)
        level: Severity level
        data: Additional data
    """
    sentry_sdk.add_breadcrumb(message=message, category=category, level=level, data=data or {})
