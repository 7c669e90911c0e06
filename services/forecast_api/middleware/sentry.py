"""
Sentry initialisation. No-op when SENTRY_DSN is empty (local dev, tests).
"""

import logging

import sentry_sdk

from services.forecast_api.config import settings

logger = logging.getLogger(__name__)


def setup_sentry() -> bool:
    """Initialise the Sentry SDK. Returns True when error reporting is active."""
    if not settings.sentry_dsn:
        logger.debug("SENTRY_DSN not set; error reporting disabled")
        return False

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"{settings.app_name}@{settings.app_version}",
        traces_sample_rate=settings.sentry_traces_sample_rate,
        send_default_pii=False,
    )
    logger.info("Sentry initialised for environment=%s", settings.environment)
    return True
