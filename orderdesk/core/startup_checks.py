from __future__ import annotations

import logging

from orderdesk.core import config

logger = logging.getLogger(__name__)
STARTUP_PREFIX = "[STARTUP]"


def validate_pricing_settings() -> None:
    max_percentage = config.MAX_DISCOUNT_PERCENTAGE
    if not 0 < max_percentage <= 100:
        logger.critical("%s invalid MAX_DISCOUNT_PERCENTAGE=%s", STARTUP_PREFIX, max_percentage)
        raise RuntimeError("MAX_DISCOUNT_PERCENTAGE must be greater than 0 and at most 100")
    logger.info(
        "%s pricing settings ok max_discount_percentage=%s currency=%s",
        STARTUP_PREFIX,
        max_percentage,
        config.CURRENCY_CODE,
    )


def validate_cors_settings() -> None:
    if config.IS_PROD and not config.CORS_ORIGINS:
        logger.warning("%s CORS_ORIGINS is empty in production; browser clients will be blocked", STARTUP_PREFIX)
