"""CORS strategies applied to the API application.

`allowlist` echoes `Access-Control-Allow-Origin` only for configured origins
and allows credentials. `open` answers every origin with a wildcard. `disabled`
installs nothing, leaving cross-origin reads to be solved by the frontend's
development proxy.
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import Settings

logger = logging.getLogger(__name__)


def apply_cors(application: FastAPI, settings: Settings) -> None:
    """Register CORSMiddleware on `application` according to `settings.CORS_MODE`."""

    mode = settings.CORS_MODE
    if mode == "disabled":
        logger.info("CORS middleware disabled; use the frontend proxy for browser access")
        return

    if mode == "open":
        application.add_middleware(
            CORSMiddleware,
            allow_origins=["*"],
            allow_credentials=False,  # browsers reject "*" together with credentials
            allow_methods=["*"],
            allow_headers=["*"],
        )
        logger.info("CORS open to all origins")
        return

    application.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.ALLOWED_ORIGINS),
        allow_credentials=settings.CORS_ALLOW_CREDENTIALS,
        allow_methods=["GET"],
        allow_headers=["Content-Type"],
    )
    logger.info("CORS restricted to %s", ", ".join(settings.ALLOWED_ORIGINS))
