"""Application entrypoint for the message API.

This module wires together the FastAPI application with its lifespan hook,
logging and the CORS strategy selected in configuration. Run it directly or
through `uvicorn app.main:app --port 3000`.
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.api.routes import message_router
from app.core.config import Settings, settings as default_settings
from app.core.cors import apply_cors
from app.core.logging import configure_logging

logger = logging.getLogger(__name__)


def create_application(settings: Settings | None = None) -> FastAPI:
    """Assemble and configure the FastAPI application instance.

    - Announces the listening address from the lifespan hook.
    - Applies the CORS strategy from `settings.CORS_MODE`.
    - Registers the message router that exposes `GET /api/message`.
    """

    settings = settings or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(settings.LOG_LEVEL)
        logger.info("Server is running at PORT http://localhost:%s", settings.PORT)
        yield

    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    apply_cors(application, settings)

    application.include_router(message_router)

    @application.get("/")
    async def healthcheck():
        """Lightweight health endpoint used by uptime monitors."""
        return {"message": f"{settings.PROJECT_NAME} is running!"}

    return application


app = create_application()


if __name__ == "__main__":
    uvicorn.run(app, host=default_settings.HOST, port=default_settings.PORT)
