"""
Application factory and uvicorn entry point.

    python -m templatr.api.server
"""
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from templatr.api.middleware import RequestLoggingMiddleware
from templatr.api.routes import router
from templatr.config.logging_config import apply_logging_config, get_logging_config
from templatr.config.settings import LOG_LEVEL, PORT
from templatr.services.template_renderer import TemplateRenderer
from templatr.setup_logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_app(renderer: Optional[TemplateRenderer] = None) -> FastAPI:
    """Build the FastAPI app; tests pass a renderer backed by a fake image source."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        # Close the pooled HTTP client used to fetch images
        app.state.renderer.image_source.close()

    app = FastAPI(title="Templatr", lifespan=lifespan)
    app.state.renderer = renderer or TemplateRenderer()

    app.add_middleware(RequestLoggingMiddleware, log_requests=get_logging_config()["log_requests"])
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router)
    return app


def main() -> None:
    setup_logging(LOG_LEVEL)
    config = apply_logging_config()
    logger.info(f"Starting Templatr API on port {PORT} ({config['environment']})")
    uvicorn.run(create_app(), host="0.0.0.0", port=PORT)


if __name__ == "__main__":
    main()
