"""FastAPI application factory and configuration.

Main application entry point with lifespan management, middleware,
and router registration.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from multichat.api.chat import router as chat_router
from multichat.api.errors import ChatProxyError, chat_proxy_error_handler
from multichat.completion.service import CompletionService

logger = logging.getLogger(__name__)

CORS_ALLOW_METHODS = ["GET", "DELETE", "PATCH", "POST", "PUT"]
CORS_ALLOW_HEADERS = [
    "X-CSRF-Token",
    "X-Requested-With",
    "Accept",
    "Accept-Version",
    "Content-Length",
    "Content-MD5",
    "Content-Type",
    "Date",
    "X-Api-Version",
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application startup and shutdown lifecycle.

    Builds the completion service on startup unless one was injected into
    ``create_app``. A missing API key fails startup here.

    Args:
        app: The FastAPI application instance.

    Yields:
        Control to the application while it runs.
    """
    # Startup
    logger.info("Starting Multi-User Chat API...")
    owned = getattr(app.state, "completion_service", None) is None
    if owned:
        app.state.completion_service = CompletionService()
    logger.info(f"Completion model: {app.state.completion_service.model_name}")
    yield
    # Shutdown
    if owned:
        await app.state.completion_service.close()
        app.state.completion_service = None
    logger.info("Shutting down Multi-User Chat API...")


def create_app(completion_service: CompletionService | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        completion_service: Service shared by all chat requests. Built from
            the environment at startup when omitted.

    Returns:
        Configured FastAPI application instance.
    """
    application = FastAPI(
        title="Multi-User Chat API",
        description=(
            "Streaming proxy for a hosted chat-completion API. Accepts a full "
            "conversation and relays the model's reply as chunked plain text."
        ),
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    application.state.completion_service = completion_service

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    application.add_exception_handler(ChatProxyError, chat_proxy_error_handler)
    application.include_router(chat_router)

    @application.get("/health")
    async def health_check() -> dict[str, str]:
        """Check service health status."""
        return {"status": "healthy", "service": "multichat"}

    return application


app = create_app()
