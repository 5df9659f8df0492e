"""Application entry point.

Serves the chat proxy and the chat page. In integrated mode both share one
uvicorn server; in separate mode they run as two processes. Either way the
page's proxy client is pointed at wherever the API actually listens.
Environment variables are loaded from .env file.
"""

import logging
import os
import sys
from typing import Literal

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field

# Load environment variables before any other imports that might need them
load_dotenv()

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
logger = logging.getLogger(__name__)

_WILDCARD_HOSTS = {"", "0.0.0.0", "::"}


class RunSettings(BaseModel):
    """Process-level settings for serving the app.

    Attributes:
        run_mode: "integrated" (one server) or "separate" (API and UI processes).
        host: Interface both servers bind to.
        port: API port; also the UI port in integrated mode.
        ui_port: UI port in separate mode.
        log_level: Level name passed to uvicorn.
    """

    # Environment values arrive as strings
    model_config = ConfigDict(validate_default=True)

    run_mode: Literal["integrated", "separate"] = Field(
        default_factory=lambda: os.getenv("RUN_MODE", "integrated").lower()
    )
    host: str = Field(default_factory=lambda: os.getenv("HOST", "0.0.0.0"))
    port: int = Field(default_factory=lambda: os.getenv("PORT", "8000"), gt=0, lt=65536)
    ui_port: int = Field(
        default_factory=lambda: os.getenv("UI_PORT", "8080"), gt=0, lt=65536
    )
    log_level: str = Field(default_factory=lambda: os.getenv("LOG_LEVEL", "info").lower())


def api_base_url(settings: RunSettings) -> str:
    """URL the chat page uses to reach the API on this machine."""
    host = "127.0.0.1" if settings.host in _WILDCARD_HOSTS else settings.host
    return f"http://{host}:{settings.port}"


def export_api_base_url(settings: RunSettings) -> str:
    """Point the chat page at the served API unless API_BASE_URL is set.

    Written to the environment so a separate UI process inherits it.
    """
    return os.environ.setdefault("API_BASE_URL", api_base_url(settings))


def run_integrated(settings: RunSettings) -> None:
    """Run the API and the chat page on one server.

    The completion service is built here, so a missing API key stops the
    process before the server starts.
    """
    import uvicorn
    from nicegui import ui

    from multichat.api.app import create_app
    from multichat.completion.service import CompletionService
    from multichat.ui.chat_page import STORAGE_SECRET, TITLE
    from multichat.ui.chat_page import chat_page  # noqa: F401 - Registers the page

    base_url = export_api_base_url(settings)
    service = CompletionService()
    logger.info(f"Relaying chat to model {service.model_name}")

    app = create_app(completion_service=service)
    ui.run_with(app, title=TITLE, storage_secret=STORAGE_SECRET)

    logger.info(f"Chat UI on http://localhost:{settings.port}/, proxy at {base_url}/api/chat")
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level)


def run_separate(settings: RunSettings) -> None:
    """Run the API and the chat page as two processes.

    Stops both when either exits.
    """
    import asyncio
    import subprocess

    base_url = export_api_base_url(settings)

    async def run_servers() -> None:
        logger.info(f"Starting chat proxy on {base_url}")
        logger.info(f"Starting chat UI on http://localhost:{settings.ui_port}")

        api_proc = subprocess.Popen(
            [
                sys.executable,
                "-m",
                "uvicorn",
                "multichat.api.app:app",
                "--host",
                settings.host,
                "--port",
                str(settings.port),
            ]
        )
        ui_proc = subprocess.Popen(
            [sys.executable, "-c", "from multichat.ui.chat_page import main; main()"],
            env={**os.environ, "UI_PORT": str(settings.ui_port)},
        )

        try:
            while api_proc.poll() is None and ui_proc.poll() is None:
                await asyncio.sleep(1)
        finally:
            for proc in (api_proc, ui_proc):
                proc.terminate()
                proc.wait()

    try:
        asyncio.run(run_servers())
    except KeyboardInterrupt:
        logger.info("Shutting down servers...")


def main() -> None:
    """Start the app in the configured RUN_MODE."""
    settings = RunSettings()
    logger.info(f"Starting Multi-User Chat in {settings.run_mode} mode")

    if settings.run_mode == "separate":
        run_separate(settings)
    else:
        run_integrated(settings)


if __name__ == "__main__":
    main()
