"""Document compiler service — main entry point.

Serves the HTTP API until SIGINT/SIGTERM. Narrative generation uses the LLM
only when an OpenRouter key is configured; otherwise the deterministic
fallback document is produced.
"""

from __future__ import annotations

import asyncio
import logging
import signal

from .config import AppConfig
from .llm_client import LLMClient
from .server import DocumentServer

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_server(config: AppConfig) -> DocumentServer:
    """Create the HTTP server with an LLM client when one is configured."""
    llm = LLMClient(config.llm) if config.llm_enabled else None
    if llm is None:
        logger.warning("OPENROUTER_API_KEY not set — Markdown will use the fallback generator")
    return DocumentServer(config, llm=llm)


async def main() -> None:
    config = AppConfig.from_env()
    server = create_server(config)

    # Graceful shutdown
    loop = asyncio.get_running_loop()
    serve_task = asyncio.create_task(server.start())

    def _shutdown() -> None:
        logger.info("Shutdown signal received")
        serve_task.cancel()

    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, _shutdown)

    try:
        await serve_task
    except asyncio.CancelledError:
        pass

    logger.info("All services stopped.")


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
