"""
Keep-alive HTTP listener.

Hosting platforms that put idle web services to sleep poll the process over
HTTP; this answers those requests so the bot stays online.
"""

import logging
from typing import Optional

from aiohttp import web

logger = logging.getLogger(__name__)

STATUS_TEXT = "BO7-Scoreboard Bot is running!\n"


def build_app() -> web.Application:
    app = web.Application()

    async def index(_request):
        return web.Response(text=STATUS_TEXT, content_type="text/plain")

    async def health(_request):
        return web.Response(text="ok", content_type="text/plain")

    app.router.add_get("/", index)
    app.router.add_get("/health", health)
    return app


class KeepAliveServer:
    """Small aiohttp site bound to the configured port."""

    def __init__(self, port: int, host: str = "0.0.0.0"):
        self.port = port
        self.host = host
        self._runner: Optional[web.AppRunner] = None

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def start(self):
        if self._runner is not None:
            return
        runner = web.AppRunner(build_app())
        await runner.setup()
        site = web.TCPSite(runner, self.host, self.port)
        await site.start()
        self._runner = runner
        logger.info(f"HTTP server running on port {self.port}")

    async def stop(self):
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("HTTP server stopped")
