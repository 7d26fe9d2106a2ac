# src/agency_taskbot/connectors/health_server.py

from __future__ import annotations

import logging

from aiohttp import web

logger = logging.getLogger(__name__)

HEALTH_BODY = "Telegram Task Bot is running! 🤖"


async def _health(request: web.Request) -> web.Response:
    return web.Response(text=HEALTH_BODY)


def create_health_app() -> web.Application:
    app = web.Application()
    app.router.add_get("/", _health)
    return app


async def start_health_server(port: int, host: str = "0.0.0.0") -> web.AppRunner:
    """Start the liveness endpoint in the running loop. Call runner.cleanup() to stop it."""
    runner = web.AppRunner(create_health_app(), access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, host=host, port=port)
    await site.start()
    logger.info("Health server is running on port %d", port)
    return runner
