"""Small HTTP endpoint that identifies the running bot.

``GET /`` answers with the configured app name, which is enough for uptime
probes. The server follows ``listeningPort``: a change restarts it on the
new port.
"""

from __future__ import annotations

from aiohttp import web

from rulesbot.configuration.config_store import ConfigStore
from rulesbot.util.logger import get_logger

logger = get_logger("status_server")

DEFAULT_APP_NAME = "RulesBot"


class StatusServer:
    def __init__(self, config: ConfigStore, host: str = "0.0.0.0") -> None:
        self._config = config
        self.host = host
        self.port: int | None = None
        self._runner: web.AppRunner | None = None

    async def identify(self, request: web.Request) -> web.Response:
        return web.Response(text=str(self._config.get_value("appName", DEFAULT_APP_NAME)))

    def build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/", self.identify)
        return app

    @property
    def running(self) -> bool:
        return self._runner is not None

    async def listen(self, port: int) -> None:
        """Serve on ``port``, stopping any previous listener first.

        A port that cannot be bound is logged and leaves the server stopped.
        """
        await self.stop()

        runner = web.AppRunner(self.build_app())
        await runner.setup()
        try:
            site = web.TCPSite(runner, self.host, port)
            await site.start()
        except (OSError, OverflowError) as exc:
            await runner.cleanup()
            logger.error("[STATUS SERVER] Failed to listen on port %s: %s", port, exc)
            return

        self._runner = runner
        self.port = port
        logger.info("[STATUS SERVER] Listening for HTTP requests on port %d", port)

    async def stop(self) -> None:
        if self._runner is None:
            return
        await self._runner.cleanup()
        self._runner = None
        logger.info("[STATUS SERVER] Stopped listening on port %s", self.port)
        self.port = None
