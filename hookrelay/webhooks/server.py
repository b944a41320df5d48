"""Webhook HTTP server using aiohttp."""

from __future__ import annotations

from aiohttp import web

from hookrelay.config import ServerConfig
from hookrelay.utils.logging import get_logger
from hookrelay.webhooks.handler import RequestHandler

log = get_logger(__name__)


class WebhookServer:
    """Receives GitHub webhooks and relays them through a RequestHandler."""

    def __init__(self, config: ServerConfig, handler: RequestHandler) -> None:
        self._config = config
        self._handler = handler
        self._runner: web.AppRunner | None = None

    @property
    def path(self) -> str:
        return self._config.path if self._config.path.startswith("/") else f"/{self._config.path}"

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        app = self._build_app()
        self._runner = web.AppRunner(app)
        await self._runner.setup()
        site = web.TCPSite(self._runner, self._config.bind, self._config.port)
        await site.start()
        log.info(
            "webhook_server_started",
            bind=self._config.bind,
            port=self._config.port,
            path=self.path,
        )

    async def stop(self) -> None:
        if self._runner is not None:
            await self._runner.cleanup()
            self._runner = None
        log.info("webhook_server_stopped")

    # ------------------------------------------------------------------
    # App construction
    # ------------------------------------------------------------------

    def _build_app(self) -> web.Application:
        app = web.Application()
        app.router.add_post(self.path, self._handle_webhook)
        app.router.add_get("/health", self._handle_health)
        return app

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    async def _handle_webhook(self, request: web.Request) -> web.Response:
        body = await request.read()
        response = await self._handler.handle(
            body or None,
            event=request.headers.get("X-GitHub-Event"),
            delivery_id=request.headers.get("X-GitHub-Delivery"),
        )
        return web.json_response(response.body, status=response.status)

    async def _handle_health(self, request: web.Request) -> web.Response:
        return web.json_response({"status": "ok"})
