"""
aiohttp webhook endpoint receiving Telegram updates.

    POST <path>   JSON update -> 200 / 400 / 403 / 500 / 504
    GET  /health  liveness probe
"""

import asyncio
import hmac
import json
import logging
from typing import Any, Dict, Optional

from aiohttp import web

from internal.bot import constants
from internal.bot.dispatcher import UpdateDispatcher
from internal.bot.errors import UnknownUpdateShapeError
from internal.bot.models import parseUpdate

logger = logging.getLogger(__name__)


def _jsonReply(status: int, ok: bool, error: Optional[str] = None) -> web.Response:
    body: Dict[str, Any] = {"ok": ok}
    if error is not None:
        body["error"] = error
    return web.json_response(body, status=status)


class WebhookServer:
    """Translates webhook requests into dispatcher calls and HTTP statuses"""

    def __init__(
        self,
        dispatcher: UpdateDispatcher,
        path: str = constants.DEFAULT_WEBHOOK_PATH,
        secretToken: Optional[str] = None,
        processingTimeout: float = constants.DEFAULT_PROCESSING_TIMEOUT,
    ):
        self.dispatcher = dispatcher
        self.path = path if path.startswith("/") else f"/{path}"
        self.secretToken = secretToken or None
        self.processingTimeout = processingTimeout

    def _checkSecret(self, request: web.Request) -> bool:
        if self.secretToken is None:
            return True
        received = request.headers.get(constants.SECRET_TOKEN_HEADER, "")
        return hmac.compare_digest(received.encode("utf-8"), self.secretToken.encode("utf-8"))

    async def handleWebhook(self, request: web.Request) -> web.Response:
        if not self._checkSecret(request):
            logger.warning(f"Rejected webhook call from {request.remote}: bad secret token")
            return _jsonReply(403, False, "forbidden")

        try:
            body = json.loads(await request.read())
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Unparseable webhook body: {e}")
            return _jsonReply(400, False, "invalid json")

        try:
            update = parseUpdate(body)
        except UnknownUpdateShapeError as e:
            logger.warning(f"Unknown update shape: {e.message}")
            return _jsonReply(400, False, "unknown update shape")

        try:
            result = await asyncio.wait_for(self.dispatcher.dispatch(update), self.processingTimeout)
        except asyncio.TimeoutError:
            logger.error(
                f"Update {update.updateId} from chat {update.chatId} not processed in {self.processingTimeout}s"
            )
            return _jsonReply(504, False, "timeout")
        except Exception as e:
            logger.error(f"Error while processing update {update.updateId}: {type(e).__name__}#{e}")
            logger.exception(e)
            return _jsonReply(500, False, "internal error")

        logger.debug(f"Update {update.updateId} handled: {result.action}")
        return _jsonReply(200, True)

    async def handleHealth(self, request: web.Request) -> web.Response:
        return web.Response(text="OK")

    def setupRoutes(self, app: web.Application) -> None:
        app.router.add_post(self.path, self.handleWebhook)
        app.router.add_get(constants.HEALTH_PATH, self.handleHealth)
