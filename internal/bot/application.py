"""
Glimpse bot application: builds all components from the configuration and
serves the webhook.
"""

import logging
from typing import Optional

import httpx
import telegram
from aiohttp import web

from internal.config.manager import ConfigManager
from internal.server.webhook import WebhookServer
from lib.ai import AbstractVisionModel
from lib.ai.providers import GeminiVisionModel, UploadMode
from lib.ai.providers.gemini_provider import DEFAULT_INLINE_LIMIT, DEFAULT_MODEL
from lib.cache import CacheInterface, ContentHashKeyGenerator, LRUCache, NullCache, StringKeyGenerator

from . import constants
from .delivery import DeliveryLayer
from .dispatcher import UpdateDispatcher
from .file_retrieval import FileRetriever
from .models import PipelineConfig
from .pipeline import AnalysisPipeline

logger = logging.getLogger(__name__)

DEFAULT_DOWNLOAD_TIMEOUT = 20.0


def createCache(config: PipelineConfig) -> CacheInterface[str, str]:
    if not config.cacheEnabled:
        logger.info("Analysis cache is disabled")
        return NullCache[str, str]()

    logger.info(
        f"Analysis cache: up to {config.cacheMaxEntries} entries, {config.cacheMaxBytes} bytes, "
        f"ttl={config.cacheTtl or 'none'}"
    )
    return LRUCache[str, str](
        keyGenerator=StringKeyGenerator(),
        maxSize=config.cacheMaxEntries,
        maxBytes=config.cacheMaxBytes,
        defaultTtl=config.cacheTtl,
    )


def createVisionModel(configManager: ConfigManager) -> AbstractVisionModel:
    geminiConfig = configManager.getGeminiConfig()
    model = GeminiVisionModel(
        apiKey=configManager.getGeminiApiKey(),
        modelId=geminiConfig.get("model", DEFAULT_MODEL),
        temperature=float(geminiConfig.get("temperature", 0.0)),
        uploadMode=UploadMode(geminiConfig.get("upload-mode", UploadMode.AUTO)),
        inlineLimitBytes=int(geminiConfig.get("inline-limit", DEFAULT_INLINE_LIMIT)),
        requestTimeout=geminiConfig.get("timeout"),
    )
    logger.info(f"Vision model: {model}")
    return model


class BotApplication:
    """Owns the Telegram bot, the HTTP client and the webhook server"""

    def __init__(
        self,
        configManager: ConfigManager,
        visionModel: Optional[AbstractVisionModel] = None,
        bot: Optional[telegram.Bot] = None,
    ):
        self.configManager = configManager
        self.botConfig = configManager.getBotConfig()
        self.serverConfig = configManager.getServerConfig()
        self.pipelineConfig = configManager.getPipelineConfig()

        self.bot = bot if bot is not None else telegram.Bot(token=configManager.getBotToken())
        self.visionModel = visionModel if visionModel is not None else createVisionModel(configManager)
        self.httpClient = httpx.AsyncClient(
            timeout=float(self.serverConfig.get("download-timeout", DEFAULT_DOWNLOAD_TIMEOUT)),
            follow_redirects=True,
        )

        self.delivery = DeliveryLayer(self.bot)
        self.pipeline = AnalysisPipeline(
            config=self.pipelineConfig,
            retriever=FileRetriever(self.bot, self.httpClient),
            visionModel=self.visionModel,
            cache=createCache(self.pipelineConfig),
            keyGenerator=ContentHashKeyGenerator(),
            delivery=self.delivery,
        )
        self.dispatcher = UpdateDispatcher(
            config=self.pipelineConfig,
            pipeline=self.pipeline,
            delivery=self.delivery,
            botUsername=self.botConfig.get("username"),
        )
        self.webhookServer = WebhookServer(
            dispatcher=self.dispatcher,
            path=self.serverConfig.get("path", constants.DEFAULT_WEBHOOK_PATH),
            secretToken=configManager.getSecretToken(),
            processingTimeout=self.pipelineConfig.processingTimeout,
        )

    async def postInit(self, app: web.Application) -> None:
        await self.bot.initialize()
        if not self.dispatcher.botUsername:
            self.dispatcher.botUsername = self.bot.username
        logger.info(f"Bot @{self.bot.username} initialized, listening on {self.webhookServer.path}")

    async def postStop(self, app: web.Application) -> None:
        logger.info("Shutting down")
        await self.httpClient.aclose()
        await self.bot.shutdown()
        logger.info(f"Cache stats: {self.pipeline.cache.getStats()}")

    def createApp(self) -> web.Application:
        app = web.Application()
        self.webhookServer.setupRoutes(app)
        app.on_startup.append(self.postInit)
        app.on_cleanup.append(self.postStop)
        return app

    def run(self) -> None:
        host = self.serverConfig.get("host", "0.0.0.0")
        port = int(self.serverConfig.get("port", 8080))
        logger.info(f"Starting webhook server on {host}:{port}")
        web.run_app(self.createApp(), host=host, port=port, print=None)
