"""
Analyze-and-reply pipeline for photos and image documents.

    FileRetriever -> cache lookup -> [miss] vision model -> sanitizer
      -> cache store -> DeliveryLayer

Every PipelineError is turned into one fixed localized reply here, nothing
below this level talks to the user.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from lib.ai import AbstractVisionModel, ImageBytes, VisionError
from lib.cache import CacheInterface, KeyGenerator
from lib.telegram_markdown import FormattingMode, sanitizeResponse

from . import constants
from .delivery import DeliveryLayer
from .errors import AnalysisError, ErrorKind, NotAnImageDocument, PipelineError
from .file_retrieval import FileRetriever
from .messages import MessageKey, errorMessage, getMessage
from .models import InboundUpdate, PipelineConfig, UpdateKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisResult:
    """Sanitized description ready to be sent"""

    text: str
    mode: FormattingMode
    fromCache: bool = False


class AnalysisPipeline:
    def __init__(
        self,
        config: PipelineConfig,
        retriever: FileRetriever,
        visionModel: AbstractVisionModel,
        cache: CacheInterface[str, str],
        keyGenerator: KeyGenerator[bytes],
        delivery: DeliveryLayer,
    ):
        self.config = config
        self.retriever = retriever
        self.visionModel = visionModel
        self.cache = cache
        self.keyGenerator = keyGenerator
        self.delivery = delivery

    async def analyze(self, image: ImageBytes, chatId: Optional[int] = None) -> AnalysisResult:
        """
        Describe a validated image, using the cache when possible.

        Raises:
            AnalysisError: Vision model failed
        """
        cacheKey = self.keyGenerator.generateKey(image.data)
        cached = await self.cache.get(cacheKey)
        if cached is not None:
            logger.info(f"Cache hit for {cacheKey} ({image.size} bytes)")
            return AnalysisResult(text=cached, mode=self.config.formattingMode, fromCache=True)

        if self.config.sendProcessingNotice and chatId is not None:
            await self.delivery.sendSafe(chatId, getMessage(MessageKey.PROCESSING, self.config.language))

        try:
            result = await self.visionModel.describeImage(image, self.config.promptText)
        except VisionError as e:
            raise AnalysisError.fromVisionError(e) from e

        text = sanitizeResponse(
            result.resultText,
            self.config.formattingMode,
            header=self.config.resultHeader or None,
            maxLength=constants.TELEGRAM_MAX_MESSAGE_LENGTH,
        )
        await self.cache.set(cacheKey, text)
        logger.info(f"Analyzed {cacheKey} ({image.size} bytes, {image.format}): {len(text)} chars")
        return AnalysisResult(text=text, mode=self.config.formattingMode)

    def _errorReply(self, error: PipelineError) -> str:
        return errorMessage(
            error.kind,
            self.config.language,
            limit=self.config.maxFileSizeBytes if error.kind == ErrorKind.OVERSIZED_INPUT else None,
            details=error.message if error.kind == ErrorKind.ANALYSIS_FAILED else None,
        )

    async def process(self, update: InboundUpdate) -> Optional[AnalysisResult]:
        """
        Handle a photo or document update end to end.

        Returns:
            Result that was delivered, None if the update ended with an
            error or informational reply
        """
        ref = update.largestFile
        if not update.isMedia or ref is None:
            raise ValueError(f"Update {update.updateId} has no files")

        isDocument = update.kind == UpdateKind.DOCUMENT
        language = self.config.language
        try:
            image = await self.retriever.fetch(
                ref,
                self.config.maxFileSizeBytes,
                declaredMimeType=ref.mimeType,
                isDocument=isDocument,
            )
            result = await self.analyze(image, update.chatId)
        except NotAnImageDocument as e:
            logger.info(
                f"Update {update.updateId}: document {ref.fileName!r} with MIME type {e.mimeType}, not an image"
            )
            await self.delivery.sendSafe(
                update.chatId,
                getMessage(MessageKey.NOT_AN_IMAGE, language),
                replyToMessageId=update.messageId,
            )
            return None
        except PipelineError as e:
            logger.warning(
                f"Update {update.updateId} in chat {update.chatId} failed: {e}"
                + (f" (cause: {type(e.cause).__name__})" if e.cause else "")
            )
            await self.delivery.sendSafe(update.chatId, self._errorReply(e), replyToMessageId=update.messageId)
            return None

        await self.delivery.sendSafe(update.chatId, result.text, result.mode, replyToMessageId=update.messageId)
        return result
