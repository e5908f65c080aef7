"""
Update dispatcher: exactly one handler per kind of inbound update.
"""

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import Optional

from . import constants
from .delivery import DeliveryLayer
from .messages import MessageKey, getMessage
from .models import InboundUpdate, PipelineConfig, UpdateKind
from .pipeline import AnalysisPipeline, AnalysisResult

logger = logging.getLogger(__name__)


class DispatchAction(StrEnum):
    INFO_REPLY = "info-reply"
    IMAGE_PROMPT = "image-prompt"
    ANALYZED = "analyzed"
    ANALYSIS_FAILED = "analysis-failed"
    IGNORED = "ignored"


@dataclass(frozen=True)
class DispatchResult:
    action: DispatchAction
    result: Optional[AnalysisResult] = None


COMMAND_REPLIES = {
    constants.START_COMMAND: MessageKey.START,
    constants.HELP_COMMAND: MessageKey.HELP,
    constants.ABOUT_COMMAND: MessageKey.ABOUT,
}


class UpdateDispatcher:
    """
    Routes parsed updates:

    - /start, /help, /about: canned informational reply
    - other commands, texts and messages of unsupported kinds: ask for an image
    - photos and documents: analysis pipeline
    """

    def __init__(
        self,
        config: PipelineConfig,
        pipeline: AnalysisPipeline,
        delivery: DeliveryLayer,
        botUsername: Optional[str] = None,
    ):
        self.config = config
        self.pipeline = pipeline
        self.delivery = delivery
        self.botUsername = botUsername

    def _isForeignCommand(self, update: InboundUpdate) -> bool:
        """Command addressed to another bot in a group (/help@other_bot)"""
        if not update.commandBotName or not self.botUsername:
            return False
        return update.commandBotName.lower() != self.botUsername.lower().lstrip("@")

    async def _reply(self, update: InboundUpdate, key: MessageKey) -> None:
        await self.delivery.sendSafe(
            update.chatId,
            getMessage(key, self.config.language, limit=self.config.maxFileSizeBytes),
            replyToMessageId=update.messageId,
        )

    async def dispatch(self, update: InboundUpdate) -> DispatchResult:
        logger.debug(f"Dispatching update {update.updateId} ({update.kind}) from chat {update.chatId}")

        match update.kind:
            case UpdateKind.COMMAND:
                if self._isForeignCommand(update):
                    logger.debug(f"Ignoring /{update.command}@{update.commandBotName}")
                    return DispatchResult(DispatchAction.IGNORED)
                messageKey = COMMAND_REPLIES.get(update.command or "")
                if messageKey is not None:
                    await self._reply(update, messageKey)
                    return DispatchResult(DispatchAction.INFO_REPLY)
                await self._reply(update, MessageKey.SEND_IMAGE)
                return DispatchResult(DispatchAction.IMAGE_PROMPT)

            case UpdateKind.PHOTO | UpdateKind.DOCUMENT:
                if update.kind == UpdateKind.DOCUMENT and not self.config.acceptDocuments:
                    await self._reply(update, MessageKey.SEND_IMAGE)
                    return DispatchResult(DispatchAction.IMAGE_PROMPT)
                result = await self.pipeline.process(update)
                if result is None:
                    return DispatchResult(DispatchAction.ANALYSIS_FAILED)
                return DispatchResult(DispatchAction.ANALYZED, result)

            case _:
                # Plain text and messages we understand but do not process (stickers, voice...)
                await self._reply(update, MessageKey.SEND_IMAGE)
                return DispatchResult(DispatchAction.IMAGE_PROMPT)
