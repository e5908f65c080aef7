"""
Delivery layer: sends replies to Telegram chats.
"""

import logging
from typing import Optional

import telegram
import telegram.error
from telegram.constants import ParseMode

from lib.telegram_markdown import FormattingMode, stripFormatting

from .errors import DeliveryFailedError

logger = logging.getLogger(__name__)

PARSE_MODES = {
    FormattingMode.MARKDOWN_V2: ParseMode.MARKDOWN_V2,
    FormattingMode.HTML: ParseMode.HTML,
    FormattingMode.PLAIN: None,
}

# Bot API description prefix for unparseable formatted text, "Bad Request: " is stripped by telegram.error
PARSE_ERROR_PREFIX = "can't parse entities"


def isParseError(error: telegram.error.TelegramError) -> bool:
    return isinstance(error, telegram.error.BadRequest) and error.message.lower().startswith(PARSE_ERROR_PREFIX)


class DeliveryLayer:
    """Sends text to a chat, retrying once as plain text if formatting is rejected"""

    def __init__(self, bot: telegram.Bot):
        self._bot = bot

    async def _sendMessage(
        self,
        chatId: int,
        text: str,
        parseMode: Optional[ParseMode],
        replyToMessageId: Optional[int],
    ) -> telegram.Message:
        replyParameters = None
        if replyToMessageId is not None:
            replyParameters = telegram.ReplyParameters(
                message_id=replyToMessageId,
                allow_sending_without_reply=True,
            )
        return await self._bot.send_message(
            chat_id=chatId,
            text=text,
            parse_mode=parseMode,
            reply_parameters=replyParameters,
        )

    async def send(
        self,
        chatId: int,
        text: str,
        mode: FormattingMode = FormattingMode.PLAIN,
        replyToMessageId: Optional[int] = None,
    ) -> telegram.Message:
        """
        Send a message formatted for the given mode.

        Raises:
            DeliveryFailedError: Message could not be delivered even as plain text
        """
        parseMode = PARSE_MODES[mode]
        try:
            return await self._sendMessage(chatId, text, parseMode, replyToMessageId)
        except telegram.error.TelegramError as e:
            if parseMode is None or not isParseError(e):
                raise DeliveryFailedError(f"sendMessage to {chatId} failed: {type(e).__name__}: {e}", cause=e) from e
            logger.warning(f"Telegram rejected {mode} text for chat {chatId} ({e}), resending as plain text")

        plainText = stripFormatting(text, mode)
        try:
            return await self._sendMessage(chatId, plainText, None, replyToMessageId)
        except telegram.error.TelegramError as e:
            raise DeliveryFailedError(
                f"Plain text fallback to {chatId} failed: {type(e).__name__}: {e}", cause=e
            ) from e

    async def sendSafe(
        self,
        chatId: int,
        text: str,
        mode: FormattingMode = FormattingMode.PLAIN,
        replyToMessageId: Optional[int] = None,
    ) -> Optional[telegram.Message]:
        """Same as send() but logs and drops delivery failures"""
        try:
            return await self.send(chatId, text, mode, replyToMessageId)
        except DeliveryFailedError as e:
            logger.error(
                f"DeliveryFailed: chatId={chatId}, mode={mode}, "
                f"cause={type(e.cause).__name__ if e.cause else None}: {e.message}"
            )
            return None
