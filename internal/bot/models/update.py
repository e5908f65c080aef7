"""
Update: Inbound Telegram update parsed into an immutable value
"""

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Optional, Tuple, Union

import telegram

from ..errors import UnknownUpdateShapeError

logger = logging.getLogger(__name__)


class UpdateKind(StrEnum):
    PHOTO = "photo"
    DOCUMENT = "document"
    TEXT = "text"
    COMMAND = "command"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class FileReference:
    """Telegram file handle, download URL is resolved later via getFile"""

    fileId: str
    fileUniqueId: str
    fileSize: Optional[int] = None
    mimeType: Optional[str] = None
    fileName: Optional[str] = None

    @classmethod
    def fromTelegram(cls, file: Union[telegram.PhotoSize, telegram.Document]) -> "FileReference":
        if not isinstance(file.file_id, str) or not file.file_id:
            raise UnknownUpdateShapeError("File without file_id")
        return cls(
            fileId=file.file_id,
            fileUniqueId=str(file.file_unique_id or ""),
            fileSize=file.file_size if isinstance(file.file_size, int) else None,
            mimeType=getattr(file, "mime_type", None),
            fileName=getattr(file, "file_name", None),
        )


@dataclass(frozen=True)
class InboundUpdate:
    updateId: int
    chatId: int
    kind: UpdateKind
    messageId: Optional[int] = None
    text: Optional[str] = None
    files: Tuple[FileReference, ...] = field(default_factory=tuple)
    command: Optional[str] = None
    commandArgs: str = ""
    commandBotName: Optional[str] = None

    @property
    def largestFile(self) -> Optional[FileReference]:
        """Photo sizes come smallest first, so the last one is the biggest"""
        return self.files[-1] if self.files else None

    @property
    def isMedia(self) -> bool:
        return self.kind in (UpdateKind.PHOTO, UpdateKind.DOCUMENT)


def _parseCommand(text: str) -> Tuple[str, str, Optional[str]]:
    """'/start@my_bot some args' -> ('start', 'some args', 'my_bot')"""
    head, _, args = text.strip().partition(" ")
    name, _, botName = head[1:].partition("@")
    return name.lower(), args.strip(), botName or None


def _isInt(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _decodeUpdate(data: Any) -> telegram.Update:
    if not isinstance(data, dict):
        raise UnknownUpdateShapeError(f"Update is not an object but {type(data).__name__}")
    if not _isInt(data.get("update_id")):
        raise UnknownUpdateShapeError("Update has no update_id")

    try:
        update = telegram.Update.de_json(data, None)
    except (TypeError, ValueError, KeyError, AttributeError) as e:
        raise UnknownUpdateShapeError(f"Update {data['update_id']} can not be decoded: {e}", cause=e) from e
    if update is None:
        raise UnknownUpdateShapeError(f"Update {data['update_id']} is empty")
    return update


def parseUpdate(data: Any) -> InboundUpdate:
    """
    Parse Telegram webhook JSON into InboundUpdate.

    The body is decoded with telegram.Update.de_json, only `message` and
    `edited_message` updates are accepted.

    Args:
        data: Decoded JSON body

    Returns:
        Parsed update, kind UNKNOWN for messages we do not handle
        (stickers, voice...)

    Raises:
        UnknownUpdateShapeError: Body is not an update with a message in a chat
    """
    update = _decodeUpdate(data)
    updateId = update.update_id

    message = update.message or update.edited_message
    if message is None:
        raise UnknownUpdateShapeError(f"Update {updateId} has no message (keys: {sorted(data.keys())})")
    if message.chat is None or not _isInt(message.chat.id):
        raise UnknownUpdateShapeError(f"Update {updateId} has no chat id")

    base = {
        "updateId": updateId,
        "chatId": message.chat.id,
        "messageId": message.message_id if _isInt(message.message_id) else None,
    }

    if message.photo:
        return InboundUpdate(
            kind=UpdateKind.PHOTO,
            text=message.caption,
            files=tuple(FileReference.fromTelegram(size) for size in message.photo),
            **base,
        )

    if message.document is not None:
        return InboundUpdate(
            kind=UpdateKind.DOCUMENT,
            text=message.caption,
            files=(FileReference.fromTelegram(message.document),),
            **base,
        )

    text = message.text
    if isinstance(text, str):
        if text.startswith("/") and len(text) > 1 and not text[1].isspace():
            command, args, botName = _parseCommand(text)
            return InboundUpdate(
                kind=UpdateKind.COMMAND,
                text=text,
                command=command,
                commandArgs=args,
                commandBotName=botName,
                **base,
            )
        return InboundUpdate(kind=UpdateKind.TEXT, text=text, **base)

    attachment = type(message.effective_attachment).__name__
    logger.debug(f"Update {updateId}: unsupported message with attachment {attachment}")
    return InboundUpdate(kind=UpdateKind.UNKNOWN, text=message.caption, **base)
