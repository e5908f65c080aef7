"""
Telegram mock objects for testing.

This module provides factory functions to create webhook bodies and mock
Telegram API objects. All mocks are configured with sensible defaults.
"""

from typing import Any, Callable, Dict, List, Optional
from unittest.mock import AsyncMock, Mock

import httpx
import telegram

FILE_URL_PREFIX = "https://api.telegram.org/file/bot123:TEST/"


def jpegBytes(size: int = 1024) -> bytes:
    """JPEG signature padded to the given size"""
    return b"\xff\xd8\xff\xe0" + b"\x00" * max(0, size - 4)


def pngBytes(size: int = 1024) -> bytes:
    return b"\x89PNG\r\n\x1a\n" + b"\x00" * max(0, size - 8)


def createPhotoSizes(
    fileSize: Optional[int] = 102400, fileId: str = "photo_123", count: int = 3
) -> List[Dict[str, Any]]:
    """
    Create photo[] array of a message, smallest size first.

    Args:
        fileSize: Size of the largest photo (None to omit file_size)
        fileId: File ID of the largest photo
        count: Number of sizes
    """
    sizes: List[Dict[str, Any]] = []
    for i in range(count - 1):
        sizes.append(
            {
                "file_id": f"{fileId}_small{i}",
                "file_unique_id": f"unique_{fileId}_small{i}",
                "width": 90 * (i + 1),
                "height": 60 * (i + 1),
                "file_size": 1000 * (i + 1),
            }
        )
    largest: Dict[str, Any] = {
        "file_id": fileId,
        "file_unique_id": f"unique_{fileId}",
        "width": 1280,
        "height": 853,
    }
    if fileSize is not None:
        largest["file_size"] = fileSize
    sizes.append(largest)
    return sizes


def createDocument(
    fileId: str = "document_123",
    mimeType: Optional[str] = "image/png",
    fileName: str = "picture.png",
    fileSize: Optional[int] = 204800,
) -> Dict[str, Any]:
    document: Dict[str, Any] = {
        "file_id": fileId,
        "file_unique_id": f"unique_{fileId}",
        "file_name": fileName,
    }
    if mimeType is not None:
        document["mime_type"] = mimeType
    if fileSize is not None:
        document["file_size"] = fileSize
    return document


def createSticker(fileId: str = "sticker_1") -> Dict[str, Any]:
    return {
        "file_id": fileId,
        "file_unique_id": f"unique_{fileId}",
        "width": 512,
        "height": 512,
        "is_animated": False,
        "is_video": False,
        "type": "regular",
    }


def createUpdateBody(
    updateId: int = 1000,
    chatId: int = 123,
    messageId: int = 1,
    text: Optional[str] = None,
    photo: Optional[List[Dict[str, Any]]] = None,
    document: Optional[Dict[str, Any]] = None,
    caption: Optional[str] = None,
    extra: Optional[Dict[str, Any]] = None,
    edited: bool = False,
) -> Dict[str, Any]:
    """
    Create a webhook JSON body as Telegram sends it.

    Example:
        body = createUpdateBody(text="/start")
        body = createUpdateBody(photo=createPhotoSizes(fileSize=2 * 1024 * 1024))
    """
    message: Dict[str, Any] = {
        "message_id": messageId,
        "date": 1700000000,
        "chat": {"id": chatId, "type": "private", "first_name": "Test"},
        "from": {"id": chatId, "is_bot": False, "first_name": "Test", "language_code": "en"},
    }
    if text is not None:
        message["text"] = text
    if photo is not None:
        message["photo"] = photo
    if document is not None:
        message["document"] = document
    if caption is not None:
        message["caption"] = caption
    if extra:
        message.update(extra)

    return {"update_id": updateId, "edited_message" if edited else "message": message}


def createMockFile(fileId: str = "photo_123", fileSize: Optional[int] = None) -> Mock:
    """Mock telegram.File as returned by getFile"""
    file = Mock(spec=telegram.File)
    file.file_id = fileId
    file.file_size = fileSize
    file.file_path = f"{FILE_URL_PREFIX}photos/{fileId}.jpg"
    return file


def createMockBot(username: str = "test_bot", fileSize: Optional[int] = None) -> AsyncMock:
    """
    Create a mock telegram.Bot.

    send_message returns a new mock message each time, get_file returns a
    file with a download URL under FILE_URL_PREFIX.
    """
    bot = AsyncMock(spec=telegram.Bot)
    bot.username = username

    def sendMessage(**kwargs):
        message = Mock(spec=telegram.Message)
        message.chat_id = kwargs.get("chat_id")
        message.text = kwargs.get("text")
        return message

    bot.send_message = AsyncMock(side_effect=sendMessage)
    bot.get_file = AsyncMock(side_effect=lambda fileId: createMockFile(fileId, fileSize))
    return bot


def sentTexts(bot: AsyncMock) -> List[str]:
    """Texts of all send_message calls"""
    return [call.kwargs["text"] for call in bot.send_message.call_args_list]


def createHttpClient(
    content: bytes = b"",
    status: int = 200,
    handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
) -> httpx.AsyncClient:
    """httpx client answering every request with the given content"""
    if handler is None:

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status, content=content)

    return httpx.AsyncClient(transport=httpx.MockTransport(handler))
