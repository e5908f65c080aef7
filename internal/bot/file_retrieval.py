"""
File retrieval and validation: Telegram file -> validated ImageBytes.
"""

import logging
from typing import List, Optional

import httpx
import telegram
import telegram.error

from lib.ai import ImageBytes
from lib.image_format import detectImageFormat

from .errors import DownloadFailedError, NotAnImageDocument, OversizedInputError, UnsupportedFormatError
from .models import FileReference

logger = logging.getLogger(__name__)


def isImageMimeType(mimeType: Optional[str]) -> bool:
    return bool(mimeType) and str(mimeType).lower().startswith("image/")


class FileRetriever:
    """
    Downloads Telegram files with a hard size ceiling and checks they are
    images of a supported format.

    The download URL returned by getFile contains the bot token, so it is
    never logged.
    """

    def __init__(self, bot: telegram.Bot, httpClient: httpx.AsyncClient):
        self._bot = bot
        self._httpClient = httpClient

    async def _getFile(self, ref: FileReference) -> telegram.File:
        try:
            file = await self._bot.get_file(ref.fileId)
        except telegram.error.TelegramError as e:
            # Includes NetworkError/TimedOut and "file is too big" BadRequest
            raise DownloadFailedError(f"getFile failed for {ref.fileUniqueId}: {type(e).__name__}: {e}", cause=e) from e

        if not file.file_path:
            raise DownloadFailedError(f"getFile returned no file_path for {ref.fileUniqueId}")
        return file

    async def _download(self, url: str, ref: FileReference, maxBytes: int) -> bytes:
        chunks: List[bytes] = []
        total = 0
        try:
            async with self._httpClient.stream("GET", url) as response:
                response.raise_for_status()

                contentLength = response.headers.get("content-length")
                if contentLength and contentLength.isdigit() and int(contentLength) > maxBytes:
                    raise OversizedInputError(int(contentLength), maxBytes)

                async for chunk in response.aiter_bytes():
                    total += len(chunk)
                    if total > maxBytes:
                        # Stop reading right away, rest of the body is discarded
                        raise OversizedInputError(None, maxBytes)
                    chunks.append(chunk)
        except httpx.HTTPStatusError as e:
            raise DownloadFailedError(
                f"Download of {ref.fileUniqueId} failed with HTTP {e.response.status_code}", cause=e
            ) from e
        except httpx.HTTPError as e:
            raise DownloadFailedError(f"Download of {ref.fileUniqueId} failed: {type(e).__name__}", cause=e) from e

        return b"".join(chunks)

    async def fetch(
        self,
        ref: FileReference,
        maxBytes: int,
        declaredMimeType: Optional[str] = None,
        isDocument: bool = False,
    ) -> ImageBytes:
        """
        Download and validate a file.

        Args:
            ref: File to download
            maxBytes: Size ceiling
            declaredMimeType: MIME type Telegram reported (documents)
            isDocument: Whether the file was sent as a document

        Returns:
            Validated image

        Raises:
            OversizedInputError: File is (or turns out to be) bigger than maxBytes
            NotAnImageDocument: Document declared with a non image MIME type
            DownloadFailedError: Telegram or HTTP failure
            UnsupportedFormatError: Content is not JPEG, PNG or GIF
        """
        if ref.fileSize is not None and ref.fileSize > maxBytes:
            raise OversizedInputError(ref.fileSize, maxBytes)

        mimeType = declaredMimeType or ref.mimeType
        if isDocument and not isImageMimeType(mimeType):
            raise NotAnImageDocument(mimeType)

        file = await self._getFile(ref)
        if file.file_size is not None and file.file_size > maxBytes:
            raise OversizedInputError(file.file_size, maxBytes)

        data = await self._download(str(file.file_path), ref, maxBytes)
        logger.debug(f"Downloaded {ref.fileUniqueId}: {len(data)} bytes")

        imageFormat = detectImageFormat(data)
        if not imageFormat.isKnown():
            raise UnsupportedFormatError(f"File {ref.fileUniqueId} has unsupported format (declared: {mimeType})")

        return ImageBytes(data=data, format=imageFormat)
