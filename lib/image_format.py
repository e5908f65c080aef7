"""
Image format detection by magic bytes, dood!

Only formats the vision model accepts are recognised; everything else is
reported as UNKNOWN and must be rejected before any external call.
"""

import logging
from enum import StrEnum
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


class ImageFormat(StrEnum):
    """Detected image format, value is the MIME type"""

    JPEG = "image/jpeg"
    PNG = "image/png"
    GIF = "image/gif"
    UNKNOWN = "application/octet-stream"

    @property
    def extension(self) -> str:
        return _EXTENSIONS[self]

    def isKnown(self) -> bool:
        return self != ImageFormat.UNKNOWN


_EXTENSIONS: Dict["ImageFormat", str] = {
    ImageFormat.JPEG: "jpg",
    ImageFormat.PNG: "png",
    ImageFormat.GIF: "gif",
    ImageFormat.UNKNOWN: "bin",
}

# (signature, format). Only the first 4 bytes are inspected.
SIGNATURES: Tuple[Tuple[bytes, ImageFormat], ...] = (
    (b"\xff\xd8\xff", ImageFormat.JPEG),
    (b"\x89PNG", ImageFormat.PNG),
    (b"GIF8", ImageFormat.GIF),
)


def detectImageFormat(data: bytes) -> ImageFormat:
    """
    Classify image data by its leading magic bytes.

    Args:
        data: Raw file content

    Returns:
        Detected ImageFormat, UNKNOWN if no signature matches
    """
    head = bytes(data[:4])
    for signature, imageFormat in SIGNATURES:
        if head.startswith(signature):
            return imageFormat

    logger.debug(f"Unknown image signature: {head.hex()}")
    return ImageFormat.UNKNOWN
