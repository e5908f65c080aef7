"""
Test fixtures package for Glimpse bot tests.

- telegram_mocks: webhook bodies and mock Telegram API objects
- service_mocks: mock vision model and configuration
"""

from tests.fixtures.service_mocks import createMockVisionModel, createPipelineConfig
from tests.fixtures.telegram_mocks import (
    createDocument,
    createHttpClient,
    createMockBot,
    createMockFile,
    createPhotoSizes,
    createSticker,
    createUpdateBody,
    jpegBytes,
    pngBytes,
    sentTexts,
)

__all__ = [
    # Telegram mocks
    "createDocument",
    "createHttpClient",
    "createMockBot",
    "createMockFile",
    "createPhotoSizes",
    "createSticker",
    "createUpdateBody",
    "jpegBytes",
    "pngBytes",
    "sentTexts",
    # Service mocks
    "createMockVisionModel",
    "createPipelineConfig",
]
