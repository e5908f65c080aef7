"""
Pytest configuration and common fixtures for Glimpse bot tests.

All fixtures follow camelCase naming convention.
"""

import pytest

from internal.bot.delivery import DeliveryLayer
from internal.bot.dispatcher import UpdateDispatcher
from internal.bot.file_retrieval import FileRetriever
from internal.bot.pipeline import AnalysisPipeline
from lib.cache import ContentHashKeyGenerator, LRUCache, StringKeyGenerator
from tests.fixtures import createHttpClient, createMockBot, createMockVisionModel, createPipelineConfig, jpegBytes

# ============================================================================
# Telegram Fixtures
# ============================================================================


@pytest.fixture
def mockBot():
    """Mock telegram.Bot"""
    return createMockBot()


@pytest.fixture
def imageData() -> bytes:
    """Content served for every file download, override to change it"""
    return jpegBytes(2048)


@pytest.fixture
def httpClient(imageData):
    """httpx client serving imageData for every URL"""
    return createHttpClient(imageData)


# ============================================================================
# Pipeline Fixtures
# ============================================================================


@pytest.fixture
def pipelineConfig():
    return createPipelineConfig()


@pytest.fixture
def visionModel():
    return createMockVisionModel()


@pytest.fixture
def analysisCache():
    return LRUCache[str, str](keyGenerator=StringKeyGenerator(), maxSize=10)


@pytest.fixture
def delivery(mockBot):
    return DeliveryLayer(mockBot)


@pytest.fixture
def pipeline(pipelineConfig, mockBot, httpClient, visionModel, analysisCache, delivery):
    return AnalysisPipeline(
        config=pipelineConfig,
        retriever=FileRetriever(mockBot, httpClient),
        visionModel=visionModel,
        cache=analysisCache,
        keyGenerator=ContentHashKeyGenerator(),
        delivery=delivery,
    )


@pytest.fixture
def dispatcher(pipelineConfig, pipeline, delivery):
    return UpdateDispatcher(config=pipelineConfig, pipeline=pipeline, delivery=delivery, botUsername="test_bot")
