"""
AI module for Glimpse - image describing models, dood!
"""

from .abstract import AbstractVisionModel, ImageBytes
from .exceptions import (
    AnalysisFailedError,
    NoResponseError,
    RateLimitedError,
    SafetyBlockedError,
    VisionError,
    VisionNetworkError,
)
from .models import ModelResultStatus, ModelRunResult

__all__ = [
    # Abstract classes
    "AbstractVisionModel",
    "ImageBytes",
    # Models and enums
    "ModelResultStatus",
    "ModelRunResult",
    # Exceptions
    "VisionError",
    "NoResponseError",
    "SafetyBlockedError",
    "RateLimitedError",
    "VisionNetworkError",
    "AnalysisFailedError",
]
