"""
Vision model providers, dood!
"""

from .gemini_provider import GeminiVisionModel, UploadMode

__all__ = ["GeminiVisionModel", "UploadMode"]
