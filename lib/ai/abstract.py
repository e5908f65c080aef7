"""
Abstract base class for vision models, dood!
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict

from lib.image_format import ImageFormat

from .models import ModelRunResult


@dataclass(frozen=True)
class ImageBytes:
    """Validated image payload, dood!

    Only constructed after the size ceiling and format checks passed.
    """

    data: bytes
    format: ImageFormat

    @property
    def size(self) -> int:
        return len(self.data)

    @property
    def mimeType(self) -> str:
        return str(self.format)


class AbstractVisionModel(ABC):
    """Abstract base class for all image describing models, dood!"""

    def __init__(
        self,
        modelId: str,
        temperature: float = 0.0,
    ):
        """Initialize model with configuration, dood!

        Args:
            modelId: Provider specific model identifier
            temperature: Temperature setting for generation
        """
        self.modelId = modelId
        self.temperature = temperature

    @abstractmethod
    async def describeImage(self, image: ImageBytes, prompt: str) -> ModelRunResult:
        """Describe given image following the prompt, dood!

        Args:
            image: Validated image
            prompt: Instruction text sent along with the image

        Returns:
            Model result with non-empty resultText

        Raises:
            VisionError: One of the lib.ai.exceptions subclasses
        """
        raise NotImplementedError

    def getInfo(self) -> Dict[str, Any]:
        """Get model information, dood!"""
        return {
            "provider": self.__class__.__name__,
            "model_id": self.modelId,
            "temperature": self.temperature,
        }

    def __str__(self) -> str:
        """String representation of the model, dood!"""
        return f"{self.modelId} (provider: {self.__class__.__name__})"
