"""
Google Gemini vision model, dood!

Uses the google-genai SDK (async client). Images up to inlineLimitBytes are
sent inline in the request; bigger ones (or all of them, depending on
uploadMode) are uploaded through the Files API first and referenced by URI.
"""

import asyncio
import io
import logging
import time
from enum import StrEnum
from typing import Any, Dict, List, Optional

import aiohttp
import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from ..abstract import AbstractVisionModel, ImageBytes
from ..exceptions import (
    AnalysisFailedError,
    NoResponseError,
    RateLimitedError,
    SafetyBlockedError,
    VisionError,
    VisionNetworkError,
)
from ..models import ModelResultStatus, ModelRunResult

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
# Gemini refuses inline request payloads above 20 MB
DEFAULT_INLINE_LIMIT = 20 * 1024 * 1024

SAFETY_FINISH_REASONS = frozenset({"SAFETY", "PROHIBITED_CONTENT", "BLOCKLIST", "SPII", "IMAGE_SAFETY"})
NETWORK_ERRORS = (httpx.TransportError, aiohttp.ClientError, asyncio.TimeoutError, OSError)


class UploadMode(StrEnum):
    """How image bytes are handed over to Gemini"""

    AUTO = "auto"
    INLINE = "inline"
    UPLOAD = "upload"


def _enumName(value: Any) -> Optional[str]:
    if value is None:
        return None
    name = getattr(value, "name", None)
    return name if isinstance(name, str) else str(value)


class GeminiVisionModel(AbstractVisionModel):
    """Gemini model describing images, dood!"""

    def __init__(
        self,
        apiKey: str,
        modelId: str = DEFAULT_MODEL,
        temperature: float = 0.0,
        uploadMode: UploadMode = UploadMode.AUTO,
        inlineLimitBytes: int = DEFAULT_INLINE_LIMIT,
        requestTimeout: Optional[float] = None,
        client: Optional[genai.Client] = None,
    ):
        """Initialize Gemini model, dood!

        Args:
            apiKey: Gemini API key
            modelId: Model name, e.g. gemini-2.0-flash
            temperature: Generation temperature, 0 for deterministic answers
            uploadMode: auto (inline up to inlineLimitBytes), inline or upload
            inlineLimitBytes: Biggest payload sent inline in auto mode
            requestTimeout: HTTP timeout in seconds for SDK requests
            client: Preconfigured client (tests)
        """
        super().__init__(modelId, temperature)
        self.uploadMode = UploadMode(uploadMode)
        self.inlineLimitBytes = inlineLimitBytes

        if client is None:
            httpOptions = None
            if requestTimeout:
                # SDK expects milliseconds
                httpOptions = types.HttpOptions(timeout=int(requestTimeout * 1000))
            client = genai.Client(api_key=apiKey, http_options=httpOptions)
        self._client = client

    def _useUpload(self, image: ImageBytes) -> bool:
        match self.uploadMode:
            case UploadMode.UPLOAD:
                return True
            case UploadMode.INLINE:
                return False
            case _:
                return image.size > self.inlineLimitBytes

    async def _buildImagePart(self, image: ImageBytes) -> types.Part:
        if not self._useUpload(image):
            return types.Part.from_bytes(data=image.data, mime_type=image.mimeType)

        displayName = f"TelegramImage_{int(time.time() * 1000)}.{image.format.extension}"
        uploaded = await self._client.aio.files.upload(
            file=io.BytesIO(image.data),
            config=types.UploadFileConfig(mime_type=image.mimeType, display_name=displayName),
        )
        logger.debug(f"Uploaded {displayName} ({image.size} bytes) as {uploaded.uri}")
        if not uploaded.uri:
            raise AnalysisFailedError(f"File upload returned no URI for {displayName}")
        return types.Part.from_uri(file_uri=uploaded.uri, mime_type=uploaded.mime_type or image.mimeType)

    def _parseResponse(self, response: Any) -> ModelRunResult:
        if response is None:
            raise NoResponseError("Model returned no response")

        promptFeedback = getattr(response, "prompt_feedback", None)
        blockReason = _enumName(getattr(promptFeedback, "block_reason", None))
        if blockReason and blockReason != "BLOCKED_REASON_UNSPECIFIED":
            raise SafetyBlockedError(f"Prompt blocked: {blockReason}", reason=blockReason)

        candidates = getattr(response, "candidates", None) or []
        if not candidates:
            raise NoResponseError("Model returned no candidates")

        candidate = candidates[0]
        finishReason = _enumName(getattr(candidate, "finish_reason", None))
        if finishReason in SAFETY_FINISH_REASONS:
            raise SafetyBlockedError(f"Answer blocked: {finishReason}", reason=finishReason)

        content = getattr(candidate, "content", None)
        parts: List[Any] = (getattr(content, "parts", None) or []) if content is not None else []
        text = "".join(
            part.text for part in parts if getattr(part, "text", None) and not getattr(part, "thought", None)
        )
        if not text.strip():
            raise NoResponseError(f"Model returned empty text (finish reason: {finishReason})")

        status = ModelResultStatus.UNKNOWN
        match finishReason:
            case "STOP":
                status = ModelResultStatus.FINAL
            case "MAX_TOKENS":
                status = ModelResultStatus.TRUNCATED_FINAL
            case None | "FINISH_REASON_UNSPECIFIED":
                status = ModelResultStatus.UNSPECIFIED
            case _:
                logger.warning(f"Unknown Gemini finish reason: {finishReason}")

        usage = getattr(response, "usage_metadata", None)
        return ModelRunResult(
            response,
            status,
            text,
            finishReason=finishReason,
            inputTokens=getattr(usage, "prompt_token_count", None),
            outputTokens=getattr(usage, "candidates_token_count", None),
        )

    async def describeImage(self, image: ImageBytes, prompt: str) -> ModelRunResult:
        try:
            imagePart = await self._buildImagePart(image)
            response = await self._client.aio.models.generate_content(
                model=self.modelId,
                contents=[imagePart, prompt],
                config=types.GenerateContentConfig(temperature=self.temperature),
            )
            ret = self._parseResponse(response)
            logger.debug(f"Gemini {self.modelId} result: {ret}")
            return ret
        except VisionError:
            raise
        except genai_errors.APIError as e:
            if e.code == 429 or e.status == "RESOURCE_EXHAUSTED":
                raise RateLimitedError(f"Gemini rate limit: {e.message}", cause=e) from e
            logger.error(f"Gemini API error {e.code}: {e.message}")
            raise AnalysisFailedError(f"{e.code} {e.status}: {e.message}", cause=e) from e
        except NETWORK_ERRORS as e:
            logger.error(f"Network error while calling Gemini: {type(e).__name__}: {e}")
            raise VisionNetworkError(f"Network error: {type(e).__name__}", cause=e) from e
        except Exception as e:
            logger.error(f"Error running Gemini model {self.modelId}: {e}")
            logger.exception(e)
            raise AnalysisFailedError(str(e) or type(e).__name__, cause=e) from e

    def getInfo(self) -> Dict[str, Any]:
        ret = super().getInfo()
        ret["upload_mode"] = str(self.uploadMode)
        ret["inline_limit"] = self.inlineLimitBytes
        return ret
