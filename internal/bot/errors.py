"""
Error taxonomy of the analyze-and-reply pipeline.

Every failure below the dispatcher is one of these exceptions. The handler
boundary maps ErrorKind to a fixed localized sentence (see messages.py).
"""

from enum import StrEnum
from typing import Optional, Type

import lib.ai.exceptions as visionErrors


class ErrorKind(StrEnum):
    OVERSIZED_INPUT = "oversized-input"
    UNSUPPORTED_FORMAT = "unsupported-format"
    DOWNLOAD_FAILED = "download-failed"
    NO_RESPONSE = "no-response"
    SAFETY_BLOCKED = "safety-blocked"
    RATE_LIMITED = "rate-limited"
    NETWORK_ERROR = "network-error"
    ANALYSIS_FAILED = "analysis-failed"
    DELIVERY_FAILED = "delivery-failed"
    UNKNOWN_UPDATE_SHAPE = "unknown-update-shape"


class PipelineError(Exception):
    """Base class for all pipeline failures

    Attributes:
        kind: Category used to pick the user facing message
        message: Diagnostic message (logged, never shown verbatim except
            for ANALYSIS_FAILED)
        cause: Underlying exception, if any
    """

    kind: ErrorKind = ErrorKind.ANALYSIS_FAILED

    def __init__(self, message: str, cause: Optional[BaseException] = None, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if kind is not None:
            self.kind = kind

    def __str__(self) -> str:
        return f"{self.kind}: {self.message}"


class OversizedInputError(PipelineError):
    kind = ErrorKind.OVERSIZED_INPUT

    def __init__(self, size: Optional[int], limit: int):
        sizeStr = "unknown size" if size is None else f"{size} bytes"
        super().__init__(f"File is too big: {sizeStr} > {limit} bytes")
        self.size = size
        self.limit = limit


class UnsupportedFormatError(PipelineError):
    kind = ErrorKind.UNSUPPORTED_FORMAT


class DownloadFailedError(PipelineError):
    kind = ErrorKind.DOWNLOAD_FAILED


class AnalysisError(PipelineError):
    """Vision model failure, kind is one of the analysis related kinds"""

    @classmethod
    def fromVisionError(cls, error: visionErrors.VisionError) -> "AnalysisError":
        kind = ErrorKind.ANALYSIS_FAILED
        for errorClass, errorKind in _VISION_ERROR_KINDS:
            if isinstance(error, errorClass):
                kind = errorKind
                break
        return cls(error.message, cause=error, kind=kind)


_VISION_ERROR_KINDS: tuple[tuple[Type[visionErrors.VisionError], ErrorKind], ...] = (
    (visionErrors.NoResponseError, ErrorKind.NO_RESPONSE),
    (visionErrors.SafetyBlockedError, ErrorKind.SAFETY_BLOCKED),
    (visionErrors.RateLimitedError, ErrorKind.RATE_LIMITED),
    (visionErrors.VisionNetworkError, ErrorKind.NETWORK_ERROR),
    (visionErrors.AnalysisFailedError, ErrorKind.ANALYSIS_FAILED),
)


class DeliveryFailedError(PipelineError):
    kind = ErrorKind.DELIVERY_FAILED


class UnknownUpdateShapeError(PipelineError):
    kind = ErrorKind.UNKNOWN_UPDATE_SHAPE


class NotAnImageDocument(Exception):
    """Document with a non image MIME type. Normal outcome, not a failure."""

    def __init__(self, mimeType: Optional[str]):
        super().__init__(f"Document is not an image: {mimeType}")
        self.mimeType = mimeType
