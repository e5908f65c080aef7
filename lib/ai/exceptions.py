"""
Vision model exceptions, dood!

Every failure of a vision call is raised as one of these classes at the point
where it is detected, so callers never have to guess the category from an
error message.
"""

from typing import Optional


class VisionError(Exception):
    """Base exception for vision model failures, dood!

    Attributes:
        message: Human readable description (may contain provider text)
        cause: Original exception, if any
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        return self.message


class NoResponseError(VisionError):
    """Model returned no candidates or an empty text"""


class SafetyBlockedError(VisionError):
    """Prompt or answer was blocked by the provider safety filters, dood!"""

    def __init__(self, message: str, reason: Optional[str] = None, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.reason = reason


class RateLimitedError(VisionError):
    """Provider quota or rate limit is exhausted"""


class VisionNetworkError(VisionError):
    """Provider could not be reached"""


class AnalysisFailedError(VisionError):
    """Any other provider failure"""
