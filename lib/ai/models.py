"""
Result types shared by vision models, dood!
"""

import json
from enum import Enum
from typing import Any, Optional


class ModelResultStatus(Enum):
    """Status of model run"""

    #: the status is not specified
    UNSPECIFIED = 0
    #: the answer is truncated but considered final
    TRUNCATED_FINAL = 2
    #: the answer is complete and final
    FINAL = 3
    #: represents an unknown status (-1)
    UNKNOWN = -1


class ModelRunResult:
    """Unified Result of model run"""

    def __init__(
        self,
        rawResult: Any,
        status: ModelResultStatus,
        resultText: str = "",
        finishReason: Optional[str] = None,
        inputTokens: Optional[int] = None,
        outputTokens: Optional[int] = None,
    ):
        self.status = status
        self.resultText = resultText
        self.result = rawResult
        self.finishReason = finishReason
        self.inputTokens = inputTokens
        self.outputTokens = outputTokens

    def __str__(self) -> str:
        return (
            "ModelRunResult("
            + json.dumps(
                {
                    "status": self.status.name,
                    "finishReason": self.finishReason,
                    "resultText": self.resultText,
                    "inputTokens": self.inputTokens,
                    "outputTokens": self.outputTokens,
                },
                ensure_ascii=False,
                default=str,
            )
            + ")"
        )
