"""
Pipeline configuration: one record parameterizing the analyze-and-reply flow
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from lib.telegram_markdown import FormattingMode

from .. import constants
from ..messages import Language, MessageKey, getMessage, resolveLanguage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PipelineConfig:
    promptText: str
    resultHeader: str
    formattingMode: FormattingMode = FormattingMode.HTML
    cacheEnabled: bool = True
    maxFileSizeBytes: int = constants.DEFAULT_MAX_FILE_SIZE
    cacheMaxEntries: int = constants.DEFAULT_CACHE_MAX_ENTRIES
    cacheMaxBytes: int = constants.DEFAULT_CACHE_MAX_BYTES
    cacheTtl: float = 0
    language: Language = Language.EN
    sendProcessingNotice: bool = True
    acceptDocuments: bool = True
    processingTimeout: float = constants.DEFAULT_PROCESSING_TIMEOUT

    @classmethod
    def fromDict(cls, config: Dict[str, Any], defaultLanguage: Optional[str] = None) -> "PipelineConfig":
        """
        Build config from the [pipeline] TOML table.

        Raises:
            ValueError: If some value is out of range or of unknown kind
        """
        language = resolveLanguage(config.get("language", defaultLanguage))

        try:
            formattingMode = FormattingMode(config.get("formatting-mode", FormattingMode.HTML))
        except ValueError:
            raise ValueError(
                f"Unknown formatting-mode {config.get('formatting-mode')!r}, "
                f"expected one of {[str(m) for m in FormattingMode]}"
            )

        ret = cls(
            promptText=config.get("prompt") or getMessage(MessageKey.DEFAULT_PROMPT, language),
            resultHeader=config.get("result-header", getMessage(MessageKey.RESULT_HEADER, language)),
            formattingMode=formattingMode,
            cacheEnabled=bool(config.get("cache-enabled", True)),
            maxFileSizeBytes=int(config.get("max-file-size", constants.DEFAULT_MAX_FILE_SIZE)),
            cacheMaxEntries=int(config.get("cache-max-entries", constants.DEFAULT_CACHE_MAX_ENTRIES)),
            cacheMaxBytes=int(config.get("cache-max-bytes", constants.DEFAULT_CACHE_MAX_BYTES)),
            cacheTtl=float(config.get("cache-ttl", 0)),
            language=language,
            sendProcessingNotice=bool(config.get("send-processing-notice", True)),
            acceptDocuments=bool(config.get("accept-documents", True)),
            processingTimeout=float(config.get("processing-timeout", constants.DEFAULT_PROCESSING_TIMEOUT)),
        )

        if ret.maxFileSizeBytes <= 0:
            raise ValueError(f"max-file-size should be positive, got {ret.maxFileSizeBytes}")
        if ret.cacheMaxEntries <= 0:
            raise ValueError(f"cache-max-entries should be positive, got {ret.cacheMaxEntries}")
        if ret.processingTimeout <= 0:
            raise ValueError(f"processing-timeout should be positive, got {ret.processingTimeout}")

        logger.debug(f"Pipeline config: {ret}")
        return ret
