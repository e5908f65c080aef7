"""
Tests for localized user facing texts, dood!
"""

import pytest

from internal.bot.errors import ErrorKind
from internal.bot.messages import (
    MAX_ERROR_DETAILS_LENGTH,
    Language,
    MessageKey,
    errorMessage,
    getMessage,
    resolveLanguage,
)


@pytest.mark.parametrize(
    "code, expected",
    [
        ("en", Language.EN),
        ("ru", Language.RU),
        ("ru-RU", Language.RU),
        ("RU_ru", Language.RU),
        ("de", Language.EN),
        ("", Language.EN),
        (None, Language.EN),
    ],
)
def testResolveLanguage(code, expected):
    assert resolveLanguage(code) == expected


@pytest.mark.parametrize("language", list(Language))
def testEveryTextIsTranslated(language):
    for key in MessageKey:
        assert getMessage(key, language)
    for kind in ErrorKind:
        assert errorMessage(kind, language)


def testLimitIsFormatted():
    assert getMessage(MessageKey.HELP, limit=4 * 1024 * 1024).count("4 MB") == 1
    assert errorMessage(ErrorKind.OVERSIZED_INPUT, "ru", limit=512 * 1024).endswith("512 KB.")


def testDetailsOnlyForAnalysisFailed():
    assert errorMessage(ErrorKind.SAFETY_BLOCKED, details="raw provider text") == (
        "Sorry, this image can't be analyzed because it was flagged by the content safety filter."
    )
    assert errorMessage(ErrorKind.ANALYSIS_FAILED, details="raw provider text") == (
        "Sorry, there was an error processing your image.\nraw provider text"
    )


def testDetailsAreTruncated():
    text = errorMessage(ErrorKind.ANALYSIS_FAILED, details="x" * 1000)
    details = text.split("\n", 1)[1]

    assert len(details) == MAX_ERROR_DETAILS_LENGTH
    assert details.endswith("…")
