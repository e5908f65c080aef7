"""
User facing texts in supported languages.

All texts are plain (not yet formatted); the delivery layer sends them as is.
"""

from enum import StrEnum
from typing import Dict, Optional

from lib.utils import formatBytes

from .errors import ErrorKind


class Language(StrEnum):
    EN = "en"
    RU = "ru"


class MessageKey(StrEnum):
    START = "start"
    HELP = "help"
    ABOUT = "about"
    SEND_IMAGE = "send-image"
    PROCESSING = "processing"
    NOT_AN_IMAGE = "not-an-image"
    DEFAULT_PROMPT = "default-prompt"
    RESULT_HEADER = "result-header"


_MESSAGES: Dict[Language, Dict[MessageKey, str]] = {
    Language.EN: {
        MessageKey.START: (
            "Hi! I describe images.\n"
            "Send me a photo or an image file (JPEG, PNG or GIF) and I will tell you what is on it."
        ),
        MessageKey.HELP: (
            "How to use me:\n"
            "• send a photo, or an image as a file, up to {limit}\n"
            "• wait a few seconds for the description\n\n"
            "Commands:\n"
            "/start - greeting\n"
            "/help - this help\n"
            "/about - about this bot"
        ),
        MessageKey.ABOUT: "I use Google Gemini to analyze images. Images are not stored, only their descriptions are cached.",
        MessageKey.SEND_IMAGE: "I received your message. Please send me an image to analyze.",
        MessageKey.PROCESSING: "Analyzing your image…",
        MessageKey.NOT_AN_IMAGE: "This file doesn't look like an image. Please send a JPEG, PNG or GIF image.",
        MessageKey.DEFAULT_PROMPT: (
            "Analyze this image and describe what you see. Provide your analysis in Markdown format, "
            "using appropriate headers, lists, and emphasis where relevant."
        ),
        MessageKey.RESULT_HEADER: "Image Analysis:",
    },
    Language.RU: {
        MessageKey.START: (
            "Привет! Я описываю изображения.\n"
            "Пришлите фото или файл с картинкой (JPEG, PNG или GIF), и я расскажу, что на нём."
        ),
        MessageKey.HELP: (
            "Как мной пользоваться:\n"
            "• пришлите фото или картинку файлом, не больше {limit}\n"
            "• подождите несколько секунд\n\n"
            "Команды:\n"
            "/start - приветствие\n"
            "/help - эта справка\n"
            "/about - о боте"
        ),
        MessageKey.ABOUT: "Я использую Google Gemini для анализа изображений. Картинки не сохраняются, кэшируются только описания.",
        MessageKey.SEND_IMAGE: "Я получил ваше сообщение. Пожалуйста, пришлите изображение для анализа.",
        MessageKey.PROCESSING: "Анализирую изображение…",
        MessageKey.NOT_AN_IMAGE: "Этот файл не похож на изображение. Пришлите картинку в формате JPEG, PNG или GIF.",
        MessageKey.DEFAULT_PROMPT: (
            "Проанализируй это изображение и опиши, что на нём. Оформи ответ в Markdown, "
            "используя заголовки, списки и выделение там, где это уместно."
        ),
        MessageKey.RESULT_HEADER: "Анализ изображения:",
    },
}

_ERRORS: Dict[Language, Dict[ErrorKind, str]] = {
    Language.EN: {
        ErrorKind.OVERSIZED_INPUT: "The image is too large. The maximum size is {limit}.",
        ErrorKind.UNSUPPORTED_FORMAT: "Unsupported image format. Please send a JPEG, PNG or GIF image.",
        ErrorKind.DOWNLOAD_FAILED: "Sorry, I couldn't download your image. Please try again.",
        ErrorKind.NO_RESPONSE: "Sorry, I couldn't get a description for this image. Please try another one.",
        ErrorKind.SAFETY_BLOCKED: "Sorry, this image can't be analyzed because it was flagged by the content safety filter.",
        ErrorKind.RATE_LIMITED: "I'm getting too many requests right now. Please try again in a minute.",
        ErrorKind.NETWORK_ERROR: "Sorry, the image analysis service is unreachable right now. Please try again later.",
        ErrorKind.ANALYSIS_FAILED: "Sorry, there was an error processing your image.",
        ErrorKind.DELIVERY_FAILED: "Sorry, there was an error processing your image.",
        ErrorKind.UNKNOWN_UPDATE_SHAPE: "Sorry, I don't understand this message.",
    },
    Language.RU: {
        ErrorKind.OVERSIZED_INPUT: "Изображение слишком большое. Максимальный размер: {limit}.",
        ErrorKind.UNSUPPORTED_FORMAT: "Неподдерживаемый формат. Пришлите изображение в формате JPEG, PNG или GIF.",
        ErrorKind.DOWNLOAD_FAILED: "Не удалось скачать изображение. Попробуйте ещё раз.",
        ErrorKind.NO_RESPONSE: "Не удалось получить описание этого изображения. Попробуйте другое.",
        ErrorKind.SAFETY_BLOCKED: "Это изображение не может быть проанализировано: его заблокировал фильтр безопасности.",
        ErrorKind.RATE_LIMITED: "Сейчас слишком много запросов. Попробуйте через минуту.",
        ErrorKind.NETWORK_ERROR: "Сервис анализа изображений сейчас недоступен. Попробуйте позже.",
        ErrorKind.ANALYSIS_FAILED: "Извините, при обработке изображения произошла ошибка.",
        ErrorKind.DELIVERY_FAILED: "Извините, при обработке изображения произошла ошибка.",
        ErrorKind.UNKNOWN_UPDATE_SHAPE: "Извините, я не понимаю это сообщение.",
    },
}

# Provider text appended to ANALYSIS_FAILED replies is cut to this length
MAX_ERROR_DETAILS_LENGTH = 200


def resolveLanguage(language: Optional[str]) -> Language:
    """Map a language code (en, ru, en-US...) to a supported Language, English by default"""
    if language:
        code = language.split("-")[0].split("_")[0].lower()
        if code in Language._value2member_map_:
            return Language(code)
    return Language.EN


def getMessage(key: MessageKey, language: Optional[str] = None, limit: Optional[int] = None) -> str:
    text = _MESSAGES[resolveLanguage(language)][key]
    if limit is not None:
        text = text.replace("{limit}", formatBytes(limit))
    return text


def errorMessage(
    kind: ErrorKind,
    language: Optional[str] = None,
    limit: Optional[int] = None,
    details: Optional[str] = None,
) -> str:
    """
    Fixed user facing sentence for an error kind.

    Provider text (details) is only added for ANALYSIS_FAILED, the last
    resort category, and is truncated.
    """
    text = _ERRORS[resolveLanguage(language)][kind]
    if limit is not None:
        text = text.replace("{limit}", formatBytes(limit))

    if kind == ErrorKind.ANALYSIS_FAILED and details:
        details = details.strip()
        if len(details) > MAX_ERROR_DETAILS_LENGTH:
            details = details[: MAX_ERROR_DETAILS_LENGTH - 1] + "…"
        text = f"{text}\n{details}"

    return text
