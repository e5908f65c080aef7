"""
Constants for the Telegram bot.
"""

import telegram.constants

# Telegram limits
# TELEGRAM_MAX_MESSAGE_LENGTH = 4096
TELEGRAM_MAX_MESSAGE_LENGTH = telegram.constants.MessageLimit.MAX_TEXT_LENGTH

# Pipeline defaults
DEFAULT_MAX_FILE_SIZE = 4 * 1024 * 1024
DEFAULT_CACHE_MAX_ENTRIES = 1000
DEFAULT_CACHE_MAX_BYTES = 16 * 1024 * 1024
DEFAULT_PROCESSING_TIMEOUT = 25  # seconds

# Commands with canned answers
START_COMMAND = "start"
HELP_COMMAND = "help"
ABOUT_COMMAND = "about"

# Webhook server
DEFAULT_WEBHOOK_PATH = "/webhook"
HEALTH_PATH = "/health"
SECRET_TOKEN_HEADER = "X-Telegram-Bot-Api-Secret-Token"
