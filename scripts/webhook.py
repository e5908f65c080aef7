#!/usr/bin/env python3
"""
Manage the Telegram webhook of the bot.

Usage:
    python -m scripts.webhook [-c config.toml] set [URL]
    python -m scripts.webhook [-c config.toml] delete
    python -m scripts.webhook [-c config.toml] info

`set` without URL uses bot.webhook-url joined with server.path.
"""

import argparse
import asyncio
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import telegram
import telegram.error

from internal.bot import constants
from internal.config.manager import ConfigManager
from lib.utils import jsonDumps

logger = logging.getLogger(__name__)

# Only updates the bot knows how to parse
ALLOWED_UPDATES = [telegram.Update.MESSAGE, telegram.Update.EDITED_MESSAGE]


class WebhookError(Exception):
    """Webhook command can not be run with the given arguments"""


def buildWebhookUrl(baseUrl: str, path: str) -> str:
    """https://example.com + /webhook -> https://example.com/webhook (unless the path is already there)"""
    baseUrl = baseUrl.rstrip("/")
    path = "/" + path.lstrip("/")
    if baseUrl.endswith(path):
        return baseUrl
    return baseUrl + path


def parseArguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Manage the Telegram webhook of the bot")
    parser.add_argument(
        "-c",
        "--config",
        default="config.toml",
        help="Path to configuration file (default: config.toml)",
    )
    parser.add_argument(
        "--config-dir",
        action="append",
        help="Directory to search for .toml config files recursively (can be specified multiple times)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    setParser = subparsers.add_parser("set", help="Register the webhook")
    setParser.add_argument("url", nargs="?", help="Webhook URL (default: bot.webhook-url + server.path)")
    subparsers.add_parser("delete", help="Remove the webhook")
    subparsers.add_parser("info", help="Show current webhook info")
    return parser.parse_args(argv)


async def runCommand(args: argparse.Namespace, configManager: ConfigManager, bot: telegram.Bot) -> Dict[str, Any]:
    """
    Run one webhook command.

    Raises:
        WebhookError: No webhook URL is given or configured
        telegram.error.TelegramError: Telegram refused the request or could not be reached
    """
    match args.command:
        case "set":
            url = args.url
            if not url:
                baseUrl = configManager.getBotConfig().get("webhook-url")
                if not baseUrl:
                    raise WebhookError("No URL given and bot.webhook-url is not configured")
                path = configManager.getServerConfig().get("path", constants.DEFAULT_WEBHOOK_PATH)
                url = buildWebhookUrl(baseUrl, path)
            print(f"Setting webhook to {url}")
            ok = await bot.set_webhook(
                url=url,
                secret_token=configManager.getSecretToken(),
                allowed_updates=ALLOWED_UPDATES,
            )
            return {"ok": ok, "url": url, "allowed_updates": ALLOWED_UPDATES}
        case "delete":
            return {"ok": await bot.delete_webhook()}
        case "info":
            webhookInfo = await bot.get_webhook_info()
            return webhookInfo.to_dict()
        case _:
            raise WebhookError(f"Unknown command {args.command}")


async def amain(args: argparse.Namespace) -> int:
    configManager = ConfigManager(os.path.abspath(args.config), args.config_dir)
    try:
        async with telegram.Bot(configManager.getBotToken()) as bot:
            result = await runCommand(args, configManager, bot)
    except (WebhookError, telegram.error.TelegramError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(jsonDumps(result, indent=2))
    return 0


def main() -> None:
    logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.WARNING)
    sys.exit(asyncio.run(amain(parseArguments())))


if __name__ == "__main__":
    main()
