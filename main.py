"""
Glimpse - a Telegram bot describing images with Google Gemini.
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from internal.bot.application import BotApplication
from internal.config.manager import ConfigManager
from lib.logging_utils import initLogging
from lib.utils import jsonDumps

# Configure basic logging first
logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s", level=logging.INFO)
# set higher logging level for httpx to avoid all GET and POST requests being logged
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


class GlimpseBot:
    """Main bot orchestrator that coordinates all components."""

    def __init__(self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None):
        self.configManager = ConfigManager(configPath, configDirs)

        initLogging(self.configManager.getLoggingConfig(), secrets=self.configManager.getSecrets())

        self.botApp = BotApplication(configManager=self.configManager)

    def run(self):
        """Start the bot."""
        self.botApp.run()


def parseArguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(description="Glimpse - a Telegram bot describing images with Google Gemini")
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
    parser.add_argument(
        "--print-config",
        action="store_true",
        help="Pretty-print loaded configuration (secrets masked) and exit",
    )
    args = parser.parse_args()
    args.config = os.path.abspath(args.config)
    if args.config_dir:
        args.config_dir = [os.path.abspath(dirPath) for dirPath in args.config_dir]

    return args


def prettyPrintConfig(configManager: ConfigManager):
    """Pretty-print the loaded configuration with secrets masked."""
    print("=== Glimpse Configuration ===")
    print()
    print(jsonDumps(configManager.getMaskedConfig(), indent=2))
    print()
    print("=== Configuration loaded successfully ===")


def main():
    """Main entry point."""
    args = parseArguments()

    try:
        if args.print_config:
            prettyPrintConfig(ConfigManager(args.config, args.config_dir))
            sys.exit(0)

        bot = GlimpseBot(configPath=args.config, configDirs=args.config_dir)
        bot.run()
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Bot crashed: {e}")
        logger.exception(e)
        sys.exit(1)


if __name__ == "__main__":
    main()
