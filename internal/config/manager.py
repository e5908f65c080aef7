"""
Configuration management for Glimpse bot.
"""

import copy
import logging
import os
import re
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

import lib.utils as utils
from internal.bot.models import PipelineConfig

logger = logging.getLogger(__name__)

# Values left over from config.example.toml
PLACEHOLDER_VALUES = frozenset({"", "YOUR_BOT_TOKEN_HERE", "YOUR_GEMINI_API_KEY_HERE"})
UNRESOLVED_ENV_RE = re.compile(r"^\$\{[A-Za-z_][A-Za-z0-9_-]*\}$")

# (section, key) pairs hidden by getMaskedConfig()
SECRET_KEYS = (
    ("bot", "token"),
    ("bot", "secret-token"),
    ("gemini", "api-key"),
)


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace ${VAR} with the environment value, keep the placeholder if the variable is not set"""
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders in strings, dicts and lists"""
    if isinstance(value, str):
        return re.sub(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}", replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


def isPlaceholder(value: Any) -> bool:
    """True for empty, example or unresolved ${VAR} values"""
    if not isinstance(value, str):
        return value is None
    value = value.strip()
    return value in PLACEHOLDER_VALUES or bool(UNRESOLVED_ENV_RE.match(value))


def mergeConfigs(baseConfig: Dict[str, Any], newConfig: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two configuration dictionaries, values of newConfig win"""
    merged = baseConfig.copy()

    for key, value in newConfig.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = mergeConfigs(merged[key], value)
        else:
            merged[key] = value

    return merged


class ConfigManager:
    """Loads the TOML configuration and hands out its sections."""

    def __init__(
        self, configPath: str = "config.toml", configDirs: Optional[List[str]] = None, dotEnvFile: str = ".env"
    ):
        """
        Load configuration.

        The .env file (if any) is loaded first, then the main config file,
        then every .toml file found in configDirs (sorted, merged on top).
        ${VAR} placeholders are substituted after merging.
        """
        self.configPath = configPath
        self.configDirs = configDirs or []
        utils.load_dotenv(path=dotEnvFile)
        self.config = substituteEnvVars(self._loadConfig())

        rootDir = self.config.get("application", {}).get("root-dir", None)
        if rootDir is not None:
            os.chdir(rootDir)
            logger.info(f"Changed root directory to {rootDir}")

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        dirPath = Path(directory)
        if not dirPath.is_dir():
            logger.warning(f"Config directory {directory} does not exist or is not a directory, skipping")
            return []

        return sorted(path for path in dirPath.rglob("*.toml") if path.is_file())

    def _loadConfig(self) -> Dict[str, Any]:
        """
        Load configuration from TOML file and optional config directories.

        Raises:
            SystemExit: If there is nothing to load or the main file is broken
        """
        configFile = Path(self.configPath)
        hasConfigFile = configFile.exists()
        if not hasConfigFile and not self.configDirs:
            logger.error(f"Configuration file {self.configPath} not found!")
            sys.exit(1)

        config: Dict[str, Any] = {}
        if hasConfigFile:
            try:
                with open(configFile, "rb") as f:
                    config = tomli.load(f)
            except (OSError, tomli.TOMLDecodeError) as e:
                logger.error(f"Failed to load configuration {self.configPath}: {e}")
                sys.exit(1)
            logger.info(f"Loaded main config from {self.configPath}")

        for configDir in self.configDirs:
            tomlFiles = self._findTomlFilesRecursive(configDir)
            logger.info(f"Found {len(tomlFiles)} .toml files in {configDir}")

            for tomlFile in tomlFiles:
                try:
                    with open(tomlFile, "rb") as f:
                        config = mergeConfigs(config, tomli.load(f))
                    logger.info(f"Merged config from {tomlFile}")
                except (OSError, tomli.TOMLDecodeError) as e:
                    # Continue with other files instead of exiting
                    logger.error(f"Failed to load config file {tomlFile}: {e}")

        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getBotConfig(self) -> Dict[str, Any]:
        return self.get("bot", {})

    def getGeminiConfig(self) -> Dict[str, Any]:
        return self.get("gemini", {})

    def getServerConfig(self) -> Dict[str, Any]:
        return self.get("server", {})

    def getLoggingConfig(self) -> Dict[str, Any]:
        return self.get("logging", {})

    def getBotToken(self) -> str:
        """Get bot token, exit if it is not configured."""
        token = self.getBotConfig().get("token", "")
        if isPlaceholder(token):
            logger.error("Please set your bot token (bot.token) in config.toml!")
            sys.exit(1)
        return str(token)

    def getGeminiApiKey(self) -> str:
        """Get Gemini API key, exit if it is not configured."""
        apiKey = self.getGeminiConfig().get("api-key", "")
        if isPlaceholder(apiKey):
            logger.error("Please set your Gemini API key (gemini.api-key) in config.toml!")
            sys.exit(1)
        return str(apiKey)

    def getSecretToken(self) -> Optional[str]:
        """Webhook secret token, None if not configured"""
        secret = self.getBotConfig().get("secret-token")
        return None if isPlaceholder(secret) else str(secret)

    def getPipelineConfig(self) -> PipelineConfig:
        """Get [pipeline] section as PipelineConfig, exit on invalid values."""
        try:
            return PipelineConfig.fromDict(
                self.get("pipeline", {}),
                defaultLanguage=self.getBotConfig().get("language"),
            )
        except (ValueError, TypeError) as e:
            logger.error(f"Invalid [pipeline] configuration: {e}")
            sys.exit(1)

    def getSecrets(self) -> List[str]:
        """All configured secret values (for log redaction)"""
        ret: List[str] = []
        for section, key in SECRET_KEYS:
            value = self.get(section, {}).get(key)
            if isinstance(value, str) and not isPlaceholder(value):
                ret.append(value)
        return ret

    def getMaskedConfig(self) -> Dict[str, Any]:
        """Copy of the configuration with secrets masked (for printing)"""
        masked = copy.deepcopy(self.config)
        for section, key in SECRET_KEYS:
            sectionConfig = masked.get(section)
            if isinstance(sectionConfig, dict) and isinstance(sectionConfig.get(key), str):
                sectionConfig[key] = utils.maskSecret(sectionConfig[key])
        return masked
