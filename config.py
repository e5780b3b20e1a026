"""
Configuration Management for the redirects tooling
Handles environment-based configuration and optional JSON config files.
"""
import os
import json
import logging
from typing import Optional, Dict, Any
from pathlib import Path
from dataclasses import dataclass, field
from dotenv import load_dotenv

# Load .env file
load_dotenv()

from exceptions import ConfigurationError
from redirects.serializers import OUTPUT_FORMATS

DEFAULT_REDIRECTS_PATH = "_redirects"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class SystemConfig:
    """System-wide configuration settings."""
    environment: str = "development"
    log_level: str = "INFO"
    version: str = "1.0.0"


@dataclass
class ParserConfig:
    """Where and how the redirects file is read."""
    redirects_path: str = DEFAULT_REDIRECTS_PATH
    encoding: str = "utf-8"


@dataclass
class OutputConfig:
    """Serialization settings for parsed rules."""
    format: str = "json"  # json, yaml, amplify
    indent: int = 2


@dataclass
class RedirectsConfig:
    """Complete configuration for the redirects tooling."""
    system: SystemConfig = field(default_factory=SystemConfig)
    parser: ParserConfig = field(default_factory=ParserConfig)
    output: OutputConfig = field(default_factory=OutputConfig)

    def validate(self) -> None:
        """
        Validate configuration settings.

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if self.system.log_level not in LOG_LEVELS:
            raise ConfigurationError(
                f"Invalid log level: {self.system.log_level}. Must be one of: {LOG_LEVELS}",
                component="ConfigManager"
            )

        if self.output.format not in OUTPUT_FORMATS:
            raise ConfigurationError(
                f"Invalid output format: {self.output.format}. Must be one of: {OUTPUT_FORMATS}",
                component="ConfigManager"
            )

        if self.output.indent < 0:
            raise ConfigurationError(
                f"JSON indent must be non-negative, got {self.output.indent}",
                component="ConfigManager"
            )

        if not self.parser.redirects_path:
            raise ConfigurationError(
                "Redirects path must not be empty",
                component="ConfigManager"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to dictionary."""
        return {
            "system": {
                "environment": self.system.environment,
                "log_level": self.system.log_level,
                "version": self.system.version
            },
            "parser": {
                "redirects_path": self.parser.redirects_path,
                "encoding": self.parser.encoding
            },
            "output": {
                "format": self.output.format,
                "indent": self.output.indent
            }
        }


class ConfigManager:
    """
    Manages configuration loading from environment variables and files.
    Implements fail-fast principle for invalid configurations.
    """

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_path: Optional path to JSON config file
        """
        self.config_path = config_path
        self._config: Optional[RedirectsConfig] = None
        self.logger = logging.getLogger(__name__)

    def load(self) -> RedirectsConfig:
        """
        Load configuration from environment and optional file.
        Priority: Environment Variables > Config File > Defaults

        Returns:
            RedirectsConfig: Validated configuration

        Raises:
            ConfigurationError: If configuration is invalid
        """
        config = RedirectsConfig()

        # Load from file if provided
        if self.config_path:
            config = self._load_from_file(self.config_path)

        # Override with environment variables
        config = self._load_from_environment(config)

        # Validate configuration
        config.validate()

        self._config = config
        self.logger.debug(f"Configuration loaded: {config.to_dict()}")
        return config

    def _load_from_file(self, file_path: str) -> RedirectsConfig:
        """
        Load configuration from JSON file.

        Args:
            file_path: Path to configuration file

        Returns:
            RedirectsConfig: Configuration object

        Raises:
            ConfigurationError: If file cannot be loaded
        """
        path = Path(file_path)
        if not path.exists():
            raise ConfigurationError(
                f"Configuration file not found: {file_path}",
                component="ConfigManager"
            )

        try:
            with open(path, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(
                f"Invalid JSON in configuration file: {e}",
                component="ConfigManager"
            )
        except OSError as e:
            raise ConfigurationError(
                f"Error loading configuration file: {e}",
                component="ConfigManager"
            )

        config = RedirectsConfig()

        if 'system' in data:
            sys_data = data['system']
            config.system.environment = sys_data.get('environment', 'development')
            config.system.log_level = sys_data.get('log_level', 'INFO').upper()

        if 'parser' in data:
            parser_data = data['parser']
            config.parser.redirects_path = parser_data.get('redirects_path', DEFAULT_REDIRECTS_PATH)
            config.parser.encoding = parser_data.get('encoding', 'utf-8')

        if 'output' in data:
            output_data = data['output']
            config.output.format = output_data.get('format', 'json')
            config.output.indent = output_data.get('indent', 2)

        return config

    def _load_from_environment(self, config: RedirectsConfig) -> RedirectsConfig:
        """
        Override configuration with environment variables.

        Args:
            config: Base configuration to override

        Returns:
            RedirectsConfig: Configuration with environment overrides
        """
        config.system.environment = os.getenv('REDIRECTS_ENVIRONMENT', config.system.environment)

        log_level = os.getenv('REDIRECTS_LOG_LEVEL')
        if log_level:
            config.system.log_level = log_level.upper()

        redirects_path = os.getenv('REDIRECTS_FILE')
        if redirects_path:
            config.parser.redirects_path = redirects_path

        encoding = os.getenv('REDIRECTS_ENCODING')
        if encoding:
            config.parser.encoding = encoding

        output_format = os.getenv('REDIRECTS_OUTPUT_FORMAT')
        if output_format:
            config.output.format = output_format.lower()

        indent = os.getenv('REDIRECTS_JSON_INDENT')
        if indent:
            try:
                config.output.indent = int(indent)
            except ValueError:
                raise ConfigurationError(
                    f"Invalid JSON indent: {indent}",
                    component="ConfigManager"
                )

        return config

    @property
    def config(self) -> RedirectsConfig:
        """
        Get current configuration.

        Raises:
            ConfigurationError: If configuration not loaded
        """
        if self._config is None:
            raise ConfigurationError(
                "Configuration not loaded. Call load() first.",
                component="ConfigManager"
            )
        return self._config


# Singleton instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager(config_path: Optional[str] = None) -> ConfigManager:
    """
    Get singleton ConfigManager instance.

    Passing a config_path different from the current manager's replaces it;
    calling without one reuses whatever manager exists.

    Args:
        config_path: Optional path to configuration file

    Returns:
        ConfigManager: Singleton instance
    """
    global _config_manager
    if _config_manager is None or (
        config_path is not None and config_path != _config_manager.config_path
    ):
        _config_manager = ConfigManager(config_path)
    return _config_manager


def load_config(config_path: Optional[str] = None) -> RedirectsConfig:
    """
    Load and validate configuration.

    Args:
        config_path: Optional path to configuration file

    Returns:
        RedirectsConfig: Validated configuration

    Raises:
        ConfigurationError: If configuration is invalid
    """
    manager = get_config_manager(config_path)
    return manager.load()
