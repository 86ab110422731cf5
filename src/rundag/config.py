"""Configuration Management with Pydantic.

Settings are read from a YAML file and may be overridden through
environment variables. Everything has a default, so an application can use
the engine without any configuration file at all.
"""

import os
import threading
from pathlib import Path
from typing import Any

import structlog
import yaml
from pydantic import BaseModel, Field

from rundag.log_config import configure_logging

logger = structlog.get_logger(__name__)

DEFAULT_CONFIG_NAMES = ("rundag.yaml", "rundag.yml")


class GraphConfig(BaseModel):
    """Graph engine settings.

    Attributes:
        validate_before_order: Run a full cycle validation before every
            ordering, so cycle membership is always cached when order() fails
    """

    validate_before_order: bool = Field(
        default=False,
        description="Validate the graph at the start of every order() call",
    )


class LoggingConfig(BaseModel):
    """Logging settings.

    Attributes:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_logs: Render events as JSON instead of console text
    """

    level: str = Field(
        default="INFO",
        description="Logging level",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    json_logs: bool = Field(
        default=True,
        description="Render log events as JSON",
    )

    model_config = {"str_strip_whitespace": True}


class RundagConfig(BaseModel):
    """Top level configuration combining all settings."""

    graph: GraphConfig = Field(default_factory=GraphConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: str | Path) -> "RundagConfig":
        """Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file

        Returns:
            Parsed and validated RundagConfig instance

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If the file is empty, not valid YAML or invalid
        """
        config_path = Path(path)

        if not config_path.exists():
            msg = f"Configuration file not found: {config_path}"
            raise FileNotFoundError(msg)

        logger.info("loading_configuration", path=str(config_path))

        try:
            with config_path.open() as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.exception("yaml_parse_error", error=str(e), path=str(config_path))
            msg = f"Invalid YAML in configuration file: {e}"
            raise ValueError(msg) from e

        if not config_data:
            msg = "Configuration file is empty"
            raise ValueError(msg)
        if not isinstance(config_data, dict):
            msg = "Configuration file must contain a mapping"
            raise ValueError(msg)

        config = cls(**cls._apply_env_overrides(config_data))

        logger.info(
            "configuration_loaded",
            validate_before_order=config.graph.validate_before_order,
            logging_level=config.logging.level,
        )
        return config

    @classmethod
    def from_env(cls) -> "RundagConfig":
        """Build configuration from defaults and environment overrides only."""
        return cls(**cls._apply_env_overrides({}))

    @classmethod
    def _apply_env_overrides(cls, config_data: dict[str, Any]) -> dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern RUNDAG_<SECTION>_<KEY>,
        e.g. RUNDAG_GRAPH_VALIDATE_BEFORE_ORDER or RUNDAG_LOGGING_LEVEL.
        """
        env_overrides = {
            ("graph", "validate_before_order"): "RUNDAG_GRAPH_VALIDATE_BEFORE_ORDER",
            ("logging", "level"): "RUNDAG_LOGGING_LEVEL",
            ("logging", "json_logs"): "RUNDAG_LOGGING_JSON",
        }

        for path, env_var in env_overrides.items():
            value: Any = os.environ.get(env_var)
            if value is None:
                continue

            current = config_data
            for key in path[:-1]:
                current = current.setdefault(key, {})

            if env_var.endswith(("_ORDER", "_JSON")):
                value = value.lower() in ("true", "1", "yes")

            current[path[-1]] = value
            logger.debug(
                "env_override_applied",
                env_var=env_var,
                config_path=".".join(path),
            )

        return config_data

    def apply_logging(self) -> None:
        """Configure structlog according to the logging section."""
        configure_logging(level=self.logging.level, json_logs=self.logging.json_logs)


class ConfigManager:
    """Configuration manager using singleton pattern."""

    _instance: RundagConfig | None = None
    _init_lock: threading.Lock = threading.Lock()

    @classmethod
    def load_config(cls, config_path: str | Path | None = None) -> RundagConfig:
        """Load configuration from file.

        Args:
            config_path: Path to configuration file. If None, looks for
                rundag.yaml or rundag.yml in the current directory and falls
                back to defaults when neither exists.

        Raises:
            FileNotFoundError: If an explicit config file is not found
            ValueError: If the config file is invalid
        """
        if config_path is None:
            for default_name in DEFAULT_CONFIG_NAMES:
                if Path(default_name).exists():
                    config_path = default_name
                    break
            else:
                logger.debug("no_configuration_file_using_defaults")
                return RundagConfig.from_env()

        return RundagConfig.from_yaml(config_path)

    @classmethod
    def get_config(
        cls,
        config_path: str | Path | None = None,
        reload: bool = False,
    ) -> RundagConfig:
        """Get the shared configuration instance.

        Args:
            config_path: Path to configuration file. Only used on first call
                or when reload=True.
            reload: If True, force reload configuration from file.
        """
        if cls._instance is not None and not reload:
            return cls._instance

        with cls._init_lock:
            if cls._instance is None or reload:
                cls._instance = cls.load_config(config_path)

            return cls._instance

    @classmethod
    def reset_config(cls) -> None:
        """Reset the configuration instance."""
        cls._instance = None


def load_config(config_path: str | Path | None = None) -> RundagConfig:
    """Load configuration from file."""
    return ConfigManager.load_config(config_path)


def get_config(config_path: str | Path | None = None, reload: bool = False) -> RundagConfig:
    """Get the shared configuration instance."""
    return ConfigManager.get_config(config_path, reload)


def reset_config() -> None:
    """Reset the configuration instance."""
    ConfigManager.reset_config()


__all__ = [
    "ConfigManager",
    "GraphConfig",
    "LoggingConfig",
    "RundagConfig",
    "get_config",
    "load_config",
    "reset_config",
]
