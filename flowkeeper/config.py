"""
flowkeeper configuration

Default settings, file-based (YAML/JSON) and environment-based sources, and
validation.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .exceptions.errors import ConfigError

ENV_PREFIX = "FLOWKEEPER_"


@dataclass
class AutoSaveConfig:
    """Autosave timing and storage settings"""

    storage_key: str = "workflow-autosave"
    debounce_ms: int = 2000
    min_saving_ms: int = 500
    saved_display_ms: int = 2000


@dataclass
class FlowkeeperConfig:
    """Main configuration class"""

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    use_structlog: bool = True

    # Persistence
    store_path: Optional[str] = None

    autosave: AutoSaveConfig = field(default_factory=AutoSaveConfig)


def get_default_config() -> FlowkeeperConfig:
    """Get default configuration"""
    return FlowkeeperConfig()


def _parse_bool(value: str) -> bool:
    return value.lower() in ["true", "1", "yes"]


def _config_from_dict(data: Optional[Dict[str, Any]]) -> FlowkeeperConfig:
    data = dict(data or {})
    autosave_data = data.pop("autosave", None) or {}

    known = FlowkeeperConfig.__dataclass_fields__
    unknown = [key for key in data if key not in known]
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(sorted(unknown))}")

    autosave_known = AutoSaveConfig.__dataclass_fields__
    unknown = [key for key in autosave_data if key not in autosave_known]
    if unknown:
        raise ConfigError(
            f"Unknown autosave configuration keys: {', '.join(sorted(unknown))}"
        )

    return FlowkeeperConfig(autosave=AutoSaveConfig(**autosave_data), **data)


def config_to_dict(config: FlowkeeperConfig) -> Dict[str, Any]:
    return asdict(config)


def load_config_from_file(config_path: Union[str, Path]) -> FlowkeeperConfig:
    """
    Load configuration from a JSON or YAML file

    Args:
        config_path: Path to configuration file

    Returns:
        FlowkeeperConfig instance
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        if config_path.suffix.lower() in [".yaml", ".yml"]:
            data = yaml.safe_load(f)
        elif config_path.suffix.lower() == ".json":
            data = json.load(f)
        else:
            raise ConfigError(f"Unsupported config file format: {config_path.suffix}")

    if data is not None and not isinstance(data, dict):
        raise ConfigError(f"Configuration file must contain a mapping: {config_path}")

    return _config_from_dict(data)


def load_config_from_env(
    base_config: Optional[FlowkeeperConfig] = None,
    environ: Optional[Dict[str, str]] = None,
) -> FlowkeeperConfig:
    """
    Apply environment variables on top of a configuration

    Variables are prefixed with FLOWKEEPER_, e.g. FLOWKEEPER_LOG_LEVEL=DEBUG,
    FLOWKEEPER_DEBOUNCE_MS=1000

    Returns:
        FlowkeeperConfig instance
    """
    config = base_config or FlowkeeperConfig()
    environ = os.environ if environ is None else environ

    env_mappings = {
        "LOG_LEVEL": (config, "log_level", str),
        "LOG_FORMAT": (config, "log_format", str),
        "USE_STRUCTLOG": (config, "use_structlog", _parse_bool),
        "STORE_PATH": (config, "store_path", str),
        "STORAGE_KEY": (config.autosave, "storage_key", str),
        "DEBOUNCE_MS": (config.autosave, "debounce_ms", int),
        "MIN_SAVING_MS": (config.autosave, "min_saving_ms", int),
        "SAVED_DISPLAY_MS": (config.autosave, "saved_display_ms", int),
    }

    for suffix, (target, attr_name, converter) in env_mappings.items():
        env_var = ENV_PREFIX + suffix
        value = environ.get(env_var)
        if value is not None:
            try:
                setattr(target, attr_name, converter(value))
            except (ValueError, TypeError) as e:
                raise ConfigError(f"Invalid value for {env_var}: {value}. Error: {e}")

    return config


def load_config(config_path: Optional[Union[str, Path]] = None) -> FlowkeeperConfig:
    """Defaults, then the optional file, then the environment"""
    config = load_config_from_file(config_path) if config_path else get_default_config()
    return load_config_from_env(config)


def validate_config(config: FlowkeeperConfig) -> List[str]:
    """
    Validate configuration and return list of issues

    Args:
        config: Configuration to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    issues = []

    valid_log_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if config.log_level.upper() not in valid_log_levels:
        issues.append(f"log_level must be one of: {', '.join(valid_log_levels)}")

    autosave = config.autosave
    if not autosave.storage_key:
        issues.append("autosave.storage_key must not be empty")
    if autosave.debounce_ms < 0:
        issues.append("autosave.debounce_ms must not be negative")
    if autosave.min_saving_ms < 0:
        issues.append("autosave.min_saving_ms must not be negative")
    if autosave.saved_display_ms < 0:
        issues.append("autosave.saved_display_ms must not be negative")

    return issues
