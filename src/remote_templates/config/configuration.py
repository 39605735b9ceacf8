"""
Configuration management for the template cache with validation.
"""
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..error.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

ENV_PREFIX = "REMOTE_TEMPLATES_"

DEFAULT_CONFIG_FILES = [
    "remote_templates.yaml",
    "remote_templates.yml",
    "remote_templates.json",
]


class TemplateCacheConfiguration(BaseModel):
    """Configuration for a template cache instance."""

    model_config = ConfigDict(extra="ignore", validate_assignment=True)

    # Logging settings
    log_level: str = "INFO"
    log_file: Optional[str] = None
    structured_logging: bool = False
    log_max_bytes: int = Field(default=10 * 1024 * 1024, description="Rotate log_file at this size", gt=0)
    log_backup_count: int = Field(default=5, description="Rotated log files to keep", ge=0)

    # Registry: template name -> URL
    templates: Dict[str, str] = Field(default_factory=dict, description="Template name to URL mapping")

    # Transport settings
    base_url: Optional[str] = Field(default=None, description="Base URL for relative template URLs")
    template_root: Optional[Path] = Field(default=None, description="Read templates from this directory instead of HTTP")
    request_timeout: Optional[float] = Field(default=None, description="Request timeout in seconds, None waits forever", gt=0)
    headers: Dict[str, str] = Field(default_factory=dict, description="Extra request headers")
    verify_ssl: bool = True
    encoding: str = "utf-8"

    # Compiler settings
    variable_start_string: str = "{{"
    variable_end_string: str = "}}"
    autoescape: bool = False
    strict_undefined: bool = Field(default=True, description="Raise on undefined template variables")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        value_upper = value.upper()
        if value_upper not in valid_levels:
            raise ValueError(f"Invalid log level '{value}'. Must be one of: {valid_levels}")
        return value_upper

    @field_validator("template_root")
    @classmethod
    def convert_single_path(cls, value: Any) -> Optional[Path]:
        """Convert path strings to resolved Path objects."""
        if value is None:
            return None
        if isinstance(value, (str, Path)):
            return Path(value).expanduser().resolve()
        raise ValueError(f"Invalid path value: {value}")

    @field_validator("variable_start_string", "variable_end_string")
    @classmethod
    def validate_delimiter(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Interpolation delimiters must not be empty")
        return value

    @model_validator(mode="after")
    def validate_delimiters_differ(self) -> 'TemplateCacheConfiguration':
        """Start and end delimiters must be distinguishable."""
        if self.variable_start_string == self.variable_end_string:
            raise ValueError("variable_start_string and variable_end_string must differ")
        if self.base_url and self.template_root:
            logger.warning("Both base_url and template_root set; templates are read from template_root")
        return self


def ensure_config(
    config: Optional[Union[TemplateCacheConfiguration, Dict[str, Any]]] = None
) -> TemplateCacheConfiguration:
    """Ensure a valid template cache configuration."""
    if isinstance(config, TemplateCacheConfiguration):
        return config

    if config is None:
        config = {}

    try:
        return TemplateCacheConfiguration(**config)
    except Exception as e:
        raise ConfigurationError(f"Invalid configuration: {str(e)}")


def find_default_config(search_paths: Optional[List[Path]] = None) -> Optional[Path]:
    """
    Find the default configuration file in standard locations.

    Returns:
        Path of the first existing configuration file or None
    """
    if search_paths is None:
        search_paths = [Path.cwd() / name for name in DEFAULT_CONFIG_FILES]
        search_paths.append(Path.home() / ".remote_templates" / "config.yaml")

    for path in search_paths:
        if path.exists():
            return path

    logger.debug("No configuration file found, using defaults")
    return None


def load_config_file(file_path: Union[str, Path]) -> Dict[str, Any]:
    """
    Load configuration from a file (YAML or JSON).

    Args:
        file_path: Path to the configuration file

    Returns:
        Dictionary with configuration

    Raises:
        ConfigurationError: If the file is not found or cannot be parsed
    """
    path = Path(file_path).expanduser()

    if not path.exists():
        raise ConfigurationError(f"Configuration file not found: {file_path}")

    try:
        content = path.read_text(encoding='utf-8')
    except OSError as e:
        raise ConfigurationError(f"Error reading config file {file_path}: {str(e)}")

    try:
        if path.suffix in (".yaml", ".yml"):
            loaded_config = yaml.safe_load(content) or {}
        elif path.suffix == ".json":
            loaded_config = json.loads(content) or {}
        else:
            raise ConfigurationError(f"Unsupported config file format: {file_path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid YAML format in {file_path}: {str(e)}")
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON format in {file_path}: {str(e)}")

    if not isinstance(loaded_config, dict):
        raise ConfigurationError(f"Configuration in {file_path} must be a mapping")

    logger.debug(f"Loaded configuration from {file_path}")
    return loaded_config


def load_configuration_from_env(prefix: str = ENV_PREFIX) -> Dict[str, Any]:
    """
    Collect configuration overrides from environment variables.

    REMOTE_TEMPLATES_BASE_URL=... becomes {"base_url": "..."}. Values are
    parsed as YAML scalars so booleans and numbers keep their types.
    """
    known = set(TemplateCacheConfiguration.model_fields)
    overrides: Dict[str, Any] = {}
    for key, raw in os.environ.items():
        if not key.startswith(prefix):
            continue
        field = key[len(prefix):].lower()
        if field not in known:
            continue
        try:
            overrides[field] = yaml.safe_load(raw)
        except yaml.YAMLError:
            overrides[field] = raw
    return overrides


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(value, dict) and key in result and isinstance(result[key], dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = value
    return result


def load_config(
    config_path: Optional[Union[str, Path]] = None,
    env_prefix: str = ENV_PREFIX,
    defaults: Optional[Dict[str, Any]] = None,
) -> TemplateCacheConfiguration:
    """
    Load configuration from defaults, a file and the environment.

    Environment variables take precedence over the file, which takes
    precedence over the defaults.
    """
    config = defaults or {}

    path = Path(config_path) if config_path else find_default_config()
    if path is not None:
        logger.info(f"Loading configuration from {path}")
        config = merge_configs(config, load_config_file(path))

    config = merge_configs(config, load_configuration_from_env(env_prefix))
    return ensure_config(config)
