"""
Configuration components for the template cache.
"""
from .configuration import (
    ENV_PREFIX,
    TemplateCacheConfiguration,
    ensure_config,
    find_default_config,
    load_config,
    load_config_file,
    load_configuration_from_env,
    merge_configs,
)

__all__ = [
    "ENV_PREFIX",
    "TemplateCacheConfiguration",
    "ensure_config",
    "find_default_config",
    "load_config",
    "load_config_file",
    "load_configuration_from_env",
    "merge_configs",
]
