# Runway Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from runway.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, generate_default_config
from runway.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    resolve_credentials,
    validate_config_file,
)
from runway.config.schema import (
    CloudCredentials,
    CodegenConfig,
    CodegenFormat,
    InputConfig,
    ProjectConfig,
    TargetConfig,
    TargetType,
)

__all__ = [
    # Schema
    "ProjectConfig",
    "TargetConfig",
    "TargetType",
    "InputConfig",
    "CodegenConfig",
    "CodegenFormat",
    "CloudCredentials",
    # Loader
    "load_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    "resolve_credentials",
    # Defaults
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
    "generate_default_config",
]
