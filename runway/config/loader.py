# Runway Configuration Loader
# Load, validate, and create runway.yaml files

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from runway.config.defaults import CONFIG_FILENAME, generate_default_config
from runway.config.schema import CloudCredentials, ProjectConfig, TargetConfig
from runway.exceptions import ConfigError


def get_config_path(path: Optional[Path] = None) -> Path:
    """
    Resolve the configuration file location.

    Args:
        path: A config file or a directory containing ``runway.yaml``.
              Defaults to ``$RUNWAY_CONFIG`` or the current directory.

    Returns:
        Path to the configuration file (which may not exist).
    """
    if path is None:
        env_path = os.environ.get("RUNWAY_CONFIG")
        path = Path(env_path).expanduser() if env_path else Path.cwd()

    if path.is_dir():
        return path / CONFIG_FILENAME
    return path


def _format_validation_errors(error: ValidationError) -> list[str]:
    messages = []
    for item in error.errors():
        loc = " -> ".join(str(part) for part in item["loc"])
        msg = item["msg"].removeprefix("Value error, ")
        messages.append(f"{loc}: {msg}" if loc else msg)
    return messages


def load_config(config_path: Optional[Path] = None) -> ProjectConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Optional config file or directory. Uses default if not provided.

    Returns:
        ProjectConfig: Validated configuration object.

    Raises:
        ConfigError: If the file is missing, unreadable, or invalid.
    """
    config_path = get_config_path(config_path)

    if not config_path.exists():
        raise ConfigError(f"Configuration file not found: {config_path}\nRun 'runway init' to create one.")

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {config_path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Invalid configuration in {config_path}: expected a mapping")

    try:
        config = ProjectConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_path}", _format_validation_errors(e)) from e

    config.file_path = config_path.resolve()
    return config


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without using it.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    try:
        config = load_config(config_path)
    except ConfigError as e:
        return False, e.errors or [str(e)]

    warnings: list[str] = []
    if not config.inputs:
        warnings.append("No inputs defined; nothing will be synced")

    return True, warnings


def ensure_config_exists(directory: Optional[Path] = None, *, name: str = "") -> tuple[Path, bool]:
    """
    Ensure a configuration file exists, creating the default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    config_path = (directory or Path.cwd()) / CONFIG_FILENAME

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(name=name or config_path.parent.name), encoding="utf-8")
    return config_path, True


def resolve_credentials(
    target: TargetConfig,
    *,
    api_key: Optional[str] = None,
    user_id: Optional[str] = None,
    group_id: Optional[str] = None,
) -> CloudCredentials:
    """
    Combine command line credentials with the target's configured owner.

    An owner given on the command line replaces the configured one.

    Raises:
        ConfigError: If both a user and a group are given on the command line.
    """
    if user_id and group_id:
        raise ConfigError("Pass either --user-id or --group-id, not both")

    if not user_id and not group_id:
        user_id, group_id = target.user_id, target.group_id

    return CloudCredentials(
        api_key=api_key or None,
        user_id=user_id or None,
        group_id=group_id or None,
    )
