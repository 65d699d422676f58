# Runway Targets Module
# Adapter contract and the closed set of sync targets

from pathlib import Path
from typing import Optional

from runway.config.schema import CloudCredentials, TargetConfig, TargetType
from runway.exceptions import ConfigError
from runway.targets.base import Asset, PlanOnlyAdapter, TargetAdapter
from runway.targets.local import LocalAdapter


def create_adapter(
    target: TargetConfig,
    root: Path,
    credentials: Optional[CloudCredentials] = None,
    *,
    plan_only: bool = False,
) -> TargetAdapter:
    """
    Create the adapter for a configured target.

    Args:
        target: Target configuration.
        root: Project root that relative paths resolve against.
        credentials: API key and owner for cloud targets.
        plan_only: Cloud targets get an adapter that can plan but not sync.

    Returns:
        Adapter ready for dispatch.

    Raises:
        ConfigError: If a cloud target lacks an API key or a valid owner.
    """
    key = target.key or target.type.value

    if target.type == TargetType.LOCAL:
        return LocalAdapter(root / target.cache_dir, key=key)

    if plan_only:
        return PlanOnlyAdapter(key)

    if target.type == TargetType.ROBLOX:
        from runway.api import RobloxCloudClient
        from runway.targets.roblox import Creator, RobloxAdapter

        credentials = credentials or CloudCredentials(user_id=target.user_id, group_id=target.group_id)
        if credentials.api_key is None or not credentials.api_key.get_secret_value():
            raise ConfigError(f"Target '{key}' needs an API key (--api-key or RUNWAY_API_KEY)")

        creator = Creator(user_id=credentials.user_id, group_id=credentials.group_id)
        client = RobloxCloudClient(credentials.api_key.get_secret_value())
        return RobloxAdapter(client, creator, key=key)

    raise ConfigError(f"Unsupported target type: {target.type}")


def uses_durable_state(target: TargetConfig) -> bool:
    """Check if a target's records belong in the version-controlled state file."""
    return target.type != TargetType.LOCAL


__all__ = [
    "Asset",
    "TargetAdapter",
    "LocalAdapter",
    "PlanOnlyAdapter",
    "create_adapter",
    "uses_durable_state",
]
