# Runway Default Configuration
# Starter configuration as Python dict and YAML generator

import copy
from typing import Any

import yaml

CONFIG_FILENAME = "runway.yaml"

DEFAULT_CONFIG: dict[str, Any] = {
    "name": "",
    "targets": [
        # Content-addressed copies in .runway/, for local testing in Studio
        {"type": "local"},
        # Open Cloud uploads; set exactly one of user_id or group_id
        {"type": "roblox", "user_id": None, "group_id": None},
    ],
    "inputs": [
        {"glob": "assets/**/*.png"},
        {"glob": "assets/**/*.jpg"},
        {"glob": "assets/**/*.ogg"},
        {"glob": "assets/**/*.mp3"},
    ],
    "exclude": [],
    "codegen": [
        {
            "format": "luau",
            "path": "src/shared/assets.luau",
            "strip_prefix": "assets/",
            "strip_extension": True,
            "flatten": False,
        },
    ],
}


def default_config(name: str = "") -> dict[str, Any]:
    """Get a copy of the default configuration with a project name."""
    config = copy.deepcopy(DEFAULT_CONFIG)
    config["name"] = name
    return config


def generate_default_config(name: str = "") -> str:
    """Generate default configuration as YAML string with comments."""
    header = """# Runway Configuration
#
# Syncs asset files to a target and generates code mapping asset paths to IDs.
#
# Targets (pick one per run with --target KEY):
#   - local:  copies files into a content cache (default key: local)
#   - roblox: uploads through Open Cloud (default key: roblox)
#             the API key comes from --api-key or RUNWAY_API_KEY
#
# Codegen formats:
#   - json, luau, typescript, typescript-declaration

"""
    return header + yaml.safe_dump(default_config(name), default_flow_style=False, sort_keys=False, allow_unicode=True)
