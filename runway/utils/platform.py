# Runway Platform Detection Utilities
# Locates Roblox Studio's content folders per platform

import os
import platform
from pathlib import Path

# Platform name mapping: system name -> Runway platform name
_PLATFORM_MAP: dict[str, str] = {
    "Darwin": "macos",
    "Linux": "linux",
    "Windows": "windows",
}

STUDIO_CONTENT_ENV = "RUNWAY_STUDIO_CONTENT"
MACOS_CONTENT_FOLDER = Path("/Applications/RobloxStudio.app/Contents/Resources/content")


def get_current_platform() -> str:
    """
    Get the current platform identifier.

    Returns:
        Platform string: "macos", "linux", or "windows".
    """
    system = platform.system()
    return _PLATFORM_MAP.get(system, system.lower())


def find_content_folders() -> list[Path]:
    """
    Find the content folders of installed Roblox Studio versions.

    ``RUNWAY_STUDIO_CONTENT`` overrides discovery with a list of folders
    separated by the platform's path separator; set it empty to disable
    linking. Without it, Windows yields one folder per installed version
    under ``%LOCALAPPDATA%\\Roblox\\Versions`` and macOS the application
    bundle's folder. Studio does not run on other platforms.

    Returns:
        Content folders, sorted.
    """
    override = os.environ.get(STUDIO_CONTENT_ENV)
    if override is not None:
        return sorted(Path(entry) for entry in override.split(os.pathsep) if entry)

    current = get_current_platform()
    if current == "windows":
        local_app_data = os.environ.get("LOCALAPPDATA")
        if not local_app_data:
            return []
        versions = Path(local_app_data) / "Roblox" / "Versions"
        if not versions.is_dir():
            return []
        return sorted(entry / "content" for entry in versions.iterdir() if entry.is_dir())

    if current == "macos" and MACOS_CONTENT_FOLDER.is_dir():
        return [MACOS_CONTENT_FOLDER]

    return []
