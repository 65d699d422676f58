# Runway Studio Content Links
# Exposes a local target's cache inside Roblox Studio's content folders

import logging
import os
from pathlib import Path
from typing import Optional

from runway.config.schema import STUDIO_CONTENT_DIRNAME
from runway.utils.paths import ensure_dir
from runway.utils.platform import find_content_folders

logger = logging.getLogger(__name__)


def link_content_folders(
    cache_dir: Path,
    name: str,
    content_folders: Optional[list[Path]] = None,
) -> list[Path]:
    """
    Link ``<content>/.runway/<name>`` to the cache directory.

    Studio resolves ``rbxasset://.runway/<name>/<file>`` through this link.
    Existing links are left alone.

    Args:
        cache_dir: Cache directory of the local target.
        name: Project name, one directory per project.
        content_folders: Folders to link into. Defaults to the discovered ones.

    Returns:
        Links created by this call.

    Raises:
        OSError: If a link or its parent directory cannot be created.
    """
    if content_folders is None:
        content_folders = find_content_folders()

    logger.debug(f"Linking {len(content_folders)} content folders to {cache_dir}")
    ensure_dir(cache_dir)

    created: list[Path] = []
    for content_folder in content_folders:
        link_path = content_folder / STUDIO_CONTENT_DIRNAME / name
        if link_path.exists() or link_path.is_symlink():
            logger.debug(f"Skipping {link_path}, already exists")
            continue

        ensure_dir(link_path.parent)
        os.symlink(cache_dir.resolve(), link_path, target_is_directory=True)
        logger.info(f"Linked {link_path} to {cache_dir}")
        created.append(link_path)

    return created
