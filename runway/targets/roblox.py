# Runway Roblox Target
# Uploads assets through Open Cloud and records the assigned asset IDs

import logging
from dataclasses import dataclass
from enum import Enum
from pathlib import PurePosixPath
from typing import Optional

from runway.api import RobloxCloudClient
from runway.exceptions import ConfigError, UnsupportedAssetError
from runway.sync.state import AssetRecord, utc_now
from runway.targets.base import Asset

logger = logging.getLogger(__name__)


class AssetKind(str, Enum):
    """Uploadable asset kinds, keyed by file format."""

    AUDIO_MP3 = "audio_mp3"
    AUDIO_OGG = "audio_ogg"
    DECAL_PNG = "decal_png"
    DECAL_JPEG = "decal_jpeg"
    DECAL_BMP = "decal_bmp"
    DECAL_TGA = "decal_tga"
    MODEL_FBX = "model_fbx"

    @property
    def asset_type(self) -> str:
        """Open Cloud asset type name."""
        if self.value.startswith("audio"):
            return "Audio"
        if self.value.startswith("decal"):
            return "Decal"
        return "Model"

    @property
    def content_type(self) -> str:
        """MIME type sent with the upload."""
        return _CONTENT_TYPES[self]

    @property
    def is_decal(self) -> bool:
        """Check if uploads of this kind need decal-to-image ID mapping."""
        return self.asset_type == "Decal"


_CONTENT_TYPES = {
    AssetKind.AUDIO_MP3: "audio/mpeg",
    AssetKind.AUDIO_OGG: "audio/ogg",
    AssetKind.DECAL_PNG: "image/png",
    AssetKind.DECAL_JPEG: "image/jpeg",
    AssetKind.DECAL_BMP: "image/bmp",
    AssetKind.DECAL_TGA: "image/tga",
    AssetKind.MODEL_FBX: "model/fbx",
}

_EXTENSIONS = {
    ".mp3": AssetKind.AUDIO_MP3,
    ".ogg": AssetKind.AUDIO_OGG,
    ".png": AssetKind.DECAL_PNG,
    ".jpg": AssetKind.DECAL_JPEG,
    ".jpeg": AssetKind.DECAL_JPEG,
    ".bmp": AssetKind.DECAL_BMP,
    ".tga": AssetKind.DECAL_TGA,
    ".fbx": AssetKind.MODEL_FBX,
}


def asset_kind_for(identity: str) -> AssetKind:
    """
    Infer the asset kind from a file extension.

    Raises:
        UnsupportedAssetError: If the extension has no uploadable kind.
    """
    suffix = PurePosixPath(identity).suffix.lower()
    try:
        return _EXTENSIONS[suffix]
    except KeyError:
        supported = ", ".join(sorted(_EXTENSIONS))
        raise UnsupportedAssetError(
            f"'{identity}' has unsupported file type '{suffix or '(none)'}' (supported: {supported})"
        ) from None


@dataclass(frozen=True)
class Creator:
    """Owner of uploaded assets: exactly one of a user or a group."""

    user_id: Optional[str] = None
    group_id: Optional[str] = None

    def __post_init__(self) -> None:
        if bool(self.user_id) == bool(self.group_id):
            raise ConfigError("Exactly one of a user ID or a group ID is required for Roblox targets")

    def to_payload(self) -> dict[str, str]:
        """Creator object of the upload request."""
        if self.user_id:
            return {"userId": str(self.user_id)}
        return {"groupId": str(self.group_id)}

    def __str__(self) -> str:
        return f"user {self.user_id}" if self.user_id else f"group {self.group_id}"


class RobloxAdapter:
    """
    Uploads assets to Roblox.

    Each upload is a create-asset call followed by polling of the returned
    operation. Decals are mapped to their image ID, which is what content
    properties expect.
    """

    def __init__(self, client: RobloxCloudClient, creator: Creator, *, key: str = "roblox"):
        """
        Initialize Roblox adapter.

        Args:
            client: Open Cloud API client.
            creator: Owner of the uploaded assets.
            key: Target key, used in log messages.
        """
        self.client = client
        self.creator = creator
        self.key = key

    def sync_one(self, asset: Asset, prior: Optional[AssetRecord]) -> AssetRecord:
        """
        Upload one asset.

        Raises:
            UnsupportedAssetError: If the file type cannot be uploaded.
            AuthError: If the API key is rejected.
            TransientNetworkError: If the service stayed unavailable.
            RobloxApiError: If the service rejected the upload.
        """
        kind = asset_kind_for(asset.identity)

        logger.debug(f"Uploading {asset.identity} as {kind.asset_type}")

        operation_id = self.client.create_asset(
            asset_type=kind.asset_type,
            display_name=asset.name,
            contents=asset.contents,
            filename=asset.name,
            content_type=kind.content_type,
            creator=self.creator.to_payload(),
        )
        logger.debug(f"{asset.identity}: created operation {operation_id}")

        asset_id = self.client.wait_for_asset(operation_id)

        if kind.is_decal:
            logger.debug(f"Uploaded {asset.identity} as decal {asset_id}, mapping to image ID")
            asset_id = self.client.get_texture_id(asset_id)

        logger.info(f"Uploaded {asset.identity} as rbxassetid://{asset_id}")

        return AssetRecord(hash=asset.fingerprint, id=asset_id, synced_at=utc_now())

    def is_stale(self, record: AssetRecord) -> bool:
        """Uploaded assets cannot be checked cheaply; never stale."""
        return False

    def close(self) -> None:
        """Close the HTTP client."""
        self.client.close()
