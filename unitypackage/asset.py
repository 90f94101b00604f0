"""Asset model for entries of a .unitypackage."""

from pathlib import PurePosixPath
from typing import Optional

from pydantic import BaseModel, Field


class UnityAsset(BaseModel):
    """One project file inside a .unitypackage.

    `guid` and `asset_path` are frozen: they are the keys of the owning
    UnityPackage's indexes and may only be changed through
    UnityPackage.rename_asset() and UnityPackage.replace_asset_guid().
    Payload, metadata and preview may be reassigned freely.
    """

    guid: str = Field(..., frozen=True, description="32-character lowercase hex GUID")
    asset_path: str = Field(..., frozen=True, description="Project-relative path, e.g. 'Assets/Foo.prefab'")
    asset_data: bytes = Field(..., description="Raw asset payload")
    meta_data: Optional[bytes] = Field(None, description="Sidecar .meta contents")
    preview_data: Optional[bytes] = Field(None, description="Preview PNG bytes")

    @property
    def extension(self) -> str:
        """Lowercase file extension without the dot ('' if none)."""
        return PurePosixPath(self.asset_path).suffix.lower().lstrip(".")

    def read_text(self, encoding: str = "utf-8") -> str:
        """Decode the payload as text."""
        return self.asset_data.decode(encoding)

    def __repr__(self) -> str:
        return f"UnityAsset(guid={self.guid!r}, asset_path={self.asset_path!r}, size={len(self.asset_data)})"
