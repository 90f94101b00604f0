"""
UnityPackage import, editing and export.

A .unitypackage is a gzip-compressed tar archive in which every asset
occupies up to four entries under a GUID-named directory:

    <guid>/
        pathname        project-relative path (UTF-8 text)
        asset           raw payload
        asset.meta      sidecar metadata (optional)
        preview.png     preview thumbnail (optional)

UnityPackage groups these entries into UnityAsset objects and keeps a
bidirectional GUID <-> path index consistent across every edit.

Example:
    from unitypackage import UnityPackage

    pkg = await UnityPackage.from_file("Shared.unitypackage")
    pkg.rename_asset("Assets/Old.prefab", "Assets/New.prefab")
    pkg.replace_asset_guid("Assets/New.prefab")
    await pkg.save("Shared-edited.unitypackage")
"""

import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from types import MappingProxyType
from typing import Dict, Iterator, Mapping, Optional

from .asset import UnityAsset
from .common import PackageSource
from .constants import PackageConstants
from .errors import CollisionError, NotFoundError, UnsupportedMediaError
from .utils.guid_utils import GuidUtils
from .utils.image_utils import ImageUtils, RasterSurface
from .utils.tar_gz_utils import TarGzEntry, TarGzUtils

logger = logging.getLogger(__name__)


@dataclass
class _EntryGroup:
    """Archive entries found under one GUID directory."""

    asset: Optional[bytes] = None
    meta: Optional[bytes] = None
    pathname: Optional[bytes] = None
    preview: Optional[bytes] = None


class UnityPackage:
    """Editable in-memory .unitypackage.

    Assets are keyed by asset path. GUIDs and paths are each unique, and the
    GUID <-> path indexes always mirror the asset map exactly; all mutations
    go through methods of this class.
    """

    def __init__(
        self,
        assets: Optional[Mapping[str, UnityAsset]] = None,
        raster_surface: Optional[RasterSurface] = None,
    ):
        """Initialize a package.

        Args:
            assets: Initial assets keyed by asset path
            raster_surface: Surface used by refresh_thumbnail() when none is passed

        Raises:
            CollisionError: If two assets share a GUID or a path
            ValueError: If a key differs from its asset's path
        """
        self._assets: Dict[str, UnityAsset] = {}
        self._guid_to_path: Dict[str, str] = {}
        self._path_to_guid: Dict[str, str] = {}
        self.raster_surface = raster_surface

        for path, asset in (assets or {}).items():
            if path != asset.asset_path:
                raise ValueError(f"Asset key '{path}' does not match asset path '{asset.asset_path}'")
            self._add(asset)

    # ============================================================
    # Import / export
    # ============================================================

    @staticmethod
    async def from_bytes(data: bytes, raster_surface: Optional[RasterSurface] = None) -> "UnityPackage":
        """Import a package from tar.gz bytes.

        Groups whose directory name is not a GUID, or that lack a payload or
        pathname, are dropped with a warning.

        Args:
            data: .unitypackage file contents
            raster_surface: Optional surface for thumbnail refresh

        Returns:
            UnityPackage instance

        Raises:
            DecodeError: If the archive is empty or corrupt
        """
        entries = TarGzUtils.extract_tar_gz(data)

        groups: Dict[str, _EntryGroup] = {}
        for entry in entries.values():
            if entry.is_directory:
                continue
            split = PackageConstants.split_entry_name(entry.name)
            if split is None:
                continue
            guid, kind = split
            group = groups.setdefault(guid, _EntryGroup())
            if kind == PackageConstants.ASSET_FILE:
                group.asset = entry.data
            elif kind == PackageConstants.META_FILE:
                group.meta = entry.data
            elif kind == PackageConstants.PATHNAME_FILE:
                group.pathname = entry.data
            elif kind == PackageConstants.PREVIEW_FILE:
                group.preview = entry.data

        package = UnityPackage(raster_surface=raster_surface)
        for guid, group in groups.items():
            if not GuidUtils.is_valid_guid(guid):
                logger.warning("Skipping asset group %s: directory name is not a GUID", guid)
                continue
            if group.asset is None or group.pathname is None:
                logger.warning(
                    "Skipping incomplete asset group %s (asset=%s, pathname=%s)",
                    guid, group.asset is not None, group.pathname is not None,
                )
                continue
            try:
                asset_path = group.pathname.decode("utf-8").strip()
            except UnicodeDecodeError as err:
                logger.warning("Skipping asset group %s: pathname is not UTF-8 (%s)", guid, err)
                continue

            asset = UnityAsset(
                guid=guid,
                asset_path=asset_path,
                asset_data=group.asset,
                meta_data=group.meta,
                preview_data=group.preview,
            )
            try:
                package._add(asset)
            except CollisionError as err:
                logger.warning("Skipping asset group %s: %s", guid, err)

        logger.debug("Imported %d assets from %d archive entries", len(package), len(entries))
        return package

    @staticmethod
    async def from_file(source: PackageSource, raster_surface: Optional[RasterSurface] = None) -> "UnityPackage":
        """Import a package from a file path or BytesIO."""
        if isinstance(source, BytesIO):
            data = source.getvalue()
        else:
            data = Path(source).read_bytes()
        return await UnityPackage.from_bytes(data, raster_surface=raster_surface)

    async def export(self) -> bytes:
        """Export the package as tar.gz bytes.

        The gzip header always carries the original name Unity expects.

        Returns:
            .unitypackage file contents
        """
        entries: Dict[str, TarGzEntry] = {}
        for asset in self._assets.values():
            parts = [
                (PackageConstants.PATHNAME_FILE, asset.asset_path.encode("utf-8")),
                (PackageConstants.ASSET_FILE, asset.asset_data),
            ]
            if asset.meta_data is not None:
                parts.append((PackageConstants.META_FILE, asset.meta_data))
            if asset.preview_data is not None:
                parts.append((PackageConstants.PREVIEW_FILE, asset.preview_data))

            for kind, data in parts:
                name = PackageConstants.entry_name(asset.guid, kind)
                entries[name] = TarGzEntry(name=name, data=data)

        compressed = TarGzUtils.compress_tar_gz(entries)
        logger.debug("Exported %d assets as %d archive entries", len(self._assets), len(entries))
        return TarGzUtils.add_original_name_to_gzip(compressed, PackageConstants.ORIGINAL_NAME)

    async def save(self, destination: PackageSource) -> None:
        """Export the package to a file path or BytesIO."""
        data = await self.export()
        if isinstance(destination, BytesIO):
            destination.seek(0)
            destination.truncate()
            destination.write(data)
        else:
            Path(destination).write_bytes(data)

    # ============================================================
    # Read access
    # ============================================================

    @property
    def assets(self) -> Mapping[str, UnityAsset]:
        """Read-only view of assets keyed by asset path."""
        return MappingProxyType(self._assets)

    def get_asset(self, asset_path: str) -> Optional[UnityAsset]:
        return self._assets.get(asset_path)

    def get_asset_by_guid(self, guid: str) -> Optional[UnityAsset]:
        path = self._guid_to_path.get(guid)
        return self._assets[path] if path is not None else None

    def guid_for_path(self, asset_path: str) -> Optional[str]:
        return self._path_to_guid.get(asset_path)

    def path_for_guid(self, guid: str) -> Optional[str]:
        return self._guid_to_path.get(guid)

    def __len__(self) -> int:
        return len(self._assets)

    def __contains__(self, asset_path: object) -> bool:
        return asset_path in self._assets

    def __iter__(self) -> Iterator[str]:
        return iter(self._assets)

    def __repr__(self) -> str:
        return f"UnityPackage(assets={len(self._assets)})"

    # ============================================================
    # Mutation
    # ============================================================

    def rename_asset(self, old_asset_path: str, new_asset_path: str) -> bool:
        """Move an asset to a new path. The GUID is not changed.

        Args:
            old_asset_path: Current asset path
            new_asset_path: Target asset path

        Returns:
            True if renamed, False if no asset exists at old_asset_path

        Raises:
            CollisionError: If another asset already uses new_asset_path
        """
        asset = self._assets.get(old_asset_path)
        if asset is None:
            return False
        if old_asset_path == new_asset_path:
            return True
        if new_asset_path in self._assets:
            raise CollisionError(f"Asset path '{new_asset_path}' is already in use")

        del self._assets[old_asset_path]
        del self._path_to_guid[old_asset_path]
        object.__setattr__(asset, "asset_path", new_asset_path)
        self._assets[new_asset_path] = asset
        self._path_to_guid[new_asset_path] = asset.guid
        self._guid_to_path[asset.guid] = new_asset_path
        return True

    def replace_asset_guid(self, asset_path: str, new_guid: Optional[str] = None) -> bool:
        """Give an asset a new GUID and update every reference to the old one.

        The `guid:` line of the asset's metadata is rewritten, then references
        to the old GUID in every asset's payload and metadata are replaced.

        Args:
            asset_path: Path of the asset to re-key
            new_guid: New GUID; a random unused GUID is generated if omitted

        Returns:
            True if replaced, False if no asset exists at asset_path

        Raises:
            CollisionError: If new_guid is already used by an asset
            ValueError: If new_guid is not 32 lowercase hex characters
        """
        asset = self._assets.get(asset_path)
        if asset is None:
            return False

        if new_guid is None:
            new_guid = GuidUtils.generate_guid()
            while new_guid in self._guid_to_path:
                new_guid = GuidUtils.generate_guid()
        elif new_guid in self._guid_to_path:
            raise CollisionError(f"GUID '{new_guid}' is already in use by '{self._guid_to_path[new_guid]}'")
        elif not GuidUtils.is_valid_guid(new_guid):
            raise ValueError(f"Invalid GUID '{new_guid}': expected 32 lowercase hex characters")

        old_guid = asset.guid
        del self._guid_to_path[old_guid]
        object.__setattr__(asset, "guid", new_guid)
        self._guid_to_path[new_guid] = asset_path
        self._path_to_guid[asset_path] = new_guid

        if asset.meta_data is not None:
            asset.meta_data = GuidUtils.replace_meta_guid(asset.meta_data, old_guid, new_guid)

        rewritten = GuidUtils.rewrite_references(old_guid, new_guid, self._assets.values())
        logger.debug("Replaced GUID %s -> %s for %s (%d fields rewritten)", old_guid, new_guid, asset_path, rewritten)
        return True

    def update_asset_data(self, asset_path: str, data: bytes) -> bool:
        """Replace an asset's payload, e.g. with an edited animation or prefab.

        Returns:
            True if updated, False if no asset exists at asset_path
        """
        asset = self._assets.get(asset_path)
        if asset is None:
            return False
        asset.asset_data = bytes(data)
        return True

    def update_meta_data(self, asset_path: str, data: Optional[bytes]) -> bool:
        """Replace (or with None, remove) an asset's sidecar metadata.

        Returns:
            True if updated, False if no asset exists at asset_path
        """
        asset = self._assets.get(asset_path)
        if asset is None:
            return False
        asset.meta_data = bytes(data) if data is not None else None
        return True

    async def refresh_thumbnail(
        self,
        asset_path: str,
        size: int = PackageConstants.DEFAULT_THUMBNAIL_SIZE,
        surface: Optional[RasterSurface] = None,
    ) -> None:
        """Regenerate the preview of an image asset from its payload.

        Args:
            asset_path: Path of an image asset
            size: Thumbnail edge length in pixels
            surface: RasterSurface to draw with; defaults to the package's surface

        Raises:
            NotFoundError: If no asset exists at asset_path
            UnsupportedMediaError: If the asset is not an image or no surface is available
        """
        asset = self._assets.get(asset_path)
        if asset is None:
            raise NotFoundError(f"Asset '{asset_path}' not found")
        if not ImageUtils.is_image_path(asset_path):
            raise UnsupportedMediaError(f"Asset '{asset_path}' is not an image")

        asset.preview_data = await ImageUtils.generate_square_thumbnail(
            asset.asset_data,
            size,
            ImageUtils.mime_type_for_path(asset_path),
            surface=surface or self.raster_surface,
        )

    def _add(self, asset: UnityAsset) -> None:
        if asset.asset_path in self._assets:
            raise CollisionError(f"Asset path '{asset.asset_path}' is already in use")
        if asset.guid in self._guid_to_path:
            raise CollisionError(f"GUID '{asset.guid}' is already in use by '{self._guid_to_path[asset.guid]}'")
        self._assets[asset.asset_path] = asset
        self._guid_to_path[asset.guid] = asset.asset_path
        self._path_to_guid[asset.asset_path] = asset.guid
