"""Constants for the .unitypackage container format."""


class PackageConstants:
    """Standard entry names, header values and defaults for .unitypackage files."""

    PATHNAME_FILE = "pathname"
    """Project-relative path of the asset (UTF-8 text)."""

    ASSET_FILE = "asset"
    """Raw asset payload."""

    META_FILE = "asset.meta"
    """Sidecar metadata carrying import settings and the `guid:` declaration."""

    PREVIEW_FILE = "preview.png"
    """Optional preview thumbnail."""

    ORIGINAL_NAME = "archtemp.tar"
    """Name the Unity editor expects in the gzip FNAME header field."""

    EXPORT_MTIME = 1577836800
    """Fixed tar entry mtime for deterministic output (2020-01-01 00:00:00 UTC)."""

    EXPORT_FILE_MODE = 0o644
    """Fixed tar entry permissions."""

    GZIP_COMPRESS_LEVEL = 6

    IMAGE_MIME_TYPES = {
        "png": "image/png",
        "jpg": "image/jpeg",
        "jpeg": "image/jpeg",
        "gif": "image/gif",
        "bmp": "image/bmp",
        "webp": "image/webp",
    }
    """Extensions treated as image assets, mapped to their MIME type."""

    DEFAULT_THUMBNAIL_SIZE = 128

    KEYFRAME_TIME_TOLERANCE = 0.001
    """Keyframes closer than this to a target time are considered the same frame."""

    DEFAULT_KEYFRAME_WEIGHT = 0.33333334
    """Unity's default in/out tangent weight."""

    YAML_LINE_WIDTH = 4096
    """Line width passed to the YAML emitter so long scalars are never folded."""

    @staticmethod
    def entry_name(guid: str, kind: str) -> str:
        """Get the archive entry name for one part of an asset.

        Args:
            guid: Asset GUID
            kind: One of PATHNAME_FILE, ASSET_FILE, META_FILE, PREVIEW_FILE

        Returns:
            Entry name like "{guid}/asset"
        """
        return f"{guid}/{kind}"

    @staticmethod
    def split_entry_name(name: str) -> tuple[str, str] | None:
        """Split an archive entry name into (guid, kind).

        A leading "./" is tolerated since some exporters write entries that way.

        Args:
            name: Archive entry name like "{guid}/asset" or "./{guid}/asset"

        Returns:
            (guid, kind) tuple, or None if the name is not "<guid>/<kind>"
        """
        if name.startswith("./"):
            name = name[2:]
        parts = name.split("/")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            return None
        return parts[0], parts[1]
