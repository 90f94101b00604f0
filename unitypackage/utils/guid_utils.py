"""GUID utilities for generating, validating and rewriting asset identifiers."""

import re
import uuid
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from ..asset import UnityAsset


GUID_PATTERN = re.compile(r"^[0-9a-f]{32}$")
META_GUID_PATTERN = re.compile(r"^guid:[ \t]*([0-9a-fA-F]{32})[ \t]*\r?$", re.MULTILINE)


class GuidUtils:
    """Utility class for asset GUID operations."""

    @staticmethod
    def generate_guid() -> str:
        """Generate a random GUID.

        Returns:
            32-character lowercase hex string
        """
        return uuid.uuid4().hex

    @staticmethod
    def is_valid_guid(value: str) -> bool:
        """Check whether a string is a 32-character lowercase hex GUID."""
        return bool(GUID_PATTERN.match(value))

    @staticmethod
    def reference_pattern(guid: str) -> re.Pattern:
        """Build a pattern matching `guid` only when not embedded in a longer hex run."""
        return re.compile(rf"(?<![0-9a-fA-F]){re.escape(guid)}(?![0-9a-fA-F])")

    @staticmethod
    def rewrite_text(data: bytes, old_guid: str, new_guid: str) -> Optional[bytes]:
        """Rewrite boundary-safe GUID references inside UTF-8 text.

        Args:
            data: Field contents
            old_guid: GUID to replace
            new_guid: Replacement GUID

        Returns:
            Rewritten bytes, or None if the data is not UTF-8 text or contained no reference
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            return None

        updated, count = GuidUtils.reference_pattern(old_guid).subn(new_guid, text)
        if count == 0:
            return None
        return updated.encode("utf-8")

    @staticmethod
    def rewrite_references(old_guid: str, new_guid: str, assets: Iterable["UnityAsset"]) -> int:
        """Replace references to `old_guid` with `new_guid` across asset payloads and metadata.

        Fields that are not valid UTF-8 are treated as binary and skipped.
        A field is only reassigned when at least one reference was replaced.

        Args:
            old_guid: GUID being retired
            new_guid: GUID taking its place
            assets: Assets to scan

        Returns:
            Number of fields that were rewritten
        """
        rewritten = 0
        for asset in assets:
            updated = GuidUtils.rewrite_text(asset.asset_data, old_guid, new_guid)
            if updated is not None:
                asset.asset_data = updated
                rewritten += 1

            if asset.meta_data is not None:
                updated = GuidUtils.rewrite_text(asset.meta_data, old_guid, new_guid)
                if updated is not None:
                    asset.meta_data = updated
                    rewritten += 1

        return rewritten

    @staticmethod
    def read_meta_guid(meta_data: bytes) -> Optional[str]:
        """Read the `guid:` declaration from sidecar metadata.

        Returns:
            Declared GUID, or None if absent or the metadata is not text
        """
        try:
            text = meta_data.decode("utf-8")
        except UnicodeDecodeError:
            return None
        match = META_GUID_PATTERN.search(text)
        return match.group(1) if match else None

    @staticmethod
    def replace_meta_guid(meta_data: bytes, old_guid: str, new_guid: str) -> bytes:
        """Rewrite the `guid: <old_guid>` declaration line of sidecar metadata.

        Metadata that is not UTF-8 or has no matching line is returned unchanged.
        """
        try:
            text = meta_data.decode("utf-8")
        except UnicodeDecodeError:
            return meta_data

        pattern = re.compile(rf"^(guid:[ \t]*){re.escape(old_guid)}(?![0-9a-fA-F])", re.MULTILINE)
        updated, count = pattern.subn(lambda m: m.group(1) + new_guid, text, count=1)
        if count == 0:
            return meta_data
        return updated.encode("utf-8")
