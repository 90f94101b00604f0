"""
Utility functions for the tar.gz container used by .unitypackage files.
"""

import gzip
import tarfile
import zlib
from dataclasses import dataclass
from io import BytesIO
from typing import Dict, Mapping

from ..constants import PackageConstants
from ..errors import DecodeError


GZIP_MAGIC = b"\x1f\x8b"
GZIP_HEADER_SIZE = 10
GZIP_FLAGS_OFFSET = 3
GZIP_FEXTRA = 0x04
GZIP_FNAME = 0x08


@dataclass
class TarGzEntry:
    """A single named entry of a tar.gz archive."""

    name: str
    """Entry name inside the archive (e.g. "{guid}/asset")"""
    data: bytes
    """Entry contents (empty for directories)"""
    is_directory: bool = False


class TarGzUtils:
    """Static utility methods for tar.gz archive operations."""

    @staticmethod
    def extract_tar_gz(compressed: bytes) -> Dict[str, TarGzEntry]:
        """
        Decode a gzip-compressed tar archive into named entries.

        Args:
            compressed: tar.gz bytes

        Returns:
            Map of entry name -> TarGzEntry, in archive order

        Raises:
            DecodeError: If the data is empty or not a readable tar.gz stream
        """
        if not compressed:
            raise DecodeError("tar.gz extraction failed: input is empty")

        entries: Dict[str, TarGzEntry] = {}
        try:
            with tarfile.open(fileobj=BytesIO(compressed), mode="r:gz") as tar:
                for member in tar:
                    if member.isdir():
                        entries[member.name] = TarGzEntry(member.name, b"", is_directory=True)
                        continue
                    if not member.isfile():
                        continue
                    fileobj = tar.extractfile(member)
                    data = fileobj.read() if fileobj is not None else b""
                    entries[member.name] = TarGzEntry(member.name, data)
        except (tarfile.TarError, OSError, EOFError, zlib.error) as err:
            raise DecodeError(f"tar.gz extraction failed: {err}") from err

        return entries

    @staticmethod
    def compress_tar_gz(entries: Mapping[str, TarGzEntry]) -> bytes:
        """
        Encode entries into a gzip-compressed tar archive.

        Output is deterministic: entries are written in the given order with a
        fixed mtime and permissions, and the gzip header carries mtime 0.

        Args:
            entries: Map of entry name -> TarGzEntry

        Returns:
            tar.gz bytes
        """
        buffer = BytesIO()
        with tarfile.open(fileobj=buffer, mode="w", format=tarfile.GNU_FORMAT) as tar:
            for entry in entries.values():
                info = tarfile.TarInfo(name=entry.name)
                info.mtime = PackageConstants.EXPORT_MTIME
                if entry.is_directory:
                    info.type = tarfile.DIRTYPE
                    info.mode = 0o755
                    tar.addfile(info)
                    continue
                info.type = tarfile.REGTYPE
                info.mode = PackageConstants.EXPORT_FILE_MODE
                info.size = len(entry.data)
                tar.addfile(info, BytesIO(entry.data))

        return gzip.compress(
            buffer.getvalue(),
            compresslevel=PackageConstants.GZIP_COMPRESS_LEVEL,
            mtime=0,
        )

    @staticmethod
    def add_original_name_to_gzip(data: bytes, name: str) -> bytes:
        """
        Insert an original-filename record (RFC 1952 FNAME) into a gzip header.

        Sets the FNAME flag bit and places the NUL-terminated name directly
        after the fixed 10-byte header.

        Args:
            data: gzip bytes without FNAME or FEXTRA fields
            name: Name to record (latin-1 encodable)

        Returns:
            gzip bytes carrying the name

        Raises:
            ValueError: If data is not a gzip stream or already has optional header fields
        """
        if len(data) < GZIP_HEADER_SIZE or data[:2] != GZIP_MAGIC:
            raise ValueError("Data is not a gzip stream")

        flags = data[GZIP_FLAGS_OFFSET]
        if flags & (GZIP_FEXTRA | GZIP_FNAME):
            raise ValueError("gzip header already carries optional fields")

        header = bytearray(data[:GZIP_HEADER_SIZE])
        header[GZIP_FLAGS_OFFSET] = flags | GZIP_FNAME
        return bytes(header) + name.encode("latin-1") + b"\x00" + data[GZIP_HEADER_SIZE:]

    @staticmethod
    def read_original_name(data: bytes) -> str | None:
        """
        Read the FNAME record from a gzip header.

        Args:
            data: gzip bytes

        Returns:
            Recorded name, or None if the header has no FNAME field
        """
        if len(data) < GZIP_HEADER_SIZE or data[:2] != GZIP_MAGIC:
            raise ValueError("Data is not a gzip stream")

        flags = data[GZIP_FLAGS_OFFSET]
        if not flags & GZIP_FNAME:
            return None

        start = GZIP_HEADER_SIZE
        if flags & GZIP_FEXTRA:
            extra_len = int.from_bytes(data[start:start + 2], "little")
            start += 2 + extra_len
        end = data.index(b"\x00", start)
        return data[start:end].decode("latin-1")
