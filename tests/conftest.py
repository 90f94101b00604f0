"""Pytest configuration and shared fixtures for unitypackage tests."""

import gzip
import tarfile
from io import BytesIO
from pathlib import Path
from typing import Iterable, Tuple

import pytest
from PIL import Image


FIXTURES_DIR = Path(__file__).parent / "fixtures"

SCRIPT_GUID = "5f0e4b1d2c3a49e8b7d6a5c4f3e2d1c0"
OTHER_SCRIPT_GUID = "0a1b2c3d4e5f40718293a4b5c6d7e8f9"
PREFAB_GUID = "8c1d7e3b9a2f4c6d8e0f1a2b3c4d5e6f"
ANIMATION_GUID = "2b9e6f0a1c3d4e5f6a7b8c9d0e1f2a3b"
TEXTURE_GUID = "d4c3b2a1f0e9487d6c5b4a3928170615"
BINARY_GUID = "9f8e7d6c5b4a39281706f5e4d3c2b1a0"


def meta_for(guid: str) -> bytes:
    """Minimal sidecar metadata declaring `guid`."""
    return f"fileFormatVersion: 2\nguid: {guid}\nMonoImporter:\n  externalObjects: {{}}\n".encode("utf-8")


def build_tar_gz(files: Iterable[Tuple[str, bytes]], with_directories: bool = False) -> bytes:
    """Build a tar.gz archive the way Unity-compatible exporters lay it out."""
    buffer = BytesIO()
    with tarfile.open(fileobj=buffer, mode="w") as tar:
        seen_dirs = set()
        for name, data in files:
            directory = name.rsplit("/", 1)[0]
            if with_directories and directory not in seen_dirs:
                seen_dirs.add(directory)
                dir_info = tarfile.TarInfo(f"{directory}/")
                dir_info.type = tarfile.DIRTYPE
                dir_info.mode = 0o755
                tar.addfile(dir_info)
            info = tarfile.TarInfo(name)
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, BytesIO(data))
    return gzip.compress(buffer.getvalue())


def png_bytes(width: int, height: int, color=(255, 0, 0, 255)) -> bytes:
    """Encode a solid-color RGBA PNG."""
    output = BytesIO()
    Image.new("RGBA", (width, height), color).save(output, format="PNG")
    return output.getvalue()


@pytest.fixture
def anim_yaml() -> str:
    """TextureMove.anim: four material float curves with two keyframes each."""
    return (FIXTURES_DIR / "TextureMove.anim").read_text(encoding="utf-8")


@pytest.fixture
def prefab_yaml() -> str:
    """Cube.prefab: a GameObject with a Transform and two MonoBehaviours."""
    return (FIXTURES_DIR / "Cube.prefab").read_text(encoding="utf-8")


@pytest.fixture
def texture_png() -> bytes:
    return png_bytes(64, 32)


@pytest.fixture
def binary_payload() -> bytes:
    """Invalid UTF-8 that nevertheless embeds the script GUID as ASCII."""
    return b"\xff\xfe\x00\x01" + SCRIPT_GUID.encode("ascii") + b"\x80\x81"


@pytest.fixture
def standard_files(anim_yaml, prefab_yaml, texture_png, binary_payload):
    """Entries of a package with a script, a prefab using it, an animation, a texture and a binary blob."""
    script = b"using UnityEngine;\n\npublic class DummyScript : MonoBehaviour\n{\n    public float speed = 2.5f;\n}\n"
    return [
        (f"{SCRIPT_GUID}/asset", script),
        (f"{SCRIPT_GUID}/asset.meta", meta_for(SCRIPT_GUID)),
        (f"{SCRIPT_GUID}/pathname", b"Assets/Scripts/DummyScript.cs"),
        (f"{PREFAB_GUID}/asset", prefab_yaml.encode("utf-8")),
        (f"{PREFAB_GUID}/asset.meta", meta_for(PREFAB_GUID)),
        (f"{PREFAB_GUID}/pathname", b"Assets/Prefabs/Cube.prefab"),
        (f"{ANIMATION_GUID}/asset", anim_yaml.encode("utf-8")),
        (f"{ANIMATION_GUID}/asset.meta", meta_for(ANIMATION_GUID)),
        (f"{ANIMATION_GUID}/pathname", b"Assets/Animations/TextureMove.anim\n"),
        (f"{TEXTURE_GUID}/asset", texture_png),
        (f"{TEXTURE_GUID}/asset.meta", meta_for(TEXTURE_GUID)),
        (f"{TEXTURE_GUID}/pathname", b"Assets/Textures/Logo.png"),
        (f"{TEXTURE_GUID}/preview.png", png_bytes(8, 8, (0, 0, 255, 255))),
        (f"{BINARY_GUID}/asset", binary_payload),
        (f"{BINARY_GUID}/pathname", b"Assets/Data/blob.bytes"),
    ]


@pytest.fixture
def standard_package_bytes(standard_files) -> bytes:
    return build_tar_gz(standard_files, with_directories=True)


@pytest.fixture
def minimal_package_bytes() -> bytes:
    guid = "00112233445566778899aabbccddeeff"
    return build_tar_gz([
        (f"{guid}/asset", b"hello"),
        (f"{guid}/pathname", b"Assets/hello.txt"),
    ])
