"""
Editing toolkit for Unity .unitypackage files.

This package provides:

1. UnityPackage for importing, editing and exporting .unitypackage archives
2. GUID re-keying with boundary-safe reference rewriting across assets
3. UnityAnimation for editing float curves of AnimationClip files
4. UnityPrefab for editing MonoBehaviour properties of prefab files
5. Thumbnail generation through an injectable RasterSurface
"""

from .animation import FloatCurve, Keyframe, UnityAnimation
from .asset import UnityAsset
from .constants import PackageConstants
from .errors import (
    CollisionError,
    DecodeError,
    NotFoundError,
    RenderError,
    UnityPackageError,
    UnsupportedMediaError,
)
from .package import UnityPackage
from .prefab import PrefabComponent, UnityPrefab
from .utils import (
    DrawBox,
    GuidUtils,
    ImageUtils,
    PillowRasterSurface,
    RasterSurface,
    TarGzEntry,
    TarGzUtils,
)

__all__ = [
    # Package container
    "UnityPackage",
    "UnityAsset",
    # Document editors
    "UnityAnimation",
    "FloatCurve",
    "Keyframe",
    "UnityPrefab",
    "PrefabComponent",
    # Errors
    "UnityPackageError",
    "DecodeError",
    "NotFoundError",
    "CollisionError",
    "UnsupportedMediaError",
    "RenderError",
    # File format constants
    "PackageConstants",
    # Utilities
    "GuidUtils",
    "ImageUtils",
    "DrawBox",
    "RasterSurface",
    "PillowRasterSurface",
    "TarGzEntry",
    "TarGzUtils",
]
