"""
Utility modules for unitypackage.

This package contains the tar.gz archive codec, GUID helpers,
image/thumbnail utilities and core-schema YAML helpers.
"""

from .guid_utils import GuidUtils
from .image_utils import DrawBox, ImageUtils, PillowRasterSurface, RasterSurface
from .tar_gz_utils import TarGzEntry, TarGzUtils
from .yaml_utils import CoreSchemaDumper, CoreSchemaLoader, YamlUtils

__all__ = [
    "CoreSchemaDumper",
    "CoreSchemaLoader",
    "DrawBox",
    "GuidUtils",
    "ImageUtils",
    "PillowRasterSurface",
    "RasterSurface",
    "TarGzEntry",
    "TarGzUtils",
    "YamlUtils",
]
