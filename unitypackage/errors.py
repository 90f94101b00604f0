"""Exception types raised by unitypackage.

Each error also derives from the closest built-in exception so callers that
already catch ValueError or KeyError keep working.
"""


class UnityPackageError(Exception):
    """Base class for all unitypackage errors."""


class DecodeError(UnityPackageError, ValueError):
    """Archive, YAML document or image data could not be decoded."""


class NotFoundError(UnityPackageError, KeyError):
    """An asset, curve or component does not exist."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the message readable
        return str(self.args[0]) if self.args else ""


class CollisionError(UnityPackageError, ValueError):
    """A GUID or asset path is already in use by another asset."""


class UnsupportedMediaError(UnityPackageError, ValueError):
    """The asset is not an image, or no raster surface is available."""


class RenderError(UnityPackageError, RuntimeError):
    """Thumbnail rendering produced no output."""
