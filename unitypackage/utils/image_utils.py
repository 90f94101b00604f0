"""
Image utilities for preview thumbnails.

Thumbnail generation needs something that can decode, resample and encode
images. That capability is abstracted as a RasterSurface injected by the
caller; PillowRasterSurface is the in-process software implementation.
"""

import inspect
from dataclasses import dataclass
from io import BytesIO
from pathlib import PurePosixPath
from typing import Any, Optional, Protocol, runtime_checkable

import numpy as np
from PIL import Image, UnidentifiedImageError

from ..common import MaybeAwaitable
from ..constants import PackageConstants
from ..errors import DecodeError, RenderError, UnsupportedMediaError


@dataclass(frozen=True)
class DrawBox:
    """Placement of the scaled image on the square canvas."""

    x: float
    y: float
    width: float
    height: float


@runtime_checkable
class RasterSurface(Protocol):
    """Capability to decode, draw and encode images.

    Methods may return their result directly or an awaitable of it.
    """

    def load_image(self, data: bytes, mime_type: str) -> MaybeAwaitable[Any]:
        """Decode image bytes into a surface-specific image handle."""
        ...

    def image_size(self, image: Any) -> tuple[int, int]:
        """Return (width, height) of a decoded image."""
        ...

    def render(self, image: Any, size: int, box: DrawBox) -> MaybeAwaitable[bytes]:
        """Draw `image` into `box` on a transparent size x size canvas and encode it as PNG."""
        ...


class PillowRasterSurface:
    """Software RasterSurface backed by Pillow and a numpy RGBA canvas."""

    def load_image(self, data: bytes, mime_type: str) -> Image.Image:
        try:
            image = Image.open(BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as err:
            raise DecodeError(f"Failed to load image ({mime_type}): {err}") from err
        return image.convert("RGBA")

    def image_size(self, image: Image.Image) -> tuple[int, int]:
        return image.size

    def render(self, image: Image.Image, size: int, box: DrawBox) -> bytes:
        x0 = min(int(round(box.x)), size - 1)
        y0 = min(int(round(box.y)), size - 1)
        width = min(max(1, int(round(box.width))), size - x0)
        height = min(max(1, int(round(box.height))), size - y0)

        scaled = image.resize((width, height), Image.Resampling.LANCZOS)

        canvas = np.zeros((size, size, 4), dtype=np.uint8)
        canvas[y0:y0 + height, x0:x0 + width] = np.asarray(scaled, dtype=np.uint8)

        output = BytesIO()
        Image.fromarray(canvas).save(output, format="PNG")
        return output.getvalue()


class ImageUtils:
    """Utility class for image assets and thumbnails."""

    @staticmethod
    def is_image_path(asset_path: str) -> bool:
        """Check whether a path has an image extension (case-insensitive).

        Classification is by extension only; contents are not sniffed.
        """
        ext = PurePosixPath(asset_path).suffix.lower().lstrip(".")
        return ext in PackageConstants.IMAGE_MIME_TYPES

    @staticmethod
    def mime_type_for_path(asset_path: str) -> str:
        """Get the MIME type for an image path, defaulting to image/png."""
        ext = PurePosixPath(asset_path).suffix.lower().lstrip(".")
        return PackageConstants.IMAGE_MIME_TYPES.get(ext, "image/png")

    @staticmethod
    def compute_draw_box(width: int, height: int, size: int) -> DrawBox:
        """Fit a width x height image into a size x size square, centered.

        Args:
            width: Source image width
            height: Source image height
            size: Canvas edge length

        Returns:
            DrawBox preserving the aspect ratio
        """
        aspect_ratio = width / height
        draw_width, draw_height = float(size), float(size)
        offset_x, offset_y = 0.0, 0.0

        if aspect_ratio > 1:
            draw_height = size / aspect_ratio
            offset_y = (size - draw_height) / 2
        elif aspect_ratio < 1:
            draw_width = size * aspect_ratio
            offset_x = (size - draw_width) / 2

        return DrawBox(offset_x, offset_y, draw_width, draw_height)

    @staticmethod
    async def _resolve(result: Any) -> Any:
        if inspect.isawaitable(result):
            return await result
        return result

    @staticmethod
    async def generate_square_thumbnail(
        image_data: bytes,
        size: int,
        mime_type: str = "image/png",
        surface: Optional[RasterSurface] = None,
    ) -> bytes:
        """
        Generate a square PNG thumbnail.

        The image keeps its aspect ratio and is centered on a transparent
        size x size canvas.

        Args:
            image_data: Source image bytes
            size: Thumbnail edge length in pixels
            mime_type: MIME type of the source image
            surface: RasterSurface used to decode, draw and encode

        Returns:
            PNG bytes

        Raises:
            UnsupportedMediaError: If no surface is available
            DecodeError: If the image has zero width or height
            RenderError: If the encoded output is empty
        """
        if surface is None:
            raise UnsupportedMediaError("Raster surface is not available")
        if size <= 0:
            raise ValueError(f"Thumbnail size must be positive, got {size}")

        image = await ImageUtils._resolve(surface.load_image(image_data, mime_type))

        width, height = surface.image_size(image)
        if width == 0 or height == 0:
            raise DecodeError("Image has invalid dimensions")

        box = ImageUtils.compute_draw_box(width, height, size)
        result = await ImageUtils._resolve(surface.render(image, size, box))

        if not result:
            raise RenderError("Thumbnail generation produced no data")
        return bytes(result)
