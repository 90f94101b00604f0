# Common type definitions
from io import BytesIO
from pathlib import Path
from typing import Awaitable, TypeVar, Union


PathLike = Union[str, Path]

# Source or destination of a serialized package: a file path or an in-memory buffer
PackageSource = Union[PathLike, BytesIO]

T = TypeVar("T")

# Raster surface operations may be implemented synchronously or, for hosts that
# draw asynchronously, return an awaitable of the same result.
MaybeAwaitable = Union[T, Awaitable[T]]
