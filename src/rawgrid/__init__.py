"""rawgrid: streaming reader for raw, regular-grid scalar data."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    __version__ = "unknown"

__all__ = [
    "__version__",
    "AUTO",
    "ByteOrder",
    "ElementDescriptor",
    "ExplicitList",
    "Extent",
    "FileDimensionality",
    "ImageData",
    "ImageInfo",
    "Increments",
    "PatternSeries",
    "RawImageReader",
    "ReadStatus",
    "RowOrientation",
    "ScalarKind",
    "SingleFile",
    "errors",
    "imread",
    "structures",
]


from . import errors, structures
from ._header import AUTO
from ._identity import ExplicitList, PatternSeries, SingleFile
from ._image import ImageData
from ._reader import RawImageReader, imread
from .structures import (
    ByteOrder,
    ElementDescriptor,
    Extent,
    FileDimensionality,
    ImageInfo,
    Increments,
    ReadStatus,
    RowOrientation,
    ScalarKind,
)
