from __future__ import annotations

import sys
from enum import Enum, IntEnum
from typing import TYPE_CHECKING, Any, NamedTuple

import numpy as np

from .errors import InvalidExtentError, UnsupportedScalarKindError

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

    Vector3: TypeAlias = "tuple[float, float, float]"
    # row-major 3x3
    Matrix3: TypeAlias = "tuple[float, ...]"

__all__ = [
    "ByteOrder",
    "ElementDescriptor",
    "Extent",
    "FileDimensionality",
    "ImageInfo",
    "Increments",
    "ReadStatus",
    "RowOrientation",
    "ScalarKind",
]

NATIVE_BYTE_ORDER = sys.byteorder  # "little" or "big"


class ScalarKind(str, Enum):
    """Numeric type of each component of an element, as stored on disk.

    The value of each member is the numpy type code of the kind.
    """

    INT8 = "i1"
    UINT8 = "u1"
    INT16 = "i2"
    UINT16 = "u2"
    INT32 = "i4"
    UINT32 = "u4"
    INT64 = "i8"
    UINT64 = "u8"
    FLOAT32 = "f4"
    FLOAT64 = "f8"

    @property
    def dtype(self) -> np.dtype:
        """Native-endian numpy dtype for this kind."""
        return np.dtype(self.value)

    @property
    def itemsize(self) -> int:
        return int(self.dtype.itemsize)

    @classmethod
    def coerce(cls, obj: Any) -> ScalarKind:
        """Return the ScalarKind for `obj`.

        `obj` may be a member, a member value (`"u2"`), a member name
        (`"UINT16"`, case-insensitive) or anything `numpy.dtype` accepts
        (`np.float32`, `">i4"`...).  Byte order in a dtype is ignored; it is
        configured separately on the reader.
        """
        if isinstance(obj, cls):
            return obj
        if isinstance(obj, str) and obj.upper() in cls.__members__:
            return cls[obj.upper()]
        try:
            dt = np.dtype(obj)
        except TypeError as e:
            raise UnsupportedScalarKindError(
                f"Unsupported scalar type: {obj!r}"
            ) from e
        try:
            return cls(f"{dt.kind}{dt.itemsize}")
        except ValueError:
            raise UnsupportedScalarKindError(
                f"Unsupported scalar type: {obj!r} (dtype {dt})"
            ) from None


class ByteOrder(Enum):
    """Whether data on disk must be byte swapped to reach native order."""

    NATIVE = "native"
    SWAPPED = "swapped"

    @classmethod
    def from_endianness(cls, endian: str) -> ByteOrder:
        """Resolve "big" or "little" against the platform byte order."""
        endian = endian.lower()
        if endian in ("big", "bigendian", ">"):
            endian = "big"
        elif endian in ("little", "littleendian", "<"):
            endian = "little"
        else:
            raise ValueError(f"Unknown byte order {endian!r}. Use 'big' or 'little'")
        return cls.NATIVE if endian == NATIVE_BYTE_ORDER else cls.SWAPPED

    def endianness(self) -> str:
        """Return "big" or "little": the byte order of the data on disk."""
        if self is ByteOrder.NATIVE:
            return NATIVE_BYTE_ORDER
        return "big" if NATIVE_BYTE_ORDER == "little" else "little"


class RowOrientation(Enum):
    """Which stored row holds the logical row `y_min`."""

    # first row in the file is y_min
    LOWER_LEFT = "lower_left"
    # first row in the file is y_max
    UPPER_LEFT = "upper_left"


class FileDimensionality(IntEnum):
    """Whether each file holds one slice (2) or the whole volume (3)."""

    TWO_D = 2
    THREE_D = 3


class ReadStatus(Enum):
    COMPLETE = "complete"
    CANCELLED = "cancelled"


class ElementDescriptor(NamedTuple):
    kind: ScalarKind = ScalarKind.INT16
    components: int = 1

    @property
    def dtype(self) -> np.dtype:
        return ScalarKind.coerce(self.kind).dtype


class Extent(NamedTuple):
    """Inclusive integer bounds of a grid region: (x0, x1, y0, y1, z0, z1)."""

    x_min: int = 0
    x_max: int = 0
    y_min: int = 0
    y_max: int = 0
    z_min: int = 0
    z_max: int = 0

    @classmethod
    def create(cls, ext: Extent | tuple[int, ...]) -> Extent:
        """Build and validate an Extent from any six-integer sequence."""
        ext = tuple(ext)
        if len(ext) != 6:
            raise InvalidExtentError(
                f"Extent must have 6 values (x0, x1, y0, y1, z0, z1), got {ext!r}"
            )
        return cls(*(int(v) for v in ext)).validate()

    def validate(self) -> Extent:
        for axis, (lo, hi) in zip("xyz", self.bounds()):
            if hi < lo:
                raise InvalidExtentError(
                    f"Invalid extent {tuple(self)}: {axis}_max ({hi}) < "
                    f"{axis}_min ({lo})"
                )
        return self

    def bounds(self) -> tuple[tuple[int, int], tuple[int, int], tuple[int, int]]:
        return (
            (self.x_min, self.x_max),
            (self.y_min, self.y_max),
            (self.z_min, self.z_max),
        )

    def axis_size(self, axis: int) -> int:
        """Number of samples along axis 0 (x), 1 (y) or 2 (z)."""
        lo, hi = self.bounds()[axis]
        return hi - lo + 1

    @property
    def shape(self) -> tuple[int, int, int]:
        """(nz, ny, nx), the numpy shape of a grid covering this extent."""
        return (self.axis_size(2), self.axis_size(1), self.axis_size(0))

    @property
    def num_rows(self) -> int:
        return self.axis_size(1) * self.axis_size(2)

    def contains(self, other: Extent) -> bool:
        return all(
            lo <= olo and ohi <= hi
            for (lo, hi), (olo, ohi) in zip(self.bounds(), other.bounds())
        )


class Increments(NamedTuple):
    """Byte strides to move one step along x, y, z, and the full volume size."""

    pixel: int
    row: int
    slice: int
    volume: int


class ImageInfo(NamedTuple):
    """What a reader will produce, without reading any sample data."""

    whole_extent: Extent
    spacing: Vector3
    origin: Vector3
    direction: Matrix3
    scalar_kind: ScalarKind
    components: int
