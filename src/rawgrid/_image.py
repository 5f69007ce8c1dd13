from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from .structures import Extent, ReadStatus

if TYPE_CHECKING:
    import xarray as xr

    from .structures import Matrix3, Vector3


AXES = ("Z", "Y", "X", "C")


@dataclass(frozen=True)
class ImageData:
    """Samples read from a raw grid, with the geometry they were described by.

    Attributes
    ----------
    data : np.ndarray
        Array of shape ``(nz, ny, nx, components)`` covering `extent`, in
        native byte order.  Row ``j - y_min`` holds logical row `j`.
    extent : Extent
        The region that was read.
    spacing : tuple[float, float, float]
        Sample spacing along (x, y, z).
    origin : tuple[float, float, float]
        Position of sample (0, 0, 0).
    direction : tuple[float, ...]
        Row-major 3x3 direction cosine matrix.
    status : ReadStatus
        `CANCELLED` if the read was stopped early; `data` then holds a valid
        prefix of rows, and whatever was there before everywhere else.
    """

    data: np.ndarray = field(repr=False)
    extent: Extent
    spacing: Vector3 = (1.0, 1.0, 1.0)
    origin: Vector3 = (0.0, 0.0, 0.0)
    direction: Matrix3 = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)
    status: ReadStatus = ReadStatus.COMPLETE

    @property
    def complete(self) -> bool:
        return self.status is ReadStatus.COMPLETE

    @property
    def shape(self) -> tuple[int, ...]:
        return self.data.shape

    @property
    def dtype(self) -> np.dtype:
        return self.data.dtype

    @property
    def components(self) -> int:
        return self.data.shape[-1]

    def __array__(self, dtype=None, copy=None) -> np.ndarray:
        if dtype is not None:
            return self.data.astype(dtype, copy=False)
        return self.data

    def coords(self) -> dict[str, np.ndarray]:
        """Physical coordinates of each sample along Z, Y and X."""
        out = {}
        for axis, name in enumerate("XYZ"):
            lo, hi = self.extent.bounds()[axis]
            idx = np.arange(lo, hi + 1)
            out[name] = self.origin[axis] + idx * self.spacing[axis]
        return out

    def to_xarray(self, squeeze: bool = True) -> xr.DataArray:
        """Return an `xarray.DataArray` with physical coordinates attached."""
        import xarray as xr

        data = self.data
        dims = list(AXES)
        if squeeze and self.components == 1:
            data = data[..., 0]
            dims.pop()
        return xr.DataArray(
            data,
            dims=dims,
            coords=self.coords(),
            attrs={
                "extent": tuple(self.extent),
                "spacing": self.spacing,
                "origin": self.origin,
                "direction": self.direction,
            },
        )
