"""Element widths and byte strides for raw grids."""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from .errors import UnsupportedScalarKindError
from .structures import ElementDescriptor, Increments, ScalarKind

if TYPE_CHECKING:
    from .structures import Extent


def element_size(kind: ScalarKind) -> int:
    """Return the byte width of one component of `kind`."""
    try:
        return ScalarKind(kind).itemsize
    except ValueError:
        raise UnsupportedScalarKindError(f"Unknown scalar kind: {kind!r}") from None


def stride_for(extent: Extent, element: ElementDescriptor) -> Increments:
    """Return the byte increments for a grid of `element`s covering `extent`.

    ``increments[0]`` is the size of one element (all components), and each
    following increment is the previous one times the size of the previous
    axis, so ``increments[3]`` is the size of the whole volume.
    """
    nbytes = element_size(element.kind) * element.components
    incs = []
    for axis in range(3):
        incs.append(nbytes)
        nbytes *= extent.axis_size(axis)
    return Increments(*incs, nbytes)


def row_byte_length(extent: Extent, element: ElementDescriptor) -> int:
    """Number of bytes in one x-row of `extent`."""
    return extent.axis_size(0) * element.components * element_size(element.kind)


def swap_row(row: np.ndarray, width: int) -> None:
    """Reverse the byte order of each `width`-byte element of `row`, in place.

    `row` may have any dtype; it is reinterpreted as contiguous bytes.
    """
    if width <= 1:
        return
    raw = row.reshape(-1).view(np.uint8)
    if raw.size % width:
        raise ValueError(
            f"Row of {raw.size} bytes is not a whole number of {width}-byte elements"
        )
    raw.view(f"u{width}").byteswap(inplace=True)
