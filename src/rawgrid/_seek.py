from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import InvalidSeekOffsetError
from .structures import FileDimensionality, RowOrientation

if TYPE_CHECKING:
    from .structures import Extent, Increments


def seek_offset(
    i: int,
    j: int,
    k: int,
    extent: Extent,
    increments: Increments,
    orientation: RowOrientation,
    dimensionality: FileDimensionality,
    header: int,
) -> int:
    """Return the absolute byte offset of sample (i, j, k) in its file.

    `extent` and `increments` describe the grid as stored on disk.  For 2D
    files the slice is chosen by file name, so `k` does not contribute.
    Coordinates are expected to lie within `extent`.

    Raises
    ------
    InvalidSeekOffsetError
        If the offset comes out negative.
    """
    offset = (i - extent.x_min) * increments[0]

    if orientation is RowOrientation.LOWER_LEFT:
        offset += (j - extent.y_min) * increments[1]
    else:
        # rows stored top-down: y_max is the first row in the file
        offset += (extent.y_max - j) * increments[1]

    if dimensionality >= FileDimensionality.THREE_D:
        offset += (k - extent.z_min) * increments[2]

    offset += header
    if offset < 0:
        raise InvalidSeekOffsetError(
            f"Negative seek offset {offset} for sample ({i}, {j}, {k}) "
            f"in extent {tuple(extent)}"
        )
    return offset
