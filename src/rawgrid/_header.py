from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, Final, Union

from ._layout import stride_for
from .errors import FileNotAccessibleError
from .structures import FileDimensionality

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

    from .structures import ElementDescriptor, Extent

logger = logging.getLogger(__name__)


class _AutoHeader:
    """Sentinel: infer the header size from the size of each file."""

    _instance: _AutoHeader | None = None

    def __new__(cls) -> _AutoHeader:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "AUTO"

    def __reduce__(self) -> str:
        return "AUTO"


AUTO: Final = _AutoHeader()

HeaderSize: TypeAlias = Union[int, _AutoHeader]


def payload_size(
    element: ElementDescriptor, extent: Extent, dimensionality: FileDimensionality
) -> int:
    """Bytes of sample data held by one file.

    One slice for 2D files, the whole volume for 3D files.  The same
    definition is used when seeking, so auto-detected headers line up with
    the data they precede.
    """
    return stride_for(extent, element)[FileDimensionality(dimensionality)]


def resolve_header_size(
    header: HeaderSize,
    source: str | os.PathLike | int,
    element: ElementDescriptor,
    extent: Extent,
    dimensionality: FileDimensionality,
) -> int:
    """Return the number of leading bytes to skip in `source`.

    Parameters
    ----------
    header : int | AUTO
        A manual header size, returned unchanged, or `AUTO`.
    source : str | PathLike | int
        Path of the file to probe, or the size in bytes of an in-memory
        source.  Only consulted in `AUTO` mode.
    element : ElementDescriptor
        Scalar kind and component count of the data.
    extent : Extent
        The data extent (the grid stored on disk).
    dimensionality : FileDimensionality
        Whether `source` holds one slice or the whole volume.

    Raises
    ------
    FileNotAccessibleError
        If `source` is a path and cannot be stat'ed.
    """
    if header is not AUTO:
        return int(header)

    if isinstance(source, int):
        size = source
    else:
        try:
            size = os.stat(source).st_size
        except OSError as e:
            raise FileNotAccessibleError(
                f"Cannot determine header size: failed to stat {os.fspath(source)!r}"
            ) from e

    expected = payload_size(element, extent, dimensionality)
    nbytes = max(0, size - expected)
    logger.debug(f"Auto header size for {source!r}: {nbytes} ({size} - {expected})")
    return nbytes
