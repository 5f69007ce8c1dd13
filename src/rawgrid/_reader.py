from __future__ import annotations

import logging
import os
import threading
import warnings
from contextlib import nullcontext
from functools import partial
from typing import TYPE_CHECKING, NamedTuple, cast, overload

import numpy as np

from ._header import AUTO, resolve_header_size
from ._identity import (
    DEFAULT_PATTERN,
    ExplicitList,
    PatternSeries,
    SingleFile,
    resolve_path,
)
from ._image import ImageData
from ._layout import element_size, row_byte_length, stride_for, swap_row
from ._seek import seek_offset
from ._source import BufferSource, FileSource, as_byte_view
from .errors import InvalidExtentError, NoIdentitySpecifiedError, ShortReadError
from .structures import (
    ByteOrder,
    ElementDescriptor,
    Extent,
    FileDimensionality,
    ImageInfo,
    ReadStatus,
    RowOrientation,
    ScalarKind,
)

if TYPE_CHECKING:
    from typing import Any, Callable, ContextManager, Iterable, Literal, Sequence

    import dask.array as da
    import xarray as xr

    from ._header import HeaderSize
    from ._identity import NamingStrategy
    from .structures import Matrix3, Vector3

    AbortCheck = Callable[[], bool]
    ProgressSink = Callable[[float], None]
    Source = FileSource | BufferSource

logger = logging.getLogger(__name__)

IDENTITY: Matrix3 = (1.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 1.0)
# at most this many progress signals per read
PROGRESS_STEPS = 50


class _ReadPlan(NamedTuple):
    """Snapshot of the configuration a single read works from."""

    strategy: NamingStrategy | None
    buffer: memoryview | None
    data_extent: Extent
    element: ElementDescriptor
    header: HeaderSize
    byte_order: ByteOrder
    orientation: RowOrientation
    dimensionality: FileDimensionality
    slice_offset: int
    slice_spacing: int

    @property
    def source_dimensionality(self) -> FileDimensionality:
        # a memory buffer is one source holding every slice
        if self.buffer is not None:
            return FileDimensionality.THREE_D
        return self.dimensionality


class RawImageReader:
    """Read axis-aligned regions of a raw, regular-grid scalar dataset.

    Data may live in a single file, in a numbered series of files (one per
    slice, named from a prefix and a printf-style pattern), in an explicit
    list of files, or in a caller-supplied memory buffer.  Files may start
    with a header of fixed (`header_size`) or inferred (`AUTO`) length.

    Parameters
    ----------
    file_name : str | PathLike, optional
        Single file holding the data.
    file_prefix : str, optional
        Prefix substituted into `file_pattern`, e.g. ``"image"``.
    file_pattern : str, optional
        printf-style pattern for a file series.  By default ``"%s.%d"``.
    file_names : Sequence[str | PathLike], optional
        Explicit, ordered list of per-slice files.  When non-empty, the z
        bounds of `data_extent` become ``(0, len(file_names) - 1)``.
    data_extent : tuple of 6 ints
        Inclusive ``(x0, x1, y0, y1, z0, z1)`` bounds of the data on disk.
    scalar_kind : ScalarKind | DTypeLike
        Numeric type of each component.  By default `ScalarKind.INT16`.
    components : int
        Number of components per element.  By default 1.
    spacing, origin, direction
        Geometry passed through to the produced `ImageData`.
    header_size : int | AUTO
        Bytes to skip at the start of each file.  `AUTO` (the default) or
        None infers it from each file's size.
    byte_order : ByteOrder | str
        `ByteOrder.NATIVE`, `ByteOrder.SWAPPED`, or the byte order of the data
        on disk: ``"big"`` or ``"little"``.
    row_orientation : RowOrientation
        By default `RowOrientation.UPPER_LEFT` (rows stored top-down).
    file_dimensionality : FileDimensionality | int
        2 (one file per slice, the default) or 3 (whole volume in one file).
    slice_offset, slice_spacing : int
        Map slice `k` of a file series to number ``k * slice_spacing +
        slice_offset``.
    memory_buffer : bytes-like, optional
        Read from this buffer instead of any file.
    memory_buffer_length : int, optional
        Use only the first `memory_buffer_length` bytes of `memory_buffer`.
    """

    def __init__(
        self,
        file_name: str | os.PathLike | None = None,
        *,
        file_prefix: str | None = None,
        file_pattern: str | None = None,
        file_names: Sequence[str | os.PathLike] | None = None,
        data_extent: Sequence[int] = (0, 0, 0, 0, 0, 0),
        scalar_kind: Any = ScalarKind.INT16,
        components: int = 1,
        spacing: Sequence[float] = (1.0, 1.0, 1.0),
        origin: Sequence[float] = (0.0, 0.0, 0.0),
        direction: Sequence[float] = IDENTITY,
        header_size: HeaderSize = AUTO,
        byte_order: ByteOrder | str = ByteOrder.NATIVE,
        row_orientation: RowOrientation = RowOrientation.UPPER_LEFT,
        file_dimensionality: FileDimensionality | int = FileDimensionality.TWO_D,
        slice_offset: int = 0,
        slice_spacing: int = 1,
        memory_buffer: Any = None,
        memory_buffer_length: int | None = None,
    ) -> None:
        self._strategy: NamingStrategy | None = None
        self._buffer: Any = None
        self._buffer_length: int | None = None
        self._data_extent = Extent()
        self._element = ElementDescriptor()
        self._header: HeaderSize = AUTO
        self._byte_order = ByteOrder.NATIVE
        self._orientation = RowOrientation.UPPER_LEFT
        self._dimensionality = FileDimensionality.TWO_D
        self._spacing: Vector3 = (1.0, 1.0, 1.0)
        self._origin: Vector3 = (0.0, 0.0, 0.0)
        self._direction: Matrix3 = IDENTITY
        self.slice_offset = slice_offset
        self.slice_spacing = slice_spacing
        # bytes copied out of sources by the most recent read
        self.bytes_read = 0
        # one read (and so one open file) at a time, e.g. across dask workers
        self._lock = threading.Lock()

        self.data_extent = data_extent  # type: ignore[assignment]
        self.scalar_kind = scalar_kind
        self.components = components
        self.spacing = spacing  # type: ignore[assignment]
        self.origin = origin  # type: ignore[assignment]
        self.direction = direction  # type: ignore[assignment]
        self.header_size = header_size  # type: ignore[assignment]
        self.byte_order = byte_order  # type: ignore[assignment]
        self.row_orientation = row_orientation
        self.file_dimensionality = file_dimensionality  # type: ignore[assignment]

        if file_name is not None:
            self.file_name = file_name  # type: ignore[assignment]
        if file_prefix is not None or file_pattern is not None:
            self.naming_strategy = PatternSeries(
                file_prefix, file_pattern or DEFAULT_PATTERN
            )
        if file_names is not None:
            self.file_names = file_names  # type: ignore[assignment]
        if memory_buffer is not None:
            self.set_memory_buffer(memory_buffer, memory_buffer_length)

    # ----------------------------------------------------------------------
    # file identity

    @property
    def naming_strategy(self) -> NamingStrategy | None:
        """The active `SingleFile`, `PatternSeries` or `ExplicitList` (or None)."""
        return self._strategy

    @naming_strategy.setter
    def naming_strategy(self, strategy: NamingStrategy | None) -> None:
        if strategy is not None and not isinstance(
            strategy, (SingleFile, PatternSeries, ExplicitList)
        ):
            raise TypeError(f"Not a naming strategy: {strategy!r}")
        self._strategy = strategy
        if isinstance(strategy, ExplicitList) and len(strategy):
            self._data_extent = self._data_extent._replace(
                z_min=0, z_max=len(strategy) - 1
            )

    @property
    def file_name(self) -> str | None:
        """Single file holding all slices, or None if another strategy is used."""
        if isinstance(self._strategy, SingleFile):
            return self._strategy.path
        return None

    @file_name.setter
    def file_name(self, path: str | os.PathLike | None) -> None:
        if path is not None:
            self.naming_strategy = SingleFile(os.fspath(path))
        elif isinstance(self._strategy, SingleFile):
            self.naming_strategy = None

    @property
    def file_prefix(self) -> str | None:
        if isinstance(self._strategy, PatternSeries):
            return self._strategy.prefix
        return None

    @file_prefix.setter
    def file_prefix(self, prefix: str | None) -> None:
        current = self._strategy
        if isinstance(current, PatternSeries):
            self.naming_strategy = PatternSeries(prefix, current.pattern)
        elif prefix is not None:
            self.naming_strategy = PatternSeries(prefix, DEFAULT_PATTERN)

    @property
    def file_pattern(self) -> str | None:
        if isinstance(self._strategy, PatternSeries):
            return self._strategy.pattern
        return None

    @file_pattern.setter
    def file_pattern(self, pattern: str | None) -> None:
        current = self._strategy
        if pattern is not None:
            prefix = current.prefix if isinstance(current, PatternSeries) else None
            self.naming_strategy = PatternSeries(prefix, pattern)
        elif isinstance(current, PatternSeries):
            if current.prefix is None:
                self.naming_strategy = None
            else:
                self.naming_strategy = PatternSeries(current.prefix, DEFAULT_PATTERN)

    @property
    def file_names(self) -> tuple[str, ...] | None:
        if isinstance(self._strategy, ExplicitList):
            return self._strategy.paths
        return None

    @file_names.setter
    def file_names(self, paths: Iterable[str | os.PathLike] | None) -> None:
        if paths is not None:
            if isinstance(paths, (str, bytes, os.PathLike)):
                raise TypeError("file_names must be a sequence of paths, not a path")
            self.naming_strategy = ExplicitList(tuple(os.fspath(p) for p in paths))
        elif isinstance(self._strategy, ExplicitList):
            self.naming_strategy = None

    def internal_file_name(self, slice_index: int) -> str:
        """Return the path that holds slice `slice_index`."""
        return resolve_path(
            self._strategy, slice_index, self.slice_offset, self.slice_spacing
        )

    # ----------------------------------------------------------------------
    # memory buffer

    @property
    def memory_buffer(self) -> Any:
        return self._buffer

    @memory_buffer.setter
    def memory_buffer(self, buffer: Any) -> None:
        self.set_memory_buffer(buffer, self._buffer_length)

    @property
    def memory_buffer_length(self) -> int | None:
        return self._buffer_length

    @memory_buffer_length.setter
    def memory_buffer_length(self, length: int | None) -> None:
        self.set_memory_buffer(self._buffer, length)

    def set_memory_buffer(self, buffer: Any, length: int | None = None) -> None:
        """Read from `buffer` instead of any file (None restores file reading)."""
        if buffer is not None:
            # validate now rather than at read time
            view = as_byte_view(buffer, length)
            if length is not None and length > view.nbytes:
                warnings.warn(
                    f"memory_buffer_length ({length}) is larger than the buffer "
                    f"({view.nbytes} bytes)",
                    stacklevel=2,
                )
        self._buffer = buffer
        self._buffer_length = length

    # ----------------------------------------------------------------------
    # data description

    @property
    def data_extent(self) -> Extent:
        """Inclusive bounds of the grid stored on disk."""
        return self._data_extent

    @data_extent.setter
    def data_extent(self, extent: Sequence[int]) -> None:
        self._data_extent = Extent.create(extent)
        if isinstance(self._strategy, ExplicitList) and len(self._strategy):
            self.naming_strategy = self._strategy

    @property
    def scalar_kind(self) -> ScalarKind:
        return self._element.kind

    @scalar_kind.setter
    def scalar_kind(self, kind: Any) -> None:
        self._element = self._element._replace(kind=ScalarKind.coerce(kind))

    @property
    def components(self) -> int:
        """Number of scalar components per element."""
        return self._element.components

    @components.setter
    def components(self, n: int) -> None:
        if int(n) < 1:
            raise ValueError(f"components must be >= 1, got {n}")
        self._element = self._element._replace(components=int(n))

    @property
    def element(self) -> ElementDescriptor:
        return self._element

    @property
    def dtype(self) -> np.dtype:
        """Native-endian dtype of the samples produced by this reader."""
        return self._element.kind.dtype

    @property
    def spacing(self) -> Vector3:
        return self._spacing

    @spacing.setter
    def spacing(self, value: Sequence[float]) -> None:
        self._spacing = cast("Vector3", _float_tuple(value, 3, "spacing"))

    @property
    def origin(self) -> Vector3:
        return self._origin

    @origin.setter
    def origin(self, value: Sequence[float]) -> None:
        self._origin = cast("Vector3", _float_tuple(value, 3, "origin"))

    @property
    def direction(self) -> Matrix3:
        return self._direction

    @direction.setter
    def direction(self, value: Sequence[float]) -> None:
        flat = np.asarray(value, dtype=float).reshape(-1)
        self._direction = cast("Matrix3", _float_tuple(flat, 9, "direction"))

    # ----------------------------------------------------------------------
    # header

    @property
    def header_size(self) -> int | None:
        """Manual header size in bytes, or None when inferred per file."""
        return None if self._header is AUTO else cast(int, self._header)

    @header_size.setter
    def header_size(self, size: int | None) -> None:
        if size is None or size is AUTO:
            self.reset_header_size()
            return
        if int(size) < 0:
            raise ValueError(f"header_size must be >= 0, got {size}")
        self._header = int(size)

    @property
    def manual_header_size(self) -> bool:
        return self._header is not AUTO

    def reset_header_size(self) -> None:
        """Go back to inferring the header size from each file's size."""
        self._header = AUTO

    def get_header_size(self, slice_index: int | None = None) -> int:
        """Return the header size that applies to `slice_index`.

        By default, the first slice that would be read.  With `AUTO` header
        size, this stats the file holding that slice.
        """
        plan = self._plan()
        if plan.buffer is not None:
            return resolve_header_size(
                plan.header,
                len(plan.buffer),
                plan.element,
                plan.data_extent,
                plan.source_dimensionality,
            )
        if slice_index is None:
            slice_index = (
                0
                if plan.dimensionality is FileDimensionality.THREE_D
                else plan.data_extent.z_min
            )
        if plan.header is not AUTO:
            return cast(int, plan.header)
        return resolve_header_size(
            plan.header,
            self.internal_file_name(slice_index),
            plan.element,
            plan.data_extent,
            plan.dimensionality,
        )

    # ----------------------------------------------------------------------
    # byte order and layout

    @property
    def byte_order(self) -> ByteOrder:
        return self._byte_order

    @byte_order.setter
    def byte_order(self, order: ByteOrder | str) -> None:
        if isinstance(order, ByteOrder):
            self._byte_order = order
        elif order in ("native", "swapped"):
            self._byte_order = ByteOrder(order)
        else:
            self._byte_order = ByteOrder.from_endianness(order)

    @property
    def swap_bytes(self) -> bool:
        return self._byte_order is ByteOrder.SWAPPED

    @swap_bytes.setter
    def swap_bytes(self, swap: bool) -> None:
        self._byte_order = ByteOrder.SWAPPED if swap else ByteOrder.NATIVE

    @property
    def data_byte_order(self) -> Literal["big", "little"]:
        """Byte order of the data on disk: "big" or "little"."""
        return cast("Literal['big', 'little']", self._byte_order.endianness())

    @data_byte_order.setter
    def data_byte_order(self, endian: str) -> None:
        self._byte_order = ByteOrder.from_endianness(endian)

    def set_data_byte_order_to_big_endian(self) -> None:
        self.data_byte_order = "big"

    def set_data_byte_order_to_little_endian(self) -> None:
        self.data_byte_order = "little"

    @property
    def data_byte_order_as_string(self) -> str:
        return "BigEndian" if self.data_byte_order == "big" else "LittleEndian"

    @property
    def row_orientation(self) -> RowOrientation:
        return self._orientation

    @row_orientation.setter
    def row_orientation(self, orientation: RowOrientation | str) -> None:
        self._orientation = RowOrientation(orientation)

    @property
    def file_lower_left(self) -> bool:
        return self._orientation is RowOrientation.LOWER_LEFT

    @file_lower_left.setter
    def file_lower_left(self, value: bool) -> None:
        self._orientation = (
            RowOrientation.LOWER_LEFT if value else RowOrientation.UPPER_LEFT
        )

    @property
    def file_dimensionality(self) -> FileDimensionality:
        return self._dimensionality

    @file_dimensionality.setter
    def file_dimensionality(self, dim: FileDimensionality | int) -> None:
        try:
            self._dimensionality = FileDimensionality(dim)
        except ValueError:
            raise ValueError(
                f"file_dimensionality must be 2 or 3, got {dim!r}"
            ) from None

    # ----------------------------------------------------------------------
    # reading

    def _plan(self) -> _ReadPlan:
        buffer = None
        if self._buffer is not None:
            buffer = as_byte_view(self._buffer, self._buffer_length)
        extent = self._data_extent
        if isinstance(self._strategy, ExplicitList) and len(self._strategy):
            extent = extent._replace(z_min=0, z_max=len(self._strategy) - 1)
        return _ReadPlan(
            strategy=self._strategy,
            buffer=buffer,
            data_extent=extent,
            element=self._element,
            header=self._header,
            byte_order=self._byte_order,
            orientation=self._orientation,
            dimensionality=self._dimensionality,
            slice_offset=self.slice_offset,
            slice_spacing=self.slice_spacing,
        )

    def information(self) -> ImageInfo:
        """Describe what `read` will produce, without touching any file."""
        plan = self._plan()
        return ImageInfo(
            whole_extent=plan.data_extent,
            spacing=self._spacing,
            origin=self._origin,
            direction=self._direction,
            scalar_kind=plan.element.kind,
            components=plan.element.components,
        )

    def _update_extent(self, plan: _ReadPlan, extent: Sequence[int] | None) -> Extent:
        if extent is None:
            return plan.data_extent
        update = Extent.create(extent)
        if not plan.data_extent.contains(update):
            raise InvalidExtentError(
                f"Requested extent {tuple(update)} is outside the data extent "
                f"{tuple(plan.data_extent)}"
            )
        return update

    def _open_source(self, plan: _ReadPlan, slice_index: int) -> Source:
        if plan.buffer is not None:
            header = resolve_header_size(
                plan.header,
                len(plan.buffer),
                plan.element,
                plan.data_extent,
                plan.source_dimensionality,
            )
            return BufferSource(plan.buffer, header)

        path = resolve_path(
            plan.strategy, slice_index, plan.slice_offset, plan.slice_spacing
        )
        src = FileSource(path)
        try:
            src.header = resolve_header_size(
                plan.header, path, plan.element, plan.data_extent, plan.dimensionality
            )
        except BaseException:
            src.close()
            raise
        logger.debug(f"Slice {slice_index}: {path!r}, header size {src.header}")
        return src

    def _output_array(self, out: np.ndarray, update: Extent) -> np.ndarray:
        shape = (*update.shape, self._element.components)
        dtype = self.dtype
        if not isinstance(out, np.ndarray):
            raise TypeError(f"out must be a numpy array, not {type(out).__name__}")
        if not out.flags.c_contiguous or not out.flags.writeable:
            raise ValueError("out must be a writeable, C-contiguous array")
        nbytes = int(np.prod(shape)) * dtype.itemsize
        if out.nbytes != nbytes:
            raise ValueError(
                f"out has {out.nbytes} bytes, but extent {tuple(update)} of "
                f"{self._element.components} x {dtype} needs {nbytes}"
            )
        # rows are filled as raw bytes; `out` may be typed or a byte buffer
        return out.reshape(-1).view(np.uint8).reshape(*shape[:2], -1)

    def read_into(
        self,
        out: np.ndarray,
        extent: Sequence[int] | None = None,
        *,
        abort: AbortCheck | None = None,
        progress: ProgressSink | None = None,
    ) -> ReadStatus:
        """Read `extent` (default: the whole data extent) into `out`.

        Rows are read one at a time, in ascending z then y order.  Only the
        bytes of the requested region are read.

        Parameters
        ----------
        out : np.ndarray
            C-contiguous array of ``nz * ny * nx * components`` samples (e.g.
            shape ``(nz, ny, nx, components)`` and dtype `self.dtype`), or a
            ``uint8`` array of the same byte size.
        extent : tuple of 6 ints, optional
            Sub-region of `data_extent` to read.
        abort : Callable[[], bool], optional
            Polled before each row; when it returns True, reading stops and
            `ReadStatus.CANCELLED` is returned.  Rows already read stay in
            `out`; the rest of `out` is untouched.
        progress : Callable[[float], None], optional
            Called with the fraction of rows done, at most 50 times per read.

        Returns
        -------
        ReadStatus
            `COMPLETE`, or `CANCELLED` if `abort` stopped the read.

        Raises
        ------
        NoIdentitySpecifiedError
            If no file name, pattern, list or memory buffer is configured.
        FileOpenError, FileNotAccessibleError, ShortReadError, ...
            Any failure aborts the whole read; see `rawgrid.errors`.
        """
        plan = self._plan()
        if plan.strategy is None and plan.buffer is None:
            raise NoIdentitySpecifiedError(
                "Either a file_name, file_names, or file_pattern must be specified."
            )
        update = self._update_extent(plan, extent)
        rows = self._output_array(out, update)
        with self._lock:
            return self._read_rows(plan, update, rows, abort, progress)

    def _read_rows(
        self,
        plan: _ReadPlan,
        update: Extent,
        rows: np.ndarray,
        abort: AbortCheck | None,
        progress: ProgressSink | None,
    ) -> ReadStatus:
        increments = stride_for(plan.data_extent, plan.element)
        row_nbytes = row_byte_length(update, plan.element)
        width = element_size(plan.element.kind)
        swap = plan.byte_order is ByteOrder.SWAPPED and width > 1
        dims = plan.source_dimensionality

        total = update.num_rows
        target = total // PROGRESS_STEPS + 1
        count = 0
        self.bytes_read = 0
        logger.debug(
            f"Reading extent {tuple(update)} of {tuple(plan.data_extent)}, "
            f"{row_nbytes} bytes per row"
        )

        volume_ctx: ContextManager[Source | None] = (
            self._open_source(plan, 0)
            if dims is FileDimensionality.THREE_D
            else nullcontext(None)
        )
        with volume_ctx as volume:
            for kk, k in enumerate(range(update.z_min, update.z_max + 1)):
                slice_ctx: ContextManager[Source] = (
                    nullcontext(volume)
                    if volume is not None
                    else self._open_source(plan, k)
                )
                with slice_ctx as src:
                    for jj, j in enumerate(range(update.y_min, update.y_max + 1)):
                        if abort is not None and abort():
                            logger.debug(f"Read cancelled after {count}/{total} rows")
                            return ReadStatus.CANCELLED
                        if progress is not None and not count % target:
                            progress(count / total)
                        count += 1

                        offset = seek_offset(
                            update.x_min,
                            j,
                            k,
                            plan.data_extent,
                            increments,
                            plan.orientation,
                            dims,
                            src.header,
                        )
                        row = rows[kk, jj]
                        nread = src.read_at(offset, row)
                        self.bytes_read += nread
                        if nread < row_nbytes:
                            raise ShortReadError(
                                f"File operation failed reading {src.path!r}: "
                                f"row = {j}, slice = {k}, expected {row_nbytes} "
                                f"bytes at offset {offset}, got {nread}"
                            )
                        if swap:
                            swap_row(row, width)
        return ReadStatus.COMPLETE

    def read(
        self,
        extent: Sequence[int] | None = None,
        *,
        abort: AbortCheck | None = None,
        progress: ProgressSink | None = None,
    ) -> ImageData:
        """Read `extent` (default: the whole data extent) into a new array.

        See `read_into` for the parameters.  Check `ImageData.status` when
        passing `abort`.
        """
        update = self._update_extent(self._plan(), extent)
        out = np.zeros((*update.shape, self._element.components), self.dtype)
        status = self.read_into(out, update, abort=abort, progress=progress)
        return ImageData(
            data=out,
            extent=update,
            spacing=self._spacing,
            origin=self._origin,
            direction=self._direction,
            status=status,
        )

    def asarray(self, extent: Sequence[int] | None = None) -> np.ndarray:
        """Read `extent` and return the samples as ``(nz, ny, nx, c)`` array."""
        return self.read(extent).data

    def to_dask(self, extent: Sequence[int] | None = None) -> da.Array:
        """Return a dask array of `extent`, with one chunk per z slice."""
        from dask.array import map_blocks

        update = self._update_extent(self._plan(), extent)
        nz, ny, nx = update.shape
        chunks = ((1,) * nz, (ny,), (nx,), (self._element.components,))
        return map_blocks(
            partial(self._dask_block, update),
            chunks=chunks,
            dtype=self.dtype,
            meta=np.empty((0, 0, 0, 0), dtype=self.dtype),
        )

    def _dask_block(self, update: Extent, block_id: tuple[int, ...]) -> np.ndarray:
        k = update.z_min + block_id[0]
        return self.asarray(update._replace(z_min=k, z_max=k))

    def to_xarray(
        self,
        extent: Sequence[int] | None = None,
        delayed: bool = True,
        squeeze: bool = True,
    ) -> xr.DataArray:
        """Return `extent` as an `xarray.DataArray` with physical coordinates.

        Parameters
        ----------
        extent : tuple of 6 ints, optional
            Sub-region to read.  By default, the whole data extent.
        delayed : bool
            Wrap a dask array (see `to_dask`) instead of reading now.
        squeeze : bool
            Drop the component axis when there is a single component.
        """
        update = self._update_extent(self._plan(), extent)
        data = self.to_dask(update) if delayed else self.asarray(update)
        image = ImageData(
            data=data,  # type: ignore[arg-type]
            extent=update,
            spacing=self._spacing,
            origin=self._origin,
            direction=self._direction,
        )
        return image.to_xarray(squeeze=squeeze)

    def __repr__(self) -> str:
        strategy = self._strategy
        if self._buffer is not None:
            source = f"memory buffer ({len(self._plan().buffer or b'')} bytes)"
        elif strategy is None:
            source = "no file"
        elif isinstance(strategy, ExplicitList):
            source = f"{len(strategy)} file names"
        else:
            source = repr(strategy)
        header = "auto" if self._header is AUTO else self._header
        return (
            f"<{type(self).__name__} {source}, extent={tuple(self._data_extent)}, "
            f"{self._element.components} x {self._element.kind.name}, "
            f"{self.data_byte_order}-endian, header={header}, "
            f"{self._orientation.name}, {int(self._dimensionality)}D files>"
        )


def _float_tuple(value: Sequence[float], n: int, name: str) -> tuple[float, ...]:
    out = tuple(float(v) for v in value)
    if len(out) != n:
        raise ValueError(f"{name} must have {n} values, got {len(out)}")
    return out


@overload
def imread(
    file: str | os.PathLike | Sequence[str | os.PathLike],
    dask: Literal[False] = ...,
    xarray: Literal[False] = ...,
    **kwargs: Any,
) -> np.ndarray: ...


@overload
def imread(
    file: str | os.PathLike | Sequence[str | os.PathLike],
    dask: bool = ...,
    xarray: Literal[True] = ...,
    **kwargs: Any,
) -> xr.DataArray: ...


@overload
def imread(
    file: str | os.PathLike | Sequence[str | os.PathLike],
    dask: Literal[True] = ...,
    xarray: Literal[False] = ...,
    **kwargs: Any,
) -> da.Array: ...


def imread(
    file: str | os.PathLike | Sequence[str | os.PathLike],
    dask: bool = False,
    xarray: bool = False,
    **kwargs: Any,
) -> np.ndarray | xr.DataArray | da.Array:
    """Read a raw file (or list of per-slice files) into an array.

    Parameters
    ----------
    file : str | PathLike | Sequence[str | PathLike]
        A single file, or an ordered list of per-slice files.
    dask : bool
        Return a dask array instead of reading now.
    xarray : bool
        Return an `xarray.DataArray` (wrapping a dask array if `dask`).
    **kwargs
        Any `RawImageReader` parameter, e.g. `data_extent` and `scalar_kind`.
    """
    if isinstance(file, (str, bytes, os.PathLike)):
        rdr = RawImageReader(file, **kwargs)
    else:
        rdr = RawImageReader(file_names=file, **kwargs)
    if xarray:
        return rdr.to_xarray(delayed=dask)
    if dask:
        return rdr.to_dask()
    return rdr.asarray()
