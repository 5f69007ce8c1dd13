import sys
import time
from pathlib import Path

import dask.array as da
import numpy as np
import pytest
import rawgrid
from rawgrid import (
    AUTO,
    ByteOrder,
    ImageData,
    RawImageReader,
    ReadStatus,
    RowOrientation,
    ScalarKind,
    _reader,
    imread,
)
from rawgrid.errors import (
    FileOpenError,
    InvalidExtentError,
    NoIdentitySpecifiedError,
    ShortReadError,
    SliceIndexError,
    UnsupportedScalarKindError,
)

from conftest import write_raw

LL = RowOrientation.LOWER_LEFT
UL = RowOrientation.UPPER_LEFT
WHOLE = (0, 4, 0, 3, 0, 2)  # matches the `volume` fixture


def _volume_reader(path: Path, **kwargs) -> RawImageReader:
    kwargs.setdefault("row_orientation", LL)
    return RawImageReader(
        path, data_extent=WHOLE, scalar_kind="u2", file_dimensionality=3, **kwargs
    )


def test_auto_header_matches_manual(volume_file: Path, volume: np.ndarray) -> None:
    auto = _volume_reader(volume_file).asarray()
    manual = _volume_reader(volume_file, header_size=17).asarray()
    np.testing.assert_array_equal(auto, manual)
    np.testing.assert_array_equal(auto[..., 0], volume)
    assert auto.dtype == np.uint16
    assert auto.shape == (3, 4, 5, 1)


def test_read_returns_image_data(volume_file: Path, volume: np.ndarray) -> None:
    rdr = _volume_reader(volume_file, spacing=(0.5, 0.5, 2), origin=(1, 2, 3))
    img = rdr.read()
    assert isinstance(img, ImageData)
    assert img.complete
    assert img.status is ReadStatus.COMPLETE
    assert img.extent == WHOLE
    assert img.spacing == (0.5, 0.5, 2.0)
    assert img.origin == (1.0, 2.0, 3.0)
    assert img.direction == (1, 0, 0, 0, 1, 0, 0, 0, 1)
    np.testing.assert_array_equal(np.asarray(img)[..., 0], volume)
    np.testing.assert_allclose(img.coords()["Z"], [3, 5, 7])


def test_upper_left_flips_rows(volume_file: Path, volume: np.ndarray) -> None:
    data = _volume_reader(volume_file, row_orientation=UL).asarray()
    np.testing.assert_array_equal(data[..., 0], volume[:, ::-1])

    rdr = _volume_reader(volume_file)
    rdr.file_lower_left = False
    assert rdr.row_orientation is UL
    np.testing.assert_array_equal(rdr.asarray(), data)


def test_pattern_series(slice_files: list, volume: np.ndarray, tmp_path: Path) -> None:
    rdr = RawImageReader(
        file_prefix=str(tmp_path / "slice"),
        file_pattern="%s.%d",
        slice_offset=100,
        data_extent=WHOLE,
        scalar_kind=ScalarKind.UINT16,
        row_orientation=LL,
    )
    assert rdr.file_dimensionality == 2
    assert rdr.internal_file_name(1) == str(slice_files[1])
    np.testing.assert_array_equal(rdr.asarray()[..., 0], volume)

    # reading a single slice opens only that slice's file
    slice_files[0].unlink()
    data = rdr.asarray((0, 4, 0, 3, 2, 2))
    np.testing.assert_array_equal(data[0, ..., 0], volume[2])


def test_explicit_file_list(slice_files: list, volume: np.ndarray) -> None:
    # z bounds come from the list length
    rdr = RawImageReader(
        file_names=slice_files[::-1],
        data_extent=(0, 4, 0, 3, 7, 7),
        scalar_kind="u2",
        header_size=8,
        row_orientation=LL,
    )
    assert rdr.data_extent == WHOLE
    np.testing.assert_array_equal(rdr.asarray()[..., 0], volume[::-1])


def test_sub_extent_reads_only_requested_bytes(
    volume_file: Path, volume: np.ndarray
) -> None:
    sub = (1, 3, 2, 3, 1, 2)
    rdr = _volume_reader(volume_file)
    data = rdr.asarray(sub)
    np.testing.assert_array_equal(data[..., 0], volume[1:3, 2:4, 1:4])
    # 2 slices x 2 rows of 3 uint16 samples
    assert rdr.bytes_read == 2 * 2 * 3 * 2
    assert rdr.bytes_read < volume.nbytes

    rdr.row_orientation = UL
    data = rdr.asarray(sub)
    np.testing.assert_array_equal(data[..., 0], volume[:, ::-1][1:3, 2:4, 1:4])
    assert rdr.bytes_read == 24


def test_sub_extent_of_file_series(slice_files: list, volume: np.ndarray) -> None:
    rdr = RawImageReader(
        file_names=slice_files, data_extent=WHOLE, scalar_kind="u2", row_orientation=LL
    )
    data = rdr.asarray((2, 2, 0, 3, 1, 2))
    np.testing.assert_array_equal(data[..., 0, 0], volume[1:, :, 2])
    assert rdr.bytes_read == 2 * 4 * 2


def test_extent_outside_data_extent(volume_file: Path) -> None:
    rdr = _volume_reader(volume_file)
    with pytest.raises(InvalidExtentError, match="outside the data extent"):
        rdr.asarray((0, 5, 0, 3, 0, 2))
    with pytest.raises(InvalidExtentError):
        rdr.asarray((3, 2, 0, 3, 0, 2))


@pytest.mark.parametrize("dtype", ["i2", "u4", "f4", "f8", "i8"])
def test_big_endian(tmp_path: Path, dtype: str) -> None:
    expected = (np.arange(2 * 3 * 4 * 3) - 20).astype(dtype).reshape(2, 3, 4, 3)
    path = write_raw(tmp_path / "be.raw", expected.astype(f">{dtype}"))
    rdr = RawImageReader(
        path,
        data_extent=(0, 3, 0, 2, 0, 1),
        scalar_kind=dtype,
        components=3,
        file_dimensionality=3,
        row_orientation=LL,
    )
    rdr.data_byte_order = "big"
    assert rdr.data_byte_order == "big"
    assert rdr.data_byte_order_as_string == "BigEndian"
    data = rdr.asarray()
    assert data.dtype == np.dtype(dtype)
    np.testing.assert_array_equal(data, expected)

    rdr.set_data_byte_order_to_little_endian()
    assert rdr.data_byte_order_as_string == "LittleEndian"
    # read as-is on a little-endian host
    raw = expected.astype(f">{dtype}").view(f"={dtype}")
    if sys.byteorder == "little":
        np.testing.assert_array_equal(rdr.asarray(), raw)


def test_byte_order_resolution() -> None:
    rdr = RawImageReader(byte_order=ByteOrder.SWAPPED)
    assert rdr.swap_bytes
    rdr.swap_bytes = False
    assert rdr.byte_order is ByteOrder.NATIVE
    rdr.data_byte_order = sys.byteorder
    assert rdr.byte_order is ByteOrder.NATIVE
    rdr.data_byte_order = "big" if sys.byteorder == "little" else "little"
    assert rdr.byte_order is ByteOrder.SWAPPED
    with pytest.raises(ValueError):
        rdr.data_byte_order = "middle"


def test_uint8_ignores_swap(tmp_path: Path) -> None:
    expected = np.arange(24, dtype="u1").reshape(1, 4, 6)
    path = write_raw(tmp_path / "u8.raw", expected)
    rdr = RawImageReader(
        path, data_extent=(0, 5, 0, 3, 0, 0), scalar_kind="u1", byte_order="swapped"
    )
    rdr.row_orientation = LL
    np.testing.assert_array_equal(rdr.asarray()[..., 0], expected)


def test_cancellation(tmp_path: Path) -> None:
    expected = np.arange(1000, dtype="i2").reshape(10, 10, 10)
    path = write_raw(tmp_path / "cube.raw", expected)
    rdr = RawImageReader(
        path,
        data_extent=(0, 9, 0, 9, 0, 9),
        scalar_kind="i2",
        file_dimensionality=3,
        row_orientation=LL,
    )
    polls = []

    def abort() -> bool:
        polls.append(1)
        return len(polls) > 5

    out = np.full((10, 10, 10, 1), -1, dtype="i2")
    status = rdr.read_into(out, abort=abort)
    assert status is ReadStatus.CANCELLED
    assert len(polls) == 6
    np.testing.assert_array_equal(out[0, :5, :, 0], expected[0, :5])
    assert (out[0, 5:] == -1).all()
    assert (out[1:] == -1).all()
    assert rdr.bytes_read == 5 * 10 * 2

    img = rdr.read(abort=lambda: True)
    assert img.status is ReadStatus.CANCELLED
    assert not img.complete
    assert not img.data.any()


def test_cancellation_stops_opening_slices(slice_files: list) -> None:
    rdr = RawImageReader(file_names=slice_files, data_extent=WHOLE, scalar_kind="u2")
    slice_files[2].unlink()
    polls = []

    def abort() -> bool:
        polls.append(1)
        return len(polls) > 4

    # the missing third file is never opened
    assert rdr.read(abort=abort).status is ReadStatus.CANCELLED
    with pytest.raises(FileOpenError):
        rdr.read()


def test_progress(tmp_path: Path) -> None:
    path = write_raw(tmp_path / "p.raw", np.zeros((10, 100, 3), "u1"))
    rdr = RawImageReader(path, data_extent=(0, 2, 0, 99, 0, 9), scalar_kind="u1")
    rdr.file_dimensionality = 3
    fractions: list = []
    rdr.read(progress=fractions.append)
    assert 0 < len(fractions) <= 50
    assert fractions[0] == 0
    assert fractions == sorted(fractions)
    assert all(0 <= f < 1 for f in fractions)

    # small reads report every row
    fractions.clear()
    rdr.read((0, 2, 0, 4, 0, 0), progress=fractions.append)
    assert fractions == [0, 0.2, 0.4, 0.6, 0.8]


def test_read_into_byte_buffer(volume_file: Path, volume: np.ndarray) -> None:
    out = np.zeros(volume.nbytes, dtype="u1")
    status = _volume_reader(volume_file).read_into(out)
    assert status is ReadStatus.COMPLETE
    np.testing.assert_array_equal(out.view("u2").reshape(volume.shape), volume)


def test_read_into_wrong_size(volume_file: Path) -> None:
    rdr = _volume_reader(volume_file)
    with pytest.raises(ValueError, match="needs"):
        rdr.read_into(np.zeros((3, 4, 5, 2), "u2"))
    with pytest.raises(ValueError, match="C-contiguous"):
        rdr.read_into(np.zeros((5, 4, 3, 1), "u2").T)


def test_short_read(volume_file: Path) -> None:
    # a manual header that pushes the last rows past the end of the file
    rdr = _volume_reader(volume_file, header_size=100)
    with pytest.raises(ShortReadError, match="row = 3"):
        rdr.asarray()
    # repeated reads fail the same way
    with pytest.raises(ShortReadError):
        rdr.asarray()


def test_short_read_auto_header(tmp_path: Path) -> None:
    path = write_raw(tmp_path / "short.raw", np.zeros(10, "u2"))
    rdr = RawImageReader(path, data_extent=(0, 4, 0, 3, 0, 0), scalar_kind="u2")
    assert rdr.get_header_size() == 0
    with pytest.raises(ShortReadError):
        rdr.asarray()


def test_missing_file(tmp_path: Path) -> None:
    rdr = RawImageReader(tmp_path / "missing.raw")
    with pytest.raises(FileOpenError, match="Could not open"):
        rdr.asarray()
    with pytest.raises(OSError):
        rdr.asarray()


def test_missing_slice_in_series(slice_files: list, tmp_path: Path) -> None:
    slice_files[1].unlink()
    rdr = RawImageReader(
        file_prefix=str(tmp_path / "slice"),
        slice_offset=100,
        data_extent=WHOLE,
        scalar_kind="u2",
    )
    out = np.full((3, 4, 5, 1), 9, "u2")
    with pytest.raises(FileOpenError, match="slice.101"):
        rdr.read_into(out)
    # the first slice was read before the failure
    assert (out[0] != 9).all()
    assert (out[1:] == 9).all()


def test_file_list_shorter_than_extent() -> None:
    rdr = RawImageReader(file_names=[], data_extent=WHOLE, scalar_kind="u2")
    with pytest.raises(SliceIndexError):
        rdr.asarray()


def test_no_identity() -> None:
    rdr = RawImageReader(data_extent=WHOLE)
    with pytest.raises(NoIdentitySpecifiedError):
        rdr.read()
    with pytest.raises(NoIdentitySpecifiedError):
        rdr.read_into(np.zeros((3, 4, 5, 1), "i2"))


def test_unsupported_scalar_kind() -> None:
    with pytest.raises(UnsupportedScalarKindError):
        RawImageReader(scalar_kind="complex128")
    rdr = RawImageReader()
    with pytest.raises(ValueError):
        rdr.scalar_kind = "U10"
    assert rdr.scalar_kind is ScalarKind.INT16


def test_memory_buffer(volume: np.ndarray) -> None:
    buf = b"\x00" * 6 + volume.tobytes()
    rdr = RawImageReader(
        memory_buffer=buf, data_extent=WHOLE, scalar_kind="u2", row_orientation=LL
    )
    # 2D file dimensionality doesn't apply: the buffer holds every slice
    assert rdr.file_dimensionality == 2
    assert rdr.get_header_size() == 6
    np.testing.assert_array_equal(rdr.asarray()[..., 0], volume)
    np.testing.assert_array_equal(
        rdr.asarray((0, 1, 1, 1, 2, 2))[..., 0], volume[2:, 1:2, :2]
    )

    # takes precedence over a configured file
    rdr.file_name = "does-not-exist.raw"
    np.testing.assert_array_equal(rdr.asarray()[..., 0], volume)

    rdr.memory_buffer_length = 50
    with pytest.raises(ShortReadError):
        rdr.asarray()

    rdr.memory_buffer = None
    with pytest.raises(FileOpenError):
        rdr.asarray()


def test_memory_buffer_from_array(volume: np.ndarray) -> None:
    rdr = RawImageReader(
        memory_buffer=volume.astype(">u2"),
        data_extent=WHOLE,
        scalar_kind="u2",
        byte_order="big",
        row_orientation=LL,
    )
    np.testing.assert_array_equal(rdr.asarray()[..., 0], volume)


def test_memory_buffer_length_warning(volume: np.ndarray) -> None:
    with pytest.warns(UserWarning, match="larger than the buffer"):
        RawImageReader(memory_buffer=volume.tobytes(), memory_buffer_length=10_000)


def test_information(slice_files: list) -> None:
    rdr = RawImageReader(
        file_names=slice_files,
        data_extent=(0, 4, 0, 3, 0, 0),
        scalar_kind="f4",
        components=2,
        spacing=(1, 2, 3),
    )
    info = rdr.information()
    assert info.whole_extent == WHOLE
    assert info.spacing == (1.0, 2.0, 3.0)
    assert info.scalar_kind is ScalarKind.FLOAT32
    assert info.components == 2
    assert len(info.direction) == 9


def test_repr(volume_file: Path) -> None:
    assert "no file" in repr(RawImageReader())
    r = repr(_volume_reader(volume_file))
    assert "SingleFile" in r
    assert "UINT16" in r
    assert "header=auto" in r
    assert "3D files" in r
    assert "2 file names" in repr(RawImageReader(file_names=["a", "b"]))


def test_geometry_validation() -> None:
    rdr = RawImageReader()
    with pytest.raises(ValueError):
        rdr.spacing = (1, 2)  # type: ignore[assignment]
    rdr.direction = np.eye(3)  # type: ignore[assignment]
    assert rdr.direction == (1, 0, 0, 0, 1, 0, 0, 0, 1)
    with pytest.raises(ValueError):
        rdr.file_dimensionality = 4  # type: ignore[assignment]
    with pytest.raises(ValueError):
        rdr.components = 0


def test_to_dask(slice_files: list, volume: np.ndarray) -> None:
    rdr = RawImageReader(
        file_names=slice_files, data_extent=WHOLE, scalar_kind="u2", row_orientation=LL
    )
    dsk = rdr.to_dask()
    assert isinstance(dsk, da.Array)
    assert dsk.shape == (3, 4, 5, 1)
    assert dsk.chunks[0] == (1, 1, 1)
    np.testing.assert_array_equal(dsk.compute()[..., 0], volume)
    np.testing.assert_array_equal(np.asarray(dsk[1, 2]), volume[1, 2, :, None])

    sub = rdr.to_dask((0, 4, 0, 3, 1, 2))
    np.testing.assert_array_equal(sub.compute()[..., 0], volume[1:])


def test_to_dask_threads_open_one_file_at_a_time(tmp_path: Path, monkeypatch) -> None:
    expected = np.arange(8 * 4 * 5, dtype="u2").reshape(8, 4, 5)
    paths = [write_raw(tmp_path / f"z{z}.raw", img) for z, img in enumerate(expected)]
    open_now = []
    most_open = []

    class CountingSource(_reader.FileSource):
        def __init__(self, *args, **kwargs):
            super().__init__(*args, **kwargs)
            open_now.append(self)
            most_open.append(len(open_now))

        def read_at(self, offset, dest):
            time.sleep(0.01)
            return super().read_at(offset, dest)

        def close(self):
            if self in open_now:
                open_now.remove(self)
            super().close()

    monkeypatch.setattr(_reader, "FileSource", CountingSource)
    rdr = RawImageReader(
        file_names=paths, data_extent=(0, 4, 0, 3, 0, 7), scalar_kind="u2"
    )
    rdr.row_orientation = LL
    data = rdr.to_dask().compute(scheduler="threads", num_workers=4)
    np.testing.assert_array_equal(data[..., 0], expected)
    assert len(most_open) == 8
    assert max(most_open) == 1
    # one slice of 4 rows x 5 samples
    assert rdr.bytes_read == 4 * 5 * 2


def test_to_xarray(volume_file: Path, volume: np.ndarray) -> None:
    xr = pytest.importorskip("xarray")
    rdr = _volume_reader(volume_file, spacing=(0.5, 1, 2), origin=(10, 0, 0))
    for delayed in (True, False):
        xarr = rdr.to_xarray(delayed=delayed)
        assert isinstance(xarr, xr.DataArray)
        assert xarr.dims == ("Z", "Y", "X")
        np.testing.assert_allclose(xarr.coords["X"], [10, 10.5, 11, 11.5, 12])
        np.testing.assert_array_equal(np.asarray(xarr), volume)
    assert rdr.to_xarray(squeeze=False).dims == ("Z", "Y", "X", "C")


def test_imread(volume_file: Path, slice_files: list, volume: np.ndarray) -> None:
    kwargs = {"data_extent": WHOLE, "scalar_kind": "u2", "row_orientation": LL}
    data = imread(volume_file, file_dimensionality=3, **kwargs)
    assert isinstance(data, np.ndarray)
    np.testing.assert_array_equal(data[..., 0], volume)

    data = imread([str(p) for p in slice_files], header_size=AUTO, **kwargs)
    np.testing.assert_array_equal(data[..., 0], volume)

    dsk = imread(slice_files, dask=True, **kwargs)
    assert isinstance(dsk, da.Array)


def test_readers_are_independent(volume_file: Path, slice_files: list) -> None:
    a = _volume_reader(volume_file)
    b = RawImageReader(file_names=slice_files, data_extent=WHOLE, scalar_kind="u2")
    b.header_size = 8
    assert a.header_size is None
    assert a.file_dimensionality == 3
    assert b.file_dimensionality == 2
    np.testing.assert_array_equal(a.asarray(), b.asarray()[:, ::-1])


def test_version() -> None:
    assert isinstance(rawgrid.__version__, str)
