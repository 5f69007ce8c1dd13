from pathlib import Path

import numpy as np
import psutil
import pytest


def write_raw(path: Path, data: np.ndarray, header: bytes = b"") -> Path:
    """Write `header` followed by the raw bytes of `data` (in C order)."""
    with open(path, "wb") as fh:
        fh.write(header)
        fh.write(np.ascontiguousarray(data).tobytes())
    return path


@pytest.fixture()
def volume() -> np.ndarray:
    """A (z, y, x) = (3, 4, 5) uint16 volume with a distinct value per sample."""
    return np.arange(3 * 4 * 5, dtype="u2").reshape(3, 4, 5) * 7 + 3


@pytest.fixture()
def volume_file(tmp_path: Path, volume: np.ndarray) -> Path:
    """`volume` in a single file, rows stored bottom-up, behind a 17 byte header."""
    return write_raw(tmp_path / "volume.raw", volume, header=b"H" * 17)


@pytest.fixture()
def slice_files(tmp_path: Path, volume: np.ndarray) -> list:
    """`volume` split into files slice.100, slice.101, slice.102 (8 byte headers)."""
    return [
        write_raw(tmp_path / f"slice.{100 + z}", plane, header=bytes(8))
        for z, plane in enumerate(volume)
    ]


@pytest.fixture(autouse=True)
def _assert_no_files_left_open(tmp_path: Path):
    root = str(tmp_path)
    before = {p.path for p in psutil.Process().open_files() if p.path.startswith(root)}
    yield
    after = {p.path for p in psutil.Process().open_files() if p.path.startswith(root)}
    assert before == after == set()
