"""Byte sources that a reader seeks into: files on disk, or a memory buffer."""

from __future__ import annotations

import logging
import os
from typing import TYPE_CHECKING, BinaryIO

import numpy as np

from .errors import FileOpenError

if TYPE_CHECKING:
    from typing import Any

logger = logging.getLogger(__name__)


class FileSource:
    """An open raw file, positioned with absolute seeks.

    Use as a context manager; the handle is closed on exit.
    """

    def __init__(self, path: str | os.PathLike, header: int = 0) -> None:
        self.path = os.fspath(path)
        self.header = header
        logger.debug(f"Opening raw file {self.path!r}")
        try:
            self._fh: BinaryIO | None = open(self.path, "rb")
        except OSError as e:
            raise FileOpenError(f"Could not open file {self.path!r}: {e}") from e

    @property
    def closed(self) -> bool:
        return self._fh is None or self._fh.closed

    def close(self) -> None:
        if self._fh is not None:
            logger.debug(f"Closing raw file {self.path!r}")
            self._fh.close()
            self._fh = None

    def read_at(self, offset: int, dest: np.ndarray) -> int:
        """Read ``dest.nbytes`` bytes at `offset` into `dest`.

        Returns the number of bytes actually read, which is smaller than
        ``dest.nbytes`` when the file ends early.
        """
        if self._fh is None:  # pragma: no cover
            raise ValueError(f"Attempt to read from closed file {self.path!r}")
        self._fh.seek(offset)
        nread = 0
        view = memoryview(dest).cast("B")
        while nread < len(view):
            n = self._fh.readinto(view[nread:])
            if not n:
                break
            nread += n
        return nread

    def __enter__(self) -> FileSource:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<{type(self).__name__} {self.path!r} ({state})>"


class BufferSource:
    """A read-only view on caller-supplied bytes, used instead of any file."""

    path = "<memory>"

    def __init__(self, buffer: memoryview, header: int = 0) -> None:
        self._view = buffer
        self.header = header

    @property
    def closed(self) -> bool:
        return False

    def close(self) -> None:
        pass

    def read_at(self, offset: int, dest: np.ndarray) -> int:
        chunk = self._view[offset : offset + dest.nbytes]
        np.asarray(dest).reshape(-1).view(np.uint8)[: len(chunk)] = np.frombuffer(
            chunk, dtype=np.uint8
        )
        return len(chunk)

    def __enter__(self) -> BufferSource:
        return self

    def __exit__(self, *_: Any) -> None:
        self.close()


def as_byte_view(buffer: Any, length: int | None = None) -> memoryview:
    """Return a flat, read-only byte view on `buffer`, cut to `length` bytes."""
    if isinstance(buffer, np.ndarray):
        # numpy formats such as '>f4' can't be cast by memoryview directly
        buffer = buffer.reshape(-1).view(np.uint8)
    view = memoryview(buffer)
    if not view.c_contiguous:
        raise ValueError("memory_buffer must be C-contiguous")
    view = view.cast("B")
    if length is not None:
        if length < 0:
            raise ValueError(f"memory_buffer_length must be >= 0, got {length}")
        view = view[:length]
    return view.toreadonly()
