"""Exceptions raised by rawgrid readers.

Each error also subclasses the closest builtin exception, so code that
catches `OSError`, `ValueError` or `IndexError` keeps working.
"""

from __future__ import annotations

__all__ = [
    "FileNotAccessibleError",
    "FileOpenError",
    "FilePatternError",
    "InvalidExtentError",
    "InvalidSeekOffsetError",
    "NoIdentitySpecifiedError",
    "RawReaderError",
    "ShortReadError",
    "SliceIndexError",
    "UnsupportedScalarKindError",
]


class RawReaderError(Exception):
    """Base class for all rawgrid errors."""


class NoIdentitySpecifiedError(RawReaderError, ValueError):
    """None of file_name, file_prefix/file_pattern or file_names is set."""


class SliceIndexError(RawReaderError, IndexError):
    """Slice index is past the end of an explicit file list."""


class FileOpenError(RawReaderError, OSError):
    """A resolved path could not be opened for reading."""


class FilePatternError(RawReaderError, ValueError):
    """A file pattern does not accept the prefix and slice number given to it."""


class FileNotAccessibleError(RawReaderError, OSError):
    """Stat failed while probing a file for its header size."""


class ShortReadError(RawReaderError, OSError):
    """Fewer bytes were available than a row requires."""


class UnsupportedScalarKindError(RawReaderError, ValueError):
    """Scalar type is not one of the supported numeric kinds."""


class InvalidSeekOffsetError(RawReaderError, ValueError):
    """A computed seek offset was negative."""


class InvalidExtentError(RawReaderError, ValueError):
    """An extent has max < min on some axis, or lies outside the data extent."""
