"""Strategies for naming the file(s) that hold a raw grid.

A reader uses exactly one of:

- `SingleFile`: every slice comes from the same path.
- `PatternSeries`: one file per slice, named with a printf-style pattern,
  e.g. `"%s.%03d" % ("image", 7) -> "image.007"`.
- `ExplicitList`: one file per slice, given as an ordered list of paths.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING, Union

from .errors import FilePatternError, NoIdentitySpecifiedError, SliceIndexError

if TYPE_CHECKING:
    from typing_extensions import TypeAlias

DEFAULT_PATTERN = "%s.%d"

SLOTS = {}
if sys.version_info >= (3, 10):
    SLOTS["slots"] = True


@dataclass(frozen=True, **SLOTS)
class SingleFile:
    path: str

    def resolve(
        self, slice_index: int, slice_offset: int = 0, slice_spacing: int = 1
    ) -> str:
        return self.path


@dataclass(frozen=True, **SLOTS)
class PatternSeries:
    """A numbered series of files.

    Attributes
    ----------
    prefix : str | None
        Substituted for the `%s` placeholder of `pattern`.
    pattern : str
        printf-style template taking ``(prefix, slice_number)``, or just
        ``(slice_number,)`` when it has no `%s` placeholder.
    """

    prefix: str | None = None
    pattern: str = DEFAULT_PATTERN

    @property
    def has_prefix_placeholder(self) -> bool:
        return "%s" in self.pattern

    def resolve(
        self, slice_index: int, slice_offset: int = 0, slice_spacing: int = 1
    ) -> str:
        num = slice_index * slice_spacing + slice_offset
        if self.prefix is not None:
            args: tuple = (self.prefix, num)
        elif self.has_prefix_placeholder:
            args = ("", num)
        else:
            args = (num,)
        try:
            return self.pattern % args
        except (TypeError, ValueError) as e:
            raise FilePatternError(
                f"Cannot format file pattern {self.pattern!r} with {args!r}: {e}"
            ) from e


@dataclass(frozen=True, **SLOTS)
class ExplicitList:
    paths: tuple[str, ...] = ()

    def __len__(self) -> int:
        return len(self.paths)

    def resolve(
        self, slice_index: int, slice_offset: int = 0, slice_spacing: int = 1
    ) -> str:
        if not 0 <= slice_index < len(self.paths):
            raise SliceIndexError(
                f"Slice index {slice_index} out of range for a list of "
                f"{len(self.paths)} file names"
            )
        return self.paths[slice_index]


NamingStrategy: TypeAlias = Union[SingleFile, PatternSeries, ExplicitList]


def resolve_path(
    strategy: NamingStrategy | None,
    slice_index: int,
    slice_offset: int = 0,
    slice_spacing: int = 1,
) -> str:
    """Return the path holding slice `slice_index` under `strategy`.

    Raises
    ------
    NoIdentitySpecifiedError
        If `strategy` is None.
    SliceIndexError
        If `strategy` is an `ExplicitList` shorter than `slice_index + 1`.
    """
    if strategy is None:
        raise NoIdentitySpecifiedError(
            "Either a file_name, file_names, or file_pattern must be specified."
        )
    return strategy.resolve(slice_index, slice_offset, slice_spacing)
