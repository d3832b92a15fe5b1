"""Glob filter set — the four include/exclude lists driving the tree walk."""

from __future__ import annotations

from fnmatch import fnmatchcase
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_INCLUDE: tuple[str, ...] = ("*",)
DEFAULT_EXCLUDE: tuple[str, ...] = (".*",)


def first_match(name: str, globs: tuple[str, ...]) -> str | None:
    """Return the first glob in *globs* matching base name *name*, or ``None``.

    Matching is case-sensitive on every platform.
    """
    for glob in globs:
        if fnmatchcase(name, glob):
            return glob
    return None


class GlobFilterSet(BaseModel):
    """Include/exclude globs for files and directories.

    Empty lists fall back to the defaults: includes match everything,
    excludes match dotfiles.
    """

    model_config = ConfigDict(frozen=True)

    include_files: tuple[str, ...] = Field(default=DEFAULT_INCLUDE)
    exclude_files: tuple[str, ...] = Field(default=DEFAULT_EXCLUDE)
    include_dirs: tuple[str, ...] = Field(default=DEFAULT_INCLUDE)
    exclude_dirs: tuple[str, ...] = Field(default=DEFAULT_EXCLUDE)

    @field_validator("include_files", "include_dirs", mode="before")
    @classmethod
    def _default_include(cls, value: Any) -> tuple[str, ...]:
        return _normalise(value) or DEFAULT_INCLUDE

    @field_validator("exclude_files", "exclude_dirs", mode="before")
    @classmethod
    def _default_exclude(cls, value: Any) -> tuple[str, ...]:
        return _normalise(value) or DEFAULT_EXCLUDE

    def excluded_file(self, name: str) -> str | None:
        return first_match(name, self.exclude_files)

    def included_file(self, name: str) -> str | None:
        return first_match(name, self.include_files)

    def excluded_dir(self, name: str) -> str | None:
        return first_match(name, self.exclude_dirs)

    def included_dir(self, name: str) -> str | None:
        return first_match(name, self.include_dirs)


def _normalise(value: Any) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [value]
    return tuple(str(v) for v in value if str(v) != "")
