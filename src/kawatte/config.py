"""Run configuration — environment-driven, overridable from the command line.

Every option can be set through a ``KAWATTE_``-prefixed environment
variable (``KAWATTE_PAT``, ``KAWATTE_DRY_RUN``, ``KAWATTE_EXCLUDE_DIR``...).
Values passed to the constructor, which is what the CLI does with its flags,
take precedence over the environment.
"""
from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from kawatte.domain.entities.filters import GlobFilterSet

GlobList = Annotated[list[str], NoDecode]


class Settings(BaseSettings):
    """Settings for a single kawatte run."""

    pat: str | None = None
    dir: str = "."

    match: GlobList = []
    exclude: GlobList = []
    match_dir: GlobList = []
    exclude_dir: GlobList = []

    dry_run: bool = False
    keep_going: bool = False
    verbose: bool = False
    log_json: bool = False

    model_config = SettingsConfigDict(env_prefix="KAWATTE_", extra="ignore")

    @field_validator("match", "exclude", "match_dir", "exclude_dir", mode="before")
    @classmethod
    def _split_globs(cls, value: Any) -> Any:
        """Accept a JSON array or a comma-separated string from the environment.

        The comma form splits on every comma; globs containing one need JSON.
        """
        if isinstance(value, str):
            stripped = value.strip()
            if stripped.startswith("["):
                return json.loads(stripped)
            return [part.strip() for part in stripped.split(",") if part.strip()]
        return value

    @property
    def log_level(self) -> str:
        return "debug" if self.verbose else "warning"

    def filter_set(self) -> GlobFilterSet:
        """Build the glob filter set, applying defaults to empty lists."""
        return GlobFilterSet(
            include_files=self.match,
            exclude_files=self.exclude,
            include_dirs=self.match_dir,
            exclude_dirs=self.exclude_dir,
        )
