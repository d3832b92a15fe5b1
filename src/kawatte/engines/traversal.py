"""
Traversal filter — walk a tree and select the files to rewrite.

The walk is depth-first and pre-order, visiting siblings in sorted name
order.  Each directory below the root is checked against the exclude-dir
globs, then the include-dir globs; a directory that is excluded, or that no
include glob matches, is pruned together with everything beneath it.  Each
file is checked against the exclude-file globs, then the include-file globs.
Exclusion always wins.  Only base names are matched.

Symbolic links are never followed into.  A link to a regular file is
treated as that file; links to directories, dangling links, FIFOs, sockets
and device nodes are skipped without being matched.

Unreadable entries never stop the walk: they are logged as warnings,
recorded on the report and skipped.
"""
from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from kawatte.domain.entities.filters import GlobFilterSet
from kawatte.infrastructure.logging import get_logger
from kawatte.shared.exceptions import TraversalError

# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------

SELECT = "select"
SKIP = "skip"
EXCLUDE = "exclude"
PRUNE = "prune"
DESCEND = "descend"
WARNING = "warning"


@dataclass
class TraversalEvent:
    """A single decision taken by the walker."""

    action: str  # select | skip | exclude | prune | descend | warning
    path: str
    kind: str  # file | dir | other
    pattern: str | None = None
    error: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class TraversalReport:
    """Result of walking one root."""

    root: str
    selected: list[Path] = field(default_factory=list)
    events: list[TraversalEvent] = field(default_factory=list)

    @property
    def warnings(self) -> list[TraversalEvent]:
        return [e for e in self.events if e.action == WARNING]

    def actions(self, action: str) -> list[str]:
        return [e.path for e in self.events if e.action == action]


# ---------------------------------------------------------------------------
# TreeFilter
# ---------------------------------------------------------------------------

class TreeFilter:
    """Applies a :class:`GlobFilterSet` to a directory tree."""

    def __init__(self, filters: GlobFilterSet | None = None, log: Any = None) -> None:
        self.filters = filters or GlobFilterSet()
        self.log = log if log is not None else get_logger(self.__class__.__name__)

    # -- public API ---------------------------------------------------------

    def walk(self, root: str | os.PathLike[str]) -> TraversalReport:
        root_path = Path(root)
        report = TraversalReport(root=str(root_path))
        self.log.debug("traversal.start", root=str(root_path))

        try:
            is_dir = root_path.is_dir()
            if not is_dir:
                root_path.lstat()
        except OSError as exc:
            self._warn(report, root_path, "dir", exc)
            return report

        if is_dir:
            self._walk_dir(root_path, report)
        elif root_path.is_file():
            self._visit_file(root_path, report)
        else:
            self._record(report, SKIP, root_path, "other", None, reason="not_regular")

        self.log.debug(
            "traversal.complete",
            root=str(root_path),
            selected=len(report.selected),
            warnings=len(report.warnings),
        )
        return report

    # -- private helpers ----------------------------------------------------

    def _walk_dir(self, directory: Path, report: TraversalReport) -> None:
        try:
            with os.scandir(directory) as it:
                entries = sorted(it, key=lambda e: e.name)
        except OSError as exc:
            self._warn(report, directory, "dir", exc)
            return

        for entry in entries:
            path = directory / entry.name
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file()
            except OSError as exc:
                self._warn(report, path, "file", exc)
                continue
            if is_dir:
                if self._enter_dir(path, report):
                    self._walk_dir(path, report)
            elif is_file:
                self._visit_file(path, report)
            else:
                self._record(report, SKIP, path, "other", None, reason="not_regular")

    def _enter_dir(self, path: Path, report: TraversalReport) -> bool:
        name = path.name
        glob = self.filters.excluded_dir(name)
        if glob is not None:
            self._record(report, PRUNE, path, "dir", glob, reason="excluded")
            return False
        glob = self.filters.included_dir(name)
        if glob is None:
            self._record(report, PRUNE, path, "dir", None, reason="no_match")
            return False
        self._record(report, DESCEND, path, "dir", glob)
        return True

    def _visit_file(self, path: Path, report: TraversalReport) -> None:
        name = path.name
        glob = self.filters.excluded_file(name)
        if glob is not None:
            self._record(report, EXCLUDE, path, "file", glob)
            return
        glob = self.filters.included_file(name)
        if glob is None:
            self._record(report, SKIP, path, "file", None)
            return
        self._record(report, SELECT, path, "file", glob)
        report.selected.append(path)

    def _record(
        self,
        report: TraversalReport,
        action: str,
        path: Path,
        kind: str,
        pattern: str | None,
        **extra: Any,
    ) -> None:
        report.events.append(TraversalEvent(action=action, path=str(path), kind=kind, pattern=pattern))
        self.log.debug(f"traversal.{action}", path=str(path), kind=kind, pattern=pattern, **extra)

    def _warn(self, report: TraversalReport, path: Path, kind: str, exc: OSError) -> None:
        err = TraversalError(
            f"walking directories: {exc}",
            context={"path": str(path), "errno": exc.errno},
        )
        report.events.append(TraversalEvent(
            action=WARNING, path=str(path), kind=kind, error=err.to_dict(),
        ))
        self.log.warning("traversal.warning", path=str(path), error=str(exc), error_code=err.error_code)


def select(
    root: str | os.PathLike[str],
    filters: GlobFilterSet | None = None,
    log: Any = None,
) -> list[Path]:
    """Return the files under *root* selected by *filters*, in traversal order."""
    return TreeFilter(filters, log=log).walk(root).selected
