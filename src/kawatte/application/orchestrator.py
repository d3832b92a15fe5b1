"""
Orchestrator — select files, run the replacer over each, report or write.

Files are handled one at a time, in traversal order.  Content is read and
replaced as bytes, so encodings are never guessed and undecodable files are
still rewritten exactly.

Write policy: a changed file is written to a temporary sibling that is given
the original file's permission bits, and its owner and group where the
caller may set them, then renamed over the original.  The rename gives the
file a new inode, so other hard links keep the old content.  Unchanged files
are left untouched.

Error policy: a read or write failure aborts the run with
:class:`FileProcessingError`.  With ``keep_going`` the failure is logged,
recorded on the summary, and the next file is processed.
"""
from __future__ import annotations

import json
import os
import stat
import sys
import tempfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, TextIO

from kawatte.domain.entities.filters import GlobFilterSet
from kawatte.engines.replacer import Replacer
from kawatte.engines.traversal import TraversalReport, TreeFilter
from kawatte.infrastructure.logging import get_logger
from kawatte.shared.exceptions import FileProcessingError

# ---------------------------------------------------------------------------
# Data models
# ---------------------------------------------------------------------------


@dataclass
class FileResult:
    """Outcome of processing one selected file."""

    path: str
    changed: bool = False
    written: bool = False
    replacements: int = 0
    error: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RunSummary:
    """Aggregated result of one run."""

    root: str
    dry_run: bool
    files_scanned: int = 0
    files_changed: int = 0
    files_written: int = 0
    traversal_warnings: int = 0
    results: list[FileResult] = field(default_factory=list)

    @property
    def failures(self) -> list[FileResult]:
        return [r for r in self.results if r.error is not None]

    @property
    def changed_paths(self) -> list[str]:
        return [r.path for r in self.results if r.changed]

    @property
    def ok(self) -> bool:
        return not self.failures

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["failures"] = len(self.failures)
        return data


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------


class Orchestrator:
    """Drives a find-and-replace run over one directory tree."""

    def __init__(
        self,
        replacer: Replacer,
        filters: GlobFilterSet | None = None,
        *,
        dry_run: bool = False,
        keep_going: bool = False,
        log: Any = None,
        out: TextIO | None = None,
    ) -> None:
        self.replacer = replacer
        self.filters = filters or GlobFilterSet()
        self.dry_run = dry_run
        self.keep_going = keep_going
        self.log = log if log is not None else get_logger(self.__class__.__name__)
        self.out = out

    # -- public API ---------------------------------------------------------

    def run(self, root: str | os.PathLike[str]) -> RunSummary:
        traversal: TraversalReport = TreeFilter(self.filters, log=self.log).walk(root)
        summary = RunSummary(
            root=str(root),
            dry_run=self.dry_run,
            traversal_warnings=len(traversal.warnings),
        )
        self.log.info(
            "run.start",
            root=str(root),
            files=len(traversal.selected),
            substitutions=len(self.replacer),
            dry_run=self.dry_run,
        )

        for path in traversal.selected:
            try:
                result = self.process_file(path)
            except FileProcessingError as exc:
                if not self.keep_going:
                    raise
                self.log.error("file.failed", **exc.context, error=str(exc.cause))
                result = FileResult(path=str(path), error=exc.to_dict())
            summary.results.append(result)
            summary.files_scanned += 1
            summary.files_changed += int(result.changed)
            summary.files_written += int(result.written)

        self.log.info(
            "run.complete",
            scanned=summary.files_scanned,
            changed=summary.files_changed,
            written=summary.files_written,
            failures=len(summary.failures),
        )
        return summary

    def process_file(self, path: str | os.PathLike[str]) -> FileResult:
        """Apply the replacer to a single file, honouring ``dry_run``."""
        file_path = Path(path)
        try:
            old_content = file_path.read_bytes()
        except OSError as exc:
            raise FileProcessingError(str(file_path), "reading", exc) from exc

        new_content, count = self.replacer.substitute(old_content)
        result = FileResult(path=str(file_path), replacements=count)
        if new_content == old_content:
            self.log.debug("file.unchanged", path=str(file_path))
            return result

        result.changed = True
        if self.dry_run:
            self._report(file_path)
            self.log.debug("file.would_change", path=str(file_path), replacements=count)
            return result

        try:
            _write_preserving_mode(file_path, new_content)
        except OSError as exc:
            raise FileProcessingError(str(file_path), "writing", exc) from exc
        result.written = True
        self.log.info("file.written", path=str(file_path), replacements=count)
        return result

    # -- private helpers ----------------------------------------------------

    def _report(self, path: Path) -> None:
        out = self.out if self.out is not None else sys.stdout
        out.write(f"* {json.dumps(str(path), ensure_ascii=False)}\n")
        out.flush()


def _write_preserving_mode(path: Path, content: bytes) -> None:
    """Replace *path* with *content* via a same-directory temp file and rename."""
    target = Path(os.path.realpath(path))
    st = target.stat()
    fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(content)
        os.chmod(tmp, stat.S_IMODE(st.st_mode))
        _copy_ownership(tmp, st)
        os.replace(tmp, target)
    except BaseException:
        try:
            os.unlink(tmp)
        except FileNotFoundError:
            pass
        raise


def _copy_ownership(tmp: str, st: os.stat_result) -> None:
    """Give *tmp* the owner and group recorded in *st*, where permitted.

    Only a privileged user may hand a file to another owner.  Otherwise the
    rewritten file belongs to the caller, the same as any new file would.
    """
    if not hasattr(os, "chown"):
        return
    try:
        os.chown(tmp, st.st_uid, st.st_gid)
    except PermissionError:
        return
