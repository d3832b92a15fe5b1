"""Tests for the orchestrator — dry run, live writes, mode preservation, error policy."""
from __future__ import annotations

import io
import os
import stat
from pathlib import Path

import pytest

from kawatte.application.orchestrator import Orchestrator
from kawatte.domain.entities.filters import GlobFilterSet
from kawatte.engines.replacer import Replacer
from kawatte.shared.exceptions import FileProcessingError

posix_only = pytest.mark.skipif(os.name != "posix", reason="POSIX permission bits")


@pytest.fixture
def replacer(cycle_pairs) -> Replacer:
    return Replacer.build(cycle_pairs)


# ===================================================================
# Live runs
# ===================================================================


class TestLiveRun:

    def test_end_to_end_cycle(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"in.txt": "abcdef"})
        summary = Orchestrator(replacer, GlobFilterSet(include_files=["*.txt"])).run(root)
        assert (root / "in.txt").read_text() == "bcadef"
        assert summary.files_scanned == 1
        assert summary.files_changed == 1
        assert summary.files_written == 1
        assert summary.ok

    def test_only_selected_files_change(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"in.txt": "abc", "in.md": "abc", ".hidden.txt": "abc"})
        Orchestrator(replacer, GlobFilterSet(include_files=["*.txt"])).run(root)
        assert (root / "in.txt").read_text() == "bca"
        assert (root / "in.md").read_text() == "abc"
        assert (root / ".hidden.txt").read_text() == "abc"

    def test_unchanged_file_not_rewritten(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"plain.txt": "xyz"})
        target = root / "plain.txt"
        os.utime(target, (1_000_000, 1_000_000))
        before = target.stat()
        result = Orchestrator(replacer).process_file(target)
        assert not result.changed and not result.written
        assert target.stat().st_mtime == before.st_mtime
        assert target.stat().st_ino == before.st_ino

    @posix_only
    def test_original_mode_is_preserved(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"run.sh": "echo a"})
        target = root / "run.sh"
        target.chmod(0o751)
        Orchestrator(replacer).run(root)
        assert target.read_text() == "echo b"
        assert stat.S_IMODE(target.stat().st_mode) == 0o751

    def test_no_temp_files_left_behind(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"a.txt": "aaa"})
        Orchestrator(replacer).run(root)
        assert sorted(p.name for p in root.iterdir()) == ["a.txt"]

    def test_symlinked_file_updates_target(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"real.txt": "a"})
        (root / "link.txt").symlink_to(root / "real.txt")
        Orchestrator(replacer).process_file(root / "link.txt")
        assert (root / "link.txt").is_symlink()
        assert (root / "real.txt").read_text() == "b"

    def test_symlinked_dir_does_not_abort_run(self, make_tree) -> None:
        root = make_tree({"real/a.txt": "a", "z.txt": "a"})
        (root / "link").symlink_to(root / "real", target_is_directory=True)
        summary = Orchestrator(Replacer.build([("a", "b")])).run(root)
        assert summary.ok
        assert (root / "z.txt").read_text() == "b"
        assert (root / "real" / "a.txt").read_text() == "b"
        assert str(root / "link") not in [r.path for r in summary.results]
        assert (root / "link").is_symlink()

    @posix_only
    def test_owner_and_group_are_carried_over(
        self, make_tree, replacer: Replacer, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        root = make_tree({"a.txt": "a"})
        before = (root / "a.txt").stat()
        calls: list[tuple[int, int]] = []
        real_chown = os.chown

        def chown(path, uid, gid):
            calls.append((uid, gid))
            real_chown(path, uid, gid)

        monkeypatch.setattr(os, "chown", chown)
        Orchestrator(replacer).run(root)
        assert calls == [(before.st_uid, before.st_gid)]
        after = (root / "a.txt").stat()
        assert (after.st_uid, after.st_gid) == (before.st_uid, before.st_gid)

    @posix_only
    def test_ownership_refused_still_writes(
        self, make_tree, replacer: Replacer, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        root = make_tree({"a.txt": "a"})

        def chown(path, uid, gid):
            raise PermissionError(1, "Operation not permitted", path)

        monkeypatch.setattr(os, "chown", chown)
        summary = Orchestrator(replacer).run(root)
        assert summary.files_written == 1
        assert (root / "a.txt").read_text() == "b"

    def test_binary_content_round_trips(self, make_tree) -> None:
        root = make_tree({})
        blob = root / "blob.bin"
        blob.write_bytes(b"\x00\xffneedle\x80")
        Orchestrator(Replacer.build([("needle", "pin")])).run(root)
        assert blob.read_bytes() == b"\x00\xffpin\x80"

    def test_replacement_counts(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"a.txt": "abcabc"})
        summary = Orchestrator(replacer).run(root)
        assert summary.results[0].replacements == 6


# ===================================================================
# Dry run
# ===================================================================


class TestDryRun:

    def test_dry_run_never_writes(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"hit.txt": "abc", "miss.txt": "xyz"})
        out = io.StringIO()
        summary = Orchestrator(replacer, dry_run=True, out=out).run(root)
        assert (root / "hit.txt").read_text() == "abc"
        assert (root / "miss.txt").read_text() == "xyz"
        assert summary.files_changed == 1
        assert summary.files_written == 0

    def test_dry_run_reports_changed_paths_only(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"hit.txt": "abc", "miss.txt": "xyz", "sub/hit2.txt": "c"})
        out = io.StringIO()
        Orchestrator(replacer, dry_run=True, out=out).run(root)
        assert out.getvalue().splitlines() == [
            f'* "{root / "hit.txt"}"',
            f'* "{root / "sub" / "hit2.txt"}"',
        ]

    def test_dry_run_defaults_to_stdout(self, make_tree, replacer: Replacer, capsys) -> None:
        root = make_tree({"hit.txt": "a"})
        Orchestrator(replacer, dry_run=True).run(root)
        assert "hit.txt" in capsys.readouterr().out


# ===================================================================
# Error policy
# ===================================================================


class TestErrorPolicy:

    @pytest.fixture
    def failing_tree(self, make_tree, monkeypatch: pytest.MonkeyPatch) -> Path:
        root = make_tree({"a.txt": "a", "b.txt": "a", "c.txt": "a"})
        original = Path.read_bytes

        def read_bytes(self: Path) -> bytes:
            if self.name == "b.txt":
                raise PermissionError(13, "Permission denied", str(self))
            return original(self)

        monkeypatch.setattr(Path, "read_bytes", read_bytes)
        return root

    def test_read_error_aborts_by_default(self, failing_tree: Path, replacer: Replacer) -> None:
        with pytest.raises(FileProcessingError) as info:
            Orchestrator(replacer).run(failing_tree)
        assert info.value.operation == "reading"
        assert info.value.context["path"] == str(failing_tree / "b.txt")
        assert isinstance(info.value.__cause__, PermissionError)
        assert (failing_tree / "a.txt").read_text() == "b"
        assert (failing_tree / "c.txt").read_text() == "a"

    def test_keep_going_collects_failures(self, failing_tree: Path, replacer: Replacer) -> None:
        summary = Orchestrator(replacer, keep_going=True).run(failing_tree)
        assert (failing_tree / "a.txt").read_text() == "b"
        assert (failing_tree / "c.txt").read_text() == "b"
        assert not summary.ok
        assert [r.path for r in summary.failures] == [str(failing_tree / "b.txt")]
        assert summary.failures[0].error["error_code"] == "KAWATTE_FILE_ERROR"
        assert summary.files_scanned == 3
        assert summary.files_written == 2

    def test_write_error_leaves_original(
        self, make_tree, replacer: Replacer, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        root = make_tree({"a.txt": "abc"})

        def boom(src, dst):
            raise OSError(28, "No space left on device")

        monkeypatch.setattr(os, "replace", boom)
        with pytest.raises(FileProcessingError) as info:
            Orchestrator(replacer).run(root)
        assert info.value.operation == "writing"
        assert (root / "a.txt").read_text() == "abc"
        assert sorted(p.name for p in root.iterdir()) == ["a.txt"]

    def test_summary_serialises(self, make_tree, replacer: Replacer) -> None:
        root = make_tree({"a.txt": "a"})
        data = Orchestrator(replacer, dry_run=True, out=io.StringIO()).run(root).to_dict()
        assert data["dry_run"] is True
        assert data["failures"] == 0
        assert data["results"][0]["changed"] is True
