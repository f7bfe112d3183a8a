"""End-to-end tests for the producer/worker pipeline."""

from __future__ import annotations

import os
import shutil
import sys
from pathlib import Path

import pytest

from restr.core import process as process_mod
from restr.core import runner as runner_mod
from restr.core.config import ReplaceConfig
from restr.core.hidden import PosixHiddenPredicate
from restr.core.process import NEWLINE
from restr.core.runner import run_replace


def _run(root: Path, search: str = "foo", replace: str = "baz", **kwargs):
    cfg = ReplaceConfig(root=root, search=search, replace=replace, **kwargs)
    return run_replace(cfg, hidden=PosixHiddenPredicate()).snapshot()


def _build_tree(root: Path) -> None:
    """Small mixed tree: text, binary, hidden, nested, many files."""
    (root / "a.txt").write_bytes(b"foo bar foo")
    (root / "b.bin").write_bytes(b"foo\x00")
    (root / ".hidden.txt").write_bytes(b"foo\n")
    (root / ".cache").mkdir()
    (root / ".cache" / "c.txt").write_bytes(b"foo foo\n")
    (root / "pkg" / "sub").mkdir(parents=True)
    (root / "pkg" / "mod.py").write_bytes(b"import foo\nfoo.run()\n")
    (root / "pkg" / "sub" / "none.txt").write_bytes(b"nothing to see\n")
    for i in range(40):
        (root / "pkg" / "sub" / f"f{i:02d}.md").write_bytes(b"foo\n" * (i % 3))


def _contents(root: Path) -> dict[str, bytes]:
    return {
        p.relative_to(root).as_posix(): p.read_bytes()
        for p in sorted(root.rglob("*"))
        if p.is_file()
    }


class TestRunReplace:
    def test_example_tree(self, tmp_path: Path):
        (tmp_path / "a.txt").write_bytes(b"foo bar foo")
        (tmp_path / "b.bin").write_bytes(b"foo\x00bar")

        snap = _run(tmp_path)

        # b.bin is deny-listed by extension, so it is never discovered.
        assert snap.files_found == 1
        assert snap.files_processed == 1
        assert snap.files_matched == 1
        assert snap.matches == 2
        assert snap.errors == 0
        assert (tmp_path / "a.txt").read_bytes() == b"baz bar baz"
        assert (tmp_path / "b.bin").read_bytes() == b"foo\x00bar"

    def test_binary_content_without_extension_untouched(self, tmp_path: Path):
        (tmp_path / "a.txt").write_bytes(b"foo bar foo")
        (tmp_path / "blob").write_bytes(b"foo\x00bar")

        snap = _run(tmp_path)

        assert snap.files_found == 1
        assert (tmp_path / "blob").read_bytes() == b"foo\x00bar"

    def test_dry_run_reports_and_mutates_nothing(self, tmp_path: Path):
        _build_tree(tmp_path)
        before = _contents(tmp_path)

        snap = _run(tmp_path, dry_run=True)

        assert _contents(tmp_path) == before
        assert snap.files_matched > 0
        assert snap.matches > 0

    def test_dry_run_count_matches_real_run(self, tmp_path: Path):
        _build_tree(tmp_path)

        dry = _run(tmp_path, dry_run=True)
        real = _run(tmp_path)

        assert dry == real

    def test_hidden_entries_untouched(self, tmp_path: Path):
        _build_tree(tmp_path)

        _run(tmp_path)

        assert (tmp_path / ".hidden.txt").read_bytes() == b"foo\n"
        assert (tmp_path / ".cache" / "c.txt").read_bytes() == b"foo foo\n"

    def test_line_count_preserved(self, tmp_path: Path):
        f = tmp_path / "lines.txt"
        f.write_bytes(b"foo\nbar\nfoo foo\n")

        _run(tmp_path, replace="quux")

        assert f.read_bytes().count(NEWLINE) == 3
        assert f.read_bytes() == NEWLINE.join([b"quux", b"bar", b"quux quux"]) + NEWLINE

    def test_second_run_is_idempotent(self, tmp_path: Path):
        _build_tree(tmp_path)

        first = _run(tmp_path)
        second = _run(tmp_path)

        assert first.matches > 0
        assert second.matches == 0
        assert second.files_matched == 0
        assert second.files_found == first.files_found

    def test_no_temp_files_left(self, tmp_path: Path):
        _build_tree(tmp_path)
        _run(tmp_path)
        assert not [p for p in tmp_path.rglob("*restr-tmp")]

    @pytest.mark.parametrize("workers", [1, 4, 64])
    def test_worker_count_does_not_change_outcome(self, tmp_path: Path, workers: int):
        reference = tmp_path / "reference"
        reference.mkdir()
        _build_tree(reference)
        expected = _run(reference, workers=1)
        expected_contents = _contents(reference)

        work = tmp_path / f"w{workers}"
        work.mkdir()
        _build_tree(work)
        snap = _run(work, workers=workers)

        assert snap == expected
        assert _contents(work) == expected_contents

    def test_small_queue_applies_backpressure_without_loss(self, tmp_path: Path):
        _build_tree(tmp_path)
        snap = _run(tmp_path, workers=2, queue_size=1)
        assert snap.files_found == snap.files_processed

    def test_every_found_file_processed_once(self, tmp_path: Path, monkeypatch):
        _build_tree(tmp_path)
        seen: list[Path] = []
        real = runner_mod.process_file

        def _recording(path, *args, **kwargs):
            seen.append(path)
            return real(path, *args, **kwargs)

        monkeypatch.setattr(runner_mod, "process_file", _recording)
        snap = _run(tmp_path, workers=8)

        assert len(seen) == len(set(seen)) == snap.files_found == snap.files_processed

    def test_per_file_error_counted_and_run_continues(self, tmp_path: Path, monkeypatch):
        _build_tree(tmp_path)
        real = runner_mod.process_file

        def _flaky(path, *args, **kwargs):
            if path.name == "mod.py":
                raise RuntimeError("boom")
            return real(path, *args, **kwargs)

        monkeypatch.setattr(runner_mod, "process_file", _flaky)
        snap = _run(tmp_path, workers=3)

        assert snap.errors == 1
        assert snap.files_processed == snap.files_found
        assert (tmp_path / "a.txt").read_bytes() == b"baz bar baz"

    def test_failed_rename_counted_as_error(self, tmp_path: Path, monkeypatch, caplog):
        caplog.set_level("WARNING", logger="restr.core.runner")
        _build_tree(tmp_path)
        real_replace = process_mod.os.replace

        def _refuse_mod_py(src, dst):
            if Path(dst).name == "mod.py":
                raise PermissionError(13, "Permission denied", str(dst))
            return real_replace(src, dst)

        monkeypatch.setattr(process_mod.os, "replace", _refuse_mod_py)
        snap = _run(tmp_path, workers=4, verbose=True)

        assert snap.errors == 1
        assert snap.files_processed == snap.files_found
        assert (tmp_path / "pkg" / "mod.py").read_bytes() == b"import foo\nfoo.run()\n"
        assert (tmp_path / "a.txt").read_bytes() == b"baz bar baz"
        assert (tmp_path / "pkg" / "sub" / "f01.md").read_bytes() == b"baz" + NEWLINE
        assert "error processing" in caplog.text
        assert not [p for p in tmp_path.rglob("*restr-tmp")]

    @pytest.mark.skipif(
        sys.platform == "win32" or os.geteuid() == 0,
        reason="needs POSIX permissions enforced for the current user",
    )
    def test_unreadable_file_counted_as_error(self, tmp_path: Path):
        (tmp_path / "a.txt").write_bytes(b"foo\n")
        locked = tmp_path / "locked.txt"
        locked.write_bytes(b"foo\n")
        locked.chmod(0)
        try:
            snap = _run(tmp_path, workers=2)
        finally:
            locked.chmod(0o644)

        assert snap.errors == 1
        assert snap.files_matched == 1
        assert (tmp_path / "a.txt").read_bytes() == b"baz" + NEWLINE
        assert locked.read_bytes() == b"foo\n"

    def test_missing_root_is_fatal(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            _run(tmp_path / "missing")

    def test_file_root_is_fatal(self, tmp_path: Path):
        f = tmp_path / "x.txt"
        f.write_text("foo\n")
        with pytest.raises(NotADirectoryError):
            _run(f)

    def test_walker_failure_drains_queue_then_propagates(self, tmp_path: Path, monkeypatch):
        (tmp_path / "a.txt").write_bytes(b"foo\n")

        def _broken_walk(root, result, **kwargs):
            result.add_found()
            yield root / "a.txt"
            raise RuntimeError("walk exploded")

        monkeypatch.setattr(runner_mod, "iter_candidate_files", _broken_walk)
        cfg = ReplaceConfig(root=tmp_path, search="foo", replace="baz", workers=2)
        with pytest.raises(RuntimeError, match="walk exploded"):
            run_replace(cfg)

        assert (tmp_path / "a.txt").read_bytes() == b"baz" + NEWLINE

    def test_verbose_logs_worker_errors(self, tmp_path: Path, monkeypatch, caplog):
        caplog.set_level("INFO")
        (tmp_path / "a.txt").write_bytes(b"foo\n")

        def _fail(path, *args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(runner_mod, "process_file", _fail)
        _run(tmp_path, verbose=True, workers=1)

        assert "worker 0: unexpected failure" in caplog.text

    def test_copy_of_tree_gives_same_result(self, tmp_path: Path):
        src = tmp_path / "src"
        src.mkdir()
        _build_tree(src)
        dst = tmp_path / "dst"
        shutil.copytree(src, dst)

        assert _run(src, dry_run=True) == _run(dst, dry_run=True)
