"""Tests for mirror_dir (copy-then-prune directory mirroring)."""

import os

import pytest

from repobackup.mirror import mirror_dir


T = 1_700_000_000_000_000_000


def _tree(base):
    """Return {relative_path: content} for every file under *base*."""
    result = {}
    for dirpath, _dirs, files in os.walk(base):
        for f in files:
            full = os.path.join(dirpath, f)
            rel = os.path.relpath(full, base).replace(os.sep, "/")
            with open(full) as fh:
                result[rel] = fh.read()
    return result


@pytest.fixture
def src(tmp_path):
    d = tmp_path / "src"
    (d / "sub" / "deeper").mkdir(parents=True)
    (d / "a.txt").write_text("a")
    (d / "sub" / "b.txt").write_text("b")
    (d / "sub" / "deeper" / "c.txt").write_text("c")
    return d


class TestMirrorBasic:
    def test_copies_into_missing_destination(self, src, tmp_path):
        dst = tmp_path / "backup" / "nested" / "dst"
        mirror_dir(str(src), str(dst))
        assert _tree(dst) == _tree(src)

    def test_preserves_mtime(self, src, tmp_path):
        os.utime(src / "a.txt", ns=(T, T))
        dst = tmp_path / "dst"
        mirror_dir(str(src), str(dst))
        assert (dst / "a.txt").stat().st_mtime_ns == T

    def test_overwrites_changed_content(self, src, tmp_path):
        dst = tmp_path / "dst"
        mirror_dir(str(src), str(dst))
        (src / "sub" / "b.txt").write_text("b2")
        mirror_dir(str(src), str(dst))
        assert (dst / "sub" / "b.txt").read_text() == "b2"

    def test_idempotent(self, src, tmp_path):
        dst = tmp_path / "dst"
        mirror_dir(str(src), str(dst))
        first = _tree(dst)
        mirror_dir(str(src), str(dst))
        assert _tree(dst) == first == _tree(src)

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(OSError):
            mirror_dir(str(tmp_path / "nope"), str(tmp_path / "dst"))


class TestMirrorOrphans:
    def test_removes_orphan_file(self, tmp_path):
        s = tmp_path / "s"
        s.mkdir()
        (s / "a.txt").write_text("a")
        d = tmp_path / "d"
        d.mkdir()
        (d / "a.txt").write_text("a")
        (d / "b.txt").write_text("b")

        mirror_dir(str(s), str(d))

        assert sorted(os.listdir(d)) == ["a.txt"]

    def test_removes_orphan_subtree(self, src, tmp_path):
        dst = tmp_path / "dst"
        mirror_dir(str(src), str(dst))
        (src / "sub" / "deeper" / "c.txt").unlink()
        (src / "sub" / "deeper").rmdir()

        mirror_dir(str(src), str(dst))

        assert not (dst / "sub" / "deeper").exists()
        assert (dst / "sub" / "b.txt").exists()

    def test_removes_nested_orphan_file(self, src, tmp_path):
        dst = tmp_path / "dst"
        mirror_dir(str(src), str(dst))
        (src / "sub" / "deeper" / "c.txt").unlink()

        mirror_dir(str(src), str(dst))

        assert (dst / "sub" / "deeper").is_dir()
        assert os.listdir(dst / "sub" / "deeper") == []


class TestMirrorTypeCollisions:
    def test_file_replaced_by_directory(self, tmp_path):
        s = tmp_path / "s"
        (s / "thing").mkdir(parents=True)
        (s / "thing" / "inner.txt").write_text("inner")
        d = tmp_path / "d"
        d.mkdir()
        (d / "thing").write_text("used to be a file")

        mirror_dir(str(s), str(d))

        assert (d / "thing").is_dir()
        assert (d / "thing" / "inner.txt").read_text() == "inner"

    def test_directory_replaced_by_file(self, tmp_path):
        s = tmp_path / "s"
        s.mkdir()
        (s / "thing").write_text("now a file")
        d = tmp_path / "d"
        (d / "thing").mkdir(parents=True)
        (d / "thing" / "old.txt").write_text("old")

        mirror_dir(str(s), str(d))

        assert (d / "thing").is_file()
        assert (d / "thing").read_text() == "now a file"

    def test_destination_itself_is_a_file(self, src, tmp_path):
        dst = tmp_path / "dst"
        dst.write_text("not a directory")
        mirror_dir(str(src), str(dst))
        assert _tree(dst) == _tree(src)
