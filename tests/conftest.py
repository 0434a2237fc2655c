"""Shared fixtures for repobackup tests."""

import os
import subprocess

import pytest
from click.testing import CliRunner


# ---------------------------------------------------------------------------
# Fake inspector
# ---------------------------------------------------------------------------

class FakeInspector:
    """In-memory RepoInspector.

    Answers are configured per instance (the same answer for every tree
    unless *per_tree* overrides it).  Every call is recorded in ``calls``.
    """

    def __init__(self, *, remotes=(), upstream=False, diff=(), tracked=(),
                 untracked=(), ignored=(), per_tree=None, fail_on=()):
        self.remotes = list(remotes)
        self.upstream = upstream
        self.diff = list(diff)
        self.tracked = list(tracked)
        self.untracked = list(untracked)
        self.ignored = set(ignored)
        self.per_tree = per_tree or {}
        self.fail_on = {os.path.normpath(p) for p in fail_on}
        self.calls = []

    def _answer(self, name, tree):
        self.calls.append((name, tree))
        if os.path.normpath(tree) in self.fail_on:
            from repobackup.exceptions import InspectorError
            raise InspectorError(["git", "-C", tree, name], 128, "boom")
        overrides = self.per_tree.get(os.path.normpath(tree), {})
        return overrides.get(name, getattr(self, name))

    def list_remotes(self, tree):
        return list(self._answer("remotes", tree))

    def has_upstream(self, tree):
        return self._answer("upstream", tree)

    def diff_against_upstream(self, tree):
        return list(self._answer("diff", tree))

    def list_tracked(self, tree):
        return list(self._answer("tracked", tree))

    def list_untracked(self, tree):
        return list(self._answer("untracked", tree))

    def check_ignore(self, repo_root, rel_path):
        self.calls.append(("check_ignore", repo_root, rel_path))
        return rel_path in self.ignored


@pytest.fixture
def make_inspector():
    """Factory for :class:`FakeInspector` instances."""
    return FakeInspector


# ---------------------------------------------------------------------------
# Real git
# ---------------------------------------------------------------------------

_GIT = [
    "git",
    "-c", "user.name=Test",
    "-c", "user.email=test@example.com",
    "-c", "commit.gpgsign=false",
    "-c", "init.defaultBranch=main",
]


def run_git(cwd, *args):
    """Run git in *cwd* with a fixed identity and return stdout."""
    proc = subprocess.run(
        [*_GIT, "-C", str(cwd), *args],
        check=True, capture_output=True, text=True,
    )
    return proc.stdout


@pytest.fixture
def git_env(tmp_path, monkeypatch):
    """Isolate git from the user's and the system's configuration."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    return home


@pytest.fixture
def git(git_env):
    """Return the :func:`run_git` helper with git isolated."""
    return run_git


@pytest.fixture
def local_repo(tmp_path, git):
    """A working tree with no remote: tracked.txt committed, src/ tree,
    an ignored build/ directory and a .gitignore.
    """
    work = tmp_path / "home" / "src" / "local"
    work.mkdir(parents=True)
    git(work, "init", "-q")
    (work / ".gitignore").write_text("build/\n*.log\n")
    (work / "tracked.txt").write_text("tracked\n")
    (work / "src").mkdir()
    (work / "src" / "main.py").write_text("print('hi')\n")
    git(work, "add", ".")
    git(work, "commit", "-q", "-m", "init")
    (work / "build").mkdir()
    (work / "build" / "out.bin").write_bytes(b"\x00")
    return work


@pytest.fixture
def cloned_repo(tmp_path, git):
    """A clone of a bare remote with upstream tracking set.

    Committed and pushed: a.txt, b.txt, dir/c.txt.
    """
    remote = tmp_path / "remote.git"
    git(tmp_path, "init", "-q", "--bare", str(remote))
    work = tmp_path / "home" / "src" / "cloned"
    work.parent.mkdir(parents=True, exist_ok=True)
    git(tmp_path, "clone", "-q", str(remote), str(work))
    (work / "a.txt").write_text("a\n")
    (work / "b.txt").write_text("b\n")
    (work / "dir").mkdir()
    (work / "dir" / "c.txt").write_text("c\n")
    git(work, "add", ".")
    git(work, "commit", "-q", "-m", "init")
    git(work, "push", "-q", "-u", "origin", "HEAD")
    return work


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

@pytest.fixture
def runner():
    return CliRunner()
