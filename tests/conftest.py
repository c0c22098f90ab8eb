"""Pytest fixtures for tagsnap tests."""
import subprocess
from pathlib import Path
from typing import Dict

import pytest


def _git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _configure_user(repo_path: Path) -> None:
    _git(repo_path, "config", "user.email", "test@example.com")
    _git(repo_path, "config", "user.name", "Test User")


@pytest.fixture
def git():
    """Run a git command in a directory and return its stdout."""
    return _git


@pytest.fixture
def tagged_repos(tmp_path: Path) -> Dict[str, any]:
    """Create an upstream repository and a clone whose origin points at it.

    Upstream layout at tag v1 (annotated):
        first, second/readme.txt, third
    After the clone, upstream gains ``fourth`` and annotated tag v2, plus
    lightweight tag ``light``. Those only reach the clone through a fetch.

    Returns dict with:
        - upstream: Path to upstream repo
        - work: Path to the clone
        - v1_sha / v2_sha: commit SHAs the tags point to
        - clone_head: HEAD commit of the clone right after cloning
    """
    upstream = tmp_path / "upstream"
    upstream.mkdir()
    _git(upstream, "init")
    _configure_user(upstream)

    (upstream / "first").write_text("first\n")
    (upstream / "second").mkdir()
    (upstream / "second" / "readme.txt").write_text("second\n")
    (upstream / "third").write_text("third\n")
    _git(upstream, "add", ".")
    _git(upstream, "commit", "-m", "Initial commit")
    v1_sha = _git(upstream, "rev-parse", "HEAD")
    _git(upstream, "tag", "-a", "v1", "-m", "Release v1")

    work = tmp_path / "work"
    _git(tmp_path, "clone", "--quiet", str(upstream), str(work))
    _configure_user(work)
    clone_head = _git(work, "rev-parse", "HEAD")

    (upstream / "fourth").write_text("fourth\n")
    _git(upstream, "add", "fourth")
    _git(upstream, "commit", "-m", "Add fourth")
    v2_sha = _git(upstream, "rev-parse", "HEAD")
    _git(upstream, "tag", "-a", "v2", "-m", "Release v2")
    _git(upstream, "tag", "light")

    return {
        "upstream": upstream,
        "work": work,
        "v1_sha": v1_sha,
        "v2_sha": v2_sha,
        "clone_head": clone_head,
    }


@pytest.fixture
def sparse_file():
    """Write ``content`` to <work>/.git/info/sparse-checkout."""
    def _write(work: Path, content: str) -> Path:
        info = work / ".git" / "info"
        info.mkdir(parents=True, exist_ok=True)
        path = info / "sparse-checkout"
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def working_tree(tmp_path: Path) -> Path:
    """Plain directory shaped like a checkout: first, second/, third, .hidden, .git/."""
    root = tmp_path / "tree"
    root.mkdir()
    (root / "first").write_text("1\n")
    (root / "second").mkdir()
    (root / "second" / "nested.txt").write_text("2\n")
    (root / "third").write_text("3\n")
    (root / ".hidden").write_text("h\n")
    (root / ".git").mkdir()
    return root
