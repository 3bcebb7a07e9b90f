"""Shared test fixtures for Stencil tests."""
import re
import shutil
import subprocess
from pathlib import Path

import pytest

GIT_IDENTITY = [
    '-c', 'user.name=Test Name',
    '-c', 'user.email=test@example.com',
    '-c', 'commit.gpgsign=false',
]

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


def git_version() -> tuple:
    """Installed git version as a tuple of ints, (0,) when git is missing."""
    if shutil.which("git") is None:
        return (0,)
    output = subprocess.run(["git", "--version"], capture_output=True, text=True).stdout
    match = re.search(r"(\d+)\.(\d+)", output)
    return tuple(int(part) for part in match.groups()) if match else (0,)


# git merge-tree --write-tree arrived in git 2.38
requires_merge_tree = pytest.mark.skipif(
    git_version() < (2, 38),
    reason="three-way merges need git 2.38 or newer (merge-tree --write-tree)",
)


def run_git(cwd: Path, *args: str) -> str:
    """Run git as a test author and return stdout."""
    result = subprocess.run(
        ['git', *GIT_IDENTITY, *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def commit_file(repo: Path, name: str, content: str, message: str = None) -> str:
    """Write a file, commit it and return the new commit id."""
    path = repo / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    run_git(repo, 'add', name)
    run_git(repo, 'commit', '-q', '-m', message or f"update {name}")
    return run_git(repo, 'rev-parse', 'HEAD')


@pytest.fixture
def isolated_git_config(tmp_path, monkeypatch):
    """Point git's global and system configuration at empty files."""
    global_config = tmp_path / "gitconfig-global"
    system_config = tmp_path / "gitconfig-system"
    global_config.write_text("")
    system_config.write_text("")
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", str(global_config))
    monkeypatch.setenv("GIT_CONFIG_SYSTEM", str(system_config))
    monkeypatch.delenv("GIT_DIR", raising=False)
    monkeypatch.delenv("GIT_WORK_TREE", raising=False)
    return global_config


@pytest.fixture
def template_repo(tmp_path, isolated_git_config):
    """A template repository on branch master with foo.txt at v1."""
    repo = tmp_path / "src"
    repo.mkdir()
    run_git(repo, 'init', '-q', '-b', 'master')
    commit_file(repo, "foo.txt", "v1: Lorem ipsum\n", "add foo.txt")
    return repo


@pytest.fixture
def template_tree(tmp_path):
    """A plain template folder: a/ and a/x.txt containing v1."""
    src = tmp_path / "template"
    (src / "a").mkdir(parents=True)
    (src / "a" / "x.txt").write_text("v1")
    return src
