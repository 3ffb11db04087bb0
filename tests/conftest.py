"""Shared fixtures: temporary git repositories and an in-memory backend."""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

import pytest

from folio.backends.base import Branch, FileChange
from folio.errors import NotFound

FIXTURES = Path(__file__).parent / "fixtures"

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")


def git(repository: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=repository, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


def commit_file(repository: Path, name: str, contents: str) -> str:
    (repository / name).write_text(contents, encoding="utf-8")
    git(repository, "add", name)
    git(repository, "commit", "-m", f"Update {name}")
    return git(repository, "rev-parse", "HEAD")


@pytest.fixture
def repository(tmp_path: Path) -> Path:
    """An empty repository whose unborn HEAD points at master."""
    path = tmp_path / "repo"
    path.mkdir()
    git(path, "init", "--quiet")
    git(path, "symbolic-ref", "HEAD", "refs/heads/master")
    git(path, "config", "user.name", "Folio Tests")
    git(path, "config", "user.email", "tests@example.com")
    git(path, "config", "commit.gpgsign", "false")
    return path


class MemoryBackend:
    """Backend keeping branches as dicts of path -> text."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.branches: dict[str, dict[str, str]] = {"master": dict(files or {})}
        self.heads: dict[str, str] = {"master": self._hash(0)}
        self.writes: list[tuple[str, FileChange]] = []
        self.auth_calls = 0
        self.profile: dict | None = None

    @staticmethod
    def _hash(n: int) -> str:
        return f"{n:040x}"

    async def authenticate(self) -> dict:
        self.auth_calls += 1
        if self.profile is None:
            self.profile = {"login": "tester"}
        return self.profile

    async def resolve_branch(self, reference: str) -> Branch:
        if reference in self.heads:
            return Branch(name=reference, hash=self.heads[reference])
        for name, head in self.heads.items():
            if head == reference:
                return Branch(name=name, hash=head)
        raise NotFound(reference)

    async def get_commit(self, reference: str) -> str:
        return (await self.resolve_branch(reference)).hash

    async def read_file(self, reference: str, path: str) -> str:
        files = self.branches.get(reference)
        if files is None or path not in files:
            raise NotFound(f"{path} does not exist at {reference}")
        return files[path]

    async def write_file(self, reference: str, change: FileChange) -> str:
        if reference not in self.branches:
            self.branches[reference] = dict(self.branches["master"])
        self.branches[reference][change.path] = change.content
        self.writes.append((reference, change))
        self.heads[reference] = self._hash(len(self.writes))
        return self.heads[reference]

    async def close(self) -> None:
        return None


@pytest.fixture
def memory_backend() -> MemoryBackend:
    return MemoryBackend()
