"""Backend protocol and shared types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

# Authentication result, cached for the lifetime of a backend
Profile = dict[str, Any]


@dataclass(frozen=True)
class Branch:
    """A branch name and the hash of its tip commit."""

    name: str
    hash: str


@dataclass(frozen=True)
class FileChange:
    """One file write, committed as a single commit."""

    path: str
    content: str
    message: str


@runtime_checkable
class Backend(Protocol):
    """Protocol that all storage backends must implement.

    Every method is scoped to a revision reference (a branch name or a
    commit hash). Writes land as exactly one commit on the named branch.
    """

    async def authenticate(self) -> Profile:
        """Establish credentials. Repeated calls return the cached profile."""
        ...

    async def resolve_branch(self, reference: str) -> Branch:
        """Resolve a branch name or commit hash to a branch and its tip."""
        ...

    async def read_file(self, reference: str, path: str) -> str:
        """Return the text of ``path`` at ``reference``. Raises NotFound."""
        ...

    async def write_file(self, reference: str, change: FileChange) -> str:
        """Write and commit one file on branch ``reference``, return the commit hash."""
        ...

    async def get_commit(self, reference: str) -> str:
        """Return the tip commit hash of the branch behind ``reference``."""
        ...

    async def close(self) -> None:
        """Release any held resources."""
        ...
