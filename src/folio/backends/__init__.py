"""Storage backends: local git working copy and GitHub REST API."""

from folio.backends.base import Backend, Branch, FileChange, Profile
from folio.backends.git import LocalGitBackend
from folio.backends.github import GitHubBackend

__all__ = [
    "Backend",
    "Branch",
    "FileChange",
    "GitHubBackend",
    "LocalGitBackend",
    "Profile",
]
