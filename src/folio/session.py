"""Folio session: one backend, one reference, and the files kept on it.

Every public method authenticates first (a no-op once the backend has a
cached profile), so a session can be used without an explicit setup step.
"""

from __future__ import annotations

import logging
from typing import Any

from folio.backends.base import Backend, Profile
from folio.backends.git import LocalGitBackend
from folio.backends.github import GitHubBackend
from folio.config import RepositoryConfig
from folio.files import Document, Schema, Views
from folio.lens import PathLike
from folio.record_file import Fragment, RecordFile

logger = logging.getLogger(__name__)


def build_backend(repository: RepositoryConfig) -> Backend:
    """Create the backend named by ``repository.backend``."""
    if repository.backend == "github":
        return GitHubBackend(
            repository.owner,
            repository.name,
            repository.credentials,
            api_url=repository.api_url,
        )
    if repository.backend == "git":
        if not repository.path:
            raise ValueError("The git backend needs a repository path")
        return LocalGitBackend(
            repository.path,
            author_name=repository.author_name,
            author_email=repository.author_email,
        )
    raise ValueError(f"Unsupported backend: {repository.backend}")


class Folio:
    """Structured records versioned in a git repository."""

    def __init__(
        self,
        backend: Backend,
        reference: str,
        document: str,
        content_path: PathLike,
        *,
        collections: dict[str, RecordFile] | None = None,
    ) -> None:
        self.backend = backend
        self.reference = reference
        self.document = Document(backend, document, content_path)
        self.views = Views(backend)
        self.schema = Schema(backend)
        self._files: dict[str, RecordFile] = {
            "document": self.document,
            "views": self.views,
            "schema": self.schema,
        }
        for name, record_file in (collections or {}).items():
            self.add_collection(name, record_file)

    @classmethod
    def from_config(
        cls, repository: RepositoryConfig, document: str, content_path: PathLike
    ) -> Folio:
        return cls(build_backend(repository), repository.reference, document, content_path)

    def add_collection(self, name: str, record_file: RecordFile) -> None:
        self._files[name] = record_file
        logger.debug("Registered collection %s (%s)", name, record_file.path)

    def _get_file(self, name: str) -> RecordFile:
        record_file = self._files.get(name)
        if record_file is None:
            raise KeyError(f"Collection '{name}' not registered. Available: {list(self._files)}")
        return record_file

    # ── Lifecycle ─────────────────────────────────────────────

    async def ready(self) -> Profile:
        """Ensure the backend is authenticated and return its profile."""
        return await self.backend.authenticate()

    async def head(self) -> str:
        """Tip commit of the session's reference."""
        await self.ready()
        return await self.backend.get_commit(self.reference)

    async def close(self) -> None:
        await self.backend.close()

    async def __aenter__(self) -> Folio:
        await self.ready()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ── Generic collection access ─────────────────────────────

    async def get(self, name: str) -> Any:
        record_file = self._get_file(name)
        await self.ready()
        return await record_file.load(self.reference)

    async def update(self, name: str, fragment: Any) -> str:
        """Merge one record, or for files without identities the given value."""
        record_file = self._get_file(name)
        await self.ready()
        if record_file.id_field is None:
            return await record_file.update(self.reference, fragment)
        return await record_file.update(self.reference, [fragment])

    async def delete(self, name: str, identity: Any) -> str:
        record_file = self._get_file(name)
        await self.ready()
        return await record_file.delete_element(self.reference, identity)

    # ── Document ──────────────────────────────────────────────

    async def get_fragments(self) -> list[Fragment]:
        return await self.get("document")

    async def update_fragment(self, fragment: Fragment) -> str:
        return await self.update("document", fragment)

    async def delete_fragment(self, uuid: str) -> str:
        return await self.delete("document", uuid)

    # ── Views ─────────────────────────────────────────────────

    async def get_views(self) -> list[Fragment]:
        return await self.get("views")

    async def update_view(self, view: Fragment) -> str:
        return await self.update("views", view)

    async def delete_view(self, key: str) -> str:
        return await self.delete("views", key)

    # ── Schema ────────────────────────────────────────────────

    async def get_schema(self) -> Any:
        return await self.get("schema")

    async def update_schema(self, schema: Any) -> str:
        """Replace the whole schema."""
        await self.ready()
        return await self.schema.update(self.reference, schema)
