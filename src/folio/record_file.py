"""RecordFile: load, merge and delete records kept in one YAML file.

A record file is configured with a path, a commit message, an optional
``content_path`` locating the record list inside the decoded document, and an
optional ``id_field`` used to match records across loads and updates.

Merge strategies:
- with ``id_field``: union by identity. Incoming records replace existing
  records with the same identity and come first; untouched records follow in
  their original order.
- without ``id_field``: the incoming value is deep-merged into the loaded one.
"""

from __future__ import annotations

import logging
from typing import Any

from folio import codec
from folio.backends.base import Backend, FileChange
from folio.errors import UnsupportedOperation
from folio.lens import PathLike, deep_merge, get_in, set_in, split_path

logger = logging.getLogger(__name__)

Fragment = dict[str, Any]


class RecordFile:
    """Generic record file over a backend."""

    def __init__(
        self,
        backend: Backend,
        file_path: str,
        commit_message: str,
        content_path: PathLike = None,
        id_field: str | None = None,
    ) -> None:
        self.backend = backend
        self.path = file_path
        self.commit_message = commit_message
        self.content_path = split_path(content_path)
        self.id_field = id_field or None

    def prepare_fragment(self, fragment: Fragment) -> Fragment:
        """Hook applied to every loaded and incoming record. Identity by default."""
        return fragment

    async def load(self, reference: str) -> Any:
        """Read and decode the file, returning the value at ``content_path``."""
        codec.check_format(self.path)
        text = await self.backend.read_file(reference, self.path)
        value = get_in(codec.decode(text, self.path), self.content_path)

        if self.id_field is None:
            return value
        if value is None:
            return []
        return [self.prepare_fragment(fragment) for fragment in value]

    async def set(self, reference: str, contents: Any) -> str:
        """Replace the file contents entirely. Returns the commit hash."""
        content = codec.encode(set_in(self.content_path, contents), self.path)
        return await self.backend.write_file(
            reference,
            FileChange(path=self.path, content=content, message=self.commit_message),
        )

    async def update(self, reference: str, contents: Any) -> str:
        """Merge ``contents`` into the stored value and write the result."""
        codec.check_format(self.path)
        source = await self.load(reference)

        if self.id_field is None:
            merged = deep_merge(source, contents)
        else:
            incoming = [self.prepare_fragment(fragment) for fragment in contents]
            merged = self._union(incoming, source)

        logger.debug("Updating %s at %s", self.path, reference)
        return await self.set(reference, merged)

    async def delete_element(self, reference: str, identity: Any) -> str:
        """Remove every record whose identity equals ``identity``."""
        if self.id_field is None:
            raise UnsupportedOperation(f"File {self.path} doesn't contain elements")

        source = await self.load(reference)
        remaining = [
            fragment for fragment in source if fragment.get(self.id_field) != identity
        ]
        if len(remaining) == len(source):
            logger.debug("No element %r in %s at %s", identity, self.path, reference)
        return await self.set(reference, remaining)

    def _union(self, incoming: list[Fragment], existing: list[Fragment]) -> list[Fragment]:
        seen: list[Any] = []
        result = []
        for fragment in [*incoming, *existing]:
            identity = fragment.get(self.id_field)
            if identity in seen:
                continue
            seen.append(identity)
            result.append(fragment)
        return result
