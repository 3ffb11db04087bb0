"""Preconfigured record files: the user document, its views and its schema."""

from __future__ import annotations

import uuid
from typing import Any

from folio.backends.base import Backend
from folio.lens import PathLike
from folio.record_file import Fragment, RecordFile

DOCUMENT_ID_FIELD = "FOLIO_UUID"
VIEWS_ID_FIELD = "key"


class Document(RecordFile):
    """The user document, ``<name>.yaml``, with records nested under ``content_path``.

    Records without an identity get a fresh time-based UUID when loaded or
    updated. Ids assigned on load are only persisted by a later write, so two
    loads without a write in between hand out different ids.
    """

    def __init__(self, backend: Backend, name: str, content_path: PathLike) -> None:
        super().__init__(
            backend,
            f"{name}.yaml",
            f"Edit {name} using Folio",
            content_path=content_path,
            id_field=DOCUMENT_ID_FIELD,
        )
        self.name = name

    def prepare_fragment(self, fragment: Fragment) -> Fragment:
        if not fragment.get(self.id_field):
            fragment[self.id_field] = str(uuid.uuid1())
        return fragment


class Views(RecordFile):
    """Saved views in ``views.yaml``, keyed by ``key``."""

    def __init__(self, backend: Backend) -> None:
        super().__init__(
            backend,
            "views.yaml",
            "Edit views using Folio",
            id_field=VIEWS_ID_FIELD,
        )


class Schema(RecordFile):
    """Field definitions in ``schema.yaml``. Updates replace the whole file."""

    def __init__(self, backend: Backend) -> None:
        super().__init__(backend, "schema.yaml", "Edit schema using Folio")

    async def update(self, reference: str, contents: Any) -> str:
        return await self.set(reference, contents)
