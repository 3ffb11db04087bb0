"""Configuration loading from environment variables and folio.toml."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib
from pathlib import Path

_CONFIG_FILENAME = "folio.toml"


@dataclass
class RepositoryConfig:
    """Where the records live: a local working copy or a GitHub repository."""

    backend: str = "github"
    reference: str = "master"
    path: str | None = None
    owner: str = ""
    name: str = ""
    token: str | None = None
    username: str | None = None
    password: str | None = None
    api_url: str = "https://api.github.com"
    author_name: str | None = None
    author_email: str | None = None

    @property
    def credentials(self) -> dict[str, str]:
        if self.token:
            return {"token": self.token}
        if self.username:
            return {"username": self.username, "password": self.password or ""}
        return {}


@dataclass
class DocumentConfig:
    """The user document file and the key its records are nested under."""

    name: str = "document"
    content_path: str = "Document"


@dataclass
class FolioConfig:
    """Top-level folio configuration."""

    repository: RepositoryConfig = field(default_factory=RepositoryConfig)
    document: DocumentConfig = field(default_factory=DocumentConfig)
    log_level: str = "INFO"


def load_config(config_path: Path | None = None) -> FolioConfig:
    """Load configuration from environment variables and optional folio.toml.

    Priority: environment variables > folio.toml > defaults.
    """
    file_data: dict = {}
    if config_path and config_path.exists():
        file_data = tomllib.loads(config_path.read_text())
    else:
        for candidate in [Path.cwd() / _CONFIG_FILENAME, Path.home() / ".folio" / _CONFIG_FILENAME]:
            if candidate.exists():
                file_data = tomllib.loads(candidate.read_text())
                break

    repo_data = file_data.get("repository", {})
    document_data = file_data.get("document", {})

    return FolioConfig(
        repository=RepositoryConfig(
            backend=os.getenv("FOLIO_BACKEND", repo_data.get("backend", "github")),
            reference=os.getenv("FOLIO_REFERENCE", repo_data.get("reference", "master")),
            path=os.getenv("FOLIO_REPO_PATH", repo_data.get("path")),
            owner=os.getenv("FOLIO_OWNER", repo_data.get("owner", "")),
            name=os.getenv("FOLIO_REPO", repo_data.get("name", "")),
            token=os.getenv("GITHUB_TOKEN", repo_data.get("token")),
            username=os.getenv("FOLIO_USERNAME", repo_data.get("username")),
            password=os.getenv("FOLIO_PASSWORD", repo_data.get("password")),
            api_url=os.getenv("FOLIO_API_URL", repo_data.get("api_url", "https://api.github.com")),
            author_name=repo_data.get("author_name"),
            author_email=repo_data.get("author_email"),
        ),
        document=DocumentConfig(
            name=os.getenv("FOLIO_DOCUMENT", document_data.get("name", "document")),
            content_path=os.getenv(
                "FOLIO_CONTENT_PATH", document_data.get("content_path", "Document")
            ),
        ),
        log_level=os.getenv("FOLIO_LOG_LEVEL", file_data.get("log_level", "INFO")),
    )
