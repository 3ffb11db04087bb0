"""GitHub backend: reads and commits through the REST API.

All writes happen server-side with the git data API: blob, tree, commit,
then a fast-forward update of the branch ref. Nothing is cloned locally.

Call ``authenticate()`` before any other method; it opens the HTTP session
and caches the user profile and the repository handle.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any
from urllib.parse import quote

import aiohttp

from folio.backends.base import Branch, FileChange, Profile
from folio.errors import AuthenticationError, BackendFailure, NotFound

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
PER_PAGE = 100


class GitHubBackend:
    """Backend over a repository hosted on GitHub.

    Authenticate with either ``{"token": ...}`` or
    ``{"username": ..., "password": ...}``.
    """

    def __init__(
        self,
        owner: str,
        repository: str,
        credentials: dict[str, str] | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
    ) -> None:
        self.owner = owner
        self.name = repository
        self.credentials = credentials or {}
        self.api_url = api_url.rstrip("/")
        self._session: aiohttp.ClientSession | None = None
        self._profile: Profile | None = None
        self._repository: dict[str, Any] | None = None

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.name}"

    async def authenticate(self) -> Profile:
        if self._session is not None and self._profile is not None:
            return self._profile

        self._session = self._open_session()
        try:
            try:
                profile = await self._api("GET", "/user")
            except BackendFailure as e:
                if e.status in (401, 403):
                    raise AuthenticationError("GitHub login", e.detail, e.status) from e
                raise
            self._repository = await self._api("GET", self.repo_path)
        except BaseException:
            await self.close()
            raise

        self._profile = profile
        logger.info(
            "Authenticated to GitHub as %s (%s/%s)",
            profile.get("login", "?"),
            self.owner,
            self.name,
        )
        return self._profile

    async def resolve_branch(self, reference: str) -> Branch:
        try:
            return await self._get_branch(reference)
        except NotFound:
            pass

        # Not a branch name: look for a branch whose history contains the commit
        branches = await self._list_branches()
        default = self._repository["default_branch"] if self._repository else None
        branches.sort(key=lambda b: b["name"] != default)

        for item in branches:
            branch = Branch(name=item["name"], hash=item["commit"]["sha"])
            if branch.hash.startswith(reference):
                return branch
            comparison = await self._api(
                "GET",
                f"{self.repo_path}/compare/{quote(reference, safe='')}...{quote(branch.name, safe='')}",
            )
            if comparison.get("status") in ("identical", "ahead"):
                return branch

        raise NotFound(f"No branch contains {reference}")

    async def get_commit(self, reference: str) -> str:
        return (await self.resolve_branch(reference)).hash

    async def read_file(self, reference: str, path: str) -> str:
        data = await self._api(
            "GET",
            f"{self.repo_path}/contents/{quote(path)}",
            params={"ref": reference},
        )
        if not isinstance(data, dict) or data.get("type") != "file":
            raise NotFound(f"{path} is not a file at {reference}")

        # Files over 1MB come back without inline content
        if data.get("encoding") == "base64":
            return base64.b64decode(data["content"]).decode("utf-8")
        blob = await self._api("GET", f"{self.repo_path}/git/blobs/{data['sha']}")
        return base64.b64decode(blob["content"]).decode("utf-8")

    async def write_file(self, reference: str, change: FileChange) -> str:
        try:
            branch = await self._get_branch(reference)
        except NotFound:
            branch = await self._create_branch(reference)

        parent = await self._api("GET", f"{self.repo_path}/git/commits/{branch.hash}")
        blob = await self._api(
            "POST",
            f"{self.repo_path}/git/blobs",
            json={"content": change.content, "encoding": "utf-8"},
        )
        tree = await self._api(
            "POST",
            f"{self.repo_path}/git/trees",
            json={
                "base_tree": parent["tree"]["sha"],
                "tree": [
                    {"path": change.path, "mode": "100644", "type": "blob", "sha": blob["sha"]}
                ],
            },
        )
        commit = await self._api(
            "POST",
            f"{self.repo_path}/git/commits",
            json={"message": change.message, "tree": tree["sha"], "parents": [branch.hash]},
        )
        await self._api(
            "PATCH",
            f"{self.repo_path}/git/refs/heads/{quote(reference)}",
            json={"sha": commit["sha"], "force": False},
        )

        logger.info("Committed %s to %s (%s)", change.path, reference, commit["sha"][:10])
        return commit["sha"]

    async def close(self) -> None:
        if self._session is not None:
            await self._session.close()
        self._session = None
        self._profile = None
        self._repository = None

    # ── Internal helpers ──────────────────────────────────────

    async def _get_branch(self, name: str) -> Branch:
        data = await self._api("GET", f"{self.repo_path}/branches/{quote(name)}")
        return Branch(name=data["name"], hash=data["commit"]["sha"])

    async def _list_branches(self) -> list[dict[str, Any]]:
        branches: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = await self._api(
                "GET",
                f"{self.repo_path}/branches",
                params={"per_page": str(PER_PAGE), "page": str(page)},
            )
            branches.extend(batch)
            if len(batch) < PER_PAGE:
                return branches
            page += 1

    async def _create_branch(self, name: str) -> Branch:
        source = await self._get_branch(self._repository["default_branch"])
        await self._api(
            "POST",
            f"{self.repo_path}/git/refs",
            json={"ref": f"refs/heads/{name}", "sha": source.hash},
        )
        logger.info("Created branch %s from %s", name, source.name)
        return Branch(name=name, hash=source.hash)

    def _open_session(self) -> aiohttp.ClientSession:
        headers = {
            "Accept": "application/vnd.github+json",
            "User-Agent": "folio",
        }
        auth = None
        if self.credentials.get("token"):
            headers["Authorization"] = f"token {self.credentials['token']}"
        elif self.credentials.get("username"):
            auth = aiohttp.BasicAuth(
                self.credentials["username"], self.credentials.get("password", "")
            )
        return aiohttp.ClientSession(headers=headers, auth=auth)

    async def _api(self, method: str, path: str, **kwargs: Any) -> Any:
        """Call the API and return the decoded body, raising on error statuses."""
        if self._session is None:
            raise RuntimeError("Call authenticate() before using the GitHub backend")

        status, body = await self._request(method, path, **kwargs)
        if status == 404:
            raise NotFound(f"{method} {path}: not found")
        if status >= 400:
            message = body.get("message", "") if isinstance(body, dict) else str(body or "")
            raise BackendFailure(f"{method} {path}", message, status)
        return body

    async def _request(self, method: str, path: str, **kwargs: Any) -> tuple[int, Any]:
        logger.debug("%s %s", method, path)
        async with self._session.request(method, f"{self.api_url}{path}", **kwargs) as response:
            text = await response.text()
            if not text:
                return response.status, None
            try:
                return response.status, json.loads(text)
            except ValueError:
                # Proxies answer 5xx with HTML
                return response.status, text
