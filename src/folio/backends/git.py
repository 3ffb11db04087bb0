"""Local git backend: sequential git commands against one working copy.

Each write checks out the target branch (creating it from the current
checkout when missing), writes the file, stages it and commits. Reads never
touch the working tree: they go through ``git show <ref>:<path>``.
"""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

from folio.backends.base import Branch, FileChange, Profile
from folio.errors import BackendFailure, NotFound

logger = logging.getLogger(__name__)


class LocalGitBackend:
    """Backend over a git repository on local storage."""

    def __init__(
        self,
        path: str | Path,
        *,
        author_name: str | None = None,
        author_email: str | None = None,
        git: str = "git",
    ) -> None:
        self.path = Path(path)
        self.author_name = author_name
        self.author_email = author_email
        self.git = git
        self._profile: Profile | None = None
        self._lock = asyncio.Lock()  # one working copy, one checkout at a time

    async def authenticate(self) -> Profile:
        # Nothing to log in to; the profile is always empty
        if self._profile is None:
            self._profile = {}
        return self._profile

    async def resolve_branch(self, reference: str) -> Branch:
        if await self._is_branch(reference):
            name = reference
        else:
            name = await self._branch_containing(reference)
        return Branch(name=name, hash=await self._rev_parse(f"refs/heads/{name}"))

    async def get_commit(self, reference: str) -> str:
        return (await self.resolve_branch(reference)).hash

    async def read_file(self, reference: str, path: str) -> str:
        object_name = f"{reference}:{path}"
        returncode, _, _ = await self._exec("cat-file", "-e", object_name)
        if returncode != 0:
            raise NotFound(f"{path} does not exist at {reference}")
        return await self._run("show", object_name)

    async def write_file(self, reference: str, change: FileChange) -> str:
        async with self._lock:
            await self._checkout(reference)

            tracked = await self._is_tracked(change.path)
            try:
                target = self.path / change.path
                target.parent.mkdir(parents=True, exist_ok=True)
                await asyncio.to_thread(target.write_text, change.content, encoding="utf-8")

                await self._run("add", "--", change.path)
                # --only keeps anything else already staged out of the commit
                await self._run(
                    *self._identity(),
                    "commit",
                    "--allow-empty",
                    "-m",
                    change.message,
                    "--only",
                    "--",
                    change.path,
                )
            except BaseException:
                await self._restore(change.path, tracked)
                raise
            commit = await self._rev_parse(f"refs/heads/{reference}")

        logger.info("Committed %s to %s (%s)", change.path, reference, commit[:10])
        return commit

    async def close(self) -> None:
        return None

    # ── Internal helpers ──────────────────────────────────────

    async def _checkout(self, reference: str) -> None:
        if await self._is_branch(reference):
            await self._run("checkout", "--quiet", reference)
            return

        returncode, _, _ = await self._exec("rev-parse", "--verify", "--quiet", "HEAD")
        if returncode == 0:
            await self._run("checkout", "--quiet", "-b", reference)
        else:
            # Empty repository: the first commit creates the branch
            await self._run("symbolic-ref", "HEAD", f"refs/heads/{reference}")
        logger.info("Created branch %s in %s", reference, self.path)

    async def _is_tracked(self, path: str) -> bool:
        returncode, _, _ = await self._exec("cat-file", "-e", f"HEAD:{path}")
        return returncode == 0

    async def _restore(self, path: str, tracked: bool) -> None:
        """Put ``path`` back to its committed state after a failed write."""
        try:
            if tracked:
                await self._run("reset", "--quiet", "--", path)
                await self._run("checkout", "--", path)
            else:
                await self._run("rm", "--cached", "--quiet", "--ignore-unmatch", "--", path)
                await asyncio.to_thread((self.path / path).unlink, missing_ok=True)
        except (BackendFailure, OSError) as e:
            logger.warning("Could not restore %s after failed write: %s", path, e)

    async def _is_branch(self, reference: str) -> bool:
        returncode, _, _ = await self._exec(
            "show-ref", "--verify", "--quiet", f"refs/heads/{reference}"
        )
        return returncode == 0

    async def _branch_containing(self, reference: str) -> str:
        returncode, _, _ = await self._exec(
            "rev-parse", "--verify", "--quiet", f"{reference}^{{commit}}"
        )
        if returncode != 0:
            raise NotFound(f"Unknown reference: {reference}")

        output = await self._run(
            "branch", "--contains", reference, "--format=%(refname:short)"
        )
        names = [line.strip() for line in output.splitlines() if line.strip()]
        if not names:
            raise NotFound(f"No branch contains {reference}")
        return names[0]

    async def _rev_parse(self, reference: str) -> str:
        returncode, stdout, _ = await self._exec("rev-parse", "--verify", "--quiet", reference)
        if returncode != 0:
            raise NotFound(f"Unknown reference: {reference}")
        return stdout.strip()

    def _identity(self) -> list[str]:
        args = []
        if self.author_name:
            args.extend(["-c", f"user.name={self.author_name}"])
        if self.author_email:
            args.extend(["-c", f"user.email={self.author_email}"])
        return args

    async def _run(self, *args: str) -> str:
        """Run a git command and return stdout, raising on non-zero exit."""
        returncode, stdout, stderr = await self._exec(*args)
        if returncode != 0:
            raise BackendFailure(f"git {' '.join(args)}", stderr)
        return stdout

    async def _exec(self, *args: str) -> tuple[int, str, str]:
        logger.debug("git %s (cwd=%s)", " ".join(args), self.path)
        process = await asyncio.create_subprocess_exec(
            self.git,
            *args,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=self.path,
        )
        stdout, stderr = await process.communicate()
        return process.returncode, stdout.decode(), stderr.decode()
