"""Real Git implementation using asyncio subprocesses."""

import asyncio
import logging
from pathlib import Path

from mcp_hub.core.errors import GitOperationError
from mcp_hub.integrations.git.abc import Git, GitResult

logger = logging.getLogger(__name__)


class RealGit(Git):
    """Production implementation running the git executable."""

    async def clone(
        self,
        url: str,
        *,
        cwd: Path,
        directory: str,
        branch: str | None = None,
    ) -> GitResult:
        cmd = ["git", "clone"]
        if branch is not None:
            cmd.extend(["--branch", branch, "--single-branch"])
        cmd.extend([url, directory])

        logger.debug("Running %s in %s", " ".join(cmd), cwd)
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=cwd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GitOperationError(url, f"could not start git: {e}") from e

        stdout, stderr = await process.communicate()
        return GitResult(
            exit_code=process.returncode if process.returncode is not None else -1,
            stdout=stdout.decode(errors="replace"),
            stderr=stderr.decode(errors="replace"),
        )
