"""Thin wrapper around the git command line."""
import os
import subprocess
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

from stencil.core.errors import GitCommandError
from stencil.core.logger import get_logger

logger = get_logger(__name__)


class GitRunner:
    """Runs git commands and raises GitCommandError on failure."""

    def __init__(self, executable: str = "git", env: Optional[Dict[str, str]] = None):
        self.executable = executable
        self.env = env or {}

    def _command(self, args: Sequence[str], config: Optional[Dict[str, str]] = None) -> List[str]:
        cmd = [self.executable]
        for key, value in (config or {}).items():
            cmd += ['-c', f"{key}={value}"]
        return cmd + list(args)

    def _environ(self, env: Optional[Dict[str, str]]) -> Optional[Dict[str, str]]:
        extra = {**self.env, **(env or {})}
        if not extra:
            return None
        return {**os.environ, **extra}

    def run(
        self,
        args: Sequence[str],
        cwd: Optional[Union[str, Path]] = None,
        env: Optional[Dict[str, str]] = None,
        config: Optional[Dict[str, str]] = None,
        ok_codes: Sequence[int] = (0,),
    ) -> subprocess.CompletedProcess:
        """Run a git command.

        Args:
            args: Arguments after ``git``
            cwd: Working directory (the repository)
            env: Extra environment variables
            config: One-off ``-c key=value`` settings
            ok_codes: Exit codes that are not failures

        Returns:
            The completed process with text stdout/stderr

        Raises:
            GitCommandError: If git is missing or exits with another code
        """
        cmd = self._command(args, config)
        logger.debug(f"Running {' '.join(cmd)}" + (f" in {cwd}" if cwd else ""))

        try:
            result = subprocess.run(
                cmd,
                cwd=str(cwd) if cwd else None,
                env=self._environ(env),
                capture_output=True,
                text=True,
                check=False,
            )
        except FileNotFoundError as e:
            raise GitCommandError(cmd, None, "Git not found. Please install git first.") from e

        if result.returncode not in ok_codes:
            raise GitCommandError(cmd, result.returncode, result.stderr)
        return result

    def output(self, args: Sequence[str], cwd: Optional[Union[str, Path]] = None, **kwargs) -> str:
        """Run a git command and return its stripped stdout."""
        return self.run(args, cwd=cwd, **kwargs).stdout.strip()

    def succeeds(self, args: Sequence[str], cwd: Optional[Union[str, Path]] = None) -> bool:
        """Return True on exit code 0, False on 1, raise on anything else."""
        return self.run(args, cwd=cwd, ok_codes=(0, 1)).returncode == 0
