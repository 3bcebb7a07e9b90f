"""Template repository models."""
from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True)
class RepositoryLocation:
    """A local working copy and the remote it tracks."""
    path: Path
    url: str


@dataclass(frozen=True)
class Signature:
    """Identity recorded on commits created by Stencil."""
    name: str = "stencil"
    email: str = "stencil@localhost"

    def as_env(self) -> dict:
        """Environment variables that make git use this identity."""
        return {
            "GIT_AUTHOR_NAME": self.name,
            "GIT_AUTHOR_EMAIL": self.email,
            "GIT_COMMITTER_NAME": self.name,
            "GIT_COMMITTER_EMAIL": self.email,
        }


class MergeAnalysis(Enum):
    """Outcome of comparing the local branch tip with a fetched commit."""
    UP_TO_DATE = "up_to_date"
    FAST_FORWARD = "fast_forward"
    NORMAL = "normal"
    CONFLICTED = "conflicted"
