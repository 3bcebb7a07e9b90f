"""Filesystem path models."""
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ChildPath:
    """A filesystem entry addressed relative to a root folder.

    The root itself is represented with ``relative == Path(".")``.
    """
    relative: Path
    base: Path
    is_symlink: bool = False

    @property
    def absolute(self) -> Path:
        """Location of the entry on disk (base + relative)."""
        return self.base / self.relative

    @property
    def is_root(self) -> bool:
        return self.relative == Path(".")

    def rebase(self, base: Path) -> "ChildPath":
        """Return the same relative entry under another root."""
        return ChildPath(relative=self.relative, base=Path(base), is_symlink=self.is_symlink)
