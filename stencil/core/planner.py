"""Action planner: mirror a template tree onto a destination folder."""
import os
from pathlib import Path
from typing import Iterable, List, Union

from stencil.models.actions import Action, FileOperation
from stencil.models.paths import ChildPath


def compute_dst_path(destination_base: Path, src: ChildPath) -> ChildPath:
    """Mirror a template entry under the destination folder."""
    return src.rebase(destination_base)


def _sort_key(pair):
    src, dst = pair
    # Segment tuples order every folder before its descendants.
    return (dst.relative.parts, src.relative.parts)


def decide_operation(src: ChildPath, dst: ChildPath) -> FileOperation:
    """Pick the operation for one entry from the live destination state.

    Existing destination entries always win and are kept untouched.
    """
    if os.path.lexists(dst.absolute):
        return FileOperation.KEEP
    if src.absolute.is_dir():
        return FileOperation.MKDIR
    return FileOperation.COPY_RAW


def plan(destination_base: Union[str, Path], src_paths: Iterable[ChildPath]) -> List[Action]:
    """List actions to execute, one per template entry, in apply order.

    Args:
        destination_base: Folder the template is materialized into
        src_paths: Entries found by the tree scanner

    Returns:
        Actions sorted so that parents are always handled before children
    """
    destination_base = Path(destination_base)
    pairs = [(src, compute_dst_path(destination_base, src)) for src in src_paths]
    pairs.sort(key=_sort_key)

    return [
        Action(src=src, dst=dst, operation=decide_operation(src, dst))
        for src, dst in pairs
    ]


def format_plan(actions: List[Action]) -> str:
    """Format actions as a human-readable plan."""
    changes = [a for a in actions if a.operation in (FileOperation.MKDIR, FileOperation.COPY_RAW)]
    kept = [a for a in actions if a.operation == FileOperation.KEEP and not a.dst.is_root]

    if not changes:
        return "No changes required. Destination is up to date with the template."

    lines = ["Stencil will perform the following actions:\n"]
    for action in actions:
        relative = action.dst.relative.as_posix()
        if action.operation == FileOperation.MKDIR:
            lines.append(f"  + {relative}/" if not action.dst.is_root else f"  + {action.dst.base}/")
        elif action.operation == FileOperation.COPY_RAW:
            lines.append(f"  + {relative}")
        elif action.operation == FileOperation.KEEP and not action.dst.is_root:
            lines.append(f"  = {relative} (exists, kept)")

    lines.append("")
    lines.append(f"Plan: {len(changes)} to create, {len(kept)} kept")
    return "\n".join(lines)
