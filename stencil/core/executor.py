"""
Plan execution for Stencil.

Applies planned actions to the destination folder, strictly in plan order:
- MKDIR creates the folder and any missing ancestors
- COPY_RAW copies the template file (content and permission bits)
- KEEP, IGNORE and NOTHING leave the destination untouched

Execution is fail-fast: the first failing action aborts the run with
ExecutionFailed. Actions applied before the failure are not rolled back.
"""
import logging
import shutil
from typing import Callable, Iterable, List, Optional

from stencil.core.errors import ExecutionFailed
from stencil.core.logger import get_logger
from stencil.models.actions import Action, FileOperation

module_logger = get_logger(__name__)

ProgressCallback = Callable[[Action], None]

NO_EFFECT = {FileOperation.KEEP, FileOperation.IGNORE, FileOperation.NOTHING}


class Executor:
    """Applies planned actions to the filesystem."""

    def __init__(
        self,
        on_progress: Optional[ProgressCallback] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.on_progress = on_progress
        self.logger = logger or module_logger

    def execute(self, actions: Iterable[Action]) -> List[Action]:
        """Apply every action in order.

        Args:
            actions: Ordered actions produced by the planner

        Returns:
            The actions that were processed

        Raises:
            ExecutionFailed: On the first filesystem failure
        """
        done = []
        for action in actions:
            try:
                self._apply(action)
            except OSError as e:
                self.logger.error(f"Failed to apply {action.operation.value} to {action.dst.absolute}: {e}")
                raise ExecutionFailed(action, e) from e

            done.append(action)
            if self.on_progress:
                self.on_progress(action)

        return done

    def _apply(self, action: Action) -> None:
        operation = action.operation
        target = action.dst.absolute

        if operation in NO_EFFECT:
            self.logger.debug(f"{operation.value}: {target}")
            return

        if operation == FileOperation.MKDIR:
            self.logger.debug(f"mkdir: {target}")
            target.mkdir(parents=True, exist_ok=True)
            return

        if operation == FileOperation.COPY_RAW:
            self.logger.debug(f"copy: {action.src.absolute} -> {target}")
            shutil.copy(action.src.absolute, target)
            return

        raise NotImplementedError(f"{operation.value} is not supported yet")


def execute(
    actions: Iterable[Action],
    on_progress: Optional[ProgressCallback] = None,
    logger: Optional[logging.Logger] = None,
) -> List[Action]:
    """Apply ``actions`` with a one-off Executor."""
    return Executor(on_progress=on_progress, logger=logger).execute(actions)
