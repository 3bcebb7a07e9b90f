"""Merge a fetched commit into the local branch of a template working copy."""
import logging
from pathlib import Path
from typing import Optional, Union

from stencil.core.logger import get_logger
from stencil.models.repository import MergeAnalysis, Signature
from stencil.services.git.runner import GitRunner

module_logger = get_logger(__name__)


class MergeEngine:
    """Decides between fast-forward, three-way merge or no-op and performs it.

    The working copy at ``repo_path`` is updated in place. Conflicting
    three-way merges leave conflict markers in the working tree and create
    no merge commit.
    """

    def __init__(
        self,
        repo_path: Union[str, Path],
        runner: Optional[GitRunner] = None,
        signature: Optional[Signature] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.repo_path = Path(repo_path)
        self.runner = runner or GitRunner()
        self.signature = signature or Signature()
        self.logger = logger or module_logger

    def _git(self, *args, **kwargs) -> str:
        return self.runner.output(list(args), cwd=self.repo_path, **kwargs)

    def _resolve(self, rev: str) -> Optional[str]:
        result = self.runner.run(
            ['rev-parse', '--verify', '--quiet', f"{rev}^{{commit}}"],
            cwd=self.repo_path,
            ok_codes=(0, 1),
        )
        return result.stdout.strip() if result.returncode == 0 else None

    def _is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return self.runner.succeeds(['merge-base', '--is-ancestor', ancestor, descendant], cwd=self.repo_path)

    def _checkout_head(self) -> None:
        # Forced so files that look unchanged are still refreshed.
        self._git('read-tree', '--reset', '-u', 'HEAD')

    def current_branch(self) -> str:
        """Name of the branch HEAD points to (may be unborn)."""
        return self._git('symbolic-ref', '--short', 'HEAD')

    def analyze(self, fetch_commit: str) -> MergeAnalysis:
        """Compare the local branch tip with ``fetch_commit``."""
        head = self._resolve('HEAD')
        if head is None:
            return MergeAnalysis.FAST_FORWARD
        if head == fetch_commit or self._is_ancestor(fetch_commit, head):
            return MergeAnalysis.UP_TO_DATE
        if self._is_ancestor(head, fetch_commit):
            return MergeAnalysis.FAST_FORWARD
        return MergeAnalysis.NORMAL

    def merge(self, branch: str, fetch_commit: str) -> MergeAnalysis:
        """Bring ``branch`` up to date with ``fetch_commit``.

        Returns:
            The analysis acted on, CONFLICTED when a three-way merge had conflicts
        """
        analysis = self.analyze(fetch_commit)

        if analysis == MergeAnalysis.FAST_FORWARD:
            self.logger.debug(f"git merge: doing a fast forward ({branch} -> {fetch_commit})")
            refname = f"refs/heads/{branch}"
            if self._resolve(refname) is not None:
                self.fast_forward(refname, fetch_commit)
            else:
                # Unborn branch, usually a freshly initialised repository.
                self._git('update-ref', '-m', f"Setting {branch} to {fetch_commit}", refname, fetch_commit)
                self._git('symbolic-ref', 'HEAD', refname)
                self._checkout_head()
            return analysis

        if analysis == MergeAnalysis.NORMAL:
            self.logger.debug(f"git merge: doing normal merge ({branch} with {fetch_commit})")
            head = self._resolve('HEAD')
            return self.normal_merge(head, fetch_commit)

        self.logger.debug("git merge: nothing to do")
        return analysis

    def fast_forward(self, refname: str, fetch_commit: str) -> None:
        """Move ``refname`` to ``fetch_commit`` and refresh the working tree."""
        msg = f"Fast-Forward: Setting {refname} to id: {fetch_commit}"
        self.logger.debug(msg)
        self._git('update-ref', '-m', msg, refname, fetch_commit)
        self._git('symbolic-ref', 'HEAD', refname)
        self._checkout_head()

    def normal_merge(self, local: str, remote: str) -> MergeAnalysis:
        """Three-way merge of ``local`` and ``remote`` (needs git 2.38+)."""
        base = self._git('merge-base', local, remote)
        self.logger.debug(f"git merge: merge base of {local} and {remote} is {base}")
        result = self.runner.run(
            ['merge-tree', '--write-tree', '--messages', local, remote],
            cwd=self.repo_path,
            ok_codes=(0, 1),
        )
        merged_tree = result.stdout.splitlines()[0].strip()

        if result.returncode == 1:
            self.logger.warning(
                f"Merge conflicts detected in {self.repo_path}; "
                "conflict markers left in the working tree"
            )
            self._git('read-tree', '--reset', '-u', merged_tree)
            return MergeAnalysis.CONFLICTED

        msg = f"Merge: {remote} into {local}"
        merge_commit = self._git(
            'commit-tree', merged_tree, '-p', local, '-p', remote, '-m', msg,
            env=self.signature.as_env(),
        )
        self._git('update-ref', '-m', msg, 'HEAD', merge_commit)
        self._checkout_head()
        return MergeAnalysis.NORMAL
