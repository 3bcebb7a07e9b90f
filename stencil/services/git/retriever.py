"""Clone or update the local working copy of a remote template."""
import logging
from pathlib import Path
from typing import Optional, Union

from stencil.core.errors import CreateFolderFailed, GitCommandError, RetrievalFailed
from stencil.core.logger import get_logger
from stencil.models.repository import MergeAnalysis, RepositoryLocation, Signature
from stencil.services.git.config_reader import GitConfigReader
from stencil.services.git.merge import MergeEngine
from stencil.services.git.runner import GitRunner
from stencil.services.git.transport import TransportOptions, make_transport_options

module_logger = get_logger(__name__)


class TemplateRetriever:
    """Keeps a local working copy of a template repository at a revision.

    A missing destination is cloned. An existing one is reset to the
    revision (local edits, untracked and ignored files are discarded), then
    the revision is fetched and merged into the current branch.
    """

    def __init__(
        self,
        runner: Optional[GitRunner] = None,
        config_reader: Optional[GitConfigReader] = None,
        signature: Optional[Signature] = None,
        remote_name: str = "origin",
        logger: Optional[logging.Logger] = None,
    ):
        self.runner = runner or GitRunner()
        self.config_reader = config_reader or GitConfigReader(self.runner)
        self.signature = signature or Signature()
        self.remote_name = remote_name
        self.logger = logger or module_logger

    def retrieve(
        self,
        destination: Union[str, Path],
        url: str,
        revision: str,
    ) -> Optional[MergeAnalysis]:
        """Clone or update ``destination`` from ``url`` at ``revision``.

        Returns:
            The merge analysis when an existing copy was updated, None after a clone

        Raises:
            CreateFolderFailed: If the destination folder cannot be created
            RetrievalFailed: If any git step fails
        """
        location = RepositoryLocation(path=Path(destination), url=url)
        dst = location.path

        try:
            options = make_transport_options(url, self.config_reader)

            if (dst / ".git").exists():
                self.logger.info(f"git reset cached template: {dst}")
                self.checkout(dst, revision)
                self.logger.info(f"git pull cached template: {dst}")
                return self.pull(location, revision, options)

            self.logger.info(f"git clone into cached template: {dst}")
            self.clone(location, options)
            self.checkout(dst, revision)
            return None
        except GitCommandError as e:
            raise RetrievalFailed(dst, url, revision, e) from e

    def clone(self, location: RepositoryLocation, options: TransportOptions) -> None:
        """Clone the remote's default branch into ``location.path``."""
        dst = location.path
        try:
            dst.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise CreateFolderFailed(dst, e) from e

        self.runner.run(
            ['clone', '--origin', self.remote_name, location.url, str(dst)],
            env=options.env,
            config=options.config,
        )

    def checkout(self, dst: Path, revision: str) -> None:
        """Force the working tree to ``revision`` without moving HEAD.

        Untracked and ignored files are removed.
        """
        tree = self.runner.output(['rev-parse', '--verify', f"{revision}^{{tree}}"], cwd=dst)
        self.runner.run(['read-tree', '--reset', '-u', tree], cwd=dst)
        self.runner.run(['clean', '-ffdxq'], cwd=dst)

    def pull(self, location: RepositoryLocation, revision: str, options: TransportOptions) -> MergeAnalysis:
        """Fetch ``revision`` from the remote and merge it into the current branch."""
        dst = location.path
        self.runner.run(
            ['fetch', '--tags', self.remote_name, revision],
            cwd=dst,
            env=options.env,
            config=options.config,
        )
        fetch_commit = self.fetch_head_commit(dst)

        engine = MergeEngine(dst, runner=self.runner, signature=self.signature, logger=self.logger)
        return engine.merge(engine.current_branch(), fetch_commit)

    def fetch_head_commit(self, dst: Path) -> str:
        """Commit id of the first for-merge entry recorded in FETCH_HEAD."""
        fetch_head = dst / self.runner.output(['rev-parse', '--git-path', 'FETCH_HEAD'], cwd=dst)
        try:
            lines = fetch_head.read_text().splitlines()
        except OSError as e:
            raise GitCommandError(['fetch', self.remote_name], None, f"Cannot read {fetch_head}: {e}") from e

        for line in lines:
            fields = line.split('\t')
            if len(fields) >= 2 and fields[1] != 'not-for-merge':
                return self.runner.output(['rev-parse', '--verify', f"{fields[0]}^{{commit}}"], cwd=dst)
        raise GitCommandError(['fetch', self.remote_name], None, "FETCH_HEAD has no commit to merge")


def retrieve(
    destination: Union[str, Path],
    url: str,
    revision: str,
    logger: Optional[logging.Logger] = None,
    signature: Optional[Signature] = None,
) -> Optional[MergeAnalysis]:
    """Clone or update ``destination`` from ``url`` at ``revision``."""
    return TemplateRetriever(logger=logger, signature=signature).retrieve(destination, url, revision)
