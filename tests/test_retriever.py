"""Tests for cloning and updating template working copies."""
from conftest import commit_file, requires_git, requires_merge_tree, run_git

import pytest

from stencil.core.errors import RetrievalFailed
from stencil.models.repository import MergeAnalysis, Signature
from stencil.services.git.retriever import TemplateRetriever, retrieve
from stencil.services.git.runner import GitRunner

pytestmark = requires_git


class TestRetrieve:
    """Test retrieve() against real local repositories."""

    def test_clone_then_follow_upstream(self, tmp_path, template_repo):
        """Each retrieve brings the working copy to the latest template."""
        dst = tmp_path / "cache" / "dst"

        assert retrieve(dst, str(template_repo), "master") is None
        assert (dst / "foo.txt").read_text() == "v1: Lorem ipsum\n"

        commit_file(template_repo, "foo.txt", "v2: Hello\n")
        assert retrieve(dst, str(template_repo), "master") == MergeAnalysis.FAST_FORWARD
        assert (dst / "foo.txt").read_text() == "v2: Hello\n"

        commit_file(template_repo, "foo.txt", "v3: Hourra\n")
        retrieve(dst, str(template_repo), "master")
        assert (dst / "foo.txt").read_text() == "v3: Hourra\n"

    def test_fast_forward_matches_upstream_tree(self, tmp_path, template_repo):
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "master")

        commit_file(template_repo, "docs/readme.md", "# docs\n")
        run_git(template_repo, 'rm', '-q', 'foo.txt')
        run_git(template_repo, 'commit', '-q', '-m', 'drop foo')
        upstream = run_git(template_repo, 'rev-parse', 'HEAD')

        retrieve(dst, str(template_repo), "master")

        assert run_git(dst, 'rev-parse', 'HEAD') == upstream
        assert run_git(dst, 'rev-parse', 'HEAD^{tree}') == run_git(template_repo, 'rev-parse', 'HEAD^{tree}')
        assert not (dst / "foo.txt").exists()
        assert (dst / "docs" / "readme.md").read_text() == "# docs\n"

    def test_retrieve_is_idempotent(self, tmp_path, template_repo):
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "master")
        head = run_git(dst, 'rev-parse', 'HEAD')

        assert retrieve(dst, str(template_repo), "master") == MergeAnalysis.UP_TO_DATE
        assert retrieve(dst, str(template_repo), "master") == MergeAnalysis.UP_TO_DATE

        assert run_git(dst, 'rev-parse', 'HEAD') == head
        assert (dst / "foo.txt").read_text() == "v1: Lorem ipsum\n"
        assert run_git(dst, 'status', '--porcelain') == ""

    def test_default_branch_revision(self, tmp_path, template_repo):
        """HEAD names the remote's default branch."""
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "HEAD")

        commit_file(template_repo, "foo.txt", "v2\n")
        assert retrieve(dst, str(template_repo), "HEAD") == MergeAnalysis.FAST_FORWARD
        assert (dst / "foo.txt").read_text() == "v2\n"

    def test_local_changes_are_discarded(self, tmp_path, template_repo):
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "master")
        (dst / "foo.txt").write_text("local edit\n")
        (dst / "untracked.txt").write_text("scratch\n")

        retrieve(dst, str(template_repo), "master")

        assert (dst / "foo.txt").read_text() == "v1: Lorem ipsum\n"
        assert not (dst / "untracked.txt").exists()

    def test_clone_at_tag(self, tmp_path, template_repo):
        run_git(template_repo, 'tag', 'v1')
        commit_file(template_repo, "foo.txt", "v2\n")
        dst = tmp_path / "dst"

        retrieve(dst, str(template_repo), "v1")

        assert (dst / "foo.txt").read_text() == "v1: Lorem ipsum\n"

    @requires_merge_tree
    def test_conflicting_histories_leave_markers(self, tmp_path, template_repo):
        """Diverging edits of the same file are not committed."""
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "master")
        local = commit_file(dst, "foo.txt", "local: mine\n", "local edit")
        commit_file(template_repo, "foo.txt", "remote: theirs\n", "remote edit")

        analysis = retrieve(dst, str(template_repo), "master")

        assert analysis == MergeAnalysis.CONFLICTED
        content = (dst / "foo.txt").read_text()
        assert "<<<<<<<" in content
        assert "local: mine" in content
        assert "remote: theirs" in content
        assert run_git(dst, 'rev-parse', 'HEAD') == local
        assert run_git(dst, 'rev-list', '--merges', 'HEAD') == ""

    @requires_merge_tree
    def test_diverged_histories_merge_cleanly(self, tmp_path, template_repo):
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "master")
        local = commit_file(dst, "bar.txt", "local file\n", "local file")
        remote = commit_file(template_repo, "foo.txt", "v2\n", "remote edit")

        retriever = TemplateRetriever(signature=Signature(name="Sync Bot", email="bot@example.com"))
        analysis = retriever.retrieve(dst, str(template_repo), "master")

        assert analysis == MergeAnalysis.NORMAL
        parents = run_git(dst, 'rev-list', '--parents', '-n', '1', 'HEAD').split()[1:]
        assert parents == [local, remote]
        assert run_git(dst, 'log', '-1', '--format=%an <%ae>') == "Sync Bot <bot@example.com>"
        assert run_git(dst, 'log', '-1', '--format=%s') == f"Merge: {remote} into {local}"
        assert (dst / "foo.txt").read_text() == "v2\n"
        assert (dst / "bar.txt").read_text() == "local file\n"
        assert run_git(dst, 'symbolic-ref', '--short', 'HEAD') == "master"

    def test_failure_carries_context(self, tmp_path, isolated_git_config):
        dst = tmp_path / "dst"
        url = str(tmp_path / "no-such-repo")

        with pytest.raises(RetrievalFailed) as exc_info:
            retrieve(dst, url, "master")

        err = exc_info.value
        assert err.destination == dst
        assert err.url == url
        assert err.revision == "master"
        assert str(dst) in str(err)
        assert url in str(err)
        assert "'master'" in str(err)

    def test_unknown_revision_fails(self, tmp_path, template_repo):
        dst = tmp_path / "dst"
        retrieve(dst, str(template_repo), "master")

        with pytest.raises(RetrievalFailed) as exc_info:
            retrieve(dst, str(template_repo), "no-such-branch")

        assert exc_info.value.revision == "no-such-branch"

    def test_missing_git_binary(self, tmp_path):
        retriever = TemplateRetriever(runner=GitRunner(executable="git-not-installed-here"))

        with pytest.raises(RetrievalFailed) as exc_info:
            retriever.retrieve(tmp_path / "dst", "https://example.com/t.git", "HEAD")

        assert "Git not found" in str(exc_info.value.cause)
        assert not (tmp_path / "dst").exists()
