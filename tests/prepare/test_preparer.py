"""Tests for the preparation pipeline."""

import re
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from git import Repo
from git.exc import GitCommandError

from repoprep.git.client import GitClient
from repoprep.git.exceptions import (
    AuthorizationError,
    ConfigurationError,
    NormalizationError,
)
from repoprep.model.config import AuthenticationCredentials, PreparationConfig
from repoprep.model.context import ABSENT, BuildContextPresent
from repoprep.prepare.preparer import GitPreparer, prepare

from ..repos import commit_file, init_repo, init_with_remotes

URL = "https://host/org/proj.git"


@pytest.fixture
def normalizer():
    return MagicMock()


@pytest.fixture
def client():
    """A client that never touches git."""
    client = MagicMock()
    client.clone.side_effect = lambda url, destination, checkout, env: (
        Path(destination) / ".git"
    )
    return client


@pytest.fixture
def local_repo(tmp_path):
    """A local working copy with two remotes and no origin."""
    path = tmp_path / "work"
    repo = init_with_remotes(
        path, ("upstream", "https://host/org/proj.git"), ("fork", "https://f/p.git")
    )
    commit_file(repo, "README.md", "hello")
    repo.close()
    return path


@pytest.mark.short
class TestDynamicRepository:
    @pytest.mark.parametrize("branch", [None, "", "   "])
    def test_requires_target_branch(self, tmp_path, client, normalizer, branch):
        clone_base = tmp_path / "clones"
        config = PreparationConfig(
            target_url=URL,
            target_branch=branch,
            dynamic_repository_clone_path=clone_base,
        )

        with pytest.raises(ConfigurationError, match="must have a target branch"):
            GitPreparer(config, normalizer=normalizer, client=client).prepare()

        assert client.mock_calls == []
        normalizer.normalize.assert_not_called()
        assert not clone_base.exists()

    def test_clones_into_temp_dir(self, temp_root, client, normalizer):
        config = PreparationConfig(target_url=URL, target_branch="main")

        result = GitPreparer(config, normalizer=normalizer, client=client).prepare()

        args, kwargs = client.clone.call_args
        assert args == (URL, temp_root / "proj")
        assert kwargs["checkout"] is False
        normalizer.normalize.assert_called_once_with(
            temp_root / "proj" / ".git", None, False, "main", True
        )
        assert result.dot_git_directory == temp_root / "proj" / ".git"
        assert result.project_root_directory == temp_root / "proj"

    def test_uses_configured_clone_path(self, tmp_path, client, normalizer):
        config = PreparationConfig(
            target_url=URL,
            target_branch="main",
            dynamic_repository_clone_path=tmp_path / "clones",
            no_fetch=True,
        )

        result = GitPreparer(config, normalizer=normalizer, client=client).prepare()

        assert result.project_root_directory == tmp_path / "clones" / "proj"
        assert normalizer.normalize.call_args.args[2] is True

    def test_build_server_branch(self, temp_root, client, normalizer, build_server):
        build_server.current_branch.return_value = "feature/x"
        config = PreparationConfig(target_url=URL, target_branch="main")

        GitPreparer(
            config, BuildContextPresent(build_server), normalizer, client
        ).prepare()

        build_server.current_branch.assert_called_once_with(False)
        assert normalizer.normalize.call_args.args[3] == "feature/x"

    def test_clone_path_marks_branch_query_dynamic(
        self, tmp_path, client, normalizer, build_server
    ):
        config = PreparationConfig(
            target_url=URL,
            target_branch="main",
            dynamic_repository_clone_path=tmp_path,
        )

        GitPreparer(
            config, BuildContextPresent(build_server), normalizer, client
        ).prepare()

        build_server.current_branch.assert_called_once_with(True)

    def test_credentials_reach_normalizer(self, temp_root, client, normalizer):
        credentials = AuthenticationCredentials(username="bot", password="pw")
        config = PreparationConfig(
            target_url=URL, target_branch="main", authentication=credentials
        )

        GitPreparer(config, normalizer=normalizer, client=client).prepare()

        assert normalizer.normalize.call_args.args[1] == credentials

    def test_clone_failure_stops_preparation(self, temp_root, client, normalizer):
        client.clone.side_effect = GitCommandError(
            ["git", "clone"], 128, stderr="The requested URL returned error: 403"
        )
        config = PreparationConfig(target_url=URL, target_branch="main")

        with pytest.raises(AuthorizationError):
            GitPreparer(config, normalizer=normalizer, client=client).prepare()

        normalizer.normalize.assert_not_called()


@pytest.mark.integration
class TestDynamicRepositoryOnDisk:
    def test_reuses_existing_clone(self, tmp_path, client, normalizer):
        init_with_remotes(tmp_path / "proj", ("origin", URL)).close()
        client.open.side_effect = GitClient().open
        client.remotes.side_effect = GitClient().remotes
        config = PreparationConfig(
            target_url=URL, target_branch="main", dynamic_repository_clone_path=tmp_path
        )

        result = GitPreparer(config, normalizer=normalizer, client=client).prepare()

        client.clone.assert_not_called()
        assert result.dot_git_directory == tmp_path / "proj" / ".git"
        normalizer.normalize.assert_called_once()

    def test_end_to_end(self, origin_repo, tmp_path):
        clone_base = tmp_path / "clones"
        config = PreparationConfig(
            target_url=str(origin_repo),
            target_branch="develop",
            dynamic_repository_clone_path=clone_base,
        )

        result = prepare(config)

        assert result.dot_git_directory == clone_base / "origin" / ".git"
        with Repo(result.dot_git_directory) as repo:
            assert repo.head.reference.name == "develop"

        # a second run reuses the clone
        again = prepare(config)
        assert again == result
        assert not (clone_base / "origin_1").exists()

    def test_reused_clone_with_foreign_remote_fails(self, origin_repo, tmp_path):
        other = init_repo(tmp_path / "other")
        commit_file(other, "OTHER.md", "not the target")
        other.close()
        clone_base = tmp_path / "clones"
        with Repo.clone_from(str(tmp_path / "other"), clone_base / "origin") as clone:
            other_tip = clone.heads.main.commit.hexsha
            clone.create_remote("mirror", str(origin_repo))
        config = PreparationConfig(
            target_url=str(origin_repo),
            target_branch="main",
            dynamic_repository_clone_path=clone_base,
        )

        with pytest.raises(NormalizationError, match="expected exactly one"):
            prepare(config)

        with Repo(clone_base / "origin") as clone:
            assert clone.heads.main.commit.hexsha == other_tip


@pytest.mark.integration
class TestLocalRepository:
    def test_cleanup_then_normalize(self, local_repo, normalizer, build_server):
        build_server.should_cleanup_remotes.return_value = True
        remotes_when_normalized = []

        def record_remotes(git_dir, *args):
            with Repo(git_dir) as repo:
                remotes_when_normalized.extend(r.name for r in repo.remotes)

        normalizer.normalize.side_effect = record_remotes
        config = PreparationConfig(
            dot_git_directory=local_repo / ".git",
            project_root_directory=local_repo,
            target_branch="main",
        )

        result = GitPreparer(
            config, BuildContextPresent(build_server), normalizer
        ).prepare()

        assert remotes_when_normalized == ["upstream"]
        normalizer.normalize.assert_called_once_with(
            local_repo / ".git", None, False, "main", False
        )
        assert result.dot_git_directory == local_repo / ".git"
        assert result.project_root_directory == local_repo

    def test_no_cleanup_without_policy(self, local_repo, normalizer, build_server):
        config = PreparationConfig(target_path=local_repo, target_branch="main")

        GitPreparer(config, BuildContextPresent(build_server), normalizer).prepare()

        with Repo(local_repo) as repo:
            assert [r.name for r in repo.remotes] == ["upstream", "fork"]
        normalizer.normalize.assert_called_once()

    def test_dynamic_flag_is_forwarded(self, local_repo, normalizer, build_server):
        config = PreparationConfig(
            target_path=local_repo, target_branch="main", is_dynamic_git_repository=True
        )

        GitPreparer(config, BuildContextPresent(build_server), normalizer).prepare()

        assert normalizer.normalize.call_args.args[4] is True

    def test_no_build_server_skips_normalization(self, local_repo, normalizer):
        config = PreparationConfig(target_path=local_repo)

        result = GitPreparer(config, ABSENT, normalizer).prepare()

        normalizer.normalize.assert_not_called()
        assert result.dot_git_directory == local_repo / ".git"
        assert result.project_root_directory == local_repo

    def test_no_normalize(self, local_repo, normalizer, build_server):
        build_server.should_cleanup_remotes.return_value = True
        config = PreparationConfig(target_path=local_repo, no_normalize=True)

        GitPreparer(config, BuildContextPresent(build_server), normalizer).prepare()

        normalizer.normalize.assert_not_called()
        with Repo(local_repo) as repo:
            assert len(repo.remotes) == 2

    def test_discovers_repository_from_subdirectory(self, local_repo, normalizer):
        subdir = local_repo / "src" / "pkg"
        subdir.mkdir(parents=True)
        config = PreparationConfig(target_path=subdir)

        result = GitPreparer(config, normalizer=normalizer).prepare()

        assert result.dot_git_directory == local_repo / ".git"
        assert result.project_root_directory == local_repo

    def test_project_root_from_dot_git_directory(self, local_repo, normalizer):
        config = PreparationConfig(dot_git_directory=local_repo / ".git")

        result = GitPreparer(config, normalizer=normalizer).prepare()

        assert result.project_root_directory == local_repo

    def test_not_a_repository(self, tmp_path, normalizer, build_server):
        target = tmp_path / "plain"
        target.mkdir()
        config = PreparationConfig(target_path=target)

        with pytest.raises(ConfigurationError, match=re.escape(str(target))):
            GitPreparer(config, BuildContextPresent(build_server), normalizer).prepare()

        normalizer.normalize.assert_not_called()

    def test_real_normalizer(self, origin_repo, tmp_path, build_server):
        path = tmp_path / "checkout"
        Repo.clone_from(str(origin_repo), path).close()
        config = PreparationConfig(target_path=path, target_branch="develop")

        GitPreparer(config, BuildContextPresent(build_server)).prepare()

        with Repo(path) as repo:
            assert "develop" in repo.heads
            assert repo.active_branch.name == "main"

    def test_empty_repository_without_remote(self, tmp_path, build_server):
        path = tmp_path / "empty"
        init_repo(path).close()
        config = PreparationConfig(target_path=path, no_normalize=True)

        result = GitPreparer(config, BuildContextPresent(build_server)).prepare()

        assert result.project_root_directory == path
