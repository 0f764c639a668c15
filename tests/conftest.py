import io
import logging
from unittest.mock import MagicMock

import pytest

from repoprep.config import ConfigAccessor

from .repos import commit_file, init_repo


@pytest.fixture
def capture_logs():
    """Fixture to capture log output during tests."""
    log_stream = io.StringIO()
    handler = logging.StreamHandler(log_stream)
    logger = logging.getLogger("repoprep")
    logger.addHandler(handler)
    previous_level = logger.level
    logger.setLevel(logging.DEBUG)

    yield log_stream

    logger.removeHandler(handler)
    logger.setLevel(previous_level)
    log_stream.close()


@pytest.fixture(autouse=True)
def empty_user_config(tmp_path_factory, monkeypatch):
    """Keep the user's repoprep.cfg out of the tests."""
    config_file = tmp_path_factory.mktemp("config") / "repoprep.cfg"
    monkeypatch.setattr("repoprep.config.config", ConfigAccessor(config_file))


@pytest.fixture
def temp_root(tmp_path, monkeypatch):
    """Point the system temp directory at a fresh directory."""
    root = tmp_path / "temp"
    root.mkdir()
    monkeypatch.setattr("tempfile.gettempdir", lambda: str(root))
    return root


# git fixtures


@pytest.fixture
def origin_repo(tmp_path):
    """A repository with `main` and `develop` branches, used as a remote."""
    path = tmp_path / "origin"
    repo = init_repo(path)
    commit_file(repo, "README.md", "hello")
    develop = repo.create_head("develop")
    develop.checkout()
    commit_file(repo, "feature.txt", "feature")
    repo.heads.main.checkout()
    repo.close()
    return path


@pytest.fixture
def build_server():
    """A build server that knows no branch and does not ask for cleanup."""
    server = MagicMock()
    server.current_branch.return_value = None
    server.should_cleanup_remotes.return_value = False
    return server
