import shutil
import subprocess

import pytest

from storage.store import DocumentStore
from utils.config import Settings

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")

PASSWORD = "correct horse battery staple"


@pytest.fixture
def remote_repo(tmp_path):
    """Bare repository used as the push target."""
    path = tmp_path / "remote.git"
    subprocess.run(["git", "init", "--bare", "-q", str(path)], check=True)
    return path


@pytest.fixture
def store(tmp_path, remote_repo):
    """Initialized store whose working directory pushes to remote_repo."""
    work = tmp_path / "work"
    s = DocumentStore.open(work, PASSWORD, Settings(remote="origin"))
    s.workdir.init()
    subprocess.run(["git", "remote", "add", "origin", str(remote_repo)], cwd=work, check=True)
    s.init()
    return s


@pytest.fixture
def local_store(tmp_path):
    """Initialized store with no remote."""
    s = DocumentStore.open(tmp_path / "local", PASSWORD)
    s.init()
    return s
