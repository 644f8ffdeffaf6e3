"""Tests for the git working-directory primitive."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest

from storage.git import GitWorkdir
from utils.errors import BackendError

from conftest import requires_git


class TestRunErrors:
    """Failures of the git process surface as BackendError."""

    @patch("storage.git.subprocess.run")
    def test_nonzero_exit(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=128, stdout=b"", stderr=b"fatal: not a git repository")
        wd = GitWorkdir(tmp_path)
        with pytest.raises(BackendError) as exc:
            wd.stage_all()
        assert exc.value.returncode == 128
        assert "not a git repository" in str(exc.value)
        assert exc.value.cmd[:2] == ["git", "add"]

    @patch("storage.git.subprocess.run")
    def test_commit_error_names_subcommand(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=1, stdout=b"", stderr=b"nothing to commit")
        with pytest.raises(BackendError, match="git commit failed"):
            GitWorkdir(tmp_path).commit("msg")

    @patch("storage.git.subprocess.run", side_effect=FileNotFoundError("git"))
    def test_missing_executable(self, mock_run, tmp_path):
        with pytest.raises(BackendError, match="not found"):
            GitWorkdir(tmp_path, git="no-such-git").list_tracked_files()

    @patch("storage.git.subprocess.run")
    def test_no_retry(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=1, stdout=b"", stderr=b"rejected")
        with pytest.raises(BackendError):
            GitWorkdir(tmp_path, remote="origin").push("master")
        mock_run.assert_called_once()

    @patch("storage.git.subprocess.run")
    def test_push_without_remote_is_noop(self, mock_run, tmp_path):
        GitWorkdir(tmp_path).push("master")
        mock_run.assert_not_called()

    @patch("storage.git.subprocess.run")
    def test_commit_uses_configured_author(self, mock_run, tmp_path):
        mock_run.return_value = MagicMock(returncode=0, stdout=b"", stderr=b"")
        GitWorkdir(tmp_path, author_name="Ann", author_email="ann@example.com").commit("update")
        cmd = mock_run.call_args[0][0]
        assert "user.name=Ann" in cmd
        assert "user.email=ann@example.com" in cmd
        assert cmd[-2:] == ["-m", "update"]


@requires_git
class TestWorkdir:
    """Tests against a real git repository."""

    @pytest.fixture
    def wd(self, tmp_path):
        w = GitWorkdir(tmp_path / "repo")
        w.init()
        return w

    def _commit_file(self, wd, name, text):
        wd.write_file(name, text)
        wd.stage_all()
        wd.commit(f"add {name}")

    def test_init_is_idempotent(self, wd):
        wd.init()
        assert (wd.path / ".git").exists()

    def test_unborn_branch(self, wd):
        wd.switch("master")
        assert wd.current_branch() == "master"
        assert wd.list_tracked_files() == []
        assert wd.last_commit_time() is None

    def test_new_branch_is_empty(self, wd):
        """A branch created by switch starts without the previous branch's files."""
        wd.switch("master")
        self._commit_file(wd, "file", "aa")
        wd.switch("other")
        assert wd.list_tracked_files() == []
        assert not wd.exists("file")
        self._commit_file(wd, "x", "bb")
        wd.switch("master")
        assert wd.list_tracked_files() == ["file"]
        assert wd.read_file("file") == b"aa"
        assert not wd.exists("x")

    def test_switch_drops_uncommitted_files(self, wd):
        wd.switch("master")
        self._commit_file(wd, "file", "aa")
        wd.switch("doc")
        wd.write_file("stray", "00")
        wd.switch("master")
        assert not wd.exists("stray")

    def test_list_branches_and_has_branch(self, wd):
        wd.switch("master")
        self._commit_file(wd, "file", "aa")
        wd.switch("b2")
        self._commit_file(wd, "y", "cc")
        assert wd.list_branches() == ["b2", "master"]
        assert wd.has_branch("b2")
        assert not wd.has_branch("b3")

    def test_last_commit_time(self, wd):
        wd.switch("master")
        self._commit_file(wd, "file", "aa")
        assert wd.last_commit_time() is not None
        assert wd.last_commit_time().tzinfo is not None

    def test_push_and_track_remote(self, wd, tmp_path, remote_repo):
        subprocess.run(["git", "remote", "add", "origin", str(remote_repo)], cwd=wd.path, check=True)
        wd.remote = "origin"
        wd.switch("master")
        self._commit_file(wd, "file", "aa")
        wd.push("master")

        clone_path = tmp_path / "clone"
        subprocess.run(["git", "clone", "-q", str(remote_repo), str(clone_path)], check=True)
        clone = GitWorkdir(clone_path, remote="origin")
        clone.switch("master")
        assert clone.read_file("file") == b"aa"
        assert "master" in clone.list_branches()

    def test_not_a_repository(self, wd, tmp_path):
        not_a_repo = GitWorkdir(tmp_path / "plain")
        (tmp_path / "plain").mkdir()
        with pytest.raises(BackendError):
            not_a_repo.list_tracked_files()
