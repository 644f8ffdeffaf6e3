"""
Git working-directory operations.

A GitWorkdir is the one handle through which the store touches git. The
working directory reflects exactly one checked-out branch at a time, so every
multi-step sequence must hold ``lock`` for its whole duration.
"""

import logging
import subprocess
import threading

from datetime import datetime, timezone
from pathlib import Path

from utils.errors import BackendError

logger = logging.getLogger(__name__)


def _subcommand(args: list[str]) -> str:
    # Skip "-c key=value" pairs in front of the git subcommand.
    return next((a for a in args if not a.startswith("-") and "=" not in a), "")


class GitWorkdir:
    """Synchronous git operations against a single working directory."""

    def __init__(
        self,
        path: str | Path,
        remote: str | None = None,
        git: str = "git",
        author_name: str = "egfs",
        author_email: str = "egfs@localhost",
    ) -> None:
        self.path = Path(path)
        self.remote = remote or None
        self.git = git
        self.author_name = author_name
        self.author_email = author_email
        self.lock = threading.RLock()

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess:
        cmd = [self.git, *args]
        logger.debug(f"{self.path}: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, cwd=self.path, capture_output=True, check=False)
        except FileNotFoundError as err:
            raise BackendError(f"git executable not found: {self.git}", cmd=cmd) from err
        except OSError as err:
            raise BackendError(f"cannot run git in {self.path}: {err}", cmd=cmd) from err
        if check and result.returncode != 0:
            raise BackendError(
                f"git {_subcommand(args)} failed with exit code {result.returncode}",
                cmd=cmd,
                returncode=result.returncode,
                stderr=result.stderr.decode("utf-8", errors="replace"),
            )
        return result

    def _output(self, args: list[str]) -> str:
        return self._run(args).stdout.decode("utf-8", errors="replace")

    # Repository

    def init(self) -> None:
        """Create the repository if the working directory is not one yet."""
        self.path.mkdir(parents=True, exist_ok=True)
        if not (self.path / ".git").exists():
            self._run(["init", "-q"])
            logger.info(f"Initialized git repository at {self.path}")

    def has_branch(self, branch: str) -> bool:
        return self._run(["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"], check=False).returncode == 0

    def has_remote_branch(self, branch: str) -> bool:
        if not self.remote:
            return False
        ref = f"refs/remotes/{self.remote}/{branch}"
        return self._run(["rev-parse", "--verify", "--quiet", ref], check=False).returncode == 0

    def branch_exists(self, branch: str) -> bool:
        return self.has_branch(branch) or self.has_remote_branch(branch)

    def list_branches(self) -> list[str]:
        """Local branches plus branches only known through the remote."""
        branches = set(self._output(["for-each-ref", "--format=%(refname:short)", "refs/heads"]).split())
        if self.remote:
            prefix = f"{self.remote}/"
            for ref in self._output(["for-each-ref", "--format=%(refname:short)", f"refs/remotes/{self.remote}"]).split():
                if ref.startswith(prefix) and ref != f"{prefix}HEAD":
                    branches.add(ref[len(prefix):])
        return sorted(branches)

    def current_branch(self) -> str | None:
        result = self._run(["symbolic-ref", "--short", "-q", "HEAD"], check=False)
        if result.returncode != 0:
            return None
        return result.stdout.decode("utf-8").strip()

    # Operations

    def switch(self, branch: str, force: bool = True) -> None:
        """Check out ``branch``, creating it as an empty orphan if it exists nowhere."""
        force_flag = ["-f"] if force else []
        if self.has_branch(branch):
            self._run(["checkout", "-q", *force_flag, branch])
        elif self.has_remote_branch(branch):
            self._run(["checkout", "-q", *force_flag, "-b", branch, "--track", f"{self.remote}/{branch}"])
        else:
            # Unborn branch with an empty tree: nothing from the previous branch leaks in.
            self._run(["symbolic-ref", "HEAD", f"refs/heads/{branch}"])
            self._run(["rm", "-r", "-f", "-q", "--ignore-unmatch", "."])
            logger.debug(f"Started orphan branch {branch}")
        # Leftovers of an interrupted write on another branch must not be staged here.
        self._run(["clean", "-f", "-d", "-q"])

    def stage_all(self) -> None:
        self._run(["add", "-A", "."])

    def commit(self, message: str) -> None:
        self._run([
            "-c", f"user.name={self.author_name}",
            "-c", f"user.email={self.author_email}",
            "-c", "commit.gpgsign=false",
            "commit", "-q", "--no-verify", "-m", message,
        ])

    def push(self, branch: str) -> None:
        if not self.remote:
            logger.debug(f"No remote configured, not pushing {branch}")
            return
        self._run(["push", "-q", self.remote, f"refs/heads/{branch}:refs/heads/{branch}"])
        logger.info(f"Pushed {branch} to {self.remote}")

    def list_tracked_files(self) -> list[str]:
        out = self._run(["ls-files", "-z"]).stdout.decode("utf-8", errors="surrogateescape")
        return [p for p in out.split("\0") if p]

    def last_commit_time(self) -> datetime | None:
        """Committer time of HEAD, or None on an unborn branch."""
        if self._run(["rev-parse", "--verify", "--quiet", "HEAD"], check=False).returncode != 0:
            return None
        stamp = self._output(["log", "-1", "--format=%ct", "HEAD"]).strip()
        return datetime.fromtimestamp(int(stamp), tz=timezone.utc)

    # Working-tree files

    def exists(self, name: str) -> bool:
        return (self.path / name).is_file()

    def read_file(self, name: str) -> bytes | None:
        p = self.path / name
        if not p.is_file():
            return None
        return p.read_bytes()

    def write_file(self, name: str, text: str) -> None:
        (self.path / name).write_text(text, encoding="ascii")
