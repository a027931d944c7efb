"""Git subprocess operations."""

import logging
import subprocess
from pathlib import Path
from typing import Sequence

from . import parsers
from .gateway import VcsGateway
from .models import AheadBehind, Commit, TrackingInfo

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git command failed."""

    def __init__(self, cmd: Sequence[str], stderr: str) -> None:
        self.cmd = list(cmd)
        self.stderr = stderr
        super().__init__(f"git {' '.join(cmd)}: {stderr}")


def run(args: Sequence[str], cwd: Path | None = None) -> str:
    """Run a git command and return stdout."""
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        check=False,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        text=True,
    )
    if result.returncode != 0:
        output = "\n".join(
            part.strip() for part in (result.stdout, result.stderr) if part and part.strip()
        )
        logger.debug("git %s failed (%d): %s", args[0] if args else "", result.returncode, output)
        raise GitError(args, output)
    return result.stdout.strip()


def try_run(args: Sequence[str], cwd: Path | None = None) -> str | None:
    """Run a git command, returning None on failure."""
    try:
        return run(args, cwd=cwd)
    except GitError:
        return None


def get_repo_root(cwd: Path | None = None) -> Path | None:
    """Top-level directory of the working tree containing `cwd`."""
    top = try_run(["rev-parse", "--show-toplevel"], cwd=cwd)
    return Path(top).resolve() if top else None


class GitGateway(VcsGateway):
    """VCS gateway backed by the git command line."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    def _run(self, args: Sequence[str]) -> str:
        return run(args, cwd=self.repo_root)

    def _try_run(self, args: Sequence[str]) -> str | None:
        return try_run(args, cwd=self.repo_root)

    def current_branch(self) -> str:
        return self._run(["rev-parse", "--abbrev-ref", "HEAD"])

    def is_clean(self) -> bool:
        return not self._run(["status", "--porcelain"]).strip()

    def local_branches(self) -> list[str]:
        out = self._run(["for-each-ref", "--format=%(refname:short)", "refs/heads"])
        return [line.strip() for line in out.splitlines() if line.strip()]

    def remote_branches(self, remote: str) -> list[str]:
        out = self._try_run(["ls-remote", "--heads", remote])
        return parsers.parse_ls_remote_heads(out or "")

    def remotes(self) -> list[str]:
        return parsers.parse_remotes(self._try_run(["remote"]) or "")

    def branch_exists_local(self, branch: str) -> bool:
        return self._try_run(["show-ref", "--verify", "--quiet", f"refs/heads/{branch}"]) is not None

    def branch_exists_remote(self, remote: str, branch: str) -> bool:
        out = self._try_run(["ls-remote", "--heads", remote, f"refs/heads/{branch}"])
        return bool(out and out.strip())

    def ahead_behind(self, left: str, right: str) -> AheadBehind:
        out = self._try_run(["rev-list", "--left-right", "--count", f"{left}...{right}"])
        return parsers.parse_ahead_behind(out or "")

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        return self._try_run(["merge-base", "--is-ancestor", ancestor, descendant]) is not None

    def tracking_info(self) -> list[TrackingInfo]:
        out = self._run(["for-each-ref", f"--format={parsers.TRACKING_FORMAT}", "refs/heads"])
        return parsers.parse_tracking(out)

    def upstream(self, branch: str) -> str | None:
        return self._try_run(["rev-parse", "--abbrev-ref", "--symbolic-full-name", f"{branch}@{{upstream}}"])

    def has_staged_changes(self) -> bool:
        return bool(self._run(["diff", "--cached", "--name-only"]).strip())

    def status_short(self) -> str:
        return self._run(["status", "--short"])

    def release_tags(self, limit: int = 20) -> list[str]:
        out = self._run(
            [
                "for-each-ref",
                "refs/tags/",
                "--sort=-creatordate",
                "--format=%(refname:short)",
                f"--count={limit}",
            ]
        )
        return [line.strip() for line in out.splitlines() if line.strip()]

    def commits_between(self, since: str, until: str) -> list[Commit]:
        out = self._run(["--no-pager", "log", f"{since}..{until}", f"--pretty=format:{parsers.LOG_FORMAT}"])
        return parsers.parse_log(out)

    def remote_url(self, remote: str) -> str | None:
        return self._try_run(["config", "--get", f"remote.{remote}.url"])

    def fetch(self, remote: str | None = None, prune: bool = False, all_remotes: bool = False) -> None:
        args = ["fetch"]
        if all_remotes:
            args.append("--all")
        elif remote:
            args.append(remote)
        if prune:
            args.append("--prune")
        self._run(args)

    def fetch_into(self, remote: str, branch: str) -> None:
        self._run(["fetch", remote, f"{branch}:{branch}"])

    def pull(self, remote: str | None = None, branch: str | None = None, ff_only: bool = False) -> None:
        args = ["pull", "--ff-only" if ff_only else "--no-rebase"]
        if remote:
            args.append(remote)
            if branch:
                args.append(branch)
        self._run(args)

    def checkout(self, branch: str) -> None:
        self._run(["checkout", branch])

    def create_branch(self, branch: str) -> None:
        self._run(["checkout", "-b", branch])

    def merge_fast_forward(self, source: str) -> None:
        self._run(["merge", "--ff-only", source])

    def merge_squash(self, source: str) -> None:
        self._run(["merge", "--squash", "--no-commit", source])

    def merge(self, source: str) -> None:
        self._run(["merge", "--no-edit", source])

    def stage_all(self) -> None:
        self._run(["add", "."])

    def commit(self, message: str, no_verify: bool = False) -> None:
        args = ["commit", "-m", message]
        if no_verify:
            args.append("--no-verify")
        self._run(args)

    def push(self, remote: str | None = None, branch: str | None = None, set_upstream: bool = False) -> None:
        args = ["push"]
        if set_upstream:
            args.append("-u")
        if remote:
            args.append(remote)
            if branch:
                args.append(branch)
        self._run(args)

    def delete_local_branch(self, branch: str) -> None:
        self._run(["branch", "-D", branch])

    def delete_remote_branch(self, remote: str, branch: str) -> None:
        self._run(["push", "--delete", remote, branch])

    def set_config(self, key: str, value: str, scope: str = "local") -> None:
        self._run(["config", f"--{scope}", key, value])
