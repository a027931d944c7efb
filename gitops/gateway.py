"""Abstract interface to the version-control system.

Workflow engines only talk to git through this interface. `GitGateway` in
`gitops.git_ops` shells out to the git binary; the test suite substitutes an
in-memory repository graph.

Every mutating primitive raises `gitops.git_ops.GitError` when the underlying
operation fails. Queries return empty or negative results instead of raising
whenever the answer is simply "absent".
"""

from abc import ABC, abstractmethod

from .models import AheadBehind, Commit, TrackingInfo


class VcsGateway(ABC):
    """Primitive repository operations used by the workflow engines."""

    # Queries

    @abstractmethod
    def current_branch(self) -> str:
        """Name of the checked-out branch (`HEAD` when detached)."""
        ...

    @abstractmethod
    def is_clean(self) -> bool:
        """True when there are no uncommitted or untracked changes."""
        ...

    @abstractmethod
    def local_branches(self) -> list[str]:
        """All local branch names, in git's enumeration order."""
        ...

    @abstractmethod
    def remote_branches(self, remote: str) -> list[str]:
        """Branch names present on `remote` (without the remote prefix)."""
        ...

    @abstractmethod
    def remotes(self) -> list[str]:
        """Configured remote names."""
        ...

    @abstractmethod
    def branch_exists_local(self, branch: str) -> bool:
        ...

    @abstractmethod
    def branch_exists_remote(self, remote: str, branch: str) -> bool:
        ...

    @abstractmethod
    def ahead_behind(self, left: str, right: str) -> AheadBehind:
        """Commits only on `left` (ahead) and only on `right` (behind).

        Unresolvable refs count as in sync.
        """
        ...

    @abstractmethod
    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True when every commit of `ancestor` is reachable from `descendant`."""
        ...

    @abstractmethod
    def tracking_info(self) -> list[TrackingInfo]:
        """Upstream tracking state for every local branch."""
        ...

    @abstractmethod
    def upstream(self, branch: str) -> str | None:
        ...

    @abstractmethod
    def has_staged_changes(self) -> bool:
        ...

    @abstractmethod
    def status_short(self) -> str:
        """Short status listing for display."""
        ...

    @abstractmethod
    def release_tags(self, limit: int = 20) -> list[str]:
        """Most recently created tags first."""
        ...

    @abstractmethod
    def commits_between(self, since: str, until: str) -> list[Commit]:
        ...

    @abstractmethod
    def remote_url(self, remote: str) -> str | None:
        ...

    # Mutations

    @abstractmethod
    def fetch(self, remote: str | None = None, prune: bool = False, all_remotes: bool = False) -> None:
        ...

    @abstractmethod
    def fetch_into(self, remote: str, branch: str) -> None:
        """Update local `branch` from `remote/branch` without checking it out."""
        ...

    @abstractmethod
    def pull(self, remote: str | None = None, branch: str | None = None, ff_only: bool = False) -> None:
        ...

    @abstractmethod
    def checkout(self, branch: str) -> None:
        ...

    @abstractmethod
    def create_branch(self, branch: str) -> None:
        """Create `branch` at HEAD and check it out."""
        ...

    @abstractmethod
    def merge_fast_forward(self, source: str) -> None:
        """Fast-forward the current branch to `source` or fail."""
        ...

    @abstractmethod
    def merge_squash(self, source: str) -> None:
        """Stage the combined changes of `source` without committing."""
        ...

    @abstractmethod
    def merge(self, source: str) -> None:
        """Merge `source` into the current branch with the default strategy."""
        ...

    @abstractmethod
    def stage_all(self) -> None:
        ...

    @abstractmethod
    def commit(self, message: str, no_verify: bool = False) -> None:
        ...

    @abstractmethod
    def push(self, remote: str | None = None, branch: str | None = None, set_upstream: bool = False) -> None:
        """Push `branch` to `remote`; with no arguments push to the upstream."""
        ...

    @abstractmethod
    def delete_local_branch(self, branch: str) -> None:
        """Force-delete a local branch."""
        ...

    @abstractmethod
    def delete_remote_branch(self, remote: str, branch: str) -> None:
        ...

    @abstractmethod
    def set_config(self, key: str, value: str, scope: str = "local") -> None:
        ...
