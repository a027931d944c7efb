"""Retiring merged feature branches and reclaiming stale ones."""

from . import ui
from .classifier import require_role, resolve_base
from .config import FlowConfig
from .errors import GuardRejection, VcsOperationFailure, git_failure
from .gateway import VcsGateway
from .git_ops import GitError
from .models import BranchRole, CleanupResult, RepositoryState


def finish_feature(gateway: VcsGateway, state: RepositoryState, config: FlowConfig) -> CleanupResult:
    """Leave a feature branch whose upstream is gone and return to the base branch."""
    branch = state.current_branch
    require_role("done", branch, config.branches, {BranchRole.FEATURE})
    remote = config.remote

    ui.step(f"🔍 Checking if branch '{branch}' has been deleted on remote...")
    with git_failure("Could not fetch remote information"):
        gateway.fetch(all_remotes=True, prune=True)

    info = next((item for item in gateway.tracking_info() if item.branch == branch), None)
    if info is None:
        raise VcsOperationFailure(f"Could not find tracking information for branch '{branch}'")
    if not info.gone:
        raise GuardRejection(
            f"Branch '{branch}' still exists on remote.",
            hint="Please make sure your branch has been merged and deleted on remote before running git done.",
        )

    base = resolve_base(state, config.branches)
    ui.step(f"🔄 Updating '{base}' branch...")
    with git_failure(
        f"Could not update '{base}' branch",
        hint="Make sure the branch exists and you have the correct permissions, then try again.",
    ):
        gateway.fetch_into(remote, base)

    ui.step(f"🔀 Switching to '{base}' branch...")
    with git_failure(f"Could not switch to '{base}'"):
        gateway.checkout(base)

    ui.step("🧹 Running cleanup...")
    result = reclaim_stale_branches(gateway)
    ui.done(f"All done! Your feature branch has been cleaned up and you are now on an up-to-date {base} branch.")
    return result


def reclaim_stale_branches(gateway: VcsGateway) -> CleanupResult:
    """Force-delete every local branch whose upstream no longer exists."""
    ui.step("Fetching and pruning remote branches...")
    with git_failure("Error during fetch and prune"):
        gateway.fetch(prune=True)

    stale = [info.branch for info in gateway.tracking_info() if info.gone]
    if not stale:
        ui.info("No stale branches found to clean up.")
        return CleanupResult()

    ui.step(f"Found {len(stale)} stale branches to remove:")
    ui.bullet_list(stale, marker="-")

    deleted: list[str] = []
    failed: list[str] = []
    for branch in stale:
        try:
            gateway.delete_local_branch(branch)
            deleted.append(branch)
        except GitError as exc:
            ui.warn(f"Failed to delete branch {branch}: {exc.stderr}")
            failed.append(branch)

    ui.done(f"Cleanup complete! Removed {len(deleted)} branch(es).")
    return CleanupResult(deleted=tuple(deleted), failed=tuple(failed))
