"""Promotion of work between workflow branches.

Two protocols exist, selected by the role of the current branch:

* feature -> integration: a squash merge with an operator-supplied message,
  after which the feature branch is deleted locally and on the remote;
* integration -> trunk: fast-forward only, so trunk never receives a merge
  commit and its history stays a prefix of integration's.
"""

from . import ui
from .classifier import classify, resolve_trunk
from .config import FlowConfig
from .errors import AncestryViolation, GuardRejection, git_failure
from .gateway import VcsGateway
from .git_ops import GitError
from .models import BranchRole, MergeMode, PromotionRequest, RepositoryState

DIVERGED_HINT = "Please resolve any divergence before attempting to promote."


def promote(
    gateway: VcsGateway, state: RepositoryState, config: FlowConfig, message: str | None = None
) -> PromotionRequest:
    """Promote the current branch one step along the workflow."""
    branches = config.branches
    role = classify(state.current_branch, branches)
    if role is BranchRole.TRUNK:
        raise GuardRejection(
            f"promote cannot be run from '{state.current_branch}' directly.",
            hint=(
                f"Run from '{branches.integration}' to fast-forward '{state.current_branch}' "
                f"OR from a feature branch to squash into '{branches.integration}'."
            ),
        )
    if role is BranchRole.INTEGRATION:
        return promote_integration(gateway, state, config)
    return promote_feature(gateway, state, config, message or "")


def promote_feature(
    gateway: VcsGateway, state: RepositoryState, config: FlowConfig, message: str
) -> PromotionRequest:
    """Squash-merge the current feature branch into integration."""
    feature = state.current_branch
    integration = config.branches.integration
    remote = config.remote
    ui.step(f"🚀 Promoting feature branch '{feature}' to {integration} (squash merge)...")

    ui.step("🔍 Checking for uncommitted changes...")
    if not state.clean:
        raise GuardRejection(
            "You have uncommitted changes.",
            hint="Commit or stash your changes before promoting a feature branch.",
        )
    if not message.strip():
        raise GuardRejection(
            "Commit message is required when promoting a feature branch.",
            hint='Usage: git promote "feat: add amazing thing"',
        )
    request = PromotionRequest(feature, integration, MergeMode.SQUASH, message)

    ui.step(f"🔄 Fetching latest {integration} branch...")
    with git_failure(
        f"Could not fetch {integration} branch",
        hint=f"Ensure '{integration}' exists on remote or locally.",
    ):
        gateway.fetch_into(remote, integration)

    ui.step(f"🔍 Checking that {integration} is contained in feature branch...")
    if not gateway.is_ancestor(integration, feature):
        raise AncestryViolation(
            f"{integration} has commits not present in your feature branch.",
            hint=(
                f"Please run 'git merge {integration}' (or rebase) on your feature branch, "
                "resolve conflicts, then retry."
            ),
        )

    ui.step(f"🔀 Switching to {integration} branch...")
    with git_failure(f"Could not switch to {integration}"):
        gateway.checkout(integration)
    ui.step(f"🔄 Pulling latest {integration} from remote...")
    with git_failure(f"Could not update {integration} from {remote}"):
        gateway.pull(remote, integration, ff_only=True)

    ui.step(f"🔄 Squash merging '{feature}' into {integration}...")
    with git_failure(
        "Squash merge failed",
        hint="Resolve any conflicts, then run the same git merge command manually and commit.",
    ):
        gateway.merge_squash(feature)

    ui.step("📝 Creating squash commit...")
    with git_failure("Could not create squash commit"):
        gateway.commit(request.message or "")

    ui.step(f"🚀 Pushing {integration} to remote...")
    with git_failure(f"Could not push {integration}"):
        gateway.push(remote, integration)

    ui.step(f"🗑️  Deleting local branch '{feature}'...")
    try:
        gateway.delete_local_branch(feature)
    except GitError as exc:
        ui.warn(f"Could not delete local branch '{feature}': {exc.stderr}")

    ui.step(f"🗑️  Attempting to delete remote branch '{feature}' (if it exists)...")
    if gateway.branch_exists_remote(remote, feature):
        try:
            gateway.delete_remote_branch(remote, feature)
            ui.success("Remote branch deleted.")
        except GitError as exc:
            ui.warn(f"Could not delete remote branch '{feature}': {exc.stderr}")
    else:
        ui.info("Remote branch not found (nothing to delete).")

    ui.done(f"Feature branch successfully promoted to {integration}!")
    return request


def promote_integration(gateway: VcsGateway, state: RepositoryState, config: FlowConfig) -> PromotionRequest:
    """Fast-forward trunk to integration after checking they have not diverged."""
    integration = config.branches.integration
    trunk = resolve_trunk(state, config.branches)
    remote = config.remote
    request = PromotionRequest(integration, trunk, MergeMode.FAST_FORWARD)
    ui.step(f"🚀 Promoting {integration} to {trunk} (fast-forward only)...")

    ui.step(f"🔄 Updating {integration} and {trunk} branches...")
    if state.has_remote(integration):
        with git_failure(f"Could not update {integration} from {remote}"):
            gateway.pull(remote, integration, ff_only=True)
    if state.has_remote(trunk):
        with git_failure(f"Could not fetch {trunk}"):
            gateway.fetch_into(remote, trunk)
    elif not state.has_local(trunk):
        raise GuardRejection(f"No '{trunk}' branch found locally or on remote.")

    ui.step(f"🔍 Ensuring {integration} is up-to-date with {trunk}...")
    if ensure_fast_forward(gateway, source=trunk, target=integration, hint=DIVERGED_HINT):
        with git_failure(f"Could not fast-forward {integration} to {trunk}"):
            gateway.merge_fast_forward(trunk)

    fast_forward_into(gateway, state, config, source=integration, target=trunk, hint=DIVERGED_HINT)
    return request


def ensure_fast_forward(gateway: VcsGateway, source: str, target: str, hint: str) -> bool:
    """Check that `target` can absorb `source` without a merge commit.

    Returns False when `target` already contains `source`.
    """
    if gateway.is_ancestor(source, target):
        return False
    if not gateway.is_ancestor(target, source):
        raise AncestryViolation(
            f"Could not fast-forward {target} to {source}: {target} has diverged from {source}.",
            hint=hint,
        )
    return True


def fast_forward_into(
    gateway: VcsGateway,
    state: RepositoryState,
    config: FlowConfig,
    source: str,
    target: str,
    hint: str,
) -> bool:
    """Check out `target`, fast-forward it to `source` and push it.

    Returns False when `target` already contained `source`.
    """
    remote = config.remote
    ui.step(f"🔀 Switching to {target} branch...")
    with git_failure(f"Could not switch to {target}"):
        gateway.checkout(target)
    if state.has_remote(target):
        with git_failure(f"Could not update {target} from {remote}"):
            gateway.pull(remote, target, ff_only=True)

    ui.step(f"🔄 Attempting to merge {source} into {target} (fast-forward only)...")
    advanced = ensure_fast_forward(gateway, source=source, target=target, hint=hint)
    if advanced:
        with git_failure(f"Could not fast-forward {target} to {source}", hint=hint):
            gateway.merge_fast_forward(source)
        ui.success(f"Successfully merged {source} into {target}!")
    else:
        ui.info(f"{target} already contains {source}; nothing to merge.")

    ui.step(f"🚀 Pushing changes to remote {target} branch...")
    with git_failure(f"Could not push {target}"):
        gateway.push(remote, target)
    ui.done(f"Successfully pushed changes to {target}!")
    return advanced
