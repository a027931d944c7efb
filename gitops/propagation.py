"""Propagation of trunk/integration changes to downstream branches."""

import logging

from . import ui
from .classifier import classify
from .config import FlowConfig
from .errors import GuardRejection, git_failure
from .gateway import VcsGateway
from .git_ops import GitError
from .models import (
    BranchRole,
    PropagationDecision,
    PropagationOutcome,
    PropagationPlan,
    Ref,
    RepositoryState,
)
from .promotion import fast_forward_into
from .prompts import ConfirmationSource

logger = logging.getLogger(__name__)

DIVERGED_HINT = "Please resolve any divergence before attempting to propagate."


def propagate(
    gateway: VcsGateway,
    state: RepositoryState,
    config: FlowConfig,
    prompts: ConfirmationSource,
) -> PropagationPlan:
    """Push trunk or integration changes downstream from the current branch."""
    branches = config.branches
    current = state.current_branch
    role = classify(current, branches)
    if role is BranchRole.TRUNK:
        if state.exists(branches.integration):
            return propagate_trunk(gateway, state, config)
        ui.info(
            f"No '{branches.integration}' branch detected locally or on remote. "
            f"Propagating from '{current}' directly to feature branches."
        )
        return fan_out(gateway, state, config, prompts, source=current)
    if role is BranchRole.INTEGRATION:
        ui.step(f"🔄 Propagating changes from {current} to other branches...")
        return fan_out(gateway, state, config, prompts, source=current)
    raise GuardRejection(
        f"propagate must be run from either {' or '.join(branches.trunk_names)} "
        f"or {branches.integration} branch.",
        hint=f"Current branch: {current}",
    )


def propagate_trunk(gateway: VcsGateway, state: RepositoryState, config: FlowConfig) -> PropagationPlan:
    """Fast-forward integration to the current trunk branch and push it."""
    trunk = state.current_branch
    integration = config.branches.integration
    remote = config.remote
    ui.step(f"🔄 Propagating changes from {trunk} to {integration}...")

    ui.step(f"🔄 Updating {trunk} branch...")
    if state.has_remote(trunk):
        with git_failure(f"Could not update {trunk} from {remote}"):
            gateway.pull(remote, trunk, ff_only=True)

    if state.has_remote(integration):
        ui.step(f"🔄 Fetching and updating {integration} branch...")
        with git_failure(f"Could not fetch {integration}"):
            gateway.fetch_into(remote, integration)

    plan = PropagationPlan(source=trunk, candidates=(integration,))
    fast_forward_into(gateway, state, config, source=trunk, target=integration, hint=DIVERGED_HINT)
    plan.record(integration, PropagationDecision(merge=True, push=True), PropagationOutcome.MERGED_PUSHED)
    return plan


def fan_out_candidates(state: RepositoryState, config: FlowConfig, source: str) -> list[str]:
    """Local branches that may receive `source`, in enumeration order."""
    excluded = {*config.branches.trunk_names, config.branches.integration, source}
    return [
        branch
        for branch in state.local_branches
        if branch.strip() and branch not in excluded and not Ref.has_remote_prefix(branch, config.remote)
    ]


def fan_out(
    gateway: VcsGateway,
    state: RepositoryState,
    config: FlowConfig,
    prompts: ConfirmationSource,
    source: str,
) -> PropagationPlan:
    """Offer to merge `source` into every other local branch, one at a time.

    A failed merge only affects its own target; the loop moves on to the
    next candidate.
    """
    remote = config.remote
    ui.step(f"🔄 Updating {source} branch...")
    if state.has_remote(source):
        with git_failure(f"Could not update {source} from {remote}"):
            gateway.pull(remote, source, ff_only=True)

    plan = PropagationPlan(source=source, candidates=tuple(fan_out_candidates(state, config, source)))
    if not plan.candidates:
        ui.info("No other branches found to propagate to.")
        return plan

    ui.step(f"\n📋 Found {len(plan.candidates)} other branches:")
    ui.bullet_list(plan.candidates)
    ui.step("")

    for target in plan.candidates:
        if not prompts.confirm(f'🤔 Merge {source} into "{target}"?', default=False):
            plan.record(target, PropagationDecision(merge=False), PropagationOutcome.SKIPPED)
            ui.step(f"⏭️  Skipped {target}\n")
            continue

        try:
            _merge_into(gateway, state, remote, source, target)
        except GitError as exc:
            logger.debug("merge of %s into %s failed: %s", source, target, exc)
            ui.fail(f"Failed to merge {source} into {target}", hint=exc.stderr or None)
            ui.step("")
            plan.record(target, PropagationDecision(merge=True), PropagationOutcome.MERGE_FAILED)
            continue
        ui.success(f"Successfully merged {source} into {target}!")

        push = prompts.confirm(f"   🚀 Push {target} to remote?", default=False)
        outcome = PropagationOutcome.MERGED_ONLY
        if push:
            try:
                gateway.push(remote, target)
                ui.success(f"Pushed {target} to remote")
                outcome = PropagationOutcome.MERGED_PUSHED
            except GitError as exc:
                ui.warn(f"Failed to push {target} to remote: {exc.stderr}")
        plan.record(target, PropagationDecision(merge=True, push=push), outcome)
        ui.step("")

    _summarize(plan)
    ui.done("Propagation complete!")
    return plan


def _merge_into(gateway: VcsGateway, state: RepositoryState, remote: str, source: str, target: str) -> None:
    ui.step(f"🔄 Processing branch: {target}")

    ui.step(f"   📥 Fetching {target}...")
    try:
        gateway.fetch_into(remote, target)
    except GitError:
        ui.info(f"Branch {target} not found on remote (local only)")

    ui.step(f"   🔀 Switching to {target}...")
    gateway.checkout(target)

    if state.has_remote(target):
        gateway.pull(remote, target)
        ui.step(f"   📥 Updated {target} from remote")
    else:
        ui.info(f"No remote tracking for {target}")

    ui.step(f"   🔄 Merging {source} into {target}...")
    gateway.merge(source)


def _summarize(plan: PropagationPlan) -> None:
    labels = {
        PropagationOutcome.MERGED_PUSHED: "merged and pushed",
        PropagationOutcome.MERGED_ONLY: "merged locally",
        PropagationOutcome.MERGE_FAILED: "merge failed",
        PropagationOutcome.SKIPPED: "skipped",
    }
    for outcome, label in labels.items():
        targets = plan.targets_with(outcome)
        if targets:
            ui.step(f"{label}: {', '.join(targets)}")
