"""Single-shot save flows: WIP snapshots and add-commit-push."""

from . import ui
from .classifier import classify, require_role
from .config import FlowConfig
from .errors import GuardRejection, git_failure
from .gateway import VcsGateway
from .models import BranchRole, CommitOutcome, PushOutcome, RepositoryState
from .prompts import ConfirmationSource

SKIP_CI_MARKER = "[skip ci]"
TRUNK_CONFIRMATION_TOKEN = "yes"


def compose_message(message: str, skip_ci: bool = False) -> str:
    if skip_ci:
        return f"{message}\n{SKIP_CI_MARKER}"
    return message


def default_remote(gateway: VcsGateway) -> str | None:
    """`origin` when configured, otherwise the first remote."""
    remotes = gateway.remotes()
    if "origin" in remotes:
        return "origin"
    return remotes[0] if remotes else None


def push_branch(gateway: VcsGateway, branch: str) -> PushOutcome:
    """Push `branch`, establishing upstream tracking on the first push."""
    if gateway.upstream(branch):
        with git_failure("Push failed"):
            gateway.push()
        return PushOutcome.PUSHED

    remote = default_remote(gateway)
    if remote is None:
        ui.info("No remote configured. Push skipped.")
        return PushOutcome.NO_REMOTE
    ui.step(f"First push; setting upstream (git push -u {remote} {branch}) ...")
    with git_failure("Push failed"):
        gateway.push(remote, branch, set_upstream=True)
    return PushOutcome.PUSHED_SET_UPSTREAM


def _commit_staged(gateway: VcsGateway, message: str, skip_hooks: bool) -> CommitOutcome:
    if not gateway.has_staged_changes():
        ui.info("Nothing to commit. Skipping push.")
        return CommitOutcome.NOTHING_TO_COMMIT
    with git_failure("git commit failed"):
        gateway.commit(message, no_verify=skip_hooks)
    return CommitOutcome.COMMITTED


def save_wip(
    gateway: VcsGateway,
    state: RepositoryState,
    config: FlowConfig,
    message: str | None = None,
    push: bool | None = None,
    skip_ci: bool | None = None,
    skip_hooks: bool | None = None,
) -> tuple[CommitOutcome, PushOutcome]:
    """Commit everything on a feature branch as a work-in-progress snapshot.

    Options left as None fall back to the `wip` section of the settings.
    """
    branch = state.current_branch
    require_role("git wip", branch, config.branches, {BranchRole.FEATURE})
    defaults = config.wip
    message = (message or "").strip() or defaults.message
    push = defaults.push if push is None else push
    skip_ci = defaults.skip_ci if skip_ci is None else skip_ci
    skip_hooks = defaults.skip_hooks if skip_hooks is None else skip_hooks

    ui.step(f"💾 Saving WIP on branch: {branch}")
    ui.step("➕ Adding changes (git add .)...")
    with git_failure("Failed to add changes"):
        gateway.stage_all()

    ui.step(f'📝 Committing (git commit -m "{message}")...')
    outcome = _commit_staged(gateway, compose_message(message, skip_ci), skip_hooks)
    if outcome is CommitOutcome.NOTHING_TO_COMMIT:
        return outcome, PushOutcome.SKIPPED

    if not push:
        ui.step("⏭️  Skipping push due to --no-push/-np flag.")
        ui.done("WIP saved.")
        return outcome, PushOutcome.SKIPPED

    ui.step("🚀 Pushing branch to remote...")
    pushed = push_branch(gateway, branch)
    ui.done("WIP saved.")
    return outcome, pushed


def add_commit_push(
    gateway: VcsGateway,
    state: RepositoryState,
    config: FlowConfig,
    prompts: ConfirmationSource,
    message: str,
    assume_yes: bool = False,
    push: bool = True,
    skip_ci: bool = False,
    skip_hooks: bool = False,
) -> tuple[CommitOutcome, PushOutcome]:
    """Stage all changes, confirm, commit with `message` and push.

    Trunk requires typing the exact confirmation token unless `assume_yes`;
    integration is rejected outright.
    """
    branch = state.current_branch
    message = message.strip()
    if not message:
        raise GuardRejection("Commit message required.", hint='Usage: git acp "feat: add feature"')
    role = classify(branch, config.branches)
    if role is BranchRole.INTEGRATION:
        raise GuardRejection(f"git acp cannot be run on '{branch}'.", hint="Use a feature branch and promote it.")

    quoted = ui.highlight(f'"{message}"')
    ui.step(f"Adding, committing and pushing with message: \n{quoted}\n")
    ui.step("➕ Staging changes (git add .) ...")
    with git_failure("Failed to add changes"):
        gateway.stage_all()
    status = gateway.status_short()
    if status:
        ui.step(status)

    if not assume_yes and not _confirm(prompts, branch, role):
        raise GuardRejection("Aborted by user.")

    ui.step(f'📝 Committing changes: "{message}"')
    outcome = _commit_staged(gateway, compose_message(message, skip_ci), skip_hooks)
    if outcome is CommitOutcome.NOTHING_TO_COMMIT:
        return outcome, PushOutcome.SKIPPED

    if not push:
        ui.done(f'git acp complete (push skipped) with message: "{message}"')
        return outcome, PushOutcome.SKIPPED

    ui.step("🚀 Pushing changes...")
    pushed = push_branch(gateway, branch)
    ui.done(f'git acp complete with message: "{message}"')
    return outcome, pushed


def _confirm(prompts: ConfirmationSource, branch: str, role: BranchRole) -> bool:
    if role is BranchRole.TRUNK:
        accepted = prompts.require_token(
            f"You are on '{branch}'. Type '{TRUNK_CONFIRMATION_TOKEN}' to commit and push these staged changes:",
            TRUNK_CONFIRMATION_TOKEN,
        )
        if not accepted:
            raise GuardRejection(
                f"Aborted: confirmation mismatch (expected '{TRUNK_CONFIRMATION_TOKEN}')."
            )
        return True
    return prompts.confirm("Commit and push these staged changes?", default=True)
