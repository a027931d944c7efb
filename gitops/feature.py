"""Creation of semantically named feature branches."""

import re

from . import ui
from .classifier import require_role
from .config import FlowConfig
from .errors import AncestryViolation, GuardRejection, git_failure
from .gateway import VcsGateway
from .git_ops import GitError
from .models import BranchRole, CommitType, Ref, RepositoryState, SemanticBranchName
from .prompts import ConfirmationSource

_TYPE_PREFIX = re.compile(r"^([a-zA-Z]+):\s*(.+)$")


def slugify(text: str) -> str:
    """Lowercase `text` and reduce it to hyphen-separated [a-z0-9] words."""
    slug = text.lower()
    slug = re.sub(r"[._\s]+", "-", slug)
    slug = re.sub(r"[^a-z0-9-]+", "", slug)
    slug = re.sub(r"-{2,}", "-", slug)
    return slug.strip("-")


def parse_type_and_subject(raw: str) -> tuple[CommitType, str]:
    """Split an optional `<type>: ` prefix off a branch description.

    Without a prefix the type defaults to `feat`.
    """
    text = raw.strip()
    if not text:
        raise GuardRejection(
            "You must provide a semantic message for the branch name.",
            hint="Example: git feat my new awesome feature",
        )
    match = _TYPE_PREFIX.match(text)
    if not match:
        return CommitType.FEAT, text
    candidate = match.group(1).lower()
    if candidate not in CommitType.values():
        raise GuardRejection(
            f"Unsupported type '{candidate}'.",
            hint=f"Supported types: {'|'.join(CommitType.values())}",
        )
    return CommitType(candidate), match.group(2).strip()


def semantic_branch_name(raw: str) -> SemanticBranchName:
    commit_type, subject = parse_type_and_subject(raw)
    slug = slugify(subject)
    if not slug:
        raise GuardRejection(
            "The provided subject produced an empty slug. Please use alphanumeric characters."
        )
    return SemanticBranchName(type=commit_type, slug=slug)


def create_feature(
    gateway: VcsGateway,
    state: RepositoryState,
    config: FlowConfig,
    prompts: ConfirmationSource,
    raw_message: str,
) -> str:
    """Create and check out `<type>/<slug>` from trunk or integration."""
    base = state.current_branch
    require_role("feat", base, config.branches, {BranchRole.TRUNK, BranchRole.INTEGRATION})
    name = str(semantic_branch_name(raw_message))
    remote = config.remote

    try:
        gateway.fetch(prune=True)
    except GitError as exc:
        ui.warn(f"Could not fetch from remote: {exc.stderr}")

    counts = gateway.ahead_behind(base, Ref.tracking(remote, base).name)
    if not counts.in_sync:
        details = f"(behind {counts.behind}, ahead {counts.ahead})"
        should_update = prompts.confirm(
            f"🔄 Current branch '{base}' is not up to date with {remote} {details}. "
            "Update before creating the branch?",
            default=True,
        )
        if should_update and counts.behind > 0:
            try:
                gateway.pull(ff_only=True)
            except GitError as exc:
                raise AncestryViolation(
                    "Could not fast-forward. Your branch may have diverged.",
                    hint="Resolve divergence (rebase or merge) and rerun git feat.",
                ) from exc
        elif should_update:
            ui.info(f"'{base}' only has local commits; nothing to pull.")

    if gateway.branch_exists_local(name):
        raise GuardRejection(f"Local branch '{name}' already exists.")
    if gateway.branch_exists_remote(remote, name):
        raise GuardRejection(
            f"Remote branch '{remote}/{name}' already exists.",
            hint="Consider: git fetch && git checkout <branch> or choose a different name.",
        )

    ui.step(f"🌿 Creating branch: {name}")
    with git_failure("Failed to create branch"):
        gateway.create_branch(name)
    ui.success(f"Done. You're now on: {name}")
    return name
