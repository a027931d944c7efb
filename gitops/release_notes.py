"""Release notes and semantic version calculation."""

import re
from dataclasses import dataclass
from urllib.parse import quote

from . import parsers, ui
from .config import FlowConfig
from .errors import GuardRejection, git_failure
from .gateway import VcsGateway
from .models import Commit, RepositoryState, Version, VersionBump

_PATCH_TYPES = "fix|refactor|style|test|docs|chore|perf"
_MAJOR = re.compile(rf"^(feat|{_PATCH_TYPES})(\([^)]+\))?!:")
_MINOR = re.compile(r"^feat(\([^)]+\))?:")
_PATCH = re.compile(rf"^({_PATCH_TYPES})(\([^)]+\))?:")


@dataclass(frozen=True)
class ReleasePlan:
    branch: str
    current: Version
    tag: str
    commits: tuple[Commit, ...]
    bump: VersionBump
    release_url: str | None = None

    @property
    def next_version(self) -> Version:
        return self.current.bump(self.bump)

    @property
    def has_changes(self) -> bool:
        return bool(self.commits)


def classify_commit(subject: str) -> VersionBump:
    if _MAJOR.match(subject):
        return VersionBump.MAJOR
    if _MINOR.match(subject):
        return VersionBump.MINOR
    if _PATCH.match(subject):
        return VersionBump.PATCH
    return VersionBump.NONE


def determine_bump(commits: list[Commit] | tuple[Commit, ...]) -> VersionBump:
    return max((classify_commit(commit.subject) for commit in commits), default=VersionBump.NONE)


def latest_release_tag(tags: list[str]) -> str | None:
    for tag in tags:
        if parsers.RELEASE_TAG_PATTERN.match(tag):
            return tag
    return None


def release_url(remote_url: str | None, branch: str, version: Version) -> str | None:
    repo = parsers.parse_github_repo(remote_url or "")
    if repo is None:
        return None
    tag = quote(str(version), safe="")
    return f"https://github.com/{repo}/releases/new?target={branch}&tag={tag}&title={tag}"


def release_notes(gateway: VcsGateway, state: RepositoryState, config: FlowConfig) -> ReleasePlan:
    """Compute the next version from commits on trunk since the latest release tag."""
    branch = config.branches.primary_trunk

    ui.step("🔄 Fetching latest changes from all remotes...")
    with git_failure("Could not fetch from remotes"):
        gateway.fetch(all_remotes=True)

    ui.step(f"🧐 Verifying current branch is '{branch}'...")
    if state.current_branch != branch:
        raise GuardRejection(
            f"Release notes must be generated from the '{branch}' branch.",
            hint=f"Current branch: {state.current_branch}. Please switch to '{branch}' and try again.",
        )

    ui.step(f"🏷️  Finding latest release tag (pattern: {parsers.RELEASE_TAG_PATTERN.pattern})...")
    with git_failure("Error getting latest tag"):
        tags = gateway.release_tags()
    tag = latest_release_tag(tags)
    if tag is None:
        raise GuardRejection(
            f"No tags matching the pattern {parsers.RELEASE_TAG_PATTERN.pattern} found.",
            hint="Make sure you have at least one tag matching the required format in your repository.",
        )

    ui.step(f"📝 Analyzing commits since {tag} on branch {branch}...")
    with git_failure("Error getting commits", hint="There might be an issue with the git history or tag reference."):
        commits = tuple(gateway.commits_between(tag, branch))

    current = parsers.parse_version(tag)
    if not commits:
        ui.info(f"No new commits found on '{branch}' since last relevant tag ({tag}).")
        return ReleasePlan(branch=branch, current=current, tag=tag, commits=(), bump=VersionBump.NONE)

    bump = determine_bump(commits)
    next_version = current.bump(bump)
    url = release_url(gateway.remote_url(config.remote), branch, next_version)
    plan = ReleasePlan(branch=branch, current=current, tag=tag, commits=commits, bump=bump, release_url=url)

    ui.step(f"📊 Current version: {tag}")
    ui.step(f"🚀 New version calculated: {next_version}")
    ui.step("Commits included:")
    for commit in commits:
        ui.step(f"- {commit.sha} {commit.subject}")
    ui.step("\n📦 Create the release at:")
    ui.step(url or f"Create a new release with tag: {next_version}")
    return plan
