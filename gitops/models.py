"""Data models for gitops."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .gateway import VcsGateway

SLUG_PATTERN = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")


class BranchRole(enum.Enum):
    """Role of a branch in the workflow."""

    TRUNK = "trunk"
    INTEGRATION = "integration"
    FEATURE = "feature"


class RefScope(enum.Enum):
    LOCAL = "local"
    REMOTE = "remote"


class CommitType(str, enum.Enum):
    """Conventional commit types accepted as branch prefixes."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    REVERT = "revert"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


class MergeMode(enum.Enum):
    FAST_FORWARD = "ff-only"
    SQUASH = "squash"


class PropagationOutcome(enum.Enum):
    SKIPPED = "skipped"
    MERGED_PUSHED = "merged+pushed"
    MERGED_ONLY = "merged-only"
    MERGE_FAILED = "merge-failed"


class CommitOutcome(enum.Enum):
    COMMITTED = "committed"
    NOTHING_TO_COMMIT = "nothing-to-commit"


class PushOutcome(enum.Enum):
    PUSHED = "pushed"
    PUSHED_SET_UPSTREAM = "pushed-set-upstream"
    NO_REMOTE = "no-remote"
    SKIPPED = "skipped"


class VersionBump(enum.IntEnum):
    NONE = 0
    PATCH = 1
    MINOR = 2
    MAJOR = 3


@dataclass(frozen=True)
class BranchConfig:
    """Names of the long-lived branches."""

    trunk_names: tuple[str, ...] = ("main", "master")
    integration: str = "develop"

    @property
    def primary_trunk(self) -> str:
        return self.trunk_names[0]


@dataclass(frozen=True)
class Ref:
    """A named pointer to a commit."""

    name: str
    scope: RefScope = RefScope.LOCAL
    remote: str = "origin"

    def __post_init__(self) -> None:
        if self.scope is RefScope.LOCAL and self.has_remote_prefix(self.name, self.remote):
            raise ValueError(f"local ref name cannot carry a remote prefix: {self.name}")

    @staticmethod
    def has_remote_prefix(name: str, remote: str) -> bool:
        return name.startswith(f"{remote}/")

    @classmethod
    def tracking(cls, remote: str, branch: str) -> Ref:
        """Remote-tracking ref `<remote>/<branch>`."""
        return cls(f"{remote}/{branch}", RefScope.REMOTE, remote)


@dataclass(frozen=True)
class AheadBehind:
    """Commit counts ahead/behind a reference."""

    ahead: int
    behind: int

    @property
    def in_sync(self) -> bool:
        return self.ahead == 0 and self.behind == 0


@dataclass(frozen=True)
class TrackingInfo:
    """Upstream tracking state of a local branch."""

    branch: str
    upstream: str | None = None
    gone: bool = False
    ahead: int = 0
    behind: int = 0


@dataclass(frozen=True)
class RepositoryState:
    """Snapshot of the repository taken once per command."""

    current_branch: str
    clean: bool
    local_branches: tuple[str, ...]
    remote_branches: frozenset[str]
    tracking: dict[str, TrackingInfo] = field(default_factory=dict)

    @classmethod
    def capture(cls, gateway: VcsGateway, remote: str = "origin") -> RepositoryState:
        infos = gateway.tracking_info()
        return cls(
            current_branch=gateway.current_branch(),
            clean=gateway.is_clean(),
            local_branches=tuple(gateway.local_branches()),
            remote_branches=frozenset(gateway.remote_branches(remote)),
            tracking={info.branch: info for info in infos},
        )

    def has_local(self, branch: str) -> bool:
        return branch in self.local_branches

    def has_remote(self, branch: str) -> bool:
        return branch in self.remote_branches

    def exists(self, branch: str) -> bool:
        return self.has_local(branch) or self.has_remote(branch)


@dataclass(frozen=True)
class PromotionRequest:
    """Source, target and merge discipline of a promotion."""

    source: str
    target: str
    mode: MergeMode
    message: str | None = None

    def __post_init__(self) -> None:
        if self.mode is MergeMode.SQUASH:
            if not self.message or not self.message.strip():
                raise ValueError("a squash promotion requires a commit message")
            object.__setattr__(self, "message", self.message.strip())
        else:
            object.__setattr__(self, "message", None)


@dataclass(frozen=True)
class PropagationDecision:
    merge: bool
    push: bool = False


@dataclass
class PropagationPlan:
    """Per-target answers collected while propagating."""

    source: str
    candidates: tuple[str, ...]
    decisions: dict[str, PropagationDecision] = field(default_factory=dict)
    outcomes: dict[str, PropagationOutcome] = field(default_factory=dict)

    def record(self, target: str, decision: PropagationDecision, outcome: PropagationOutcome) -> None:
        self.decisions[target] = decision
        self.outcomes[target] = outcome

    def targets_with(self, outcome: PropagationOutcome) -> list[str]:
        return [target for target, value in self.outcomes.items() if value is outcome]


@dataclass(frozen=True)
class SemanticBranchName:
    """A `<type>/<slug>` feature branch name."""

    type: CommitType
    slug: str

    def __post_init__(self) -> None:
        if not SLUG_PATTERN.match(self.slug):
            raise ValueError(f"invalid branch slug: {self.slug!r}")

    def __str__(self) -> str:
        return f"{self.type.value}/{self.slug}"


@dataclass(frozen=True)
class CleanupResult:
    deleted: tuple[str, ...] = ()
    failed: tuple[str, ...] = ()

    @property
    def nothing_to_clean(self) -> bool:
        return not self.deleted and not self.failed


@dataclass(frozen=True)
class Version:
    major: int
    minor: int
    patch: int

    def bump(self, kind: VersionBump) -> Version:
        if kind is VersionBump.MAJOR:
            return Version(self.major + 1, 0, 0)
        if kind is VersionBump.MINOR:
            return Version(self.major, self.minor + 1, 0)
        if kind is VersionBump.PATCH:
            return Version(self.major, self.minor, self.patch + 1)
        return self

    def __str__(self) -> str:
        return f"v{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class Commit:
    sha: str
    subject: str
