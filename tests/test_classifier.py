import pytest

from gitops.classifier import classify, is_protected, require_role, resolve_base, resolve_trunk
from gitops.errors import GuardRejection
from gitops.models import BranchConfig, BranchRole, Ref, RefScope, RepositoryState


def _state(local: tuple[str, ...], remote: tuple[str, ...] = ()) -> RepositoryState:
    return RepositoryState(
        current_branch=local[0],
        clean=True,
        local_branches=local,
        remote_branches=frozenset(remote),
    )


@pytest.mark.parametrize(
    ("branch", "role"),
    [
        ("main", BranchRole.TRUNK),
        ("master", BranchRole.TRUNK),
        ("develop", BranchRole.INTEGRATION),
        ("feat/x", BranchRole.FEATURE),
        ("release", BranchRole.FEATURE),
    ],
)
def test_classify_defaults(branch: str, role: BranchRole) -> None:
    assert classify(branch) is role


def test_classify_with_overrides() -> None:
    config = BranchConfig(trunk_names=("trunk",), integration="next")
    assert classify("trunk", config) is BranchRole.TRUNK
    assert classify("next", config) is BranchRole.INTEGRATION
    assert classify("main", config) is BranchRole.FEATURE
    assert is_protected("next", config)
    assert not is_protected("develop", config)


def test_require_role_rejects_protected_branch_for_feature_commands() -> None:
    with pytest.raises(GuardRejection, match="cannot be run on 'main' or 'master' or 'develop'"):
        require_role("git wip", "main", BranchConfig(), {BranchRole.FEATURE})


def test_require_role_rejects_feature_for_base_commands() -> None:
    with pytest.raises(GuardRejection) as excinfo:
        require_role("feat", "feat/x", BranchConfig(), {BranchRole.TRUNK, BranchRole.INTEGRATION})
    assert "must be run from 'develop'" in excinfo.value.message
    assert excinfo.value.hint == "Current branch: feat/x"


def test_resolve_trunk_prefers_existing_name() -> None:
    config = BranchConfig()
    assert resolve_trunk(_state(("develop", "master")), config) == "master"
    assert resolve_trunk(_state(("develop",), ("main",)), config) == "main"
    assert resolve_trunk(_state(("develop",)), config) == "main"


def test_resolve_base_falls_back_to_trunk() -> None:
    config = BranchConfig()
    assert resolve_base(_state(("feat/x", "main"), ("develop",)), config) == "develop"
    assert resolve_base(_state(("feat/x", "master")), config) == "master"


def test_local_ref_rejects_remote_prefix() -> None:
    with pytest.raises(ValueError):
        Ref("origin/main")
    assert Ref("origin/main", RefScope.REMOTE).name == "origin/main"


def test_ref_prefix_follows_remote_name() -> None:
    with pytest.raises(ValueError):
        Ref("upstream/main", remote="upstream")
    assert Ref("origin/main", remote="upstream").scope is RefScope.LOCAL
    tracking = Ref.tracking("upstream", "develop")
    assert tracking.name == "upstream/develop"
    assert tracking.scope is RefScope.REMOTE
