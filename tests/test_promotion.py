import pytest

from fakes import FakeGateway
from gitops.config import FlowConfig
from gitops.errors import AncestryViolation, GuardRejection
from gitops.models import MergeMode, RepositoryState
from gitops.promotion import promote


def _feature_repo() -> FakeGateway:
    gateway = FakeGateway.with_branches("main", "develop", head="feat/x")
    gateway.branch_from("feat/x", "develop", publish=True)
    gateway.commit_on("feat/x", "wip 1")
    gateway.commit_on("feat/x", "wip 2")
    gateway.publish("feat/x")
    return gateway


def _promote(gateway: FakeGateway, message: str | None = None):
    state = RepositoryState.capture(gateway)
    return promote(gateway, state, FlowConfig(), message)


def test_squash_promotion_lands_one_commit_and_removes_feature() -> None:
    gateway = _feature_repo()
    before = gateway.local["develop"]

    request = _promote(gateway, "feat: final squash")

    assert request.mode is MergeMode.SQUASH
    assert request.message == "feat: final squash"
    assert gateway.head == "develop"
    assert gateway.tip_message("develop") == "feat: final squash"
    assert gateway.commits[gateway.local["develop"]].parents == (before,)
    assert gateway.remote["develop"] == gateway.local["develop"]
    assert "feat/x" not in gateway.local
    assert "feat/x" not in gateway.remote


def test_squash_promotion_without_remote_feature_branch() -> None:
    gateway = _feature_repo()
    gateway.delete_on_remote("feat/x")

    _promote(gateway, "fix: local only")

    assert "feat/x" not in gateway.local
    assert not any(name == "delete_remote_branch" for name, _ in gateway.calls)


def test_squash_promotion_refuses_when_integration_moved_on() -> None:
    gateway = _feature_repo()
    gateway.remote_commit("develop", "someone else's work")

    with pytest.raises(AncestryViolation, match="develop has commits not present"):
        _promote(gateway, "feat: final squash")

    assert gateway.mutations() == []
    assert gateway.head == "feat/x"
    assert "feat/x" in gateway.remote


def test_squash_promotion_requires_message() -> None:
    gateway = _feature_repo()
    with pytest.raises(GuardRejection, match="Commit message is required"):
        _promote(gateway, "   ")
    assert gateway.mutations() == []


def test_squash_promotion_requires_clean_tree() -> None:
    gateway = _feature_repo()
    gateway.dirty = True
    with pytest.raises(GuardRejection, match="uncommitted changes"):
        _promote(gateway, "feat: final squash")
    assert gateway.calls == []


def test_promote_rejected_on_trunk() -> None:
    gateway = FakeGateway.with_branches("main", "develop")
    with pytest.raises(GuardRejection) as excinfo:
        _promote(gateway, "feat: anything")
    assert "from 'develop'" in (excinfo.value.hint or "")
    assert gateway.calls == []


def test_fast_forward_promotion_moves_trunk_to_integration() -> None:
    gateway = FakeGateway.with_branches("main", "develop", head="develop")
    gateway.commit_on("develop", "feat: one")
    gateway.commit_on("develop", "feat: two")

    request = _promote(gateway)

    assert request.mode is MergeMode.FAST_FORWARD
    assert request.message is None
    assert gateway.local["main"] == gateway.local["develop"]
    assert gateway.remote["main"] == gateway.local["develop"]
    assert "merge_fast_forward" in gateway.mutations()
    assert "merge" not in gateway.mutations()


def test_fast_forward_promotion_is_idempotent() -> None:
    gateway = FakeGateway.with_branches("main", "develop", head="develop")
    gateway.commit_on("develop", "feat: one")
    _promote(gateway)
    tip = gateway.local["main"]
    commit_count = len(gateway.commits)

    gateway.head = "develop"
    gateway.calls.clear()
    _promote(gateway)

    assert gateway.local["main"] == tip
    assert len(gateway.commits) == commit_count
    assert "merge_fast_forward" not in gateway.mutations()


def test_fast_forward_promotion_catches_up_integration_first() -> None:
    gateway = FakeGateway.with_branches("main", "develop", head="develop")
    hotfix = gateway.remote_commit("main", "fix: hotfix")

    _promote(gateway)

    assert gateway.local["develop"] == hotfix
    assert gateway.local["main"] == hotfix


def test_fast_forward_promotion_refuses_diverged_trunk() -> None:
    gateway = FakeGateway.with_branches("main", "develop", head="develop")
    gateway.commit_on("develop", "feat: new")
    gateway.remote_commit("main", "fix: hotfix")

    with pytest.raises(AncestryViolation, match="diverged"):
        _promote(gateway)

    assert "merge_fast_forward" not in gateway.mutations()
    assert "push" not in gateway.mutations()


def test_fast_forward_promotion_uses_master_when_main_absent() -> None:
    gateway = FakeGateway.with_branches("master", "develop", head="develop")
    gateway.commit_on("develop", "feat: one")

    request = _promote(gateway)

    assert request.target == "master"
    assert gateway.remote["master"] == gateway.local["develop"]
