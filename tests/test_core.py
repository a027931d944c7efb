from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from gitops.cli import main
from gitops.git_ops import GitGateway, get_repo_root

GIT_AVAILABLE = subprocess.run(["git", "--version"], capture_output=True).returncode == 0

pytestmark = pytest.mark.skipif(not GIT_AVAILABLE, reason="git missing")


def _run(cmd: list[str], cwd: Path | None = None) -> None:
    subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=True, capture_output=True)


def _out(cmd: list[str], cwd: Path | None = None) -> str:
    result = subprocess.run(cmd, cwd=str(cwd) if cwd else None, check=True, capture_output=True, text=True)
    return result.stdout.strip()


def _commit_file(work: Path, name: str, message: str) -> None:
    (work / name).write_text(message)
    _run(["git", "-C", str(work), "add", name])
    _run(["git", "-C", str(work), "commit", "-m", message])


def _init_repo(root: Path) -> tuple[Path, Path]:
    """Working copy on `develop` with `main` and `develop` published to a bare origin."""
    origin = root / "origin.git"
    work = root / "work"
    root.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "--bare", str(origin)])
    _run(["git", f"--git-dir={origin}", "symbolic-ref", "HEAD", "refs/heads/main"])
    _run(["git", "init", str(work)])
    _run(["git", "-C", str(work), "symbolic-ref", "HEAD", "refs/heads/main"])
    _run(["git", "-C", str(work), "config", "user.email", "test@example.com"])
    _run(["git", "-C", str(work), "config", "user.name", "Test"])
    _run(["git", "-C", str(work), "config", "commit.gpgsign", "false"])
    _commit_file(work, "README.md", "init")
    _run(["git", "-C", str(work), "remote", "add", "origin", str(origin)])
    _run(["git", "-C", str(work), "push", "-u", "origin", "main"])
    _run(["git", "-C", str(work), "checkout", "-b", "develop"])
    _run(["git", "-C", str(work), "push", "-u", "origin", "develop"])
    return origin, work


def _gitops(work: Path, *args: str, input: str | None = None):
    return CliRunner().invoke(main, ["-C", str(work), *args], input=input)


def _rev(work: Path, ref: str) -> str:
    return _out(["git", "-C", str(work), "rev-parse", ref])


def test_repo_root_and_tracking(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    assert get_repo_root(work) == work.resolve()
    gateway = GitGateway(work)
    assert gateway.current_branch() == "develop"
    assert gateway.local_branches() == ["develop", "main"]
    assert sorted(gateway.remote_branches("origin")) == ["develop", "main"]
    assert gateway.upstream("develop") == "origin/develop"
    assert gateway.is_ancestor("main", "develop")
    assert [info.gone for info in gateway.tracking_info()] == [False, False]


def test_feature_squash_promotion_end_to_end(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    develop_before = _rev(work, "develop")

    result = _gitops(work, "feat", "Add", "Thing")
    assert result.exit_code == 0, result.output
    assert _out(["git", "-C", str(work), "branch", "--show-current"]) == "feat/add-thing"

    _commit_file(work, "a.txt", "wip a")
    (work / "b.txt").write_text("b")
    result = _gitops(work, "wip")
    assert result.exit_code == 0, result.output
    assert GitGateway(work).branch_exists_remote("origin", "feat/add-thing")

    result = _gitops(work, "promote", "-m", "feat: final squash")
    assert result.exit_code == 0, result.output

    gateway = GitGateway(work)
    assert gateway.current_branch() == "develop"
    assert _out(["git", "-C", str(work), "log", "-1", "--format=%s", "develop"]) == "feat: final squash"
    assert _rev(work, "develop^") == develop_before
    assert not gateway.branch_exists_local("feat/add-thing")
    assert not gateway.branch_exists_remote("origin", "feat/add-thing")
    assert _rev(work, "origin/develop") == _rev(work, "develop")


def test_promote_refuses_stale_feature(tmp_path: Path) -> None:
    origin, work = _init_repo(tmp_path / "repo")
    _run(["git", "-C", str(work), "checkout", "-b", "feat/late"])
    _commit_file(work, "late.txt", "late work")

    other = tmp_path / "other"
    _run(["git", "clone", "-b", "develop", str(origin), str(other)])
    _run(["git", "-C", str(other), "config", "user.email", "other@example.com"])
    _run(["git", "-C", str(other), "config", "user.name", "Other"])
    _run(["git", "-C", str(other), "config", "commit.gpgsign", "false"])
    _commit_file(other, "other.txt", "someone else")
    _run(["git", "-C", str(other), "push", "origin", "develop"])

    result = _gitops(work, "promote", "feat: too late")

    assert result.exit_code == 1
    assert "develop has commits not present in your feature branch" in result.output
    assert _out(["git", "-C", str(work), "branch", "--show-current"]) == "feat/late"


def test_fast_forward_promotion(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    _commit_file(work, "f.txt", "feat: ready")
    _run(["git", "-C", str(work), "push"])

    result = _gitops(work, "promote")

    assert result.exit_code == 0, result.output
    assert _rev(work, "main") == _rev(work, "develop")
    assert _rev(work, "origin/main") == _rev(work, "develop")


def test_done_and_cleanup(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    for branch in ("feat/one", "feat/two"):
        _run(["git", "-C", str(work), "checkout", "-b", branch, "develop"])
        _run(["git", "-C", str(work), "push", "-u", "origin", branch])
    _run(["git", "-C", str(work), "push", "origin", "--delete", "feat/one"])

    result = _gitops(work, "done")
    assert result.exit_code == 1
    assert "still exists on remote" in result.output

    _run(["git", "-C", str(work), "push", "origin", "--delete", "feat/two"])
    result = _gitops(work, "done")
    assert result.exit_code == 0, result.output

    gateway = GitGateway(work)
    assert gateway.current_branch() == "develop"
    assert gateway.local_branches() == ["develop", "main"]

    result = _gitops(work, "cleanup")
    assert result.exit_code == 0, result.output
    assert "No stale branches found to clean up." in result.output


def test_acp_guards_and_commits(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    (work / "x.txt").write_text("x")

    result = _gitops(work, "acp", "fix: on develop", "--yes")
    assert result.exit_code == 1
    assert "cannot be run on 'develop'" in result.output

    _run(["git", "-C", str(work), "checkout", "-b", "fix/x"])
    result = _gitops(work, "acp", "fix: typo", "--skip", "ci", input="y\n")
    assert result.exit_code == 0, result.output
    assert _out(["git", "-C", str(work), "log", "-1", "--format=%B"]) == "fix: typo\n[skip ci]"
    assert GitGateway(work).upstream("fix/x") == "origin/fix/x"


def test_wip_skip_ci_marker_is_second_line(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    _run(["git", "-C", str(work), "checkout", "-b", "feat/x"])
    (work / "w.txt").write_text("w")

    result = _gitops(work, "wip", "-np", "--skip", "ci")

    assert result.exit_code == 0, result.output
    lines = _out(["git", "-C", str(work), "log", "-1", "--format=%B"]).splitlines()
    assert lines == ["wip", "[skip ci]"]
    assert GitGateway(work).upstream("feat/x") is None


def test_release_notes(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")
    _run(["git", "-C", str(work), "checkout", "main"])
    _run(["git", "-C", str(work), "tag", "v1.0.0"])
    _commit_file(work, "fix.txt", "fix: x")
    _commit_file(work, "feat.txt", "feat: y")

    result = _gitops(work, "release-notes")

    assert result.exit_code == 0, result.output
    assert "🚀 New version calculated: v1.1.0" in result.output
    assert "Create a new release with tag: v1.1.0" in result.output


def test_install_aliases_locally(tmp_path: Path) -> None:
    _, work = _init_repo(tmp_path / "repo")

    assert _gitops(work, "install-aliases").exit_code == 2

    result = _gitops(work, "install-aliases", "--local")
    assert result.exit_code == 0, result.output
    assert _out(["git", "-C", str(work), "config", "--local", "--get", "alias.promote"]) == "!gitops promote"
    assert _out(["git", "-C", str(work), "config", "--local", "--get", "alias.release-notes"]) == (
        "!gitops release-notes"
    )


def test_outside_repository(tmp_path: Path) -> None:
    empty = tmp_path / "empty"
    empty.mkdir()
    result = _gitops(empty, "cleanup")
    assert result.exit_code == 1
    assert "not inside a git repository" in result.output
