import functools
import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

import click

from . import ui
from .aliases import install_aliases
from .config import FlowConfig, load_config
from .errors import FlowError, VcsOperationFailure
from .feature import create_feature
from .git_ops import GitError, GitGateway, get_repo_root
from .lifecycle import finish_feature, reclaim_stale_branches
from .models import RepositoryState
from .promotion import promote as run_promote
from .prompts import TerminalConfirmations
from .propagation import propagate as run_propagate
from .quick_commit import add_commit_push, save_wip
from .release_notes import release_notes as run_release_notes

F = TypeVar("F", bound=Callable[..., Any])

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


@dataclass
class Session:
    repo_root: Path
    gateway: GitGateway
    config: FlowConfig

    def snapshot(self) -> RepositoryState:
        try:
            return RepositoryState.capture(self.gateway, self.config.remote)
        except GitError as exc:
            raise VcsOperationFailure.from_git_error(exc, "Could not read repository state") from exc


def _open_session(ctx: click.Context) -> Session:
    obj = ctx.find_object(dict) or {}
    cwd = obj.get("cwd") or Path.cwd()
    repo_root = get_repo_root(cwd)
    if repo_root is None:
        click.echo("gitops: not inside a git repository", err=True)
        raise SystemExit(1)
    return Session(repo_root=repo_root, gateway=GitGateway(repo_root), config=load_config(repo_root))


def _reports_failures(func: F) -> F:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except FlowError as exc:
            ui.fail(exc.message, hint=exc.hint)
            raise SystemExit(1)
        except GitError as exc:
            ui.fail(str(exc))
            raise SystemExit(1)

    return wrapper  # type: ignore[return-value]


@click.group(context_settings=CONTEXT_SETTINGS)
@click.option(
    "-C",
    "cwd",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Run as if started in this directory.",
)
@click.option("-v", "--verbose", is_flag=True, help="Log every git command.")
@click.pass_context
def main(ctx: click.Context, cwd: Path | None, verbose: bool) -> None:
    """gitops: opinionated git-flow branch workflow."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj["cwd"] = cwd


@main.command("promote", context_settings=CONTEXT_SETTINGS)
@click.argument("words", nargs=-1)
@click.option("-m", "--message", help="Squash commit message when promoting a feature branch.")
@click.pass_context
@_reports_failures
def promote(ctx: click.Context, words: tuple[str, ...], message: str | None) -> None:
    """Squash a feature into develop, or fast-forward main to develop."""
    session = _open_session(ctx)
    text = (message or " ".join(words)).strip()
    run_promote(session.gateway, session.snapshot(), session.config, text or None)


@main.command("propagate", context_settings=CONTEXT_SETTINGS)
@click.pass_context
@_reports_failures
def propagate(ctx: click.Context) -> None:
    """From main: fast-forward develop. From develop: merge into other branches."""
    session = _open_session(ctx)
    run_propagate(session.gateway, session.snapshot(), session.config, TerminalConfirmations())


@main.command("feat", context_settings=CONTEXT_SETTINGS)
@click.argument("words", nargs=-1)
@click.pass_context
@_reports_failures
def feat(ctx: click.Context, words: tuple[str, ...]) -> None:
    """Create <type>/<slug> from develop or main.

    \b
    git feat my new awesome feature   -> feat/my-new-awesome-feature
    git feat ci: update workflows     -> ci/update-workflows
    """
    session = _open_session(ctx)
    create_feature(
        session.gateway, session.snapshot(), session.config, TerminalConfirmations(), " ".join(words)
    )


@main.command("done", context_settings=CONTEXT_SETTINGS)
@click.pass_context
@_reports_failures
def done(ctx: click.Context) -> None:
    """Return to the base branch once the feature branch is gone on remote."""
    session = _open_session(ctx)
    finish_feature(session.gateway, session.snapshot(), session.config)


@main.command("cleanup", context_settings=CONTEXT_SETTINGS)
@click.pass_context
@_reports_failures
def cleanup(ctx: click.Context) -> None:
    """Remove local branches that have been deleted on the remote."""
    session = _open_session(ctx)
    reclaim_stale_branches(session.gateway)


@main.command("wip", context_settings=CONTEXT_SETTINGS)
@click.argument("words", nargs=-1)
@click.option("-np", "--no-push", "no_push", is_flag=True, help="Commit without pushing.")
@click.option("--skip", "skip", type=click.Choice(["ci"]), multiple=True, help="Append [skip ci].")
@click.option("-nh", "--no-hooks", "no_hooks", is_flag=True, help="Bypass commit hooks.")
@click.pass_context
@_reports_failures
def wip(
    ctx: click.Context, words: tuple[str, ...], no_push: bool, skip: tuple[str, ...], no_hooks: bool
) -> None:
    """Commit everything as a WIP snapshot and push it."""
    session = _open_session(ctx)
    save_wip(
        session.gateway,
        session.snapshot(),
        session.config,
        message=" ".join(words) or None,
        push=False if no_push else None,
        skip_ci=True if "ci" in skip else None,
        skip_hooks=True if no_hooks else None,
    )


@main.command("acp", context_settings=CONTEXT_SETTINGS)
@click.argument("words", nargs=-1)
@click.option("-y", "--yes", "assume_yes", is_flag=True, help="Skip confirmation prompts.")
@click.option("-np", "--no-push", "no_push", is_flag=True, help="Commit without pushing.")
@click.option("--skip", "skip", type=click.Choice(["ci"]), multiple=True, help="Append [skip ci].")
@click.option("-nh", "--no-hooks", "no_hooks", is_flag=True, help="Bypass commit hooks.")
@click.pass_context
@_reports_failures
def acp(
    ctx: click.Context,
    words: tuple[str, ...],
    assume_yes: bool,
    no_push: bool,
    skip: tuple[str, ...],
    no_hooks: bool,
) -> None:
    """Stage all changes, commit with MESSAGE, then push."""
    session = _open_session(ctx)
    add_commit_push(
        session.gateway,
        session.snapshot(),
        session.config,
        TerminalConfirmations(),
        " ".join(words),
        assume_yes=assume_yes,
        push=not no_push,
        skip_ci="ci" in skip,
        skip_hooks=no_hooks,
    )


@main.command("release-notes", context_settings=CONTEXT_SETTINGS)
@click.pass_context
@_reports_failures
def release_notes(ctx: click.Context) -> None:
    """Generate release notes and calculate the next semantic version."""
    session = _open_session(ctx)
    run_release_notes(session.gateway, session.snapshot(), session.config)


@main.command("install-aliases", context_settings=CONTEXT_SETTINGS)
@click.option("-g", "--global", "global_scope", is_flag=True, help="Install for all repositories.")
@click.option("-l", "--local", "local_scope", is_flag=True, help="Install for this repository only.")
@click.pass_context
@_reports_failures
def install_aliases_command(ctx: click.Context, global_scope: bool, local_scope: bool) -> None:
    """Install git aliases for every gitops command."""
    if global_scope == local_scope:
        raise click.UsageError("You must specify either --global or --local")
    if global_scope:
        obj = ctx.find_object(dict) or {}
        root = get_repo_root(obj.get("cwd") or Path.cwd()) or Path.cwd()
        gateway = GitGateway(root)
    else:
        gateway = _open_session(ctx).gateway
    install_aliases(gateway, "global" if global_scope else "local")


if __name__ == "__main__":
    main()
