"""Installation of git aliases for every workflow command."""

from dataclasses import dataclass

from . import ui
from .errors import git_failure
from .gateway import VcsGateway


@dataclass(frozen=True)
class Alias:
    name: str
    description: str

    @property
    def command(self) -> str:
        return f"!gitops {self.name}"


ALIASES = [
    Alias("promote", "Promote feature -> develop (squash) or develop -> main (fast-forward)"),
    Alias("propagate", "Propagate main/develop into downstream branches"),
    Alias("feat", "Create a semantic feature branch"),
    Alias("done", "Complete feature branch workflow"),
    Alias("cleanup", "Remove stale local branches"),
    Alias("wip", "Commit a quick WIP snapshot and push it"),
    Alias("acp", "Add, commit and push with a message"),
    Alias("release-notes", "Generate release notes and version"),
]


def install_aliases(gateway: VcsGateway, scope: str) -> list[Alias]:
    """Write `alias.<name>` entries into the global or local git config."""
    if scope not in ("global", "local"):
        raise ValueError(f"unknown config scope: {scope}")
    scope_text = "globally" if scope == "global" else "locally"
    ui.step(f"🔧 Installing gitops aliases {scope_text}...")
    for alias in ALIASES:
        ui.step(f"  ✓ git {alias.name} - {alias.description}")
        with git_failure(f"Failed to install alias: git {alias.name}"):
            gateway.set_config(f"alias.{alias.name}", alias.command, scope=scope)

    ui.done(f"Successfully installed {len(ALIASES)} git aliases {scope_text}!")
    if scope == "global":
        ui.info("These aliases are now available in all your git repositories.")
    else:
        ui.info("These aliases are available in this repository only.")
    return list(ALIASES)
