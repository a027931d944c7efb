import pytest

from fakes import FakeGateway
from gitops.aliases import ALIASES, install_aliases


def test_aliases_cover_every_workflow_command() -> None:
    names = [alias.name for alias in ALIASES]
    assert names == ["promote", "propagate", "feat", "done", "cleanup", "wip", "acp", "release-notes"]
    assert ALIASES[0].command == "!gitops promote"


@pytest.mark.parametrize("scope", ["global", "local"])
def test_install_aliases_writes_config(scope: str) -> None:
    gateway = FakeGateway.with_branches("main")

    installed = install_aliases(gateway, scope)

    assert len(installed) == len(ALIASES)
    assert gateway.config[(scope, "alias.wip")] == "!gitops wip"
    assert all(key[0] == scope for key in gateway.config)


def test_install_aliases_rejects_unknown_scope() -> None:
    with pytest.raises(ValueError):
        install_aliases(FakeGateway.with_branches("main"), "system")
