"""Settings loading for gitops."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import cast

from .errors import ConfigError
from .models import BranchConfig

ENV_TRUNK = "GITOPS_TRUNK_BRANCHES"
ENV_INTEGRATION = "GITOPS_INTEGRATION_BRANCH"
ENV_REMOTE = "GITOPS_REMOTE"


@dataclass(frozen=True)
class WipDefaults:
    message: str = "wip"
    push: bool = True
    skip_ci: bool = False
    skip_hooks: bool = False


@dataclass(frozen=True)
class FlowConfig:
    branches: BranchConfig = field(default_factory=BranchConfig)
    remote: str = "origin"
    wip: WipDefaults = field(default_factory=WipDefaults)


def settings_path(repo_root: Path) -> Path:
    return repo_root / ".gitops" / "settings.json"


def _load_settings(repo_root: Path) -> dict[str, object]:
    path = settings_path(repo_root)
    if not path.is_file():
        return {}

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in {path}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"Invalid settings format in {path}")
    return raw


def _expect_object_dict(value: object, section: str) -> dict[str, object]:
    if not isinstance(value, dict):
        raise ConfigError(f"Invalid {section} section in settings.")
    return cast(dict[str, object], value)


def _expect_str(value: object, key: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Setting '{key}' must be a non-empty string.")
    return value.strip()


def _expect_bool(value: object, key: str) -> bool:
    if not isinstance(value, bool):
        raise ConfigError(f"Setting '{key}' must be true or false.")
    return value


def _trunk_names(value: object) -> tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not value:
        raise ConfigError("Setting 'branches.trunk' must be a non-empty list of names.")
    return tuple(_expect_str(item, "branches.trunk") for item in value)


def _branch_config(settings: dict[str, object]) -> BranchConfig:
    defaults = BranchConfig()
    raw = settings.get("branches")
    section = {} if raw is None else _expect_object_dict(raw, "branches")

    trunk = defaults.trunk_names
    if "trunk" in section:
        trunk = _trunk_names(section["trunk"])
    integration = defaults.integration
    if "integration" in section:
        integration = _expect_str(section["integration"], "branches.integration")

    env_trunk = os.environ.get(ENV_TRUNK)
    if env_trunk:
        trunk = tuple(name.strip() for name in env_trunk.split(",") if name.strip()) or trunk
    integration = os.environ.get(ENV_INTEGRATION, "").strip() or integration

    if integration in trunk:
        raise ConfigError(f"Branch '{integration}' cannot be both trunk and integration.")
    return BranchConfig(trunk_names=trunk, integration=integration)


def _wip_defaults(settings: dict[str, object]) -> WipDefaults:
    raw = settings.get("wip")
    if raw is None:
        return WipDefaults()
    section = _expect_object_dict(raw, "wip")
    defaults = WipDefaults()
    return WipDefaults(
        message=_expect_str(section["message"], "wip.message")
        if "message" in section
        else defaults.message,
        push=_expect_bool(section.get("push", defaults.push), "wip.push"),
        skip_ci=_expect_bool(section.get("skip_ci", defaults.skip_ci), "wip.skip_ci"),
        skip_hooks=_expect_bool(section.get("skip_hooks", defaults.skip_hooks), "wip.skip_hooks"),
    )


def load_config(repo_root: Path | None) -> FlowConfig:
    """Load settings from the repository, applying environment overrides."""
    settings = _load_settings(repo_root) if repo_root is not None else {}
    remote = FlowConfig.remote
    if "remote" in settings:
        remote = _expect_str(settings["remote"], "remote")
    remote = os.environ.get(ENV_REMOTE, "").strip() or remote
    return FlowConfig(
        branches=_branch_config(settings),
        remote=remote,
        wip=_wip_defaults(settings),
    )
