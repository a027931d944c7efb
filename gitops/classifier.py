"""Branch role classification."""

from .errors import GuardRejection
from .models import BranchConfig, BranchRole, RepositoryState


def classify(branch: str, config: BranchConfig | None = None) -> BranchRole:
    """Return the workflow role of `branch`."""
    config = config or BranchConfig()
    if branch in config.trunk_names:
        return BranchRole.TRUNK
    if branch == config.integration:
        return BranchRole.INTEGRATION
    return BranchRole.FEATURE


def is_protected(branch: str, config: BranchConfig | None = None) -> bool:
    return classify(branch, config) is not BranchRole.FEATURE


def protected_names(config: BranchConfig) -> str:
    names = [*config.trunk_names, config.integration]
    return " or ".join(f"'{name}'" for name in names)


def require_role(
    command: str, branch: str, config: BranchConfig, allowed: set[BranchRole]
) -> BranchRole:
    """Raise GuardRejection unless `branch` has one of the allowed roles."""
    role = classify(branch, config)
    if role in allowed:
        return role
    if allowed == {BranchRole.FEATURE}:
        message = f"{command} cannot be run on {protected_names(config)}."
    else:
        names = []
        if BranchRole.INTEGRATION in allowed:
            names.append(f"'{config.integration}'")
        if BranchRole.TRUNK in allowed:
            names.extend(f"'{name}'" for name in config.trunk_names)
        message = f"{command} must be run from {' or '.join(names)}."
    raise GuardRejection(message, hint=f"Current branch: {branch}")


def resolve_trunk(state: RepositoryState, config: BranchConfig) -> str:
    """First configured trunk name present locally or on the remote."""
    for name in config.trunk_names:
        if state.exists(name):
            return name
    return config.primary_trunk


def resolve_base(state: RepositoryState, config: BranchConfig) -> str:
    """Integration branch when it exists anywhere, otherwise trunk."""
    if state.exists(config.integration):
        return config.integration
    return resolve_trunk(state, config)
