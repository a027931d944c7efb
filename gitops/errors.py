"""Error taxonomy for workflow commands."""

from collections.abc import Iterator
from contextlib import contextmanager

from .git_ops import GitError


class FlowError(Exception):
    """A workflow command could not complete."""

    def __init__(self, message: str, hint: str | None = None) -> None:
        self.message = message
        self.hint = hint
        super().__init__(message)


class GuardRejection(FlowError):
    """A precondition of the command does not hold."""


class AncestryViolation(FlowError):
    """A branch is not contained in the branch it should be merged into."""


class VcsOperationFailure(FlowError):
    """A git command failed."""

    @classmethod
    def from_git_error(
        cls, exc: GitError, message: str, hint: str | None = None
    ) -> "VcsOperationFailure":
        detail = exc.stderr.strip()
        text = f"{message}: {detail}" if detail else message
        return cls(text, hint=hint)


class ConfigError(FlowError):
    """Settings file is malformed."""


@contextmanager
def git_failure(message: str, hint: str | None = None) -> Iterator[None]:
    """Re-raise GitError from the wrapped block as VcsOperationFailure."""
    try:
        yield
    except GitError as exc:
        raise VcsOperationFailure.from_git_error(exc, message, hint) from exc
