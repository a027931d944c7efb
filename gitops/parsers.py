"""Parsers for git command output."""

import re

from .models import AheadBehind, Commit, TrackingInfo, Version

TRACKING_FORMAT = "%(refname:short)%00%(upstream:short)%00%(upstream:track)"
LOG_FORMAT = "%h%x00%s"
RELEASE_TAG_PATTERN = re.compile(r"^v\d+\.\d+\.\d+$")

_TRACK_COUNT = re.compile(r"(ahead|behind) (\d+)")
_VERSION = re.compile(r"v?(\d+)\.(\d+)\.(\d+)")
_GITHUB_PATTERNS = [
    r"^git@github\.com:(?P<repo>[^/]+/[^/]+?)(?:\.git)?$",
    r"^ssh://git@github\.com/(?P<repo>[^/]+/[^/]+?)(?:\.git)?$",
    r"^https?://github\.com/(?P<repo>[^/]+/[^/]+?)(?:\.git)?$",
]


def parse_tracking_line(line: str) -> TrackingInfo | None:
    """Parse one line of `git for-each-ref` output in TRACKING_FORMAT."""
    if not line.strip():
        return None
    branch, _, rest = line.partition("\0")
    upstream, _, track = rest.partition("\0")
    branch = branch.strip()
    if not branch:
        return None
    track = track.strip()
    counts = {kind: int(value) for kind, value in _TRACK_COUNT.findall(track)}
    return TrackingInfo(
        branch=branch,
        upstream=upstream.strip() or None,
        gone=track == "[gone]",
        ahead=counts.get("ahead", 0),
        behind=counts.get("behind", 0),
    )


def parse_tracking(output: str) -> list[TrackingInfo]:
    infos: list[TrackingInfo] = []
    for line in output.splitlines():
        info = parse_tracking_line(line)
        if info is not None:
            infos.append(info)
    return infos


def parse_ahead_behind(output: str) -> AheadBehind:
    """Parse `git rev-list --left-right --count A...B` output.

    The left count is reported as ahead, the right one as behind.
    """
    parts = output.split()
    if len(parts) != 2 or not all(part.isdigit() for part in parts):
        return AheadBehind(0, 0)
    return AheadBehind(ahead=int(parts[0]), behind=int(parts[1]))


def parse_remotes(output: str) -> list[str]:
    return [line.strip() for line in output.splitlines() if line.strip()]


def parse_ls_remote_heads(output: str) -> list[str]:
    branches: list[str] = []
    for line in output.splitlines():
        _, _, ref = line.partition("\t")
        ref = ref.strip()
        if ref.startswith("refs/heads/"):
            branches.append(ref[len("refs/heads/") :])
    return branches


def parse_log(output: str) -> list[Commit]:
    commits: list[Commit] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        sha, _, subject = line.partition("\0")
        commits.append(Commit(sha=sha.strip(), subject=subject.strip()))
    return commits


def parse_version(tag: str) -> Version:
    match = _VERSION.search(tag)
    if not match:
        raise ValueError(f"Invalid version format: {tag}")
    return Version(int(match.group(1)), int(match.group(2)), int(match.group(3)))


def parse_github_repo(remote: str) -> str | None:
    for pattern in _GITHUB_PATTERNS:
        match = re.match(pattern, remote.strip())
        if match:
            return match.group("repo")
    return None
