"""Version-control metadata for a project directory.

Reads ``.git/config`` as text; git itself is never invoked.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .models import HostKind, VcsHost

log = logging.getLogger(__name__)

# Case-insensitive substrings of the origin URL, first match wins.
KNOWN_HOSTS: list[tuple[str, HostKind]] = [
    ("github.com", HostKind.GITHUB),
    ("gitlab.com", HostKind.GITLAB),
    ("bitbucket.org", HostKind.BITBUCKET),
    ("codeberg.org", HostKind.CODEBERG),
    ("gitea", HostKind.GITEA),
]

_ORIGIN_HEADER = '[remote "origin"]'
_GITDIR_PREFIX = "gitdir:"


@dataclass(frozen=True)
class VcsInfo:
    is_version_controlled: bool
    host: VcsHost
    origin_url: Optional[str]


NOT_VERSION_CONTROLLED = VcsInfo(False, VcsHost.unknown(), None)


def inspect(directory: str | Path) -> VcsInfo:
    """Determine whether a directory is a git checkout and where its origin points."""
    dot_git = os.path.join(str(directory), ".git")
    if not os.path.exists(dot_git):
        return NOT_VERSION_CONTROLLED

    config_path = _config_path(str(directory), dot_git)
    origin_url = None
    if config_path is not None:
        try:
            with open(config_path, encoding="utf-8", errors="replace") as f:
                origin_url = parse_origin_url(f.read())
        except OSError as e:
            log.debug("Cannot read git config %s: %s", config_path, e)

    if origin_url is None:
        return VcsInfo(True, VcsHost.unknown(), None)
    return VcsInfo(True, detect_host(origin_url), origin_url)


def _config_path(directory: str, dot_git: str) -> Optional[str]:
    """Locate the config file, following a ``gitdir:`` pointer for worktrees and submodules."""
    if os.path.isdir(dot_git):
        return os.path.join(dot_git, "config")
    try:
        with open(dot_git, encoding="utf-8", errors="replace") as f:
            first = f.readline().strip()
    except OSError as e:
        log.debug("Cannot read %s: %s", dot_git, e)
        return None
    if not first.startswith(_GITDIR_PREFIX):
        return None
    git_dir = first[len(_GITDIR_PREFIX):].strip()
    if not os.path.isabs(git_dir):
        git_dir = os.path.normpath(os.path.join(directory, git_dir))
    # Linked worktrees keep their config in the common dir
    commondir = os.path.join(git_dir, "commondir")
    if os.path.isfile(commondir):
        try:
            with open(commondir, encoding="utf-8", errors="replace") as f:
                common = f.read().strip()
            git_dir = os.path.normpath(os.path.join(git_dir, common))
        except OSError:
            pass
    return os.path.join(git_dir, "config")


def parse_origin_url(config_text: str) -> Optional[str]:
    """
    Return the first ``url =`` value inside the ``[remote "origin"]`` section.

    The section ends at the next bracketed header. Returns None when there is
    no origin section or it has no url line.
    """
    in_origin = False
    for raw in config_text.splitlines():
        line = raw.strip()
        if line == _ORIGIN_HEADER:
            in_origin = True
            continue
        if not in_origin:
            continue
        if line.startswith("["):
            break
        key, sep, value = line.partition("=")
        if sep and key.strip() == "url":
            return value.strip() or None
    return None


def detect_host(url: str) -> VcsHost:
    """Classify an origin URL as a well-known host, a custom hostname, or unknown."""
    lowered = url.lower()
    for fragment, kind in KNOWN_HOSTS:
        if fragment in lowered:
            return VcsHost.well_known(kind)

    hostname = extract_hostname(url)
    if hostname:
        return VcsHost.custom(hostname)
    return VcsHost.unknown()


def extract_hostname(url: str) -> Optional[str]:
    """
    Pull the bare hostname out of ``scheme://[user@]host[:port]/...`` or ``user@host:path``.

    Returns None when neither form applies.
    """
    scheme_end = url.find("://")
    if scheme_end != -1:
        rest = url[scheme_end + 3:]
        slash = rest.find("/")
        if slash == -1:
            return None
        authority = rest[:slash].rpartition("@")[2]
        return authority.partition(":")[0] or None

    at = url.find("@")
    if at != -1:
        rest = url[at + 1:]
        colon = rest.find(":")
        if colon == -1:
            return None
        return rest[:colon] or None

    return None
