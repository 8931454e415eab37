"""Where to look for projects.

Two sources: conventional per-IDE project roots, listed one level deep, and
a shallow sweep of the home directory's top-level entries.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, Optional

log = logging.getLogger(__name__)


class HomeDirectoryError(RuntimeError):
    """The user's home directory cannot be resolved."""


# Relative to the home directory
CONVENTIONAL_ROOTS: list[str] = [
    # JetBrains
    "IdeaProjects",
    "RustroverProjects",
    "CLionProjects",
    "GolandProjects",
    "PyCharmProjects",
    "WebstormProjects",
    "AppCodeProjects",
    # Android
    "AndroidStudioProjects",
    "Android Studio Projects",
    # Eclipse
    "eclipse-workspace",
    "eclipse",
    # Xcode
    "Library/Developer/Xcode/DerivedData",
    # Generic
    "Projects",
    "Source",
    "Code",
    "Developer",
]

SHARED_ROOTS: list[str] = [
    "/Users/Shared/Projects",
]

DEFAULT_APPLICATIONS_DIR = "/Applications"

IDE_BUNDLES: dict[str, str] = {
    "Xcode.app": "xcode",
    "IntelliJ IDEA.app": "intellij-idea",
    "IntelliJ IDEA CE.app": "intellij-idea",
    "RustRover.app": "rustrover",
    "CLion.app": "clion",
    "GoLand.app": "goland",
    "PyCharm.app": "pycharm",
    "PyCharm CE.app": "pycharm",
    "WebStorm.app": "webstorm",
    "AppCode.app": "appcode",
    "Android Studio.app": "android-studio",
    "Eclipse.app": "eclipse",
}


def resolve_home(override: Optional[str | Path] = None) -> Path:
    """Return the home directory, raising HomeDirectoryError if it cannot be determined."""
    if override:
        return Path(override).expanduser()
    try:
        home = Path.home()
    except (RuntimeError, KeyError) as e:
        raise HomeDirectoryError(f"Cannot resolve home directory: {e}") from e
    if not str(home) or str(home) == ".":
        raise HomeDirectoryError("Cannot resolve home directory")
    return home


def conventional_locations(home: Path, extra: Iterable[str | Path] = ()) -> list[Path]:
    """Candidate parent directories in scan order, without duplicates. Existence is not checked."""
    locations: list[Path] = []
    for root in CONVENTIONAL_ROOTS:
        locations.append(home / root)
    for root in SHARED_ROOTS:
        locations.append(Path(root))
    for root in extra:
        locations.append(Path(root).expanduser())

    seen: set[str] = set()
    unique: list[Path] = []
    for loc in locations:
        key = os.path.abspath(loc)
        if key not in seen:
            seen.add(key)
            unique.append(loc)
    return unique


def conventional_candidates(home: Path, extra: Iterable[str | Path] = ()) -> Iterator[Path]:
    """Yield every visible subdirectory of each existing conventional location."""
    for location in conventional_locations(home, extra):
        # Symlinked roots (e.g. ~/Projects -> /Volumes/work) are listed at their target
        resolved = Path(os.path.realpath(location))
        if not resolved.is_dir():
            continue
        log.debug("Listing %s", location)
        yield from _child_directories(resolved)


def home_candidates(home: Path) -> Iterator[Path]:
    """Yield visible top-level directories of the home directory."""
    resolved = Path(os.path.realpath(home))
    if not resolved.is_dir():
        log.debug("Home directory %s is not a directory", home)
        return
    yield from _child_directories(resolved)


def _child_directories(parent: Path) -> Iterator[Path]:
    try:
        entries = sorted(os.listdir(parent))
    except OSError as e:
        log.debug("Cannot list %s: %s", parent, e)
        return
    for name in entries:
        if name.startswith("."):
            continue
        child = parent / name
        try:
            if not child.is_dir():
                continue
        except OSError as e:
            log.debug("Cannot stat %s: %s", child, e)
            continue
        # Symlinked entries are reported at their target
        yield Path(os.path.realpath(child))


def installed_ides(applications_dir: str | Path = DEFAULT_APPLICATIONS_DIR) -> set[str]:
    """Names of IDEs whose application bundles are present."""
    apps = Path(applications_dir)
    return {ide for bundle, ide in IDE_BUNDLES.items() if (apps / bundle).exists()}
