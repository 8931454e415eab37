import logging
import os
from fnmatch import fnmatch
from pathlib import Path

from .models import Ecosystem

log = logging.getLogger(__name__)


# Marker paths relative to a candidate directory, in scan order.
# Entries starting with "*" are name patterns matched against the candidate's
# top-level listing (Xcode bundles are named after the project).
MARKERS: list[tuple[str, Ecosystem]] = [
    # Tauri: a Rust backend nested under src-tauri/
    ("src-tauri/tauri.conf.json", Ecosystem.TAURI),
    ("src-tauri/config.json", Ecosystem.TAURI),
    ("src-tauri/Cargo.toml", Ecosystem.TAURI),
    # Android Studio (Gradle app module layout)
    ("app/src/main/AndroidManifest.xml", Ecosystem.ANDROID_STUDIO),
    ("Cargo.toml", Ecosystem.CARGO),
    ("package.json", Ecosystem.NPM),
    ("pyproject.toml", Ecosystem.PYTHON_POETRY),
    ("poetry.lock", Ecosystem.PYTHON_POETRY),
    ("setup.py", Ecosystem.PYTHON_SETUPTOOLS),
    ("setup.cfg", Ecosystem.PYTHON_SETUPTOOLS),
    ("requirements.txt", Ecosystem.PYTHON_PIP),
    ("*.xcodeproj", Ecosystem.XCODE),
    ("*.xcworkspace", Ecosystem.XCODE),
    (".idea", Ecosystem.INTELLIJ_IDEA),
    (".project", Ecosystem.ECLIPSE_WORKSPACE),
    ("pom.xml", Ecosystem.MAVEN),
    ("build.gradle", Ecosystem.GRADLE),
    ("build.gradle.kts", Ecosystem.GRADLE),
    ("CMakeLists.txt", Ecosystem.CMAKE),
    ("Makefile", Ecosystem.MAKE),
    ("go.mod", Ecosystem.GO),
    ("Package.swift", Ecosystem.SWIFT_SPM),
    ("build.zig", Ecosystem.ZIG),
    (".git", Ecosystem.GIT_REPO),
]

# Frameworks outrank the languages they are built from, languages outrank
# build systems and IDE folders, and a bare .git comes last.
PRIORITY: list[Ecosystem] = [
    Ecosystem.TAURI,
    Ecosystem.ANDROID_STUDIO,
    Ecosystem.CARGO,
    Ecosystem.NPM,
    Ecosystem.PYTHON_POETRY,
    Ecosystem.PYTHON_SETUPTOOLS,
    Ecosystem.PYTHON_PIP,
    Ecosystem.GO,
    Ecosystem.MAVEN,
    Ecosystem.GRADLE,
    Ecosystem.SWIFT_SPM,
    Ecosystem.ZIG,
    Ecosystem.XCODE,
    Ecosystem.CMAKE,
    Ecosystem.MAKE,
    Ecosystem.INTELLIJ_IDEA,
    Ecosystem.ECLIPSE_WORKSPACE,
    Ecosystem.GIT_REPO,
]

_RANK: dict[Ecosystem, int] = {eco: i for i, eco in enumerate(PRIORITY)}


def classify(directory: str | Path) -> tuple[Ecosystem, ...]:
    """
    Return the ecosystem tags a directory matches, primary first.

    Each marker is checked by exact relative path, so the cost is bounded by
    the size of the marker table and not by the size of the directory. An
    empty tuple means the directory is not a project.

    Args:
        directory: Candidate project directory.

    Returns:
        Tags ordered by PRIORITY, without duplicates.
    """
    directory = str(directory)
    listing: list[str] | None = None
    found: list[Ecosystem] = []

    for marker, eco in MARKERS:
        if eco in found:
            continue
        if marker.startswith("*"):
            if listing is None:
                listing = _top_level_names(directory)
            hit = any(fnmatch(name, marker) for name in listing)
        else:
            hit = os.path.exists(os.path.join(directory, marker))
        if hit:
            found.append(eco)

    return tuple(sorted(found, key=_RANK.__getitem__))


def _top_level_names(directory: str) -> list[str]:
    try:
        return os.listdir(directory)
    except OSError as e:
        log.debug("Cannot list %s: %s", directory, e)
        return []
