from .cache import CacheStore
from .classifier import classify
from .config import DevdugConfig
from .discover import DiscoveryEngine, DiscoveryPhase, Phase
from .locations import HomeDirectoryError
from .models import Ecosystem, HostKind, ProjectRecord, VcsHost
from .vcs import inspect

__all__ = [
    "CacheStore",
    "classify",
    "DevdugConfig",
    "DiscoveryEngine",
    "DiscoveryPhase",
    "Phase",
    "HomeDirectoryError",
    "Ecosystem",
    "HostKind",
    "ProjectRecord",
    "VcsHost",
    "inspect",
]
