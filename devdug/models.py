from datetime import datetime
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator


class Ecosystem(str, Enum):
    # Composite frameworks
    TAURI = "tauri"
    ANDROID_STUDIO = "android-studio"
    # Single-language toolchains
    CARGO = "cargo"
    NPM = "npm"
    PYTHON_POETRY = "python-poetry"
    PYTHON_SETUPTOOLS = "python-setuptools"
    PYTHON_PIP = "python-pip"
    GO = "go"
    MAVEN = "maven"
    GRADLE = "gradle"
    SWIFT_SPM = "swift-spm"
    ZIG = "zig"
    # Native build systems
    XCODE = "xcode"
    CMAKE = "cmake"
    MAKE = "make"
    # IDE conventions
    INTELLIJ_IDEA = "intellij-idea"
    ECLIPSE_WORKSPACE = "eclipse-workspace"
    # VCS only
    GIT_REPO = "git-repo"


class HostKind(str, Enum):
    GITHUB = "github"
    GITLAB = "gitlab"
    BITBUCKET = "bitbucket"
    CODEBERG = "codeberg"
    GITEA = "gitea"
    CUSTOM = "custom"
    UNKNOWN = "unknown"


_CUSTOM_PREFIX = "custom:"


class VcsHost(BaseModel):
    """Where a repository's origin lives: a well-known host, a custom hostname, or unknown."""

    model_config = ConfigDict(frozen=True)

    kind: HostKind
    hostname: Optional[str] = None

    @model_validator(mode="after")
    def _hostname_only_for_custom(self) -> "VcsHost":
        if self.kind == HostKind.CUSTOM and not self.hostname:
            raise ValueError("custom host requires a hostname")
        if self.kind != HostKind.CUSTOM and self.hostname is not None:
            raise ValueError(f"{self.kind.value} host does not carry a hostname")
        return self

    @classmethod
    def unknown(cls) -> "VcsHost":
        return cls(kind=HostKind.UNKNOWN)

    @classmethod
    def well_known(cls, kind: HostKind) -> "VcsHost":
        return cls(kind=kind)

    @classmethod
    def custom(cls, hostname: str) -> "VcsHost":
        return cls(kind=HostKind.CUSTOM, hostname=hostname)

    @property
    def is_unknown(self) -> bool:
        return self.kind == HostKind.UNKNOWN

    @property
    def token(self) -> str:
        """Short string form used for persistence, e.g. ``github`` or ``custom:git.example.org``."""
        if self.kind == HostKind.CUSTOM:
            return f"{_CUSTOM_PREFIX}{self.hostname}"
        return self.kind.value

    @classmethod
    def from_token(cls, token: str) -> "VcsHost":
        """Parse a persisted token. Raises ValueError for anything unrecognized."""
        if token.startswith(_CUSTOM_PREFIX):
            return cls.custom(token[len(_CUSTOM_PREFIX):])
        try:
            kind = HostKind(token)
        except ValueError:
            raise ValueError(f"unrecognized host token: {token!r}") from None
        if kind == HostKind.CUSTOM:
            raise ValueError("custom host token must carry a hostname")
        return cls(kind=kind)

    def __str__(self) -> str:
        return self.token


class ProjectRecord(BaseModel):
    """One discovered project directory."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(description="Absolute path to the project directory; unique within a run")
    name: str = Field(description="Final path segment, for display")
    ecosystems: tuple[Ecosystem, ...] = Field(
        min_length=1,
        description="Ecosystem tags in priority order; the first is the primary",
    )
    size_bytes: int = Field(ge=0, description="Disk usage in bytes")
    last_modified: datetime = Field(description="Directory mtime, used only for ordering")
    is_version_controlled: bool = False
    vcs_host: VcsHost = Field(default_factory=VcsHost.unknown)
    origin_url: Optional[str] = Field(
        default=None,
        description="URL of the 'origin' remote, when one is configured",
    )

    @field_validator("vcs_host", mode="before")
    @classmethod
    def _parse_host_token(cls, value):
        if isinstance(value, str):
            return VcsHost.from_token(value)
        return value

    @field_serializer("vcs_host")
    def _serialize_host(self, host: VcsHost) -> str:
        return host.token

    @model_validator(mode="after")
    def _host_requires_origin(self) -> "ProjectRecord":
        if self.origin_url is None and not self.vcs_host.is_unknown:
            raise ValueError("vcs_host must be unknown when no origin_url is set")
        if not self.is_version_controlled and (self.origin_url is not None or not self.vcs_host.is_unknown):
            raise ValueError("remote metadata requires is_version_controlled")
        return self

    @property
    def primary_ecosystem(self) -> Ecosystem:
        return self.ecosystems[0]


CACHE_SCHEMA_VERSION = 1


class CacheSnapshot(BaseModel):
    """Persisted payload of the project cache. Its age comes from the file mtime, not from here."""

    version: Literal[1] = CACHE_SCHEMA_VERSION
    projects: list[ProjectRecord] = Field(default_factory=list)
