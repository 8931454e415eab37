"""Discovery settings from environment."""

import os
from dataclasses import dataclass, field
from datetime import timedelta
from pathlib import Path
from typing import Optional

from .sizing import DEFAULT_DU_TIMEOUT, SizeStrategy

DEFAULT_TTL_HOURS = 24.0


def _default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


def _default_cache_dir() -> Path:
    xdg = os.getenv("XDG_CONFIG_HOME", "")
    base = Path(xdg) if xdg else Path("~/.config").expanduser()
    return base / "devdug"


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in ("1", "true", "yes", "on"):
        return True
    if value in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be true or false, got: {raw!r}")


def _parse_positive(name: str, raw: str, kind=float):
    try:
        value = kind(raw)
    except ValueError:
        raise ValueError(f"{name} must be a positive number, got: {raw!r}") from None
    if value <= 0:
        raise ValueError(f"{name} must be a positive number, got: {raw!r}")
    return value


@dataclass(frozen=True)
class DevdugConfig:
    cache_dir: Path = field(default_factory=_default_cache_dir)
    home: Optional[Path] = None
    cache_ttl_hours: float = DEFAULT_TTL_HOURS
    use_blocks: bool = False
    workers: int = field(default_factory=_default_workers)
    du_timeout: float = DEFAULT_DU_TIMEOUT
    extra_locations: tuple[Path, ...] = ()

    @classmethod
    def from_env(cls) -> "DevdugConfig":
        """Load from environment variables.

        All optional:
          DEVDUG_HOME, DEVDUG_CACHE_DIR, DEVDUG_CACHE_TTL_HOURS,
          DEVDUG_USE_BLOCKS, DEVDUG_WORKERS, DEVDUG_DU_TIMEOUT,
          DEVDUG_EXTRA_LOCATIONS (os.pathsep-separated)

        Raises ValueError naming the variable when a value is malformed.
        """
        kwargs = {}

        home = os.getenv("DEVDUG_HOME", "")
        if home:
            kwargs["home"] = Path(home).expanduser()

        cache_dir = os.getenv("DEVDUG_CACHE_DIR", "")
        if cache_dir:
            kwargs["cache_dir"] = Path(cache_dir).expanduser()

        ttl = os.getenv("DEVDUG_CACHE_TTL_HOURS", "")
        if ttl:
            kwargs["cache_ttl_hours"] = _parse_positive("DEVDUG_CACHE_TTL_HOURS", ttl)

        blocks = os.getenv("DEVDUG_USE_BLOCKS", "")
        if blocks:
            kwargs["use_blocks"] = _parse_bool("DEVDUG_USE_BLOCKS", blocks)

        workers = os.getenv("DEVDUG_WORKERS", "")
        if workers:
            kwargs["workers"] = _parse_positive("DEVDUG_WORKERS", workers, kind=int)

        du_timeout = os.getenv("DEVDUG_DU_TIMEOUT", "")
        if du_timeout:
            kwargs["du_timeout"] = _parse_positive("DEVDUG_DU_TIMEOUT", du_timeout)

        extra = os.getenv("DEVDUG_EXTRA_LOCATIONS", "")
        if extra:
            kwargs["extra_locations"] = tuple(
                Path(p).expanduser() for p in extra.split(os.pathsep) if p.strip()
            )

        return cls(**kwargs)

    @property
    def cache_validity(self) -> timedelta:
        return timedelta(hours=self.cache_ttl_hours)

    @property
    def size_strategy(self) -> SizeStrategy:
        return SizeStrategy.BLOCKS if self.use_blocks else SizeStrategy.LOGICAL
