"""CLI entry point: python -m devdug"""

import argparse
import json
import logging
import sys
import time
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from .config import DevdugConfig
from .discover import DiscoveryEngine
from .locations import HomeDirectoryError, installed_ides
from .models import ProjectRecord

log = logging.getLogger(__name__)

_UNITS = ["B", "KB", "MB", "GB", "TB"]


def format_bytes(size: int) -> str:
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    return f"{value:.1f} {_UNITS[unit]}"


def _format_line(project: ProjectRecord) -> str:
    ecosystems = ",".join(e.value for e in project.ecosystems)
    return f"{project.name}\t{ecosystems}\t{format_bytes(project.size_bytes)}\t{project.path}"


def main():
    load_dotenv()

    parser = argparse.ArgumentParser(
        description="Discover development projects in your home directory.",
    )
    parser.add_argument(
        "--blocks",
        action="store_true",
        help="Report allocated disk usage (du -sk) instead of summed file sizes",
    )
    parser.add_argument(
        "--no-cache",
        action="store_true",
        help="Ignore the cached project list and scan now",
    )
    parser.add_argument(
        "--clear-cache",
        action="store_true",
        help="Delete the cached project list and exit",
    )
    parser.add_argument(
        "--skip-refresh",
        action="store_true",
        help="On a cache hit, exit without updating the cache in the background",
    )
    parser.add_argument(
        "-o", "--output",
        help="Write project records as JSON to file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    args = parser.parse_args()

    level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(name)s %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = DevdugConfig.from_env()
    except ValueError as e:
        print(f"Config error: {e}", file=sys.stderr)
        sys.exit(1)

    if args.blocks:
        config = replace(config, use_blocks=True)

    engine = DiscoveryEngine(config)

    if args.clear_cache:
        removed = engine.cache.clear()
        print("Cache cleared." if removed else "No cache to clear.", file=sys.stderr)
        return

    if args.debug:
        ides = installed_ides()
        log.debug("IDE apps found: %s", ", ".join(sorted(ides)) or "none")

    t0 = time.time()
    try:
        projects = engine.discover(force_refresh=args.no_cache)
    except HomeDirectoryError as e:
        print(f"Cannot scan: {e}", file=sys.stderr)
        sys.exit(1)
    elapsed_ms = (time.time() - t0) * 1000

    for project in projects:
        print(_format_line(project))

    total = sum(p.size_bytes for p in projects)
    print(
        f"{len(projects)} project(s), {format_bytes(total)} total ({elapsed_ms:.0f} ms)",
        file=sys.stderr,
    )

    if args.output:
        data = [p.model_dump(mode="json") for p in projects]
        Path(args.output).write_text(json.dumps(data, indent=2))
        print(f"Results written to {args.output}", file=sys.stderr)

    if args.skip_refresh:
        engine.close()
    elif engine.refreshing:
        log.debug("Waiting for background refresh")
        engine.wait_for_refresh()


if __name__ == "__main__":
    main()
