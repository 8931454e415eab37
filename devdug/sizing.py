import logging
import os
import subprocess
from enum import Enum
from pathlib import Path

log = logging.getLogger(__name__)

DEFAULT_DU_TIMEOUT = 120.0


class SizeStrategy(str, Enum):
    LOGICAL = "logical"  # sum of regular file sizes
    BLOCKS = "blocks"    # allocated blocks as reported by du


def directory_size(
    directory: str | Path,
    strategy: SizeStrategy = SizeStrategy.LOGICAL,
    du_timeout: float = DEFAULT_DU_TIMEOUT,
) -> int:
    """Disk usage of a directory in bytes under the chosen strategy."""
    if strategy == SizeStrategy.BLOCKS:
        size = block_size(directory, timeout=du_timeout)
        if size is not None:
            return size
        log.debug("du unavailable for %s, using logical size", directory)
    return logical_size(directory)


def logical_size(directory: str | Path) -> int:
    """
    Sum the sizes of every regular file under a directory.

    Symlinks are never followed. A file with several hard links inside the
    tree is counted once. Entries that cannot be read are skipped.
    """
    total = 0
    seen_inodes: set[tuple[int, int]] = set()
    stack = [str(directory)]

    while stack:
        current = stack.pop()
        try:
            with os.scandir(current) as entries:
                for entry in entries:
                    try:
                        if entry.is_dir(follow_symlinks=False):
                            stack.append(entry.path)
                        elif entry.is_file(follow_symlinks=False):
                            st = entry.stat(follow_symlinks=False)
                            if st.st_nlink > 1:
                                key = (st.st_dev, st.st_ino)
                                if key in seen_inodes:
                                    continue
                                seen_inodes.add(key)
                            total += st.st_size
                    except OSError as e:
                        log.debug("Skipping %s: %s", entry.path, e)
        except OSError as e:
            log.debug("Cannot scan %s: %s", current, e)

    return total


def block_size(directory: str | Path, timeout: float = DEFAULT_DU_TIMEOUT) -> int | None:
    """
    Allocated size from ``du -sk``, in bytes.

    du exits non-zero when some sub-entries are unreadable but still prints
    a total, so any parseable first field is accepted. Returns None if du
    cannot be run, times out, or prints nothing usable.
    """
    try:
        result = subprocess.run(
            ["du", "-sk", str(directory)],
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as e:
        log.debug("du failed for %s: %s", directory, e)
        return None

    return parse_du_output(result.stdout)


def parse_du_output(output: str) -> int | None:
    """Parse the kilobyte count from the first field of du output."""
    fields = output.split()
    if not fields:
        return None
    try:
        kilobytes = int(fields[0])
    except ValueError:
        return None
    if kilobytes < 0:
        return None
    return kilobytes * 1024
