import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from . import vcs
from .classifier import classify
from .models import ProjectRecord
from .sizing import DEFAULT_DU_TIMEOUT, SizeStrategy, directory_size

log = logging.getLogger(__name__)


def build_project(
    directory: str | Path,
    strategy: SizeStrategy = SizeStrategy.LOGICAL,
    du_timeout: float = DEFAULT_DU_TIMEOUT,
) -> Optional[ProjectRecord]:
    """
    Build a ProjectRecord for a candidate directory.

    Returns None when the directory matches no ecosystem marker or its own
    metadata cannot be read.
    """
    path = os.path.abspath(directory)

    ecosystems = classify(path)
    if not ecosystems:
        return None

    try:
        mtime = os.stat(path).st_mtime
    except OSError as e:
        log.debug("Cannot stat %s: %s", path, e)
        return None

    info = vcs.inspect(path)
    size = directory_size(path, strategy, du_timeout=du_timeout)

    return ProjectRecord(
        path=path,
        name=os.path.basename(path),
        ecosystems=ecosystems,
        size_bytes=size,
        last_modified=datetime.fromtimestamp(mtime, tz=timezone.utc),
        is_version_controlled=info.is_version_controlled,
        vcs_host=info.host,
        origin_url=info.origin_url,
    )
