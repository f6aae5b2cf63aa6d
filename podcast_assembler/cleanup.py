"""Best-effort removal of temporary per-segment files."""

import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


def cleanup_segments(paths: list[str | Path | None], temp_dir: str | Path | None = None) -> int:
    """Delete segment files, then temp_dir if it is left empty.

    Failures are logged and never raised. Returns the number of files removed.
    """
    removed = 0
    for path in paths:
        if path is None:
            continue
        try:
            os.remove(path)
            removed += 1
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not delete segment file %s: %s", path, e)

    if temp_dir is not None:
        temp_dir = Path(temp_dir)
        try:
            if temp_dir.is_dir() and not any(temp_dir.iterdir()):
                temp_dir.rmdir()
        except OSError as e:
            logger.warning("Could not remove temp directory %s: %s", temp_dir, e)

    return removed
