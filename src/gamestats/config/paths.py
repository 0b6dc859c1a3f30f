"""Filesystem locations used by gamestats."""

import os
from pathlib import Path

DATA_DIR_ENV = "GAMESTATS_DATA_DIR"


def get_data_dir() -> Path:
    """
    Get the directory for runtime files (log file).

    Uses $GAMESTATS_DATA_DIR when set, otherwise ~/.gamestats.
    The directory is created if it doesn't exist.
    """
    override = os.environ.get(DATA_DIR_ENV)
    if override:
        data_dir = Path(override)
    else:
        data_dir = Path.home() / ".gamestats"

    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
