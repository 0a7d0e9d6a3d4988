"""Utility functions."""

import logging
import os
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


def get_file_size_mb(path: str) -> float:
    """Get file size in megabytes."""
    if not Path(path).exists():
        return 0.0
    return Path(path).stat().st_size / (1024 * 1024)


def temp_path_for(path: str) -> str:
    """Sibling temp file name used for atomic writes."""
    return f"{path}.{uuid.uuid4().hex[:8]}.tmp"


def remove_file(path: str) -> bool:
    """Delete a file if it exists. Returns True if something was removed."""
    try:
        os.remove(path)
        return True
    except FileNotFoundError:
        return False
    except OSError as e:
        logger.warning("Could not remove %s: %s", path, e)
        return False
