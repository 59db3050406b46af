# logship/inode.py
import logging
import os
from typing import Optional

logger = logging.getLogger(__name__)


def resolve_inode(path: str) -> Optional[int]:
    """Return the inode of ``path``, or None if it cannot be stat'ed."""
    try:
        return os.stat(path).st_ino
    except OSError as e:
        logger.error("Error getting inode for %s: %s", path, e)
        return None
