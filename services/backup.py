# services/backup.py: timestamped copies of the catalog file taken before each mutation
import logging
import os
import shutil
from datetime import datetime
from typing import List, Optional

logger = logging.getLogger(__name__)


def create_backup(path: str, backup_dir: str) -> Optional[str]:
    """Copy the catalog file into backup_dir. Returns the backup path, or None if there is nothing to copy."""
    if not os.path.exists(path):
        return None
    os.makedirs(backup_dir, exist_ok=True)
    stamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    target = os.path.join(backup_dir, f"{os.path.basename(path)}_{stamp}.bak")
    shutil.copyfile(path, target)
    logger.debug("Backup written to %s", target)
    return target


def cleanup_backups(backup_dir: str, keep: int = 5) -> List[str]:
    """Remove all but the `keep` most recently modified backups. Returns the removed paths."""
    if not os.path.isdir(backup_dir):
        return []
    entries = [
        os.path.join(backup_dir, name)
        for name in os.listdir(backup_dir)
        if name.endswith(".bak")
    ]
    # newest first; the name breaks ties for copies made within the same mtime tick
    entries.sort(key=lambda p: (os.path.getmtime(p), p), reverse=True)
    removed = []
    for stale in entries[keep:]:
        os.remove(stale)
        removed.append(stale)
    if removed:
        logger.debug("Removed %d old backup(s)", len(removed))
    return removed
