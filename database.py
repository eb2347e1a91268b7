# database.py: the catalog file on disk, its write guard and the atomic swap
import logging
import os
import threading
from typing import Iterable, Iterator, Optional

import config
from errors import StorageIOError
from services.backup import create_backup, cleanup_backups

logger = logging.getLogger(__name__)


class Catalog:
    """
    Handle on one catalog file shared by every session of the server.

    ``guard`` is the single write token: create, update and delete hold it for
    their whole run. Readers never take it; they only ever see the file before
    or after a rewrite because rewrites land through ``os.replace``.
    """

    def __init__(
        self,
        path: str,
        backup_dir: Optional[str] = None,
        backup_keep: int = 5,
        backup_required: bool = False,
    ):
        self.path = path
        self.temp_path = f"{path}.tmp"
        self.backup_dir = backup_dir
        self.backup_keep = backup_keep
        self.backup_required = backup_required
        self.guard = threading.Lock()

    def exists(self) -> bool:
        return os.path.exists(self.path)

    def iter_lines(self) -> Iterator[str]:
        """Yield every non-blank line, stripped. A missing file is an empty catalog."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                for raw in f:
                    line = raw.strip()
                    if line:
                        yield line
        except FileNotFoundError:
            return
        except OSError as e:
            raise StorageIOError(f"error reading catalog file: {e}") from e

    def append_line(self, line: str) -> None:
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            raise StorageIOError(f"error writing catalog file: {e}") from e

    def write_temp(self, lines: Iterable[str]) -> None:
        """Write the full new content to the side file. Nothing is visible until commit_temp()."""
        try:
            with open(self.temp_path, "w", encoding="utf-8") as f:
                for line in lines:
                    f.write(line + "\n")
                f.flush()
                os.fsync(f.fileno())
        except OSError as e:
            self.discard_temp()
            raise StorageIOError(f"error writing temporary file: {e}") from e
        except Exception:
            self.discard_temp()
            raise

    def commit_temp(self) -> None:
        try:
            os.replace(self.temp_path, self.path)
        except OSError as e:
            raise StorageIOError(f"error replacing catalog file: {e}") from e

    def discard_temp(self) -> None:
        try:
            os.remove(self.temp_path)
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning("Could not remove %s", self.temp_path, exc_info=True)

    def rewrite(self, lines: Iterable[str]) -> None:
        self.write_temp(lines)
        self.commit_temp()

    def backup(self) -> None:
        """Best-effort copy of the current file, unless backup_required is set."""
        if not self.backup_dir:
            return
        try:
            create_backup(self.path, self.backup_dir)
            cleanup_backups(self.backup_dir, self.backup_keep)
        except OSError as e:
            if self.backup_required:
                raise StorageIOError(f"error creating backup: {e}") from e
            logger.warning("Backup of %s failed, continuing without it: %s", self.path, e)

    def recover(self) -> None:
        """Finish or drop a swap interrupted by a crash."""
        if not self.exists() and os.path.exists(self.temp_path):
            logger.warning("Catalog file missing, restoring it from %s", self.temp_path)
            os.replace(self.temp_path, self.path)
        elif os.path.exists(self.temp_path):
            logger.info("Removing leftover %s", self.temp_path)
            os.remove(self.temp_path)


def init_db() -> Catalog:
    db = Catalog(
        config.CATALOG_FILE,
        backup_dir=config.BACKUP_DIR if config.BACKUPS_ENABLED else None,
        backup_keep=config.BACKUP_KEEP,
        backup_required=config.BACKUP_REQUIRED,
    )
    db.recover()
    return db
