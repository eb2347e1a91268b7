import os
from dotenv import load_dotenv

load_dotenv()


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


# --- Server ---
HOST = os.getenv("CATALOG_HOST", "0.0.0.0")
PORT = int(os.getenv("CATALOG_PORT", "8080"))

# --- Catalog file ---
CATALOG_FILE = os.getenv("CATALOG_FILE", "books")

# --- Backups ---
BACKUP_DIR = os.getenv("CATALOG_BACKUP_DIR", "backups")
BACKUP_KEEP = int(os.getenv("CATALOG_BACKUP_KEEP", "5"))
BACKUPS_ENABLED = _flag("CATALOG_BACKUPS_ENABLED", "true")
# When set, a failed backup aborts the mutation it was meant to protect
BACKUP_REQUIRED = _flag("CATALOG_BACKUP_REQUIRED", "false")

# --- Logging ---
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
