# pricecheck/database.py
import logging
import os
import re
import tempfile
from pathlib import Path
from typing import Dict, Optional

# Key-value collaborators the catalog is mirrored to.
# Both expose load(key) -> Optional[str] and save(key, blob) -> bool.

logger = logging.getLogger(__name__)


class MemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self.data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def save(self, key: str, blob: str) -> bool:
        self.data[key] = blob
        return True


class JsonFileStorage:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        name = re.sub(r"[^A-Za-z0-9_.-]", "", key) or "default"
        return self.directory / f"{name}.json"

    def load(self, key: str) -> Optional[str]:
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, blob: str) -> bool:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        fd, tmp = tempfile.mkstemp(dir=str(self.directory), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(blob)
            os.replace(tmp, path)
        finally:
            if os.path.exists(tmp):
                os.unlink(tmp)
        logger.debug("wrote %s (%d bytes)", path, len(blob))
        return True


def get_storage(settings):
    if settings.storage_backend == "memory":
        return MemoryStorage()
    return JsonFileStorage(settings.data_dir)
