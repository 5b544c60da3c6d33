# services/storage/file_store.py

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from .base import BaseDocumentStore, StorageError

logger = logging.getLogger(__name__)


class FileDocumentStore(BaseDocumentStore):
    """Keeps each key as <directory>/<key>.json"""

    SUFFIX = ".json"

    def __init__(self, directory: str):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        if not key or os.sep in key or (os.altsep and os.altsep in key):
            raise StorageError(f"Invalid storage key: {key!r}", key)
        return self.directory / f"{key}{self.SUFFIX}"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Error reading {path}: {str(e)}", key) from e

    def set_item(self, key: str, value: str) -> None:
        path = self._path_for(key)
        # Target file is only ever replaced whole
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp_name, path)
        except OSError as e:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StorageError(f"Error writing {path}: {str(e)}", key) from e
        logger.debug(f"Saved {len(value)} characters to {path}")

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Error removing {path}: {str(e)}", key) from e
