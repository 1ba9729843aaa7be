import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class FileManager:
    """Owns the data directory and writes files in it atomically."""

    def __init__(self, base_dir: Optional[Path] = None):
        if base_dir is None:
            base_dir = Path.home() / ".cliphistory"
        self.base_dir = Path(base_dir)

    def path_for(self, file_name: str) -> Path:
        return self.base_dir / file_name

    def read_json(self, file_name: str) -> Optional[Any]:
        """Parsed contents of ``file_name``, or ``None`` if it does not exist.

        Raises ``OSError`` or ``ValueError`` when the file is unreadable.
        """
        file_path = self.path_for(file_name)
        if not file_path.exists():
            return None
        with file_path.open("r", encoding="utf-8") as handle:
            return json.load(handle)

    def write_json(self, file_name: str, data: Any) -> Path:
        self.base_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.path_for(file_name)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{file_name}.", dir=str(self.base_dir))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, ensure_ascii=False)
            os.replace(tmp_name, file_path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
        return file_path

    def remove(self, file_name: str) -> bool:
        file_path = self.path_for(file_name)
        try:
            file_path.unlink()
        except FileNotFoundError:
            return False
        logger.info(f"Removed {file_path}")
        return True

    def save_file(self, payload: bytes, file_name: str) -> Path:
        """Write ``payload`` under a name that does not clash with existing files."""
        self.base_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.path_for(file_name)

        counter = 1
        original_stem = file_path.stem
        original_suffix = file_path.suffix
        while file_path.exists():
            file_path = self.base_dir / f"{original_stem}_{counter}{original_suffix}"
            counter += 1

        file_path.write_bytes(payload)
        logger.info(f"Saved file to {file_path}")
        return file_path
