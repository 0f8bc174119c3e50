# FILE: quiz_backend/services/file_io.py
"""
JSON document persistence helpers
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterator, Tuple

from quiz_backend.errors import StorageError

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, data: Dict[str, Any]) -> None:
    """Write a JSON document so readers never see a partial file"""
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.stem}-", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)
    except (OSError, TypeError, ValueError) as e:
        logger.error(f"Failed to persist {path}: {e}", exc_info=True)
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise StorageError(f"Could not write {path.name}", cause=e) from e


def iter_json_documents(directory: Path) -> Iterator[Tuple[Path, Dict[str, Any]]]:
    """Yield every *.json document in a directory"""
    for path in sorted(directory.glob("*.json")):
        try:
            with open(path, "r", encoding="utf-8") as f:
                yield path, json.load(f)
        except (OSError, ValueError) as e:
            raise StorageError(f"Could not read {path.name}", cause=e) from e
