"""Filesystem utility functions."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def ensure_exists(path: Path, what: str) -> None:
    """
    Check that a path exists, raise FileNotFoundError if not.

    Args:
        path: Path to check
        what: Description of what this path represents (for error message)

    Raises:
        FileNotFoundError: If path does not exist
    """
    if not path.exists():
        raise FileNotFoundError(f"Missing {what} at: {path}")


def read_text(path: Path) -> str:
    """
    Read text file with UTF-8 encoding and strip whitespace.

    Args:
        path: Path to text file

    Returns:
        File contents with leading/trailing whitespace removed
    """
    return path.read_text(encoding="utf-8").strip()


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def write_json_atomic(path: Path, data: Any) -> None:
    """
    Write JSON to ``path`` through a temp file in the same directory, then replace.

    Readers see either the old file or the new one, never a partial write.

    Raises:
        OSError: If the directory cannot be created or the write fails
        TypeError: If ``data`` is not JSON serializable
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f"{path.stem}_", suffix=".tmp")
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
        tmp_path.replace(path)
    except BaseException:
        tmp_path.unlink(missing_ok=True)
        raise
    logger.debug("Wrote %s", path)
