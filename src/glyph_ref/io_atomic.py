from __future__ import annotations

import os
import tempfile
from pathlib import Path


def read_text_exact(path: Path, encoding: str = "utf-8") -> str:
    """Read a file without newline translation."""
    with open(path, "r", encoding=encoding, newline="") as fh:
        return fh.read()


def atomic_write_text(path: Path, text: str, encoding: str = "utf-8") -> None:
    """Replace the content of ``path`` in one step, keeping its permissions."""
    target = path.resolve()
    tmp_path: Path | None = None
    existing_mode: int | None = None
    try:
        if target.exists():
            existing_mode = target.stat().st_mode & 0o777
        with tempfile.NamedTemporaryFile(
            "w", encoding=encoding, newline="", delete=False, dir=target.parent,
            prefix=f".{target.name}.", suffix=".tmp",
        ) as tmp:
            tmp_path = Path(tmp.name)
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        if existing_mode is not None:
            os.chmod(tmp_path, existing_mode)
        os.replace(tmp_path, target)
        tmp_path = None
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
