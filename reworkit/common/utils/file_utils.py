from pathlib import Path
from typing import Union
import os
import tempfile

from reworkit.common.config.logging_config import get_logger


logger = get_logger(__name__)


def ensure_directory(path: Union[str, Path]) -> Path:
    path = Path(path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write_bytes(
    file_path: Union[str, Path],
    content: bytes,
    create_dirs: bool = True,
) -> Path:
    """Write ``content`` to a sibling temp file, then rename it over ``file_path``.

    Readers see either the previous file or the complete new one. Errors are
    raised to the caller after the temp file is removed.
    """
    file_path = Path(file_path)

    if create_dirs:
        ensure_directory(file_path.parent)

    temp_fd, temp_path = tempfile.mkstemp(
        dir=file_path.parent,
        prefix=f".{file_path.name}.",
        suffix=".tmp"
    )

    try:
        with os.fdopen(temp_fd, "wb") as f:
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        os.replace(temp_path, file_path)
    except BaseException:
        try:
            os.unlink(temp_path)
        except FileNotFoundError:
            pass
        raise

    logger.debug(f"Wrote {len(content)} bytes to {file_path}")
    return file_path
