"""Temporary files for staging uploads."""

from __future__ import annotations

import logging
import os
import uuid
from contextlib import contextmanager
from typing import Iterator

from mediabot.config import get_settings

logger = logging.getLogger(__name__)


@contextmanager
def staged_file(data: bytes, suffix: str = ".jpg", tmp_dir: str | None = None) -> Iterator[str]:
    """Write `data` to a temp file and yield its path; the file is removed on exit."""
    directory = tmp_dir or get_settings().TMP_DIR
    os.makedirs(directory, exist_ok=True)

    path = os.path.join(directory, f"{uuid.uuid4().hex}{suffix}")

    try:
        with open(path, "wb") as f:
            f.write(data)
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning("Could not remove staged file %s: %s", path, e)
