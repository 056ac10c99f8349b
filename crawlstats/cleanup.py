from __future__ import annotations

import os
import time
from typing import List

from loguru import logger


def _created_at(st: os.stat_result) -> float:
    # st_birthtime exists on macOS/BSD and recent Windows builds; Linux falls back to ctime.
    return getattr(st, "st_birthtime", st.st_ctime)


def clean_old_files(folder_path: str, max_age: float) -> List[str]:
    """Delete regular files in folder_path created more than max_age seconds ago.

    Subdirectories are not descended into. Returns the deleted paths."""
    if not os.path.isdir(folder_path):
        raise NotADirectoryError(f"{folder_path} is not a directory")

    now = time.time()
    deleted: List[str] = []
    with os.scandir(folder_path) as entries:
        for entry in entries:
            if not entry.is_file(follow_symlinks=False):
                continue
            if now - _created_at(entry.stat(follow_symlinks=False)) > max_age:
                logger.info(f"Deleting expired file: {entry.path}")
                os.remove(entry.path)
                deleted.append(entry.path)
    return deleted
