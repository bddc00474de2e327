# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import errno
import os
from typing import List, Union

from loguru import logger

from extractguard.errors import EscapeError
from extractguard.utils.paths import is_within


def prepare_output_root(output: Union[str, os.PathLike]) -> str:
    """Create the output directory if it is missing and return its canonical path."""
    os.makedirs(output, exist_ok=True)
    return os.path.realpath(output, strict=True)


def ensure_within(real_path: str, real_root: str) -> None:
    """Raise EscapeError unless the canonical `real_path` is at or beneath `real_root`."""
    if not is_within(real_path, real_root):
        logger.warning(f"Refusing path outside output directory {real_root}: {real_path}")
        raise EscapeError(real_path, real_root)


def _ensure_directory(real_path: str) -> None:
    if not os.path.isdir(real_path):
        raise NotADirectoryError(errno.ENOTDIR, "Not a directory", real_path)


def resolve_safe_directory(target_dir: str, real_root: str) -> str:
    """Create `target_dir` and any missing ancestors without ever leaving the output directory.

    The deepest existing ancestor is canonicalized (following every symlink) and must lie
    within `real_root` before anything is created below it. Each missing component is then
    created one level at a time, and its canonical path is checked again, so a symlink that
    appears mid-way or a dangling symlink in the ancestry can't redirect the creation.

    Args:
        target_dir (str): Directory to establish; may not exist yet, any number of levels deep.
        real_root (str): Canonical path of the output directory.

    Returns:
        str: The canonical path of `target_dir`.

    Raises:
        EscapeError: An existing or newly created ancestor resolves outside `real_root`.
        OSError: Directory creation or canonicalization failed, or a path
            component exists but is not a directory (NotADirectoryError).
    """
    missing: List[str] = []
    current = os.path.abspath(target_dir)
    while True:
        try:
            real_path = os.path.realpath(current, strict=True)
            break
        except FileNotFoundError:
            parent = os.path.dirname(current)
            if parent == current:
                raise
            missing.append(current)
            current = parent

    ensure_within(real_path, real_root)
    _ensure_directory(real_path)

    for directory in reversed(missing):
        try:
            os.mkdir(directory)
            logger.debug(f"Created directory {directory}")
        except FileExistsError:
            # Another writer got there first, or a dangling symlink sits here; the
            # canonicalization below tells the two apart.
            pass
        real_path = os.path.realpath(directory, strict=True)
        ensure_within(real_path, real_root)
        _ensure_directory(real_path)

    return real_path
