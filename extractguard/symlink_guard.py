# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import errno
import os

from loguru import logger

from extractguard.errors import SymlinkWriteThroughError

# readlink() failures meaning "there is no symlink here"
_NOT_A_SYMLINK = (errno.ENOENT, errno.ENOTDIR, errno.EINVAL)


def prevent_writing_through_symlink(destination: str) -> None:
    """Refuse to open `destination` for writing if it is already a symlink.

    An earlier entry of the same archive may have planted a symlink where a later file
    entry writes; following it would put the file's content wherever the link points.
    Any symlink counts, whatever its target, including an empty one.

    Raises:
        SymlinkWriteThroughError: `destination` is a symlink.
        OSError: The path could not be inspected for another reason (e.g. permissions).
    """
    try:
        target = os.readlink(destination)
    except OSError as e:
        if e.errno in _NOT_A_SYMLINK:
            return
        raise

    logger.warning(f"Refusing to write into symlink {destination} -> {target!r}")
    raise SymlinkWriteThroughError(destination, target)
