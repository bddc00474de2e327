# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from typing import Optional


class ExtractGuardError(Exception):
    """Base class for every refusal raised while writing an archive entry.

    Filesystem failures are not wrapped; they propagate as ``OSError``.
    """


class EscapeError(ExtractGuardError):
    """A resolved path lies outside the canonical output directory."""

    def __init__(self, path: str, root: str, message: Optional[str] = None) -> None:
        self.path = path
        self.root = root
        super().__init__(message or f"Refusing to write outside output directory {root}: {path}")


class SymlinkWriteThroughError(ExtractGuardError):
    """A file entry would be written through an existing symlink."""

    def __init__(self, path: str, target: str) -> None:
        self.path = path
        self.target = target
        super().__init__(f"Refusing to write into a symlink: {path} -> {target!r}")
