# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from .entry import Entry, EntryKind
from .errors import EscapeError, ExtractGuardError, SymlinkWriteThroughError
from .writer import WriteOptions, write

try:
    from ._version import __version__, __version_tuple__
except ModuleNotFoundError:
    __version__ = ""
    __version_tuple__ = ()

__all__ = [
    "Entry",
    "EntryKind",
    "EscapeError",
    "ExtractGuardError",
    "SymlinkWriteThroughError",
    "WriteOptions",
    "write",
]
