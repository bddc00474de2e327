# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class EntryKind(Enum):
    DIRECTORY = "directory"
    FILE = "file"
    LINK = "link"
    SYMLINK = "symlink"


@dataclass(frozen=True)
class Entry:
    """A single decoded archive member, as handed over by an archive reader.

    Attributes:
        path (str): Archive-internal relative path. Untrusted; may contain '..' segments
            or look absolute.
        kind (EntryKind): What the entry materializes as.
        mode (int): Permission bits used when creating a file.
        mtime (Optional[datetime]): Modification time to restore once the entry is written.
            Naive datetimes are taken as local time. None leaves the timestamp untouched.
        link_target (Optional[str]): For hardlinks, a path relative to the output directory.
            For symlinks, the literal link text.
    """

    path: str
    kind: EntryKind
    mode: int = 0o644
    mtime: Optional[datetime] = None
    link_target: Optional[str] = None

    def __post_init__(self) -> None:
        if self.kind in (EntryKind.LINK, EntryKind.SYMLINK) and self.link_target is None:
            raise ValueError(f"{self.kind.value} entry '{self.path}' has no link target")

    def with_path(self, path: str) -> "Entry":
        return replace(self, path=path)

    @property
    def mtime_ns(self) -> Optional[int]:
        """The modification time as integer nanoseconds since the epoch, without float rounding."""
        if self.mtime is None:
            return None
        mtime = self.mtime if self.mtime.tzinfo is not None else self.mtime.astimezone()
        delta = mtime - _EPOCH
        return (delta.days * 86400 + delta.seconds) * 10**9 + delta.microseconds * 1000
