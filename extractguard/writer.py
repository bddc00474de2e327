# Copyright 2023 Lawrence Livermore National Security, LLC
# See the top-level LICENSE file for details.
#
# SPDX-License-Identifier: MIT
import os
import shutil
import time
from dataclasses import dataclass, replace
from typing import BinaryIO, Callable, Optional, Union

from loguru import logger

from extractguard.configmanager import ConfigManager
from extractguard.entry import Entry, EntryKind
from extractguard.errors import EscapeError
from extractguard.resolver import ensure_within, prepare_output_root, resolve_safe_directory
from extractguard.symlink_guard import prevent_writing_through_symlink
from extractguard.utils.paths import join_under, strip_components

DEFAULT_CHUNK_SIZE = 64 * 1024

# Windows only creates symlinks with elevated privileges or developer mode enabled
SUPPORTS_SYMLINKS = ConfigManager().get_bool("extract", "supports_symlinks", os.name != "nt")
CHUNK_SIZE = ConfigManager().get_int("extract", "chunk_size", DEFAULT_CHUNK_SIZE)

_WRITE_FLAGS = (
    os.O_WRONLY
    | os.O_CREAT
    | os.O_TRUNC
    | getattr(os, "O_NOFOLLOW", 0)
    | getattr(os, "O_BINARY", 0)
)


@dataclass
class WriteOptions:
    """Per-call policy for :func:`write`.

    Attributes:
        filter (Optional[Callable[[Entry], bool]]): Keep an entry only if this returns True.
        map (Optional[Callable[[Entry], Entry]]): Return a replacement entry before writing.
        strip (int): Number of leading path components to remove. (Default: 0)
        supports_symlinks (Optional[bool]): Override the configured symlink capability; when
            False, symlink entries are written as hardlinks.
    """

    filter: Optional[Callable[[Entry], bool]] = None
    map: Optional[Callable[[Entry], Entry]] = None
    strip: int = 0
    supports_symlinks: Optional[bool] = None

    def __post_init__(self) -> None:
        if self.strip < 0:
            raise ValueError(f"strip must be zero or positive, got {self.strip}")


def drain(content: Optional[BinaryIO], chunk_size: Optional[int] = None) -> int:
    """Read `content` to the end and discard it. Returns the number of bytes skipped."""
    if content is None:
        return 0
    skipped = 0
    while True:
        chunk = content.read(chunk_size or CHUNK_SIZE)
        if not chunk:
            return skipped
        skipped += len(chunk)


def write(
    entry: Entry,
    content: Optional[BinaryIO],
    output: Union[str, os.PathLike],
    options: Optional[WriteOptions] = None,
) -> None:
    """Materialize one archive entry underneath the output directory.

    Paths are canonicalized and checked against the output directory before anything is
    created, so neither '..' segments nor symlinks planted by earlier entries can place
    data outside it. Nothing is rolled back on failure: ancestor directories created
    before an error stay, and an interrupted file write leaves a partial file.

    Args:
        entry (Entry): The entry to write.
        content (Optional[BinaryIO]): Content of a file entry. Fully consumed when the file
            is written; drained when the entry is skipped or isn't a file.
        output (Union[str, os.PathLike]): Output directory, created if missing.
        options (Optional[WriteOptions]): Strip, filter, map and symlink policy.

    Raises:
        EscapeError: The entry, one of its ancestors, or a hardlink source resolves outside
            the output directory.
        SymlinkWriteThroughError: A file entry's destination is an existing symlink.
        OSError: A filesystem operation or reading `content` failed.
    """
    opts = options or WriteOptions()

    if opts.strip > 0:
        stripped = strip_components(entry.path, opts.strip)
        if stripped is None:
            logger.debug(f"Skipping '{entry.path}', nothing left after stripping {opts.strip}")
            drain(content)
            return
        entry = entry.with_path(stripped)
        if entry.kind is EntryKind.LINK:
            entry = replace(entry, link_target=_strip_link_target(entry, opts.strip, output))

    if opts.filter is not None and not opts.filter(entry):
        logger.debug(f"Skipping '{entry.path}', rejected by filter")
        drain(content)
        return

    if opts.map is not None:
        entry = opts.map(entry)

    if entry.kind is not EntryKind.FILE:
        drain(content)
        content = None

    root = os.path.abspath(output)
    real_root = prepare_output_root(root)
    destination = join_under(root, entry.path)

    if entry.kind is EntryKind.DIRECTORY:
        real_dir = resolve_safe_directory(destination, real_root)
        _restore_mtime(real_dir, entry)
        return

    parent = os.path.dirname(destination)
    resolve_safe_directory(parent, real_root)

    if entry.kind is EntryKind.FILE:
        prevent_writing_through_symlink(destination)

    # The tree may have changed since the parent was resolved
    real_parent = os.path.realpath(parent, strict=True)
    ensure_within(real_parent, real_root)
    target = os.path.join(real_parent, os.path.basename(destination))

    if entry.kind is EntryKind.LINK:
        _hardlink_within(entry, root, real_root, target)
    elif entry.kind is EntryKind.SYMLINK:
        supports_symlinks = (
            SUPPORTS_SYMLINKS if opts.supports_symlinks is None else opts.supports_symlinks
        )
        if supports_symlinks:
            os.symlink(entry.link_target, target)
            logger.debug(f"Created symlink {target} -> {entry.link_target}")
        else:
            _hardlink_within(entry, root, real_root, target)
    else:
        _write_file(target, entry.mode, content)
        _restore_mtime(target, entry)


def _strip_link_target(entry: Entry, count: int, output: Union[str, os.PathLike]) -> str:
    link_target = strip_components(entry.link_target, count)
    if link_target is None:
        raise EscapeError(
            entry.link_target,
            os.fspath(output),
            f"Refusing to link '{entry.path}' to '{entry.link_target}', "
            f"nothing left after stripping {count}",
        )
    return link_target


def _hardlink_within(entry: Entry, root: str, real_root: str, target: str) -> None:
    source = join_under(root, entry.link_target)
    real_source = os.path.realpath(source, strict=True)
    ensure_within(real_source, real_root)
    os.link(real_source, target)
    logger.debug(f"Created hardlink {target} -> {real_source}")


def _write_file(target: str, mode: int, content: Optional[BinaryIO]) -> None:
    fd = os.open(target, _WRITE_FLAGS, mode & 0o7777)
    with open(fd, "wb") as f_out:
        if content is not None:
            shutil.copyfileobj(content, f_out, CHUNK_SIZE)
    logger.debug(f"Wrote {target}")


def _restore_mtime(path: str, entry: Entry) -> None:
    mtime_ns = entry.mtime_ns
    if mtime_ns is None:
        return
    os.utime(path, ns=(time.time_ns(), mtime_ns))
