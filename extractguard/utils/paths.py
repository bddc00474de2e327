import os
import pathlib
import posixpath
from typing import List, Optional, Union


def normalize_path(*path_parts: Union[str, pathlib.PurePosixPath]) -> str:
    """
    Normalize one or more path parts into a single POSIX-style path string.

    Args:
        *path_parts: One or more path components, strings or PurePath objects.

    Returns:
        str: POSIX-style normalized path (e.g., 'C:/Program Files/App')
    """
    # Replace backslashes in each part before joining
    cleaned_parts = [str(p).replace("\\", "/") for p in path_parts]
    return pathlib.PurePosixPath(*cleaned_parts).as_posix()


def archive_path_parts(path: str) -> List[str]:
    """
    Split an untrusted archive path into lexically normalized components.

    Backslashes count as separators, leading slashes are dropped, and '.' and
    inner '..' segments are collapsed. Leading '..' segments are kept so that the
    caller can still detect a climb above the archive root.

    Args:
        path (str): Archive-internal path.

    Returns:
        List[str]: Path components, empty when the path names the archive root.
    """
    normalized = posixpath.normpath(normalize_path(path))
    return [part for part in normalized.split("/") if part not in ("", ".")]


def strip_components(path: str, count: int) -> Optional[str]:
    """
    Remove `count` leading components from an archive path.

    Returns None when nothing is left, i.e. the path had `count` or fewer components.
    """
    parts = archive_path_parts(path)
    if count <= 0:
        return "/".join(parts) or "."
    if len(parts) <= count:
        return None
    return "/".join(parts[count:])


def join_under(root: str, path: str) -> str:
    """
    Join an archive path underneath `root`. Paths that look absolute are still placed
    under `root`; '..' segments are collapsed lexically and may climb out of it.
    """
    return os.path.normpath(os.path.join(root, *archive_path_parts(path)))


def is_within(path: str, root: str) -> bool:
    """Check whether `path` is `root` or lies beneath it, comparing whole components."""
    path = os.path.normcase(path)
    root = os.path.normcase(root)
    if path == root:
        return True
    return path.startswith(root.rstrip(os.sep) + os.sep)
