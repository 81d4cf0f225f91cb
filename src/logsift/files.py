"""Local files and directories."""

import logging
import os
from collections.abc import Iterator

from logsift.errors import InputError, SourceError
from logsift.sources import Content, DirectoryContent, FileContent, IndexName, LocalSource, Source


logger = logging.getLogger(__name__)


def content_from_path(path: str) -> Content:
    """Create a Content for a local file or directory.

    The relative identity of a file is its name, the one of a directory
    entry is its path below the directory.

    Raises:
        InputError: If the path doesn't exist
    """
    path = os.path.abspath(path)
    if os.path.isdir(path):
        return DirectoryContent(LocalSource(len(path), path))
    if os.path.isfile(path):
        return FileContent(LocalSource(len(os.path.join(os.path.dirname(path), '')), path))
    raise InputError(f'{path}: no such file or directory')


def dir_iter(root: str) -> Iterator[Source]:
    """Recursively list the files of a directory, in sorted order.

    Raises:
        SourceError: If a directory can't be listed
    """
    prefix_len = len(os.path.join(root, ''))

    def on_error(error: OSError):
        raise SourceError(error.filename or root, f"can't list directory: {error.strerror}") from error

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            path = os.path.join(dirpath, filename)
            if os.path.isfile(path):
                yield LocalSource(prefix_len, path)


def discover_baselines_from_path(path: str) -> list[Content]:
    """Find the previous versions of a log file, e.g. the rotated app.log.1 for app.log.

    Every other regular file of the same directory whose IndexName matches
    the one of path is considered a baseline.
    """
    directory = os.path.dirname(os.path.abspath(path))
    prefix_len = len(os.path.join(directory, ''))
    target = LocalSource(prefix_len, os.path.abspath(path))
    target_name = IndexName.from_source(target)

    baselines: list[Content] = []
    for filename in sorted(os.listdir(directory)):
        candidate = LocalSource(prefix_len, os.path.join(directory, filename))
        if candidate == target or not os.path.isfile(candidate.location):
            continue
        if IndexName.from_source(candidate) == target_name:
            baselines.append(FileContent(candidate))

    logger.debug(f'Found {len(baselines)} baselines for {target}')
    return baselines
