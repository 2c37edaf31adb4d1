#!/usr/bin/env python3
"""
Metadata Collector
Walks a directory tree and turns every entry into a body file record

Features:
- Lexical depth-first walk that never follows symlinks
- Two output passes: all files first, then all directories
- Per-entry failures are written to the side log and skipped
"""

import os
import stat as stat_module
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from .bodyfile.format import write_record
from .core.errors import EntryAccessError, OutputOpenError
from .core.logger import EntryErrorLog, get_module_logger
from .core.record import TimelineRecord
from .platform import StatProvider, get_stat_provider

logger = get_module_logger("collector")


@dataclass
class CollectionSummary:
    """Outcome of one body file run"""

    output: Path
    written: int = 0
    errors: int = 0

    def as_dict(self) -> dict:
        return {
            "output": str(self.output),
            "written": self.written,
            "errors": self.errors,
        }


def _report(error_log: Optional[EntryErrorLog], path: str, message: str) -> None:
    if error_log is not None:
        error_log.log(path, message)
    else:
        logger.warning(f"{path}: {message}")


def walk_paths(
    root: str, error_log: Optional[EntryErrorLog] = None
) -> Tuple[List[str], List[str]]:
    """
    Walk ``root`` and split the visited paths into files and directories

    The walk is depth-first with names sorted lexically. Symbolic links are
    never followed; a link to a directory is listed as a file entry.

    Args:
        root: Directory to walk (included in the result)
        error_log: Receives directories that could not be listed

    Returns:
        (files, directories) in walk order
    """
    files: List[str] = []
    directories: List[str] = []

    try:
        root_mode = os.lstat(root).st_mode
    except OSError as exc:
        _report(error_log, root, f"failed to access path: {exc}")
        return files, directories

    if not stat_module.S_ISDIR(root_mode):
        files.append(root)
        return files, directories

    def visit(directory: str) -> None:
        directories.append(directory)
        try:
            with os.scandir(directory) as iterator:
                children = sorted(iterator, key=lambda entry: entry.name)
        except OSError as exc:
            _report(error_log, directory, f"failed to access path: {exc}")
            return

        for child in children:
            path = os.path.join(directory, child.name)
            try:
                is_directory = child.is_dir(follow_symlinks=False)
            except OSError as exc:
                _report(error_log, path, f"failed to access path: {exc}")
                continue
            if is_directory:
                visit(path)
            else:
                files.append(path)

    visit(root)
    return files, directories


def collect(
    root: Union[str, Path],
    provider: Optional[StatProvider] = None,
    error_log: Optional[EntryErrorLog] = None,
) -> Iterator[TimelineRecord]:
    """
    Walk ``root`` and return an iterator of one record per entry

    The walk completes before this function returns; only the stat calls
    are deferred to iteration. All files are yielded before all
    directories. The caller is responsible for checking that ``root``
    exists.

    Args:
        root: Directory to collect
        provider: Stat provider (defaults to the running platform's)
        error_log: Side log for entries that had to be skipped

    Returns:
        Iterator of TimelineRecord for every entry the provider could stat
    """
    provider = provider or get_stat_provider()
    files, directories = walk_paths(os.fspath(root), error_log)
    logger.info(
        f"Collecting {len(files)} files and {len(directories)} directories "
        f"with the {provider.name} provider"
    )
    return _stat_entries(files + directories, provider, error_log)


def _stat_entries(
    paths: List[str],
    provider: StatProvider,
    error_log: Optional[EntryErrorLog],
) -> Iterator[TimelineRecord]:
    for path in paths:
        try:
            bundle = provider.stat(path)
        except EntryAccessError as exc:
            _report(error_log, path, f"failed to stat file: {exc}")
            continue
        yield TimelineRecord.from_stat(path, bundle)


def write_body_file(
    root: Union[str, Path],
    output: Union[str, Path],
    provider: Optional[StatProvider] = None,
    *,
    error_log: Optional[EntryErrorLog] = None,
    encoding: str = "utf-8",
) -> CollectionSummary:
    """
    Collect ``root`` and append every record to ``output``

    The tree is walked before the output is opened, so an output inside
    ``root`` is not part of its own listing. The output is opened once, in
    append mode. Overwrite confirmation is the caller's job.

    Raises:
        OutputOpenError: the output cannot be created or opened
    """
    output = Path(output)
    summary = CollectionSummary(output=output)
    errors_before = error_log.count if error_log is not None else 0
    records = collect(root, provider, error_log)

    try:
        # surrogateescape keeps undecodable POSIX file names byte-exact
        handle = output.open("a", encoding=encoding, errors="surrogateescape", newline="")
    except OSError as exc:
        raise OutputOpenError(str(output), exc.strerror or str(exc)) from exc

    with handle:
        for record in records:
            write_record(handle, record)
            summary.written += 1

    if error_log is not None:
        summary.errors = error_log.count - errors_before
    logger.info(
        f"Wrote {summary.written} records to {output} ({summary.errors} errors)"
    )
    return summary


__all__ = ["CollectionSummary", "collect", "walk_paths", "write_body_file"]
