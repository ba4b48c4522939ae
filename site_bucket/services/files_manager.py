from __future__ import annotations

import logging
import mimetypes
import os
import stat
from pathlib import Path
from typing import Callable, Optional, Union

from site_bucket.models.files import FileDescriptor


logger = logging.getLogger(__name__)

ContentTypeLookup = Callable[[str], Optional[str]]
PathLike = Union[str, "os.PathLike[str]"]


class FilesystemError(RuntimeError):
    pass


# Built-in table only; host mime.types files differ between machines.
_MIME_TYPES = mimetypes.MimeTypes()


def guess_content_type(path: str) -> Optional[str]:
    guessed, _ = _MIME_TYPES.guess_type(path)
    return guessed


def _to_posix(path: str) -> str:
    return path.replace("\\", "/")


def to_remote_key(relative_path: str) -> str:
    """Canonical S3 key for a path relative to the walk root."""

    parts = [p for p in _to_posix(relative_path).split("/") if p not in ("", ".")]
    return "/".join(parts)


def to_display_name(path: str) -> str:
    """Flatten a (root-joined) path into a separator-free resource name.

    `../source/css/style.css` becomes `source-css-style.css`.
    """

    parts = [p for p in _to_posix(path).split("/") if p not in ("", ".", "..")]
    return "-".join(parts)


class FilesManager:
    """Collects every regular file under `build_path` as a FileDescriptor.

    Symbolic links and special files (sockets, FIFOs, devices) are skipped;
    symlinked directories are never followed.
    """

    def __init__(self, build_path: PathLike, *, content_type_lookup: ContentTypeLookup = guess_content_type) -> None:
        self._build_path = _to_posix(os.fspath(build_path))
        self._content_type_lookup = content_type_lookup

    @property
    def build_path(self) -> str:
        return self._build_path

    def get_files(self) -> list[FileDescriptor]:
        root = self._build_path
        try:
            root_stat = os.stat(root)
        except OSError as exc:
            raise FilesystemError(f"Source directory not found: {root}") from exc
        if not stat.S_ISDIR(root_stat.st_mode):
            raise FilesystemError(f"Source path is not a directory: {root}")

        files: list[FileDescriptor] = []
        self._process_folder(root, "", files)
        logger.info("Discovered %d file(s) under %s", len(files), root)
        return files

    def _process_folder(self, folder: str, relative_folder: str, accumulator: list[FileDescriptor]) -> None:
        try:
            with os.scandir(folder) as entries:
                for entry in entries:
                    relative_path = f"{relative_folder}/{entry.name}" if relative_folder else entry.name
                    mode = entry.stat(follow_symlinks=False).st_mode

                    if stat.S_ISDIR(mode):
                        self._process_folder(_to_posix(entry.path), relative_path, accumulator)
                    elif stat.S_ISREG(mode):
                        accumulator.append(self._process_file(_to_posix(entry.path), relative_path))
                    elif stat.S_ISLNK(mode):
                        logger.debug("Skipping symbolic link: %s", entry.path)
                    else:
                        logger.warning("Skipping special file: %s", entry.path)
        except OSError as exc:
            raise FilesystemError(f"Failed to read directory: {folder}") from exc

    def _process_file(self, path: str, relative_path: str) -> FileDescriptor:
        return FileDescriptor(
            content_type=self._content_type_lookup(path),
            absolute_path=str(Path(path).resolve()),
            remote_key=to_remote_key(relative_path),
            display_name=to_display_name(path),
        )


def discover(root: PathLike, *, content_type_lookup: ContentTypeLookup = guess_content_type) -> list[FileDescriptor]:
    """Walk `root` depth-first and return one descriptor per regular file.

    Order within a directory is whatever the filesystem enumerates; nothing
    is sorted. Any unreadable directory fails the whole walk with
    FilesystemError.
    """

    return FilesManager(root, content_type_lookup=content_type_lookup).get_files()
