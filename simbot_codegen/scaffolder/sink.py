"""Hierarchical output sinks for generated projects.

Generators only see :class:`OutputSink` and :class:`FolderHandle`: create a
folder (nested on demand), write a text file into it.  Every file path can be
written exactly once per sink; a second write is an :class:`OutputSinkError`.

Two implementations ship here:

* :class:`MemorySink` keeps the tree in memory; :func:`build_zip` turns it
  into zip bytes for download.
* :class:`DirectorySink` writes straight to a directory on disk;
  :func:`export_tree` copies a finished :class:`MemorySink` there in one go.
"""

from __future__ import annotations

import io
import zipfile
from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath


EXECUTABLE_FILES = frozenset({"gradlew"})


class OutputSinkError(Exception):
    """Raised when a folder cannot be created or a file cannot be written."""

    def __init__(self, path: str, message: str) -> None:
        self.path = path
        super().__init__(f"{path}: {message}")


def _join(parent: str, child: str) -> str:
    """Join and normalise a relative sink path, rejecting escapes."""
    if not child or child.startswith("/"):
        raise OutputSinkError(child or "<empty>", "path must be relative and non-empty")
    parts = [p for p in PurePosixPath(child).parts if p not in ("", ".")]
    if not parts or ".." in parts:
        raise OutputSinkError(child, "path must not be empty or contain '..'")
    return str(PurePosixPath(parent, *parts)) if parent else str(PurePosixPath(*parts))


# ---------------------------------------------------------------------------
# Abstractions
# ---------------------------------------------------------------------------


class FolderHandle:
    """A folder inside a sink. Obtained from :meth:`OutputSink.create_folder`."""

    def __init__(self, sink: "OutputSink", path: str) -> None:
        self.sink = sink
        self.path = path

    def create_folder(self, name: str) -> "FolderHandle":
        return self.sink.create_folder(_join(self.path, name))

    def write_file(self, name: str, content: str) -> str:
        """Write *content* to ``<this folder>/<name>`` and return the sink path."""
        path = _join(self.path, name)
        self.sink.write(path, content)
        return path

    def __repr__(self) -> str:
        return f"FolderHandle({self.path!r})"


class OutputSink(ABC):
    """Write-once hierarchical file target."""

    def create_folder(self, path: str) -> FolderHandle:
        normalised = _join("", path)
        self._make_folder(normalised)
        return FolderHandle(self, normalised)

    def write(self, path: str, content: str) -> None:
        normalised = _join("", path)
        if self.exists(normalised):
            raise OutputSinkError(normalised, "file already written")
        self._write_file(normalised, content)

    def discard(self) -> None:
        """Drop everything written through this sink.  No-op by default."""

    @abstractmethod
    def exists(self, path: str) -> bool:
        """Return ``True`` if a file was already written at *path*."""

    @abstractmethod
    def _make_folder(self, path: str) -> None: ...

    @abstractmethod
    def _write_file(self, path: str, content: str) -> None: ...


# ---------------------------------------------------------------------------
# In-memory sink
# ---------------------------------------------------------------------------


class MemorySink(OutputSink):
    """Keeps folders and files in memory, in write order."""

    def __init__(self) -> None:
        self.files: dict[str, str] = {}
        self.folders: list[str] = []

    def exists(self, path: str) -> bool:
        return path in self.files

    def _make_folder(self, path: str) -> None:
        if path in self.files:
            raise OutputSinkError(path, "a file already exists at this path")
        parts = PurePosixPath(path).parts
        for depth in range(1, len(parts) + 1):
            folder = str(PurePosixPath(*parts[:depth]))
            if folder in self.files:
                raise OutputSinkError(folder, "a file already exists at this path")
            if folder not in self.folders:
                self.folders.append(folder)

    def _write_file(self, path: str, content: str) -> None:
        if path in self.folders:
            raise OutputSinkError(path, "a folder already exists at this path")
        parent = str(PurePosixPath(path).parent)
        if parent != ".":
            self._make_folder(parent)
        self.files[path] = content

    def discard(self) -> None:
        self.files.clear()
        self.folders.clear()

    def read(self, path: str) -> str:
        return self.files[path]

    def paths(self) -> list[str]:
        """Return all written file paths, sorted."""
        return sorted(self.files)


# ---------------------------------------------------------------------------
# Directory sink
# ---------------------------------------------------------------------------


class DirectorySink(OutputSink):
    """Writes the tree below ``root`` on the local filesystem.

    Existing files are never overwritten.  Files and folders created by this
    sink are tracked so :meth:`discard` can remove them again.
    """

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self.written: list[str] = []
        self._created: list[Path] = []

    def exists(self, path: str) -> bool:
        return (self.root / path).is_file()

    def _mkdirs(self, folder: Path) -> None:
        missing = []
        for candidate in (folder, *folder.parents):
            if candidate.exists():
                break
            missing.append(candidate)
        folder.mkdir(parents=True, exist_ok=True)
        self._created.extend(reversed(missing))

    def _make_folder(self, path: str) -> None:
        try:
            self._mkdirs(self.root / path)
        except OSError as exc:
            raise OutputSinkError(path, f"cannot create folder: {exc}") from exc

    def _write_file(self, path: str, content: str) -> None:
        target = self.root / path
        try:
            self._mkdirs(target.parent)
            with target.open("x", encoding="utf-8", newline="") as fh:
                fh.write(content)
            self.written.append(path)
            if target.name in EXECUTABLE_FILES:
                target.chmod(0o755)
        except OSError as exc:
            raise OutputSinkError(path, f"cannot write file: {exc}") from exc

    def discard(self) -> None:
        """Remove the files and the now-empty folders this sink created."""
        for path in reversed(self.written):
            (self.root / path).unlink(missing_ok=True)
        for folder in reversed(self._created):
            if folder.is_dir() and not any(folder.iterdir()):
                folder.rmdir()
        self.written.clear()
        self._created.clear()


def export_tree(source: MemorySink, root: str | Path) -> DirectorySink:
    """Copy a finished :class:`MemorySink` below *root*, all or nothing.

    Every target path is checked before the first write.  If a write still
    fails, whatever was already written is removed again.

    Raises:
        OutputSinkError: For the first path that exists on disk or cannot
            be written.
    """
    target = DirectorySink(root)
    for folder in source.folders:
        if (target.root / folder).exists() and not (target.root / folder).is_dir():
            raise OutputSinkError(folder, "a file already exists at this path")
    for path in source.paths():
        if (target.root / path).exists():
            raise OutputSinkError(path, "already exists on disk")

    try:
        for path in source.paths():
            target.write(path, source.read(path))
    except OutputSinkError:
        target.discard()
        raise
    return target


# ---------------------------------------------------------------------------
# Archive
# ---------------------------------------------------------------------------


def build_zip(sink: MemorySink) -> bytes:
    """Serialise a :class:`MemorySink` to zip bytes.

    Entries are written in sorted order with a fixed timestamp so identical
    trees produce identical archives.  ``gradlew`` keeps its executable bit.
    """
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as archive:
        for folder in sorted(sink.folders):
            info = zipfile.ZipInfo(f"{folder}/", date_time=(1980, 1, 1, 0, 0, 0))
            info.external_attr = (0o40755 << 16) | 0x10
            archive.writestr(info, b"")
        for path in sink.paths():
            info = zipfile.ZipInfo(path, date_time=(1980, 1, 1, 0, 0, 0))
            info.compress_type = zipfile.ZIP_DEFLATED
            mode = 0o755 if PurePosixPath(path).name in EXECUTABLE_FILES else 0o644
            info.external_attr = (0o100000 | mode) << 16
            archive.writestr(info, sink.files[path].encode("utf-8"))
    return buffer.getvalue()
