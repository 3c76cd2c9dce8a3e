"""File store collaborator for compiled outputs.

This module defines:
- FileStore: Protocol the orchestrator writes compiled outputs through
- artifact_folder / artifact_filename: output path derivation
- LocalFileStore: FileStore backed by a local directory
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath
from typing import Protocol, runtime_checkable

from remix_cairo.observability import get_logger

ARTIFACTS_DIR = "artifacts"
SIERRA_EXTENSION = ".json"
CASM_EXTENSION = ".casm"


@runtime_checkable
class FileStore(Protocol):
    """Host file manager the pipeline reads sources from and writes outputs to.

    Paths are POSIX-style strings relative to the store's workspace.
    """

    def read_file(self, path: str) -> bytes:
        """Return the content of a file."""
        ...

    def write_file(self, path: str, data: bytes) -> None:
        """Create or overwrite a file."""
        ...

    def switch_active_file(self, path: str) -> None:
        """Make a file the active one in the host environment."""
        ...

    def get_active_file(self) -> str:
        """Return the path of the active file."""
        ...


def artifact_folder(source_path: str) -> str:
    """Return the folder compiled outputs of a source file go to.

    Example:
        >>> artifact_folder("contracts/counter.cairo")
        'contracts/artifacts'
        >>> artifact_folder("counter.cairo")
        'artifacts'
    """
    parent = PurePosixPath(source_path).parent
    if str(parent) in ("", "."):
        return ARTIFACTS_DIR
    return str(parent / ARTIFACTS_DIR)


def artifact_filename(extension: str, file_name: str) -> str:
    """Return an output file name: the source name up to its first dot plus extension.

    Example:
        >>> artifact_filename(".casm", "counter.cairo")
        'counter.casm'
    """
    return file_name.split(".")[0] + extension


class LocalFileStore:
    """FileStore rooted at a local directory.

    Attributes:
        root: Workspace directory all paths are resolved against.

    Example:
        >>> store = LocalFileStore(Path("."), active_file="contracts/counter.cairo")
        >>> store.read_file(store.get_active_file())
        b'...'
    """

    def __init__(self, root: Path, *, active_file: str | None = None) -> None:
        self.root = Path(root)
        self._active_file = active_file
        self._logger = get_logger()

    def _resolve(self, path: str) -> Path:
        resolved = (self.root / path).resolve()
        root = self.root.resolve()
        if resolved != root and root not in resolved.parents:
            msg = f"Path escapes the workspace: {path}"
            raise ValueError(msg)
        return resolved

    def read_file(self, path: str) -> bytes:
        return self._resolve(path).read_bytes()

    def write_file(self, path: str, data: bytes) -> None:
        target = self._resolve(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)
        self._logger.debug("file_written", path=path, size=len(data))

    def switch_active_file(self, path: str) -> None:
        if not self._resolve(path).exists():
            raise FileNotFoundError(path)
        self._active_file = path

    def get_active_file(self) -> str:
        if self._active_file is None:
            msg = "No active file"
            raise LookupError(msg)
        return self._active_file
