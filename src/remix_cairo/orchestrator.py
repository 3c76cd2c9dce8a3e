"""Compilation pipeline orchestration.

This module provides CompilationOrchestrator, which turns a Cairo source
file into a registered artifact:

1. source -> Sierra (remote)
2. Sierra -> CASM (remote)
3. parse Sierra
4. compute the class hash (hash-pending signal held)
5-6. build and register the artifact (it becomes selected)
7. write Sierra and CASM to the file store, switch to the Sierra file

Failures in steps 1-4 leave the catalog and file store untouched. Failures
in step 7 do not roll back the registration.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING

from remix_cairo.catalog import ArtifactCatalog
from remix_cairo.compiler import RemoteCompiler
from remix_cairo.errors import PersistenceError
from remix_cairo.file_store import (
    CASM_EXTENSION,
    SIERRA_EXTENSION,
    FileStore,
    artifact_filename,
    artifact_folder,
)
from remix_cairo.hashing import ContentHasher
from remix_cairo.models import Artifact, CompilationResult, SourceUnit
from remix_cairo.observability import compiler_operation, get_logger

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.stdlib import BoundLogger


class CompilationOrchestrator:
    """Drives RemoteCompiler -> ContentHasher -> ArtifactCatalog for one source.

    Runs are serialized: concurrent compile() calls queue on an internal
    lock, so at most one run holds the hash-pending signal at a time.

    Attributes:
        compiler: Remote compiler client.
        catalog: Session artifact catalog.
        file_store: Host file store outputs are written to.

    Example:
        >>> orchestrator = CompilationOrchestrator(compiler, catalog, store)
        >>> artifact = orchestrator.compile(
        ...     SourceUnit.from_path("contracts/valid.cairo", source)
        ... )
        >>> catalog.selected() is artifact
        True
    """

    def __init__(
        self,
        compiler: RemoteCompiler,
        catalog: ArtifactCatalog,
        file_store: FileStore,
        *,
        hasher: ContentHasher | None = None,
        folder_for: Callable[[str], str] = artifact_folder,
        filename_for: Callable[[str, str], str] = artifact_filename,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize CompilationOrchestrator.

        Args:
            compiler: Remote compiler client.
            catalog: Session artifact catalog.
            file_store: Host file store.
            hasher: Optional hasher. Defaults to one bound to the catalog's
                hash-pending signal.
            folder_for: Maps a source path to its output folder.
            filename_for: Maps (extension, source name) to an output file name.
            logger: Optional structlog logger. Uses default if not provided.
        """
        self.compiler = compiler
        self.catalog = catalog
        self.file_store = file_store
        self._hasher = hasher or ContentHasher(hash_pending=catalog.hash_pending)
        self._folder_for = folder_for
        self._filename_for = filename_for
        self._logger = logger or get_logger()
        self._run_lock = threading.Lock()
        self._executor: ThreadPoolExecutor | None = None
        self._executor_lock = threading.Lock()

    def output_paths(self, unit: SourceUnit) -> tuple[str, str]:
        """Return the (Sierra, CASM) output paths for a source unit."""
        folder = self._folder_for(unit.path)
        return (
            f"{folder}/{self._filename_for(SIERRA_EXTENSION, unit.name)}",
            f"{folder}/{self._filename_for(CASM_EXTENSION, unit.name)}",
        )

    def compile(self, unit: SourceUnit) -> Artifact:
        """Compile a source unit into a registered, selected artifact.

        Args:
            unit: Source file to compile.

        Returns:
            The registered artifact.

        Raises:
            RemoteCompilationError: If either remote stage fails.
            MalformedIntermediateError: If the Sierra output is unusable.
            PersistenceError: If writing outputs fails. The artifact is
                registered regardless.
        """
        result = self.run(unit)
        if result.persistence_error is not None:
            raise result.persistence_error
        return result.artifact

    def run(self, unit: SourceUnit) -> CompilationResult:
        """Compile a source unit, reporting persistence failures in the result.

        Same sequence as compile(), but a PersistenceError is returned in
        CompilationResult.persistence_error instead of being raised.

        Raises:
            RemoteCompilationError: If either remote stage fails.
            MalformedIntermediateError: If the Sierra output is unusable.
        """
        with self._run_lock, compiler_operation("compile", source=unit.path):
            sierra_text = self.compiler.to_intermediate(unit.content)
            casm_text = self.compiler.to_final(sierra_text)

            sierra = self._hasher.parse(sierra_text)
            class_hash = self._hasher.compute_id(sierra)

            artifact = Artifact(
                name=unit.name,
                abi=sierra.get("abi"),
                class_hash=class_hash,
                sierra=sierra,
            )
            self.catalog.register(artifact)

            sierra_path, casm_path = self.output_paths(unit)
            persistence_error = self._persist(sierra_path, sierra_text, casm_path, casm_text)

            return CompilationResult(
                artifact=artifact,
                sierra_path=sierra_path,
                casm_path=casm_path,
                persistence_error=persistence_error,
            )

    def _persist(
        self,
        sierra_path: str,
        sierra_text: str,
        casm_path: str,
        casm_text: str,
    ) -> PersistenceError | None:
        """Write both outputs and switch to the Sierra file.

        Returns:
            The first failure as a PersistenceError, or None.
        """
        writes = ((sierra_path, sierra_text), (casm_path, casm_text))
        operation, path = "write_file", sierra_path
        try:
            for path, text in writes:
                self.file_store.write_file(path, text.encode("utf-8"))
            operation, path = "switch_active_file", sierra_path
            self.file_store.switch_active_file(sierra_path)
        except Exception as exc:
            error = PersistenceError(path, operation, str(exc))
            error.__cause__ = exc
            self._logger.error(
                "artifact_persistence_failed",
                path=path,
                operation=operation,
                error=str(exc),
            )
            return error

        self._logger.info("artifact_persisted", sierra_path=sierra_path, casm_path=casm_path)
        return None

    def compile_active_file(self) -> Artifact:
        """Compile the file store's active file.

        Raises:
            Whatever the file store raises when reading, plus the errors of compile().
        """
        path = self.file_store.get_active_file()
        content = self.file_store.read_file(path)
        return self.compile(SourceUnit.from_path(path, content))

    def submit(self, unit: SourceUnit) -> Future[Artifact]:
        """Run compile() on the orchestrator's worker thread.

        Returns:
            Future resolving to the artifact, or to the error compile() raised.
        """
        with self._executor_lock:
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=1,
                    thread_name_prefix="remix-cairo-compile",
                )
            return self._executor.submit(self.compile, unit)

    def shutdown(self, *, wait: bool = True) -> None:
        """Stop the worker thread started by submit()."""
        with self._executor_lock:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)

    def close(self) -> None:
        """Stop the worker thread and close the compiler client."""
        self.shutdown()
        self.compiler.close()

    def __enter__(self) -> CompilationOrchestrator:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
