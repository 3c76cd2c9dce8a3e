"""Orchestrator factory.

This module provides the create_orchestrator() factory function that wires
a CompilerConfig into a ready-to-use CompilationOrchestrator.
"""

from __future__ import annotations

from remix_cairo.catalog import ArtifactCatalog
from remix_cairo.compiler import RemoteCompiler
from remix_cairo.config import CompilerConfig
from remix_cairo.file_store import FileStore
from remix_cairo.observability import get_logger
from remix_cairo.orchestrator import CompilationOrchestrator


def create_orchestrator(
    file_store: FileStore,
    config: CompilerConfig | None = None,
    *,
    catalog: ArtifactCatalog | None = None,
) -> CompilationOrchestrator:
    """Create a compilation orchestrator.

    Args:
        file_store: Host file store outputs are written to.
        config: Compiler endpoint configuration. Loaded from REMIX_CAIRO_*
            environment variables if not provided.
        catalog: Existing session catalog to register into. A new, empty one
            is created if not provided.

    Returns:
        CompilationOrchestrator owning a new RemoteCompiler.

    Example:
        >>> store = LocalFileStore(Path("."))
        >>> with create_orchestrator(store) as orchestrator:
        ...     orchestrator.compile(SourceUnit.from_path("counter.cairo", source))
    """
    compiler_config = config or CompilerConfig()
    get_logger().info(
        "creating_orchestrator",
        base_url=compiler_config.base_url,
        intermediate_route=compiler_config.intermediate_route,
        final_route=compiler_config.final_route,
    )
    return CompilationOrchestrator(
        RemoteCompiler(compiler_config),
        catalog or ArtifactCatalog(),
        file_store,
    )
