"""remix-cairo: remote Cairo compilation pipeline with a session artifact catalog.

This package compiles a Cairo source file through a remote compiler API
(source -> Sierra -> CASM), computes the Sierra class hash, and registers
the result in an in-memory catalog:
- httpx client for the two compilation stages
- Bit-exact Starknet Sierra class hash
- Append-only artifact catalog with a hash-pending signal
- Structured logging via structlog and OpenTelemetry spans

Example:
    >>> from remix_cairo import LocalFileStore, SourceUnit, create_orchestrator
    >>> store = LocalFileStore(Path("."))
    >>> with create_orchestrator(store) as orchestrator:
    ...     artifact = orchestrator.compile(
    ...         SourceUnit.from_path("contracts/counter.cairo", source)
    ...     )
    >>> artifact.class_hash.hex
    '0x...'
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Factory function
    "create_orchestrator",
    # Pipeline components
    "CompilationOrchestrator",
    "RemoteCompiler",
    "ContentHasher",
    "ArtifactCatalog",
    "HashPendingSignal",
    # File store
    "FileStore",
    "LocalFileStore",
    # Configuration
    "CompilerConfig",
    # Data models
    "SourceUnit",
    "ClassHash",
    "Artifact",
    "CompilationResult",
    # Exceptions
    "RemixCairoError",
    "RemoteCompilationError",
    "MalformedIntermediateError",
    "PersistenceError",
]

_LAZY_MODULES = {
    "create_orchestrator": "remix_cairo.factory",
    "CompilationOrchestrator": "remix_cairo.orchestrator",
    "RemoteCompiler": "remix_cairo.compiler",
    "ContentHasher": "remix_cairo.hashing",
    "ArtifactCatalog": "remix_cairo.catalog",
    "HashPendingSignal": "remix_cairo.catalog",
    "FileStore": "remix_cairo.file_store",
    "LocalFileStore": "remix_cairo.file_store",
    "CompilerConfig": "remix_cairo.config",
    "SourceUnit": "remix_cairo.models",
    "ClassHash": "remix_cairo.models",
    "Artifact": "remix_cairo.models",
    "CompilationResult": "remix_cairo.models",
    "RemixCairoError": "remix_cairo.errors",
    "RemoteCompilationError": "remix_cairo.errors",
    "MalformedIntermediateError": "remix_cairo.errors",
    "PersistenceError": "remix_cairo.errors",
}


def __getattr__(name: str) -> object:
    """Lazy import of public API members."""
    module_name = _LAZY_MODULES.get(name)
    if module_name is not None:
        import importlib

        return getattr(importlib.import_module(module_name), name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
