"""remix-cairo compile command - compile a Cairo file through the remote pipeline."""

from __future__ import annotations

from pathlib import Path

import click

from remix_cairo.cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    describe_pipeline_error,
    exit_code_for,
    format_pydantic_error,
)
from remix_cairo.cli.output import error, info, print_json, success, warning


def _workspace_path(file_path: Path, root: Path) -> str | None:
    """Return file_path relative to root as a POSIX string, or None if outside it."""
    try:
        return file_path.resolve().relative_to(root.resolve()).as_posix()
    except ValueError:
        return None


@click.command("compile")
@click.argument("file_path", type=click.Path(dir_okay=False))
@click.option(
    "--url",
    "base_url",
    type=str,
    default=None,
    help="Compiler API base URL [default: $REMIX_CAIRO_BASE_URL or http://localhost:8000]",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=float,
    default=None,
    help="Per-stage request timeout in seconds [default: 60]",
)
@click.option(
    "--root",
    "root_path",
    type=click.Path(file_okay=False),
    default=".",
    help="Workspace root outputs are written under [default: .]",
)
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
def compile_cmd(
    file_path: str,
    base_url: str | None,
    timeout_seconds: float | None,
    root_path: str,
    as_json: bool,
) -> None:
    """Compile a Cairo contract to Sierra and CASM and print its class hash.

    Outputs are written next to the source, under an `artifacts/` folder.

    Examples:

        remix-cairo compile src/counter.cairo

        remix-cairo compile src/counter.cairo --url https://compiler.example.org --json
    """
    path = Path(file_path)
    root = Path(root_path)

    if not path.is_file():
        error(f"File not found: {file_path}")
        raise SystemExit(EXIT_SYSTEM_ERROR)

    relative = _workspace_path(path, root)
    if relative is None:
        error(f"{file_path} is outside the workspace root {root_path}")
        raise SystemExit(EXIT_SYSTEM_ERROR)

    # Import here to avoid heavy imports at CLI startup
    from pydantic import ValidationError as PydanticValidationError

    from remix_cairo.config import CompilerConfig
    from remix_cairo.errors import RemixCairoError
    from remix_cairo.factory import create_orchestrator
    from remix_cairo.file_store import LocalFileStore
    from remix_cairo.models import SourceUnit

    overrides: dict[str, object] = {}
    if base_url is not None:
        overrides["base_url"] = base_url
    if timeout_seconds is not None:
        overrides["timeout_seconds"] = timeout_seconds

    try:
        config = CompilerConfig(**overrides)
    except PydanticValidationError as e:
        error(f"Invalid compiler settings:\n{format_pydantic_error(e)}")
        raise SystemExit(EXIT_USER_ERROR) from None

    store = LocalFileStore(root, active_file=relative)
    unit = SourceUnit.from_path(relative, store.read_file(relative))

    try:
        with create_orchestrator(store, config) as orchestrator:
            result = orchestrator.run(unit)
    except RemixCairoError as e:
        error(describe_pipeline_error(e))
        raise SystemExit(exit_code_for(e)) from None

    artifact = result.artifact
    if as_json:
        print_json(
            {
                "name": artifact.name,
                "class_hash": artifact.class_hash.hex,
                "sierra_path": result.sierra_path,
                "casm_path": result.casm_path,
                "persisted": result.persisted,
            }
        )
    else:
        success(f"Compiled {artifact.name}")
        info(f"Class hash: {artifact.class_hash.hex}")

    if result.persistence_error is not None:
        warning(describe_pipeline_error(result.persistence_error))
        raise SystemExit(exit_code_for(result.persistence_error))

    if not as_json:
        info(f"Sierra: {result.sierra_path}")
        info(f"CASM:   {result.casm_path}")
