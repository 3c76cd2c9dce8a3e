"""remix-cairo class-hash command - class hash of an existing Sierra file."""

from __future__ import annotations

from pathlib import Path

import click

from remix_cairo.cli.errors import EXIT_USER_ERROR, describe_pipeline_error, handle_file_not_found
from remix_cairo.cli.output import error, info


@click.command("class-hash")
@click.argument("file_path", type=click.Path(dir_okay=False))
def class_hash_cmd(file_path: str) -> None:
    """Compute the class hash of a compiled Sierra JSON file.

    Examples:

        remix-cairo class-hash src/artifacts/counter.json
    """
    path = Path(file_path)
    if not path.is_file():
        handle_file_not_found(file_path)

    from remix_cairo.errors import MalformedIntermediateError
    from remix_cairo.hashing import ContentHasher

    try:
        class_hash = ContentHasher().compute_id(path.read_bytes())
    except MalformedIntermediateError as e:
        error(describe_pipeline_error(e))
        raise SystemExit(EXIT_USER_ERROR) from None

    info(class_hash.hex)
