"""CLI entry point for remix-cairo.

Defines the main command group using a LazyGroup so that --help does not
import httpx, the hashing backends or pydantic models.
"""

from __future__ import annotations

import importlib
from typing import Any

import click
import rich_click as rclick

from remix_cairo import __version__
from remix_cairo.cli.output import set_no_color

rclick.rich_click.TEXT_MARKUP = "markdown"
rclick.rich_click.SHOW_ARGUMENTS = True
rclick.rich_click.GROUP_ARGUMENTS_OPTIONS = True


class LazyGroup(rclick.RichGroup):
    """Click group that loads commands lazily.

    Attributes:
        lazy_subcommands: Mapping of command names to "module.attribute" paths.
    """

    def __init__(
        self,
        *args: Any,
        lazy_subcommands: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(*args, **kwargs)
        self.lazy_subcommands: dict[str, str] = lazy_subcommands or {}

    def list_commands(self, ctx: click.Context) -> list[str]:
        commands = set(super().list_commands(ctx))
        commands.update(self.lazy_subcommands.keys())
        return sorted(commands)

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        cmd = super().get_command(ctx, cmd_name)  # type: ignore[arg-type]
        if cmd is not None:
            return cmd

        if cmd_name not in self.lazy_subcommands:
            return None

        module_name, attr_name = self.lazy_subcommands[cmd_name].rsplit(".", 1)
        mod = importlib.import_module(module_name)
        return getattr(mod, attr_name)  # type: ignore[no-any-return]


LAZY_COMMANDS = {
    "compile": "remix_cairo.cli.commands.compile.compile_cmd",
    "class-hash": "remix_cairo.cli.commands.class_hash.class_hash_cmd",
}


def _configure_logging(ctx: click.Context, param: click.Parameter, value: str) -> str:
    from remix_cairo.observability import configure_logging

    configure_logging(log_level=value, json_format=False)
    return value


@click.command(cls=LazyGroup, lazy_subcommands=LAZY_COMMANDS)
@click.version_option(version=__version__, prog_name="remix-cairo")
@click.option(
    "--no-color",
    is_flag=True,
    default=False,
    help="Disable colored output.",
    is_eager=True,
    expose_value=False,
    callback=lambda ctx, param, value: set_no_color(value) if value else None,
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Minimum level of pipeline log events (written to stderr).",
    expose_value=False,
    callback=_configure_logging,
)
def cli() -> None:
    """remix-cairo - compile Cairo contracts through a remote compiler.

    **Commands:**

    - `remix-cairo compile src/counter.cairo` - compile to Sierra and CASM,
      print the class hash
    - `remix-cairo class-hash artifacts/counter.json` - class hash of an
      existing Sierra file

    The compiler endpoint is read from `REMIX_CAIRO_BASE_URL`
    (default `http://localhost:8000`) or `--url`.
    """
    pass


if __name__ == "__main__":
    cli()
