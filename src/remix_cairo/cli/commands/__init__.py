"""CLI command modules.

Commands are loaded lazily by remix_cairo.cli.main.LazyGroup.
"""

from __future__ import annotations

__all__: list[str] = []
