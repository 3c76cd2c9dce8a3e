"""Command line interface for remix-cairo.

Entry point: ``remix-cairo`` (see remix_cairo.cli.main).
"""

from __future__ import annotations
