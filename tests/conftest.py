"""Shared pytest fixtures for remix-cairo tests.

Provides sample Sierra/CASM documents, an in-memory file store, and a
structlog configuration suited to output capture.
"""

from __future__ import annotations

import json
import sys
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog

from remix_cairo.compiler import RemoteCompiler

CASM_TEXT = '{"prime": "0x800000000000011000000000000000000000000000000000000000000000001", "bytecode": ["0xa0680017fff8000"]}'


@pytest.fixture(autouse=True)
def configure_structlog_for_tests() -> None:
    """Configure structlog to output to stderr for test capture."""
    structlog.configure(
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,  # Important for test isolation
    )


@pytest.fixture
def sierra_document() -> dict[str, Any]:
    """Return a small Sierra contract class document."""
    return {
        "sierra_program": ["0x1", "0x3", "0x0", "0x2", "0x2", "0x1f"],
        "sierra_program_debug_info": {"type_names": [], "libfunc_names": [], "user_func_names": []},
        "contract_class_version": "0.1.0",
        "entry_points_by_type": {
            "EXTERNAL": [
                {
                    "selector": "0x362398bec32bc0ebb411203221a35a0301193a96f317ebe5e40be9f60d15320",
                    "function_idx": 0,
                },
                {
                    "selector": "0x39e11d48192e4333233c7eb19d10ad67c362bb28580c604d67884c85da39695",
                    "function_idx": 1,
                },
            ],
            "L1_HANDLER": [],
            "CONSTRUCTOR": [],
        },
        "abi": [
            {
                "type": "function",
                "name": "increase_balance",
                "inputs": [{"name": "amount", "type": "core::felt252"}],
                "outputs": [],
                "state_mutability": "external",
            },
            {
                "type": "function",
                "name": "get_balance",
                "inputs": [],
                "outputs": [{"type": "core::felt252"}],
                "state_mutability": "view",
            },
        ],
    }


@pytest.fixture
def sierra_text(sierra_document: dict[str, Any]) -> str:
    """Return the Sierra document as the compiler API would send it."""
    return json.dumps(sierra_document, indent=2)


@pytest.fixture
def casm_text() -> str:
    """Return a CASM document as the compiler API would send it."""
    return CASM_TEXT


class InMemoryFileStore:
    """FileStore keeping files in a dict, with optional injected failures."""

    def __init__(self, files: dict[str, bytes] | None = None, active_file: str | None = None) -> None:
        self.files: dict[str, bytes] = dict(files or {})
        self.active_file = active_file
        self.fail_writes_to: set[str] = set()
        self.fail_switch = False
        self.switched_to: list[str] = []

    def read_file(self, path: str) -> bytes:
        return self.files[path]

    def write_file(self, path: str, data: bytes) -> None:
        if path in self.fail_writes_to:
            raise OSError(f"disk full: {path}")
        self.files[path] = data

    def switch_active_file(self, path: str) -> None:
        if self.fail_switch:
            raise RuntimeError("editor unavailable")
        self.switched_to.append(path)
        self.active_file = path

    def get_active_file(self) -> str:
        if self.active_file is None:
            raise LookupError("No active file")
        return self.active_file


@pytest.fixture
def file_store() -> InMemoryFileStore:
    """Return an empty in-memory file store."""
    return InMemoryFileStore()


@pytest.fixture
def mock_compiler(sierra_text: str, casm_text: str) -> MagicMock:
    """Return a RemoteCompiler mock answering both stages successfully."""
    compiler = MagicMock(spec=RemoteCompiler)
    compiler.to_intermediate.return_value = sierra_text
    compiler.to_final.return_value = casm_text
    return compiler
