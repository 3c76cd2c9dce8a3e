"""Pydantic data models for the compilation pipeline.

This module provides:
- SourceUnit: a captured source file for one compilation run
- ClassHash: the Sierra class hash of a compiled contract
- Artifact: a registered compilation result
- CompilationResult: an artifact plus where its outputs were written
"""

from __future__ import annotations

import json
from pathlib import PurePosixPath
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

from remix_cairo.errors import PersistenceError

# Starknet field prime: 2**251 + 17 * 2**192 + 1
FIELD_PRIME = 0x800000000000011000000000000000000000000000000000000000000000001


class SourceUnit(BaseModel):
    """A source file captured for a single compilation run.

    Attributes:
        path: Path of the source file in the file store.
        content: Raw source bytes.
        name: File name (last path segment), derived from path if omitted.

    Example:
        >>> unit = SourceUnit.from_path("contracts/valid.cairo", "mod counter {}")
        >>> unit.name
        'valid.cairo'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    path: str = Field(..., min_length=1, description="Source path in the file store")
    content: bytes = Field(..., description="Raw source bytes")
    name: str = Field(..., min_length=1, description="Source file name")

    @model_validator(mode="before")
    @classmethod
    def derive_name(cls, data: Any) -> Any:
        """Fill name from the last segment of path when not given."""
        if isinstance(data, dict) and not data.get("name") and data.get("path"):
            data = {**data, "name": PurePosixPath(str(data["path"])).name}
        return data

    @classmethod
    def from_path(cls, path: str, content: bytes | str) -> SourceUnit:
        """Build a SourceUnit, encoding str content as UTF-8.

        Args:
            path: Source path in the file store.
            content: Source content.

        Returns:
            Frozen SourceUnit.
        """
        raw = content.encode("utf-8") if isinstance(content, str) else bytes(content)
        return cls(path=path, content=raw)


class ClassHash(BaseModel):
    """Sierra class hash, a Starknet field element.

    Example:
        >>> ClassHash(value=255).hex
        '0xff'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    value: int = Field(..., ge=0, lt=FIELD_PRIME, description="Class hash as a felt")

    @property
    def hex(self) -> str:
        """Return the class hash as a 0x-prefixed lowercase hex string."""
        return hex(self.value)

    @classmethod
    def from_hex(cls, value: str) -> ClassHash:
        """Parse a 0x-prefixed hex string."""
        return cls(value=int(value, 16))

    def __str__(self) -> str:
        return self.hex


class Artifact(BaseModel):
    """A compiled contract registered in the artifact catalog.

    The ABI and Sierra document are stored as JSON text. ``abi`` and
    ``sierra`` return a freshly parsed copy on every access, so changing a
    returned value never changes the registered artifact.

    Attributes:
        name: Source file name the artifact was compiled from.
        class_hash: Sierra class hash.
        abi_json: Interface descriptor extracted from the Sierra document, as JSON.
        sierra_json: Sierra contract class, as JSON.

    Example:
        >>> artifact = Artifact(name="valid.cairo", class_hash=h, sierra=document)
        >>> artifact.sierra["sierra_program"].append("0x99")
        >>> artifact.sierra == document
        True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(..., min_length=1, description="Contract source name")
    class_hash: ClassHash = Field(..., description="Sierra class hash")
    abi_json: str = Field(default="null", repr=False, description="Contract ABI as JSON")
    sierra_json: str = Field(..., repr=False, description="Sierra contract class as JSON")

    @model_validator(mode="before")
    @classmethod
    def serialize_documents(cls, data: Any) -> Any:
        """Accept parsed ``abi`` and ``sierra`` values and store them as JSON."""
        if isinstance(data, dict) and ("abi" in data or "sierra" in data):
            data = dict(data)
            if "abi" in data:
                data["abi_json"] = json.dumps(data.pop("abi"), ensure_ascii=False)
            if "sierra" in data:
                sierra = data.pop("sierra")
                if not isinstance(sierra, dict):
                    msg = f"sierra must be a JSON object, got {type(sierra).__name__}"
                    raise ValueError(msg)
                data["sierra_json"] = json.dumps(sierra, ensure_ascii=False)
        return data

    @property
    def abi(self) -> Any:
        """Return a copy of the contract ABI."""
        return json.loads(self.abi_json)

    @property
    def sierra(self) -> dict[str, Any]:
        """Return a copy of the parsed Sierra contract class."""
        return json.loads(self.sierra_json)  # type: ignore[no-any-return]


class CompilationResult(BaseModel):
    """Outcome of a full pipeline run.

    persistence_error is set when the artifact was registered but writing
    its outputs to the file store failed.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    artifact: Artifact
    sierra_path: str
    casm_path: str
    persistence_error: PersistenceError | None = None

    @property
    def persisted(self) -> bool:
        """Return True if both outputs were written and the active file switched."""
        return self.persistence_error is None
