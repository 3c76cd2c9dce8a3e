"""Unit tests for pipeline data models."""

from __future__ import annotations

from typing import Any

import pytest
from pydantic import ValidationError

from remix_cairo.errors import PersistenceError
from remix_cairo.models import FIELD_PRIME, Artifact, ClassHash, CompilationResult, SourceUnit


class TestSourceUnit:
    """Tests for SourceUnit."""

    def test_name_derived_from_path(self) -> None:
        """Test name is the last path segment."""
        unit = SourceUnit(path="contracts/nested/valid.cairo", content=b"")

        assert unit.name == "valid.cairo"

    def test_explicit_name_kept(self) -> None:
        """Test an explicit name is not overwritten."""
        unit = SourceUnit(path="contracts/valid.cairo", content=b"", name="other.cairo")

        assert unit.name == "other.cairo"

    def test_from_path_encodes_text(self) -> None:
        """Test str content is UTF-8 encoded."""
        unit = SourceUnit.from_path("a.cairo", "// café")

        assert unit.content == "// café".encode()

    def test_frozen(self) -> None:
        """Test source units are immutable."""
        unit = SourceUnit.from_path("a.cairo", b"x")

        with pytest.raises(ValidationError):
            unit.content = b"y"  # type: ignore[misc]

    def test_empty_path_rejected(self) -> None:
        """Test an empty path is rejected."""
        with pytest.raises(ValidationError):
            SourceUnit(path="", content=b"")


class TestClassHash:
    """Tests for ClassHash."""

    def test_hex(self) -> None:
        """Test hex rendering is 0x-prefixed lowercase."""
        class_hash = ClassHash(value=0xABC)

        assert class_hash.hex == "0xabc"
        assert str(class_hash) == "0xabc"

    def test_from_hex(self) -> None:
        """Test parsing from hex."""
        assert ClassHash.from_hex("0x0ABC") == ClassHash(value=0xABC)

    @pytest.mark.parametrize("value", [-1, FIELD_PRIME])
    def test_out_of_field(self, value: int) -> None:
        """Test values outside the field are rejected."""
        with pytest.raises(ValidationError):
            ClassHash(value=value)


class TestCompilationResult:
    """Tests for CompilationResult."""

    @pytest.fixture
    def artifact(self) -> Artifact:
        return Artifact(
            name="a.cairo",
            class_hash=ClassHash(value=1),
            sierra={"sierra_program": []},
        )

    def test_persisted(self, artifact: Artifact) -> None:
        """Test persisted reflects the absence of a persistence error."""
        result = CompilationResult(
            artifact=artifact, sierra_path="artifacts/a.json", casm_path="artifacts/a.casm"
        )

        assert result.persisted is True
        assert artifact.abi is None

    def test_not_persisted(self, artifact: Artifact) -> None:
        """Test a persistence error is carried through."""
        error = PersistenceError("artifacts/a.json", "write_file", "read-only file system")
        result = CompilationResult(
            artifact=artifact,
            sierra_path="artifacts/a.json",
            casm_path="artifacts/a.casm",
            persistence_error=error,
        )

        assert result.persisted is False
        assert result.persistence_error is error


class TestArtifact:
    """Tests for Artifact immutability."""

    @pytest.fixture
    def document(self) -> dict[str, Any]:
        return {
            "sierra_program": ["0x1", "0x2"],
            "entry_points_by_type": {"EXTERNAL": [], "L1_HANDLER": [], "CONSTRUCTOR": []},
            "abi": [{"type": "function", "name": "get_balance"}],
        }

    def test_nested_values_cannot_be_changed(self, document: dict[str, Any]) -> None:
        """Test changing returned ABI and Sierra values leaves the artifact intact."""
        artifact = Artifact(
            name="a.cairo", abi=document["abi"], class_hash=ClassHash(value=1), sierra=document
        )

        artifact.abi[0]["name"] = "tampered"
        artifact.sierra["sierra_program"].append("0x99")

        assert artifact.abi == [{"type": "function", "name": "get_balance"}]
        assert artifact.sierra["sierra_program"] == ["0x1", "0x2"]

    def test_source_document_detached(self, document: dict[str, Any]) -> None:
        """Test changing the document after construction does not reach the artifact."""
        artifact = Artifact(name="a.cairo", class_hash=ClassHash(value=1), sierra=document)

        document["sierra_program"].clear()

        assert artifact.sierra["sierra_program"] == ["0x1", "0x2"]

    def test_abi_key_order_kept(self) -> None:
        """Test ABI members keep their order through storage."""
        abi = [{"type": "function", "name": "f", "inputs": [], "outputs": []}]
        artifact = Artifact(name="a.cairo", abi=abi, class_hash=ClassHash(value=1), sierra={})

        assert list(artifact.abi[0]) == ["type", "name", "inputs", "outputs"]

    def test_sierra_must_be_object(self) -> None:
        """Test a non-object Sierra document is rejected."""
        with pytest.raises(ValidationError):
            Artifact(name="a.cairo", class_hash=ClassHash(value=1), sierra=[1, 2])
