"""Sierra class hash computation.

Computes the Starknet class hash of a Sierra contract class (the
intermediate representation returned by the compiler API):

    poseidon_hash_many([
        short_string("CONTRACT_CLASS_V0.1.0"),
        hash(EXTERNAL entry points),
        hash(L1_HANDLER entry points),
        hash(CONSTRUCTOR entry points),
        starknet_keccak(abi json),
        poseidon_hash_many(sierra_program),
    ])

where each entry point list hashes as poseidon_hash_many over the
flattened (selector, function_idx) pairs. The hash is computed over the
parsed document, so whitespace and the order of top-level fields are
irrelevant. The ABI is re-serialized in its own key order.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

from Crypto.Hash import keccak
from poseidon_py.poseidon_hash import poseidon_hash_many

from remix_cairo.errors import MalformedIntermediateError
from remix_cairo.models import ClassHash
from remix_cairo.observability import compiler_operation, get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from remix_cairo.catalog import HashPendingSignal

CONTRACT_CLASS_VERSION = "0.1.0"
ENTRY_POINT_TYPES = ("EXTERNAL", "L1_HANDLER", "CONSTRUCTOR")
REQUIRED_FIELDS = ("sierra_program", "entry_points_by_type")

MASK_250 = 2**250 - 1


def encode_short_string(text: str) -> int:
    """Encode an ASCII string of at most 31 characters as a felt."""
    if len(text) > 31:
        msg = f"short string exceeds 31 characters: {text!r}"
        raise ValueError(msg)
    return int.from_bytes(text.encode("ascii"), "big")


def starknet_keccak(data: bytes) -> int:
    """Keccak-256 truncated to 250 bits, as used for Starknet selectors."""
    digest = keccak.new(data=data, digest_bits=256).digest()
    return int.from_bytes(digest, "big") & MASK_250


def _felt(value: Any, field: str) -> int:
    if isinstance(value, bool):
        raise MalformedIntermediateError(f"{field} must be a felt, got bool")
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        # 0x-prefixed strings are hex, anything else is decimal
        base = 16 if value[:2].lower() == "0x" else 10
        try:
            return int(value, base)
        except ValueError as exc:
            raise MalformedIntermediateError(f"{field} is not a felt: {value!r}") from exc
    raise MalformedIntermediateError(f"{field} must be a felt string, got {type(value).__name__}")


def _entry_points_hash(entry_points: Any, kind: str) -> int:
    if not isinstance(entry_points, list):
        raise MalformedIntermediateError(f"entry_points_by_type.{kind} must be a list")

    flattened: list[int] = []
    for index, entry_point in enumerate(entry_points):
        if not isinstance(entry_point, dict):
            raise MalformedIntermediateError(f"entry_points_by_type.{kind}[{index}] must be an object")
        try:
            selector = entry_point["selector"]
            function_idx = entry_point["function_idx"]
        except KeyError as exc:
            raise MalformedIntermediateError(
                f"entry_points_by_type.{kind}[{index}] missing {exc.args[0]}"
            ) from exc
        flattened.append(_felt(selector, f"{kind}[{index}].selector"))
        flattened.append(_felt(function_idx, f"{kind}[{index}].function_idx"))

    return poseidon_hash_many(flattened)


def abi_hash(abi: Any) -> int:
    """Hash the contract ABI.

    A list ABI is serialized as compact JSON with ", " and ": " separators;
    a string ABI is hashed verbatim; a missing ABI hashes the empty string.
    """
    if abi is None:
        encoded = b""
    elif isinstance(abi, str):
        encoded = abi.encode("utf-8")
    else:
        encoded = json.dumps(abi, ensure_ascii=False).encode("utf-8")
    return starknet_keccak(encoded)


def compute_class_hash(sierra: dict[str, Any]) -> int:
    """Compute the Sierra class hash of a parsed contract class.

    Args:
        sierra: Parsed Sierra contract class document.

    Returns:
        Class hash as an integer felt.

    Raises:
        MalformedIntermediateError: If a field the hash depends on is malformed.
    """
    missing = [field for field in REQUIRED_FIELDS if field not in sierra]
    if missing:
        raise MalformedIntermediateError(f"missing fields: {', '.join(missing)}")

    entry_points_by_type = sierra["entry_points_by_type"]
    if not isinstance(entry_points_by_type, dict):
        raise MalformedIntermediateError("entry_points_by_type must be an object")

    program = sierra["sierra_program"]
    if not isinstance(program, list):
        raise MalformedIntermediateError("sierra_program must be a list")

    program_hash = poseidon_hash_many(
        [_felt(felt, f"sierra_program[{i}]") for i, felt in enumerate(program)]
    )

    elements = [encode_short_string(f"CONTRACT_CLASS_V{CONTRACT_CLASS_VERSION}")]
    elements.extend(
        _entry_points_hash(entry_points_by_type.get(kind, []), kind) for kind in ENTRY_POINT_TYPES
    )
    elements.append(abi_hash(sierra.get("abi")))
    elements.append(program_hash)

    return poseidon_hash_many(elements)


class ContentHasher:
    """Parses Sierra documents and derives their class hash.

    When a HashPendingSignal is attached, it is held set for the duration of
    every compute_id call.

    Example:
        >>> hasher = ContentHasher(hash_pending=catalog.hash_pending)
        >>> sierra = hasher.parse(sierra_text)
        >>> hasher.compute_id(sierra).hex
        '0x...'
    """

    def __init__(
        self,
        *,
        hash_pending: HashPendingSignal | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._hash_pending = hash_pending
        self._logger = logger or get_logger()

    def parse(self, raw: str | bytes) -> dict[str, Any]:
        """Parse Sierra text into a document.

        Args:
            raw: Sierra JSON text.

        Returns:
            Parsed contract class.

        Raises:
            MalformedIntermediateError: If the text is not a JSON object with
                the fields the class hash depends on.
        """
        try:
            document = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise MalformedIntermediateError(f"invalid JSON: {exc}") from exc

        if not isinstance(document, dict):
            raise MalformedIntermediateError(
                f"expected a JSON object, got {type(document).__name__}"
            )

        missing = [field for field in REQUIRED_FIELDS if field not in document]
        if missing:
            raise MalformedIntermediateError(f"missing fields: {', '.join(missing)}")

        self._logger.debug("sierra_parsed", fields=len(document))
        return document

    def compute_id(self, sierra: dict[str, Any] | str | bytes) -> ClassHash:
        """Compute the class hash of a Sierra document.

        Args:
            sierra: Parsed document, or raw Sierra text to parse first.

        Returns:
            ClassHash of the contract class.

        Raises:
            MalformedIntermediateError: If the document cannot be hashed.
        """
        if self._hash_pending is None:
            return self._compute(sierra)
        with self._hash_pending.pending():
            return self._compute(sierra)

    def _compute(self, sierra: dict[str, Any] | str | bytes) -> ClassHash:
        document = sierra if isinstance(sierra, dict) else self.parse(sierra)
        with compiler_operation("compute_class_hash"):
            version = document.get("contract_class_version")
            if version is not None and version != CONTRACT_CLASS_VERSION:
                self._logger.warning(
                    "contract_class_version_mismatch",
                    declared=version,
                    hashed_as=CONTRACT_CLASS_VERSION,
                )
            return ClassHash(value=compute_class_hash(document))
