"""Remote compiler client.

This module provides RemoteCompiler, a thin httpx wrapper over the two
compilation endpoints of the Cairo compiler API:
- source -> Sierra (intermediate representation)
- Sierra -> CASM (final representation)

Each call is a single request/response round-trip with no retry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

from remix_cairo.config import CompilerConfig
from remix_cairo.errors import STAGE_TO_FINAL, STAGE_TO_INTERMEDIATE, RemoteCompilationError
from remix_cairo.observability import compiler_operation, get_logger

if TYPE_CHECKING:
    from types import TracebackType

    from structlog.stdlib import BoundLogger

OCTET_STREAM = "application/octet-stream"


class RemoteCompiler:
    """Stateless client for the remote compilation endpoints.

    Attributes:
        config: Endpoint configuration.

    Example:
        >>> with RemoteCompiler(CompilerConfig(base_url="http://localhost:8000")) as compiler:
        ...     sierra = compiler.to_intermediate(b"#[starknet::contract] mod c {}")
        ...     casm = compiler.to_final(sierra)
    """

    def __init__(
        self,
        config: CompilerConfig,
        *,
        client: httpx.Client | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        """Initialize RemoteCompiler.

        Args:
            config: Endpoint configuration.
            client: Optional httpx client. When given, the caller owns it and
                close() leaves it open.
            logger: Optional structlog logger. Uses default if not provided.
        """
        self.config = config
        self._logger = logger or get_logger()
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=config.timeout_seconds,
            follow_redirects=config.follow_redirects,
        )

    def to_intermediate(self, source: bytes | str) -> str:
        """Compile Cairo source to Sierra.

        Args:
            source: Raw source bytes.

        Returns:
            Sierra contract class JSON text.

        Raises:
            RemoteCompilationError: With stage "to-intermediate" on any failure.
        """
        return self._post(STAGE_TO_INTERMEDIATE, self.config.endpoint("intermediate"), source)

    def to_final(self, intermediate: bytes | str) -> str:
        """Compile Sierra to CASM.

        Args:
            intermediate: Sierra text returned by to_intermediate, sent as-is.

        Returns:
            CASM text.

        Raises:
            RemoteCompilationError: With stage "to-final" on any failure.
        """
        return self._post(STAGE_TO_FINAL, self.config.endpoint("final"), intermediate)

    def _post(self, stage: str, url: str, body: bytes | str) -> str:
        """Send one compilation request and return the decoded response body.

        Raises:
            RemoteCompilationError: On transport failure, timeout, non-2xx
                status or an undecodable body.
        """
        payload = body.encode("utf-8") if isinstance(body, str) else body

        with compiler_operation(stage.replace("-", "_"), stage=stage, endpoint=url):
            try:
                response = self._client.post(
                    url,
                    content=payload,
                    headers={"Content-Type": OCTET_STREAM},
                )
            except httpx.TimeoutException as exc:
                raise RemoteCompilationError(stage, f"request timed out: {exc}") from exc
            except httpx.HTTPError as exc:
                raise RemoteCompilationError(stage, f"request failed: {exc}") from exc

            if not response.is_success:
                self._logger.warning(
                    "compiler_rejected_request",
                    stage=stage,
                    status_code=response.status_code,
                    body=response.text[:200],
                )
                raise RemoteCompilationError(
                    stage,
                    f"HTTP {response.status_code} {response.reason_phrase}".strip(),
                    status_code=response.status_code,
                )

            try:
                text = response.content.decode(response.encoding or "utf-8")
            except (UnicodeDecodeError, LookupError) as exc:
                raise RemoteCompilationError(
                    stage,
                    f"unreadable response body: {exc}",
                    status_code=response.status_code,
                ) from exc

            self._logger.debug("stage_succeeded", stage=stage, size=len(text))
            return text

    def close(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> RemoteCompiler:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
