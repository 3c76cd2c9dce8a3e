"""Session-local catalog of compiled artifacts.

This module provides:
- HashPendingSignal: busy/ready flag observed while a class hash is computed
- ArtifactCatalog: append-only artifact list with a single selected artifact
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING

from remix_cairo.models import Artifact
from remix_cairo.observability import get_logger

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

Listener = Callable[[bool], None]


class HashPendingSignal:
    """Boolean signal that is set while a class hash is being computed.

    Observers either poll ``is_set`` or subscribe to transitions. While set,
    the selected artifact's class hash is not safe to read.

    Example:
        >>> signal = HashPendingSignal()
        >>> with signal.pending():
        ...     signal.is_set
        True
        >>> signal.is_set
        False
    """

    def __init__(self, *, logger: BoundLogger | None = None) -> None:
        self._logger = logger or get_logger()
        self._lock = threading.Lock()
        self._is_set = False
        self._listeners: list[Listener] = []

    @property
    def is_set(self) -> bool:
        """Return True while a hash computation is in progress."""
        with self._lock:
            return self._is_set

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a callback invoked with the new value on every transition.

        Args:
            listener: Callable receiving the new flag value.

        Returns:
            A callable that removes the listener.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    @contextmanager
    def pending(self) -> Iterator[None]:
        """Hold the signal set for the duration of the block.

        The signal is cleared on every exit path, including exceptions.
        """
        self._set(True)
        try:
            yield
        finally:
            self._set(False)

    def _set(self, value: bool) -> None:
        with self._lock:
            if self._is_set == value:
                return
            self._is_set = value
            listeners = list(self._listeners)

        for listener in listeners:
            try:
                listener(value)
            except Exception as exc:
                # Listener errors are logged, never raised
                self._logger.warning("hash_pending_listener_failed", value=value, error=str(exc))


class ArtifactCatalog:
    """Append-only collection of compiled artifacts for one session.

    ``register`` is the only mutation: it appends the artifact and makes it
    the selected one. Artifacts with the same name are kept side by side.

    Attributes:
        hash_pending: Signal set while the orchestrator computes a class hash.

    Example:
        >>> catalog = ArtifactCatalog()
        >>> catalog.register(artifact)
        >>> catalog.selected() is artifact
        True
        >>> len(catalog)
        1
    """

    def __init__(
        self,
        *,
        hash_pending: HashPendingSignal | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self._logger = logger or get_logger()
        self.hash_pending = hash_pending or HashPendingSignal(logger=self._logger)
        self._lock = threading.RLock()
        self._artifacts: list[Artifact] = []
        self._selected: Artifact | None = None

    def register(self, artifact: Artifact) -> None:
        """Append an artifact and select it.

        Args:
            artifact: Newly compiled artifact.
        """
        with self._lock:
            self._artifacts.append(artifact)
            self._selected = artifact
            count = len(self._artifacts)

        self._logger.info(
            "artifact_registered",
            name=artifact.name,
            class_hash=artifact.class_hash.hex,
            count=count,
        )

    def list(self) -> tuple[Artifact, ...]:
        """Return a snapshot of all artifacts in registration order."""
        with self._lock:
            return tuple(self._artifacts)

    def selected(self) -> Artifact | None:
        """Return the currently selected artifact, if any."""
        with self._lock:
            return self._selected

    def find(self, name: str) -> tuple[Artifact, ...]:
        """Return all artifacts registered under a name, oldest first."""
        with self._lock:
            return tuple(a for a in self._artifacts if a.name == name)

    def latest(self, name: str) -> Artifact | None:
        """Return the most recent artifact registered under a name."""
        matches = self.find(name)
        return matches[-1] if matches else None

    def is_selection_ready(self) -> bool:
        """Return True when the selected artifact's class hash is stable."""
        return not self.hash_pending.is_set

    def __len__(self) -> int:
        with self._lock:
            return len(self._artifacts)

    def __iter__(self) -> Iterator[Artifact]:
        return iter(self.list())
