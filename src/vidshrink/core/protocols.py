"""Protocols (interfaces) consumed by the core layer.

These define the contracts that infrastructure adapters must satisfy.
Core code depends ONLY on these protocols — never on concrete
implementations — preserving the dependency inversion principle.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any, Literal, Protocol

EngineEvent = Literal["progress", "log"]
"""Event channels an engine can emit.

* ``"progress"`` — callback receives a ``float`` in ``0.0``–``1.0``.
* ``"log"`` — callback receives one diagnostic line (``str``).
"""

EngineCallback = Callable[[Any], None]


class CodecEngine(Protocol):
    """Contract for codec engine backends.

    The engine owns a private file namespace (its *working directory*)
    used to pass bytes across its call boundary.  File names given to the
    engine are bare names inside that namespace, never host paths.

    All coroutine methods may raise any exception; the session controller
    is responsible for translating failures into
    :class:`~vidshrink.exceptions.VidshrinkError` subclasses.
    """

    async def load(self) -> None:
        """Prepare the engine for use.  May fail."""
        ...  # pragma: no cover

    async def write_file(self, name: str, data: bytes) -> None:
        """Stage *data* under *name* in the engine's namespace."""
        ...  # pragma: no cover

    async def exec(self, args: Sequence[str]) -> int:
        """Run one job and return its exit code (``0`` on success)."""
        ...  # pragma: no cover

    async def read_file(self, name: str) -> bytes:
        """Return the bytes stored under *name*."""
        ...  # pragma: no cover

    async def delete_file(self, name: str) -> None:
        """Remove *name* from the engine's namespace."""
        ...  # pragma: no cover

    async def terminate(self) -> None:
        """Release everything the engine holds.  Idempotent."""
        ...  # pragma: no cover

    def on(self, event: EngineEvent, callback: EngineCallback) -> None:
        """Subscribe *callback* to *event*."""
        ...  # pragma: no cover

    def off(self, event: EngineEvent, callback: EngineCallback) -> None:
        """Unsubscribe *callback* from *event*.  Unknown callbacks are ignored."""
        ...  # pragma: no cover


class ResourceStore(Protocol):
    """Contract for holding downloadable result bytes.

    A handle stays valid until :meth:`revoke` is called for it.
    """

    def create(self, data: bytes, *, mime_type: str) -> str:
        """Store *data* and return a new handle."""
        ...  # pragma: no cover

    def revoke(self, handle: str) -> None:
        """Release *handle*.  Revoking an unknown handle is a no-op."""
        ...  # pragma: no cover

    def save(self, handle: str, destination: Path) -> Path:
        """Copy the bytes behind *handle* to *destination*.

        Raises
        ------
        KeyError
            When *handle* is not live.
        """
        ...  # pragma: no cover
