"""Temp-file backed implementation of :class:`~vidshrink.core.protocols.ResourceStore`.

Each handle owns one file in a private temporary directory.  Revoking a
handle deletes its file, so stale results never pile up on disk across
repeated runs.
"""

from __future__ import annotations

import logging
import mimetypes
import shutil
import tempfile
import uuid
from pathlib import Path

logger = logging.getLogger(__name__)


class TempFileResourceStore:
    """Concrete :class:`ResourceStore` keeping result bytes in temp files.

    Parameters
    ----------
    root:
        Parent directory for the store's private directory.  Defaults to
        the system temporary directory.
    """

    def __init__(self, root: Path | None = None) -> None:
        self._root = root
        self._directory: Path | None = None
        self._entries: dict[str, Path] = {}

    @property
    def live_handles(self) -> int:
        return len(self._entries)

    def __contains__(self, handle: object) -> bool:
        return handle in self._entries

    def __enter__(self) -> TempFileResourceStore:
        return self

    def __exit__(self, *_args: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Protocol methods
    # ------------------------------------------------------------------

    def create(self, data: bytes, *, mime_type: str) -> str:
        directory = self._ensure_directory()
        suffix = mimetypes.guess_extension(mime_type) or ".bin"
        key = uuid.uuid4().hex
        path = directory / f"{key}{suffix}"
        path.write_bytes(data)
        handle = f"vidshrink:{key}"
        self._entries[handle] = path
        logger.debug("Created resource %s (%d bytes)", handle, len(data))
        return handle

    def revoke(self, handle: str) -> None:
        path = self._entries.pop(handle, None)
        if path is None:
            return
        path.unlink(missing_ok=True)
        logger.debug("Revoked resource %s", handle)

    def save(self, handle: str, destination: Path) -> Path:
        try:
            source = self._entries[handle]
        except KeyError:
            raise KeyError(f"Unknown or revoked resource handle: {handle}") from None
        destination.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
        return destination

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Revoke every live handle and remove the private directory."""
        for handle in list(self._entries):
            self.revoke(handle)
        if self._directory is not None:
            shutil.rmtree(self._directory, ignore_errors=True)
            self._directory = None

    def _ensure_directory(self) -> Path:
        if self._directory is None:
            self._directory = Path(tempfile.mkdtemp(prefix="vidshrink-out-", dir=self._root))
        return self._directory
