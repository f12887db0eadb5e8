"""Shared pytest fixtures and configuration for the vidshrink test suite.

Guidelines
----------
* No real ffmpeg in any test — the codec engine is replaced by
  :class:`FakeEngine` at the protocol boundary.
* Async code is driven with ``asyncio.run`` inside plain tests.
* Core tests must be pure — no side effects outside ``tmp_path``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import Any

import pytest

from vidshrink.core.engine_manager import EngineLifecycleManager
from vidshrink.core.models import SourceAsset
from vidshrink.core.session_controller import TranscodeSessionController
from vidshrink.infra.resource_store import TempFileResourceStore


class FakeEngine:
    """In-memory :class:`CodecEngine` with scriptable failures."""

    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}
        self.calls: list[tuple[str, Any]] = []
        self.listeners: dict[str, list[Any]] = {"progress": [], "log": []}
        self.load_calls: int = 0
        self.load_error: BaseException | None = None
        self.load_gate: asyncio.Event | None = None
        self.exec_error: Exception | None = None
        self.write_error: Exception | None = None
        self.exit_code: int = 0
        self.progress_steps: tuple[float, ...] = (0.0, 0.25, 0.5, 1.0)
        self.output: bytes = b"\x00" * 4096
        self.exec_gate: asyncio.Event | None = None
        self.terminated: bool = False

    async def load(self) -> None:
        self.load_calls += 1
        await asyncio.sleep(0)
        if self.load_gate is not None:
            await self.load_gate.wait()
        if self.load_error is not None:
            raise self.load_error

    async def write_file(self, name: str, data: bytes) -> None:
        self.calls.append(("write_file", name))
        if self.write_error is not None:
            raise self.write_error
        self.files[name] = data

    async def exec(self, args: Sequence[str]) -> int:
        self.calls.append(("exec", tuple(args)))
        self._emit("log", "ffmpeg version fake")
        for step in self.progress_steps:
            self._emit("progress", step)
            await asyncio.sleep(0)
        if self.exec_gate is not None:
            await self.exec_gate.wait()
        if self.exec_error is not None:
            raise self.exec_error
        if self.exit_code == 0:
            self.files[args[-1]] = self.output
        return self.exit_code

    async def read_file(self, name: str) -> bytes:
        self.calls.append(("read_file", name))
        if name not in self.files:
            raise FileNotFoundError(name)
        return self.files[name]

    async def delete_file(self, name: str) -> None:
        self.calls.append(("delete_file", name))
        if name not in self.files:
            raise FileNotFoundError(name)
        del self.files[name]

    async def terminate(self) -> None:
        self.terminated = True

    def on(self, event: str, callback: Any) -> None:
        self.listeners[event].append(callback)

    def off(self, event: str, callback: Any) -> None:
        if callback in self.listeners[event]:
            self.listeners[event].remove(callback)

    def _emit(self, event: str, payload: object) -> None:
        for callback in list(self.listeners[event]):
            callback(payload)

    def count(self, op: str, name: str) -> int:
        return sum(1 for call in self.calls if call == (op, name))


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()


@pytest.fixture
def manager(fake_engine: FakeEngine) -> EngineLifecycleManager:
    return EngineLifecycleManager(fake_engine)


@pytest.fixture
def store(tmp_path: Path) -> Iterator[TempFileResourceStore]:
    resource_store = TempFileResourceStore(tmp_path)
    yield resource_store
    resource_store.close()


@pytest.fixture
def controller(
    manager: EngineLifecycleManager,
    store: TempFileResourceStore,
) -> TranscodeSessionController:
    return TranscodeSessionController(manager, store)


@pytest.fixture
def asset() -> SourceAsset:
    return SourceAsset.from_bytes("clip.mp4", b"\x01" * 2048)


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Undo handlers and levels that ``main()`` attaches to the root logger."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
