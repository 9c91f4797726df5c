"""Regression tests for startup warmup routines."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

import havbors.warmup as warmup


class _DummyTransaction:
    """Async context manager handing out a mocked connection."""

    def __init__(self, *, fail: bool = False) -> None:
        self.connection: AsyncMock = AsyncMock()
        self._fail = fail

    async def __aenter__(self) -> AsyncMock:
        if self._fail:
            raise ConnectionRefusedError("database is down")
        return self.connection

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: Any,
    ) -> bool:
        return False


@pytest.mark.asyncio
async def test_warmup_database_executes_ping(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    caplog.set_level(logging.INFO)
    dummy_txn = _DummyTransaction()
    sentinel_engine = object()
    captured_engines: list[object] = []

    def _capture_engine(engine: object) -> _DummyTransaction:
        captured_engines.append(engine)
        return dummy_txn

    monkeypatch.setattr(warmup, "begin_engine_transaction", _capture_engine)

    await warmup.warmup_database(resolve_engine=lambda: sentinel_engine)

    assert captured_engines == [sentinel_engine]
    executed_statement = dummy_txn.connection.execute.await_args.args[0]
    assert str(executed_statement).strip().upper() == "SELECT 1"
    assert not [record for record in caplog.records if record.levelno >= logging.WARNING]


@pytest.mark.asyncio
async def test_warmup_database_failure_is_logged_not_raised(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        warmup, "begin_engine_transaction", lambda _: _DummyTransaction(fail=True)
    )

    with caplog.at_level(logging.WARNING):
        await warmup.warmup_database(resolve_engine=lambda: object())

    assert "Database warmup failed" in caplog.text


@pytest.mark.asyncio
async def test_warmup_redis_skips_when_unavailable(
    caplog: pytest.LogCaptureFixture, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(warmup, "get_redis", AsyncMock(return_value=None))

    with caplog.at_level(logging.INFO):
        await warmup.warmup_redis()

    assert "Redis warmup skipped" in caplog.text
