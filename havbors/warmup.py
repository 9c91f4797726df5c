"""Startup warmup so the first request does not pay for cold connections."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from havbors.cache import get_redis
from havbors.db.connection import begin_engine_transaction, get_engine

logger = logging.getLogger(__name__)


async def warmup_database(resolve_engine: Callable[[], AsyncEngine] = get_engine) -> None:
    """Open a pooled connection and issue ``SELECT 1``; failures are only logged."""

    start = time.perf_counter()
    try:
        async with begin_engine_transaction(resolve_engine()) as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as exc:  # noqa: BLE001 - startup continues without warm pool
        logger.warning("Database warmup failed: %s", exc)
        return
    logger.info("Database connection warmed up (%.0fms)", (time.perf_counter() - start) * 1000)


async def warmup_redis() -> None:
    start = time.perf_counter()
    redis = await get_redis()
    if redis is None:
        logger.info("Redis warmup skipped (connection unavailable)")
        return
    logger.info("Redis connection warmed up (%.0fms)", (time.perf_counter() - start) * 1000)


async def warmup_all(resolve_engine: Callable[[], AsyncEngine] = get_engine) -> None:
    logger.info("Starting warmup")
    await warmup_database(resolve_engine)
    await warmup_redis()
    logger.info("Warmup complete")
