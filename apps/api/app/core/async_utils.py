from __future__ import annotations

import asyncio
from typing import Coroutine, TypeVar

import anyio

T = TypeVar("T")


def run_async(coro: Coroutine[object, object, T], *, timeout: float | None = None) -> T:
    """
    Await an outbound AI call from a sync endpoint or service.

    - Sync FastAPI endpoints run in an AnyIO worker thread, so the coroutine is
      handed back to the event loop with anyio.from_thread.run while the
      database session stays on the worker thread.
    - Outside a worker thread (CLI, plain scripts) it falls back to anyio.run.
    - Calling it from a coroutine on the loop thread is an error; await instead.
    """

    async def _runner() -> T:
        if timeout is not None:
            with anyio.fail_after(timeout):
                return await coro
        return await coro

    try:
        return anyio.from_thread.run(_runner)
    except RuntimeError:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            return anyio.run(_runner)
        coro.close()
        raise RuntimeError("run_async called from async context; use await instead")
