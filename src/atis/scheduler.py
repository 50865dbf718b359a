"""Debounced hand-off of voice ATIS text to a speech synthesizer.

Rapid letter changes for the same station coalesce: each request waits a fixed
delay, and a newer request (or ``cancel``) for the same key cancels the pending
one before the synthesizer is ever called.
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Dict, Optional

import structlog
from prometheus_client import Counter, Gauge

logger = structlog.get_logger(__name__)

_PENDING_GAUGE = Gauge(
    "atis_speech_requests_pending",
    "Voice ATIS synthesis requests waiting out the debounce delay",
)
_SYNTHESIS_COUNTER = Counter(
    "atis_speech_requests_total",
    "Voice ATIS synthesis requests by outcome",
    labelnames=("outcome",),
)

Synthesizer = Callable[[str, str], Awaitable[Any]]


class SpeechScheduler:
    def __init__(self, synthesizer: Synthesizer, debounce_seconds: float = 5.0):
        self._synthesizer = synthesizer
        self.debounce_seconds = max(0.0, float(debounce_seconds))
        self._tasks: Dict[str, asyncio.Task] = {}

    def pending_count(self) -> int:
        return len([t for t in self._tasks.values() if not t.done()])

    async def request(self, key: str, text: str) -> asyncio.Task:
        """Schedule synthesis of ``text`` for ``key``, replacing any pending request."""
        await self.cancel(key)
        logger.info(
            "[TIMER] Scheduled: action=synthesize",
            key=key,
            delay_seconds=self.debounce_seconds,
            pending_timers=self.pending_count() + 1,
        )

        async def _task() -> Optional[Any]:
            try:
                await asyncio.sleep(self.debounce_seconds)
                result = await self._synthesizer(key, text)
                _SYNTHESIS_COUNTER.labels(outcome="synthesized").inc()
                logger.info("[TIMER] Executed: action=synthesize", key=key, characters=len(text))
                return result
            except asyncio.CancelledError:
                _SYNTHESIS_COUNTER.labels(outcome="cancelled").inc()
                logger.info("[TIMER] Cancelled: action=synthesize", key=key, reason="task_cancelled")
                raise
            except Exception:
                _SYNTHESIS_COUNTER.labels(outcome="failed").inc()
                logger.exception("Speech synthesis failed", key=key)
                return None
            finally:
                if self._tasks.get(key) is asyncio.current_task():
                    self._tasks.pop(key, None)
                _PENDING_GAUGE.set(self.pending_count())

        task = asyncio.create_task(_task())
        self._tasks[key] = task
        _PENDING_GAUGE.set(self.pending_count())
        return task

    async def cancel(self, key: str) -> bool:
        """Cancel the pending request for ``key``; returns True if one was cancelled."""
        task = self._tasks.pop(key, None)
        if task is None or task.done():
            return False
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        _PENDING_GAUGE.set(self.pending_count())
        return True

    async def cancel_all(self) -> None:
        for key in list(self._tasks):
            await self.cancel(key)
