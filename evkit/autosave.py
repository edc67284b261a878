"""Debounced autosave for in-progress drafts.

DebouncedPersister coalesces bursts of edits into a single save once the
editor has been quiet for `interval_ms`, keeps at most one save in flight,
and carries edits made during a save into the next cycle.

Runs on the asyncio event loop: notify() must be called from a coroutine or
loop callback, and returns immediately.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, Generic, TypeVar

from evkit.domain.autosave import Dirty, Failed, Idle, Saved, SaveStatus, Saving, has_content, is_terminal

logger = logging.getLogger(__name__)

D = TypeVar("D")

DEFAULT_INTERVAL_MS = 30_000

StatusListener = Callable[[SaveStatus], Any]


class DebouncedPersister(Generic[D]):
    """Save the latest draft after a quiet period, one save at a time."""

    def __init__(
        self,
        on_save: Callable[[D], Awaitable[Any]],
        interval_ms: int = DEFAULT_INTERVAL_MS,
        should_save: Callable[[D], bool] = has_content,
        now: Callable[[], datetime] = datetime.now,
    ) -> None:
        if interval_ms < 0:
            raise ValueError(f"interval_ms must be >= 0, got {interval_ms}")

        self._on_save = on_save
        self._interval_ms = interval_ms
        self._should_save = should_save
        self._now = now

        self._status: SaveStatus = Idle()
        self._draft: D | None = None
        self._dirty = False
        self._retry_requested = False
        self._timer: asyncio.TimerHandle | None = None
        self._task: asyncio.Task[None] | None = None
        self._listeners: list[StatusListener] = []

    @property
    def status(self) -> SaveStatus:
        return self._status

    @property
    def draft(self) -> D | None:
        return self._draft

    @property
    def dirty(self) -> bool:
        return self._dirty

    @property
    def interval_ms(self) -> int:
        return self._interval_ms

    @property
    def saving(self) -> bool:
        return self._task is not None

    @property
    def pending(self) -> bool:
        """True while a countdown is armed."""
        return self._timer is not None

    @property
    def last_error(self) -> Exception | None:
        return self._status.error if isinstance(self._status, Failed) else None

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """Call `listener(status)` on every status change.

        Returns:
            Function that removes the listener.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def notify(self, draft: D) -> None:
        """Record a new draft snapshot and restart the countdown.

        While a save is in flight the snapshot is kept for the next cycle,
        which starts as soon as the save finishes.
        """
        self._draft = draft
        self._dirty = True

        if self._task is not None:
            self._retry_requested = True
            return

        self._start_cycle()

    def retry(self) -> None:
        """Schedule another attempt for unsaved changes (e.g., after a failure)."""
        if not self._dirty or self._task is not None or self._timer is not None:
            return
        self._start_cycle()

    def cancel(self) -> None:
        """Cancel the pending countdown. A save already in flight is not affected."""
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def drain(self) -> None:
        """Wait for the in-flight save, if any, to finish."""
        while self._task is not None:
            await self._task

    async def flush(self) -> SaveStatus:
        """Save unsaved changes now instead of waiting for the countdown.

        Returns:
            Status after the save (or the current status if nothing was saved).
        """
        self.cancel()
        await self.drain()
        # A cycle may have been restarted by edits made during that save
        self.cancel()

        if self._dirty:
            if self._should_save(self._draft):
                self._begin_save(self._draft)
                await self.drain()
            else:
                self._skip_blank()
        return self._status

    def _start_cycle(self) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self._interval_ms / 1000, self._on_quiet)

        if self._should_save(self._draft):
            self._set_status(Dirty())

    def _on_quiet(self) -> None:
        self._timer = None
        draft = self._draft

        if not self._should_save(draft):
            self._skip_blank()
            return

        self._begin_save(draft)

    def _skip_blank(self) -> None:
        logger.debug("Skipping autosave of draft without content")
        self._dirty = False
        if not is_terminal(self._status):
            self._set_status(Idle())

    def _begin_save(self, draft: D) -> None:
        self._set_status(Saving())
        self._task = asyncio.get_running_loop().create_task(self._save(draft))

    async def _save(self, draft: D) -> None:
        try:
            await self._on_save(draft)
        except Exception as e:
            logger.error("Auto-save failed: %s", e)
            self._set_status(Failed(error=e, at=self._now()))
        else:
            if not self._retry_requested:
                self._dirty = False
            self._set_status(Saved(at=self._now()))
            logger.debug("Draft autosaved")
        finally:
            self._task = None

        if self._retry_requested:
            self._retry_requested = False
            self._start_cycle()

    def _set_status(self, status: SaveStatus) -> None:
        if status == self._status:
            return
        self._status = status
        for listener in list(self._listeners):
            try:
                listener(status)
            except Exception:
                logger.exception("Autosave status listener failed")
