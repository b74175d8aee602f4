"""Periodic autosave of the open PEI.

Usage::

    autosave = Autosave(form, store, interval=5.0)
    autosave.start()        # inside a running event loop
    ...
    await autosave.stop()

Each tick saves the full snapshot when the student name is filled in.
The first save adopts the identifier assigned by the store, so every
later tick updates the same record.  Saves of one form are serialized
through ``form.save_lock`` (shared with the explicit save), and an id is
not adopted if the form was cleared or reloaded while the save ran.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Optional

from pei.config.fields import OWNER_NAME_FIELD
from pei.config.settings import DEFAULT_AUTOSAVE_INTERVAL
from pei.form.state import FormState
from pei.storage.base import RecordStore

logger = logging.getLogger(__name__)


class Autosave:
    """Timer pushing ``form.snapshot()`` to ``store`` every *interval* seconds."""

    def __init__(
        self,
        form: FormState,
        store: RecordStore,
        *,
        interval: float = DEFAULT_AUTOSAVE_INTERVAL,
    ):
        self.form = form
        self.store = store
        self.interval = interval
        self.saves = 0
        self._stop: Optional[asyncio.Event] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def tick(self) -> Optional[str]:
        """One autosave attempt.  Returns the record id when a save happened."""
        async with self.form.save_lock:
            name = self.form.get(OWNER_NAME_FIELD).strip()
            if not name:
                return None
            generation = self.form.generation
            record = await asyncio.to_thread(
                self.store.save_pei, self.form.snapshot(), self.form.record_id, name,
            )
            self.form.adopt_record_id(record.id, generation)
        self.saves += 1
        logger.debug("Autosaved PEI %s (%s)", record.id, name)
        return record.id

    async def _run(self) -> None:
        stop = self._stop
        while not stop.is_set():
            try:
                await asyncio.wait_for(stop.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                pass
            if stop.is_set():
                break
            try:
                await self.tick()
            except Exception as e:
                logger.error("Autosave failed: %s", e)

    def start(self) -> None:
        if self.interval <= 0 or self.running:
            return
        self._stop = asyncio.Event()
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Autosave started (every %.1fs)", self.interval)

    async def stop(self) -> None:
        if self._task is None:
            return
        self._stop.set()
        await self._task
        self._task = None
        logger.info("Autosave stopped after %d save(s)", self.saves)
