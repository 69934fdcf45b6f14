# core/owner_guard.py

import asyncio
from typing import Dict

from .config import settings

class OwnerGuard:
    """
    Per-owner synchronisation shared by the dispatcher, the reminder handlers
    and the reminder scheduler of a session.

    lock(owner)  - mutual exclusion for reminder reads/writes and scheduler ticks.
    slots(owner) - caps how many handler calls run at once for one owner.
    """
    def __init__(self, max_concurrent: int = None):
        self.max_concurrent = max_concurrent or settings.max_concurrent_calls_per_owner
        self._locks: Dict[str, asyncio.Lock] = {}
        self._slots: Dict[str, asyncio.Semaphore] = {}

    def lock(self, owner_id: str) -> asyncio.Lock:
        if owner_id not in self._locks:
            self._locks[owner_id] = asyncio.Lock()
        return self._locks[owner_id]

    def slots(self, owner_id: str) -> asyncio.Semaphore:
        if owner_id not in self._slots:
            self._slots[owner_id] = asyncio.Semaphore(self.max_concurrent)
        return self._slots[owner_id]
