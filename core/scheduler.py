# core/scheduler.py

import asyncio
from datetime import datetime, timezone
from typing import List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .config import settings
from .models import Message, Reminder
from .owner_guard import OwnerGuard
from .session_bridge import SessionBridge
from .store import DocumentStore, Predicate, Record, Subscription

REMINDERS = "reminders"
MESSAGES = "messages"


class ReminderScheduler:
    """
    Periodically announces the owner's due reminders into the live session.

    A reminder is marked completed only after the announcement went through,
    so a reminder that comes due while the session is down is delivered on
    the first tick after it reconnects.
    """
    def __init__(
        self,
        store: DocumentStore,
        bridge: SessionBridge,
        owner_id: str,
        guard: OwnerGuard,
        interval: Optional[float] = None,
        timeout: Optional[float] = None,
    ):
        self.store = store
        self.bridge = bridge
        self.owner_id = owner_id
        self.guard = guard
        self.interval = interval or settings.reminder_check_interval_seconds
        self.timeout = timeout if timeout is not None else settings.handler_timeout_seconds
        self._scheduler: Optional[AsyncIOScheduler] = None

    @property
    def running(self) -> bool:
        return self._scheduler is not None

    def start(self) -> None:
        """Must be called from inside the running event loop."""
        if self._scheduler is not None:
            return
        scheduler = AsyncIOScheduler(timezone=timezone.utc)
        scheduler.add_job(
            self.tick,
            "interval",
            seconds=self.interval,
            id=f"reminders-{self.owner_id}",
            max_instances=1,
            coalesce=True,
        )
        scheduler.start()
        self._scheduler = scheduler
        print(f"---SCHEDULER: Checking reminders for user {self.owner_id} every {self.interval:g}s---")

    def stop(self) -> None:
        if self._scheduler is None:
            return
        scheduler, self._scheduler = self._scheduler, None
        scheduler.shutdown(wait=False)
        print(f"---SCHEDULER: Stopped reminder checks for user {self.owner_id}---")

    async def tick(self) -> int:
        """Announces every due, open reminder. Returns how many were delivered."""
        delivered = 0
        async with self.guard.lock(self.owner_id):
            now = datetime.now(timezone.utc)
            try:
                due = await asyncio.wait_for(
                    self.store.query(
                        REMINDERS,
                        [
                            Predicate("farmer_id", "==", self.owner_id),
                            Predicate("is_completed", "==", False),
                            Predicate("date_time", "<=", now),
                        ],
                    ),
                    timeout=self.timeout,
                )
            except Exception as e:
                print(f"---SCHEDULER: Could not load reminders for user {self.owner_id}: {type(e).__name__}: {e}---")
                return 0
            if due:
                print(f"---SCHEDULER: {len(due)} reminder(s) due for user {self.owner_id}---")

            for doc in due:
                try:
                    reminder = Reminder.model_validate(doc)
                    announced = await asyncio.wait_for(
                        self.bridge.announce(f"Reminder: {reminder.task}"), timeout=self.timeout
                    )
                    if not announced:
                        continue
                    await asyncio.wait_for(
                        self.store.patch(REMINDERS, reminder.id, {"is_completed": True}), timeout=self.timeout
                    )
                    delivered += 1
                except asyncio.TimeoutError:
                    print(f"---SCHEDULER: Reminder {doc.get('id')} not delivered, timed out after {self.timeout:g}s---")
                except Exception as e:
                    print(f"---SCHEDULER: Failed to deliver reminder {doc.get('id')}: {type(e).__name__}: {e}---")
        return delivered


class MessageListener:
    """Reads newly received direct messages to the user as they arrive."""

    def __init__(self, store: DocumentStore, bridge: SessionBridge, owner_id: str):
        self.store = store
        self.bridge = bridge
        self.owner_id = owner_id
        self.history: List[Message] = []
        self._subscription: Optional[Subscription] = None

    async def start(self) -> None:
        if self._subscription is not None:
            return
        self._subscription = await self.store.subscribe(
            MESSAGES, [Predicate("recipient_id", "==", self.owner_id)], self._on_message
        )
        print(f"---MESSAGE LISTENER: Listening for messages to user {self.owner_id}---")

    async def stop(self) -> None:
        if self._subscription is None:
            return
        subscription, self._subscription = self._subscription, None
        await subscription.close()
        print(f"---MESSAGE LISTENER: Stopped for user {self.owner_id}---")

    async def _on_message(self, doc: Record) -> None:
        try:
            message = Message.model_validate(doc)
            self.history.append(message)
            await self.bridge.announce(
                "Please read this message to the user: "
                f'You\'ve received a new message from {message.sender_id}: "{message.content}"'
            )
        except Exception as e:
            print(f"---MESSAGE LISTENER: Could not handle message {doc.get('id')}: {type(e).__name__}: {e}---")
