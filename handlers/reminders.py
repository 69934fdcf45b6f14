# handlers/reminders.py

from datetime import datetime, timedelta, timezone
from typing import Optional

from pydantic import field_validator

from core.config import settings
from core.models import Reminder, parse_timestamp
from core.owner_guard import OwnerGuard
from core.store import DocumentStore, OrderBy, Predicate
from handlers.base import ToolArguments, ToolHandler

REMINDERS = "reminders"


class ReminderSetArgs(ToolArguments):
    task: str
    date_time: datetime

    @field_validator("date_time", mode="before")
    @classmethod
    def _parse(cls, value):
        return parse_timestamp(value)


class SetReminder(ToolHandler):
    name = "reminder_set"
    args_model = ReminderSetArgs

    def __init__(self, guard: OwnerGuard):
        self.guard = guard

    async def execute(self, arguments: ReminderSetArgs, owner_id: str, store: DocumentStore):
        reminder = Reminder(task=arguments.task, date_time=arguments.date_time, farmer_id=owner_id)
        async with self.guard.lock(owner_id):
            reminder_id = await store.append(REMINDERS, reminder.model_dump(exclude={"id"}))
        print(f"---REMINDER HANDLER: Reminder {reminder_id} set for user {owner_id}---")
        return f"Reminder set for {arguments.task} on {arguments.date_time.isoformat()}"


class GetRemindersArgs(ToolArguments):
    days_ahead: Optional[float] = None


class GetReminders(ToolHandler):
    """Lists the owner's open reminders due within the look-ahead window, soonest first."""
    name = "get_reminders"
    args_model = GetRemindersArgs

    def __init__(self, guard: OwnerGuard):
        self.guard = guard

    async def execute(self, arguments: GetRemindersArgs, owner_id: str, store: DocumentStore):
        days = arguments.days_ahead or settings.reminder_lookahead_days
        until = datetime.now(timezone.utc) + timedelta(days=days)
        async with self.guard.lock(owner_id):
            docs = await store.query(
                REMINDERS,
                [
                    Predicate("farmer_id", "==", owner_id),
                    Predicate("date_time", "<=", until),
                    Predicate("is_completed", "==", False),
                ],
                order_by=OrderBy("date_time"),
            )
        reminders = [Reminder.model_validate(doc).model_dump(mode="json") for doc in docs]
        return {"reminders": reminders}
