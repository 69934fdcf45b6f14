# tests/test_reminders_scheduler.py

import asyncio
from datetime import datetime, timedelta, timezone

from core.dispatcher import Dispatcher
from core.models import ToolCallRequest
from core.scheduler import ReminderScheduler
from core.session_bridge import SessionBridge


def make_session(store, channel, guard, handlers):
    dispatcher = Dispatcher(handlers, store, guard)
    bridge = SessionBridge(channel, dispatcher, "farmer-1")
    scheduler = ReminderScheduler(store, bridge, "farmer-1", guard, interval=60)
    return bridge, scheduler


def test_due_reminder_is_announced_exactly_once(store, channel, guard, handlers):
    bridge, scheduler = make_session(store, channel, guard, handlers)
    past = (datetime.now(timezone.utc) - timedelta(minutes=5)).isoformat()

    async def scenario():
        await bridge.connect()
        await channel.deliver([
            {"id": "call-1", "name": "reminder_set", "args": {"task": "Spray neem oil", "date_time": past}},
        ])
        first = await scheduler.tick()
        second = await scheduler.tick()
        await bridge.disconnect()
        return first, second

    first, second = asyncio.run(scenario())

    assert channel.sent_responses[0][0].result.startswith("Reminder set for Spray neem oil on ")
    assert (first, second) == (1, 0)
    assert channel.sent_texts == ["Reminder: Spray neem oil"]
    stored = asyncio.run(store.query("reminders"))
    assert stored[0]["is_completed"] is True


def test_future_reminder_is_not_announced(store, channel, guard, handlers):
    bridge, scheduler = make_session(store, channel, guard, handlers)
    future = (datetime.now(timezone.utc) + timedelta(days=2)).isoformat()

    async def scenario():
        await bridge.connect()
        await channel.deliver([
            {"id": "call-1", "name": "reminder_set", "args": {"task": "Harvest tomatoes", "date_time": future}},
        ])
        return await scheduler.tick()

    assert asyncio.run(scenario()) == 0
    assert channel.sent_texts == []


def test_reminder_stays_open_while_disconnected(store, channel, guard, handlers):
    bridge, scheduler = make_session(store, channel, guard, handlers)
    past = datetime.now(timezone.utc) - timedelta(hours=1)

    async def scenario():
        await store.append("reminders", {
            "task": "Check irrigation pump",
            "date_time": past,
            "is_completed": False,
            "farmer_id": "farmer-1",
        })
        missed = await scheduler.tick()
        await bridge.connect()
        delivered = await scheduler.tick()
        return missed, delivered

    missed, delivered = asyncio.run(scenario())

    assert missed == 0
    assert delivered == 1
    assert channel.sent_texts == ["Reminder: Check irrigation pump"]


def test_other_farmers_reminders_are_left_alone(store, channel, guard, handlers):
    bridge, scheduler = make_session(store, channel, guard, handlers)
    past = datetime.now(timezone.utc) - timedelta(hours=1)

    async def scenario():
        await store.append("reminders", {
            "task": "Someone else's task",
            "date_time": past,
            "is_completed": False,
            "farmer_id": "farmer-2",
        })
        await bridge.connect()
        return await scheduler.tick()

    assert asyncio.run(scenario()) == 0
    assert channel.sent_texts == []


def test_get_reminders_lists_open_ones_soonest_first(store, channel, guard, handlers):
    dispatcher = Dispatcher(handlers, store, guard)
    now = datetime.now(timezone.utc)

    async def scenario():
        for task, offset in [("Weed the field", 3), ("Buy seeds", 1), ("Next month", 30)]:
            await store.append("reminders", {
                "task": task,
                "date_time": now + timedelta(days=offset),
                "is_completed": False,
                "farmer_id": "farmer-1",
            })
        await store.append("reminders", {
            "task": "Already done",
            "date_time": now + timedelta(days=2),
            "is_completed": True,
            "farmer_id": "farmer-1",
        })
        return await dispatcher.dispatch([ToolCallRequest(id="1", name="get_reminders")], "farmer-1")

    responses = asyncio.run(scenario())

    tasks = [r["task"] for r in responses[0].result["reminders"]]
    assert tasks == ["Buy seeds", "Weed the field"]


def test_start_and_stop_are_idempotent(store, channel, guard, handlers):
    bridge, scheduler = make_session(store, channel, guard, handlers)

    async def scenario():
        scheduler.start()
        scheduler.start()
        running = scheduler.running
        scheduler.stop()
        scheduler.stop()
        return running

    assert asyncio.run(scenario()) is True
    assert scheduler.running is False


def test_stuck_announce_does_not_hold_the_reminder_lock(store, guard, handlers, make_channel):
    channel = make_channel(hang_on_send=True)
    dispatcher = Dispatcher(handlers, store, guard, timeout=1.0)
    bridge = SessionBridge(channel, dispatcher, "farmer-1")
    scheduler = ReminderScheduler(store, bridge, "farmer-1", guard, interval=60, timeout=0.05)
    past = datetime.now(timezone.utc) - timedelta(minutes=1)

    async def scenario():
        await store.append("reminders", {
            "task": "Feed the cattle",
            "date_time": past,
            "is_completed": False,
            "farmer_id": "farmer-1",
        })
        await bridge.connect()
        delivered = await scheduler.tick()
        listed = await dispatcher.dispatch([ToolCallRequest(id="1", name="get_reminders")], "farmer-1")
        return delivered, listed

    delivered, listed = asyncio.run(scenario())

    assert delivered == 0
    assert [r["task"] for r in listed[0].result["reminders"]] == ["Feed the cattle"]
    assert not guard.lock("farmer-1").locked()
