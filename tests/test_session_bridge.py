# tests/test_session_bridge.py

import asyncio

import pytest

from core.dispatcher import Dispatcher
from core.models import ToolCallRequest
from core.session_bridge import SessionBridge, SessionState


def make_bridge(store, channel, handlers):
    return SessionBridge(channel, Dispatcher(handlers, store), "farmer-1")


def test_connect_sends_catalog_and_prompt(store, channel, handlers):
    bridge = make_bridge(store, channel, handlers)

    async def scenario():
        await bridge.connect()
        state = bridge.state
        await bridge.disconnect()
        return state

    assert asyncio.run(scenario()) == SessionState.CONNECTED
    assert bridge.state == SessionState.DISCONNECTED
    assert len(channel.opened_with.tools) == 25
    assert "Agriguru" in channel.opened_with.system_instruction


def test_listener_is_removed_before_the_channel_closes(store, channel, handlers):
    bridge = make_bridge(store, channel, handlers)

    async def scenario():
        async with bridge:
            pass

    asyncio.run(scenario())

    assert channel.events == ["open", "add_listener", "remove_listener", "close"]
    assert channel.listeners == []


def test_failed_connect_returns_to_disconnected(store, handlers, make_channel):
    bridge = make_bridge(store, make_channel(fail_open=True), handlers)

    with pytest.raises(ConnectionError):
        asyncio.run(bridge.connect())
    assert bridge.state == SessionState.DISCONNECTED


def test_announce_is_dropped_unless_connected(store, channel, handlers):
    bridge = make_bridge(store, channel, handlers)

    async def scenario():
        before = await bridge.announce("hello")
        await bridge.connect()
        during = await bridge.announce("hello")
        await bridge.disconnect()
        after = await bridge.announce("hello")
        return before, during, after

    assert asyncio.run(scenario()) == (False, True, False)
    assert channel.sent_texts == ["hello"]


def test_tool_calls_are_answered_as_one_batch(store, channel, handlers):
    bridge = make_bridge(store, channel, handlers)

    async def scenario():
        await bridge.connect()
        await channel.deliver([
            {"id": "w", "name": "get_weather_forecast", "args": {"location": "Thanjavur"}},
            {"id": "u", "name": "not_a_tool", "args": {}},
        ])

    asyncio.run(scenario())

    assert len(channel.sent_responses) == 1
    weather, unknown = channel.sent_responses[0]
    assert (weather.id, weather.result["location"]) == ("w", "Thanjavur")
    assert unknown.result == "Function not_a_tool not implemented yet."


def test_tool_calls_while_disconnected_are_dropped(store, channel, handlers):
    bridge = make_bridge(store, channel, handlers)

    async def scenario():
        await bridge._on_tool_call([])
        await bridge._on_tool_call([ToolCallRequest(id="1", name="speak_text", args={"text": "hi"})])

    asyncio.run(scenario())
    assert channel.sent_responses == []
