# tests/conftest.py

import asyncio
from typing import List

import pytest

from core.in_memory_store import InMemoryStore
from core.models import ToolCallRequest
from core.owner_guard import OwnerGuard
from core.session_bridge import LiveChannel, SessionConfig
from handlers import build_handlers
from tools.market_api import MockMarketPriceProvider
from tools.weather_api import MockWeatherProvider


class FakeChannel(LiveChannel):
    """Records everything the bridge sends; tests push tool calls with deliver()."""

    def __init__(self, fail_open: bool = False, hang_on_send: bool = False):
        self.fail_open = fail_open
        self.hang_on_send = hang_on_send
        self.opened_with = None
        self.is_open = False
        self.listeners = []
        self.sent_responses = []
        self.sent_texts: List[str] = []
        self.events: List[str] = []

    async def open(self, config: SessionConfig) -> None:
        if self.fail_open:
            raise ConnectionError("live endpoint unreachable")
        self.opened_with = config
        self.is_open = True
        self.events.append("open")

    def add_tool_call_listener(self, listener) -> None:
        self.listeners.append(listener)
        self.events.append("add_listener")

    def remove_tool_call_listener(self, listener) -> None:
        self.listeners.remove(listener)
        self.events.append("remove_listener")

    async def send_tool_response(self, responses) -> None:
        self.sent_responses.append(list(responses))

    async def send_text(self, text: str) -> None:
        if self.hang_on_send:
            await asyncio.Event().wait()
        self.sent_texts.append(text)

    async def close(self) -> None:
        self.is_open = False
        self.events.append("close")

    async def deliver(self, calls):
        batch = [ToolCallRequest(**call) for call in calls]
        for listener in list(self.listeners):
            await listener(batch)


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def channel():
    return FakeChannel()


@pytest.fixture
def guard():
    return OwnerGuard(max_concurrent=4)


@pytest.fixture
def handlers(guard):
    return build_handlers(guard, weather=MockWeatherProvider(), market=MockMarketPriceProvider())


@pytest.fixture
def make_channel():
    return FakeChannel
