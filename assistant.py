# assistant.py

import asyncio
from contextlib import AsyncExitStack
from typing import Optional

from dotenv import load_dotenv

from core.config import Settings, settings as default_settings
from core.dispatcher import Dispatcher
from core.mongo_store import MongoStore
from core.owner_guard import OwnerGuard
from core.scheduler import MessageListener, ReminderScheduler
from core.session_bridge import GeminiLiveChannel, LiveChannel, SessionBridge, SessionConfig
from core.store import DocumentStore
from handlers import build_handlers
from tools.market_api import MarketPriceProvider
from tools.weather_api import WeatherProvider

load_dotenv()


class FarmAssistantSession:
    """
    One voice session for one signed-in farmer.

    Wires the handlers, dispatcher, live session, reminder scheduler and
    message listener around a shared store, and tears them down in reverse:
    listener, then scheduler, then the live session.
    """
    def __init__(
        self,
        owner_id: str,
        store: DocumentStore,
        channel: LiveChannel,
        weather: Optional[WeatherProvider] = None,
        market: Optional[MarketPriceProvider] = None,
        settings: Settings = default_settings,
    ):
        self.owner_id = owner_id
        self.store = store
        self.settings = settings

        self.guard = OwnerGuard(settings.max_concurrent_calls_per_owner)
        self.handlers = build_handlers(self.guard, weather=weather, market=market)
        self.dispatcher = Dispatcher(self.handlers, store, self.guard, settings.handler_timeout_seconds)
        self.bridge = SessionBridge(
            channel,
            self.dispatcher,
            owner_id,
            SessionConfig(
                model=settings.live_model,
                response_modality=settings.response_modality,
                voice_name=settings.voice_name,
            ),
        )
        self.scheduler = ReminderScheduler(
            store,
            self.bridge,
            owner_id,
            self.guard,
            settings.reminder_check_interval_seconds,
            settings.handler_timeout_seconds,
        )
        self.listener = MessageListener(store, self.bridge, owner_id)
        self._stack: Optional[AsyncExitStack] = None

    async def __aenter__(self) -> "FarmAssistantSession":
        print(f"---ASSISTANT: Starting session for user {self.owner_id}---")
        async with AsyncExitStack() as stack:
            await stack.enter_async_context(self.bridge)
            self.scheduler.start()
            stack.callback(self.scheduler.stop)
            await self.listener.start()
            stack.push_async_callback(self.listener.stop)
            self._stack = stack.pop_all()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._stack is None:
            return
        stack, self._stack = self._stack, None
        await stack.aclose()
        print(f"---ASSISTANT: Session for user {self.owner_id} closed---")


async def run(owner_id: str) -> None:
    """Runs a live session against MongoDB and Gemini until cancelled."""
    store = MongoStore(default_settings.db_name, default_settings.final_mongo_uri)
    try:
        async with FarmAssistantSession(owner_id, store, GeminiLiveChannel()):
            await asyncio.Event().wait()
    finally:
        await store.close()

