# core/session_bridge.py

import asyncio
from abc import ABC, abstractmethod
from contextlib import AsyncExitStack
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Sequence

from google import genai
from google.genai import types

from .config import settings
from .dispatcher import Dispatcher
from .models import ToolCallRequest, ToolCallResponse
from .prompts import SYSTEM_INSTRUCTION
from tools.catalog import function_declarations

ToolCallListener = Callable[[List[ToolCallRequest]], Awaitable[None]]


class SessionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass
class SessionConfig:
    """Everything the live session needs at connect time."""
    model: str = field(default_factory=lambda: settings.live_model)
    response_modality: str = field(default_factory=lambda: settings.response_modality)
    voice_name: str = field(default_factory=lambda: settings.voice_name)
    system_instruction: str = SYSTEM_INSTRUCTION
    tools: List[dict] = field(default_factory=function_declarations)


class LiveChannel(ABC):
    """Transport for one realtime conversation with the model."""

    @abstractmethod
    async def open(self, config: SessionConfig) -> None:
        ...

    @abstractmethod
    def add_tool_call_listener(self, listener: ToolCallListener) -> None:
        ...

    @abstractmethod
    def remove_tool_call_listener(self, listener: ToolCallListener) -> None:
        ...

    @abstractmethod
    async def send_tool_response(self, responses: Sequence[ToolCallResponse]) -> None:
        ...

    @abstractmethod
    async def send_text(self, text: str) -> None:
        ...

    @abstractmethod
    async def close(self) -> None:
        ...


class GeminiLiveChannel(LiveChannel):
    """LiveChannel over the Gemini Live API (google-genai)."""

    def __init__(self, api_key: Optional[str] = None):
        self.client = genai.Client(api_key=api_key or settings.google_api_key)
        self._listeners: List[ToolCallListener] = []
        self._stack: Optional[AsyncExitStack] = None
        self._session = None
        self._receiver: Optional[asyncio.Task] = None

    @staticmethod
    def build_connect_config(config: SessionConfig) -> types.LiveConnectConfig:
        return types.LiveConnectConfig(
            response_modalities=[config.response_modality.upper()],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=config.voice_name)
                )
            ),
            system_instruction=types.Content(parts=[types.Part(text=config.system_instruction)]),
            tools=[types.Tool(function_declarations=[types.FunctionDeclaration(**decl) for decl in config.tools])],
        )

    async def open(self, config: SessionConfig) -> None:
        self._stack = AsyncExitStack()
        try:
            self._session = await self._stack.enter_async_context(
                self.client.aio.live.connect(model=config.model, config=self.build_connect_config(config))
            )
        except Exception:
            await self._stack.aclose()
            self._stack = None
            raise
        self._receiver = asyncio.create_task(self._receive_loop())
        print(f"---GEMINI LIVE: Session opened with model {config.model}---")

    async def _receive_loop(self) -> None:
        try:
            while True:
                # receive() ends after each model turn; keep listening for the next one
                async for message in self._session.receive():
                    tool_call = message.tool_call
                    if not tool_call or not tool_call.function_calls:
                        continue
                    batch = [
                        ToolCallRequest(id=fc.id or "", name=fc.name or "", args=fc.args or {})
                        for fc in tool_call.function_calls
                    ]
                    for listener in list(self._listeners):
                        try:
                            await listener(batch)
                        except Exception as e:
                            print(f"---GEMINI LIVE: Tool call listener failed: {type(e).__name__}: {e}---")
        except asyncio.CancelledError:
            raise
        except Exception as e:
            print(f"---GEMINI LIVE: Receive loop stopped: {type(e).__name__}: {e}---")

    def add_tool_call_listener(self, listener: ToolCallListener) -> None:
        self._listeners.append(listener)

    def remove_tool_call_listener(self, listener: ToolCallListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    async def send_tool_response(self, responses: Sequence[ToolCallResponse]) -> None:
        await self._session.send_tool_response(
            function_responses=[
                types.FunctionResponse(id=r.id, name=r.name, response=r.to_wire()) for r in responses
            ]
        )

    async def send_text(self, text: str) -> None:
        await self._session.send_client_content(
            turns=types.Content(role="user", parts=[types.Part(text=text)]),
            turn_complete=True,
        )

    async def close(self) -> None:
        try:
            if self._receiver and not self._receiver.done():
                self._receiver.cancel()
                try:
                    await self._receiver
                except asyncio.CancelledError:
                    pass
        finally:
            self._receiver = None
            self._session = None
            if self._stack is not None:
                stack, self._stack = self._stack, None
                await stack.aclose()
                print("---GEMINI LIVE: Session closed---")


class SessionBridge:
    """
    Owns one live channel for one user.

    connect() supplies the catalog, prompt and voice settings, then listens for
    tool-call batches; each batch goes through the dispatcher and the responses
    are sent straight back. announce() pushes proactive text into the same
    conversation. Outside the connected state both are dropped.
    """
    def __init__(
        self,
        channel: LiveChannel,
        dispatcher: Dispatcher,
        owner_id: str,
        config: Optional[SessionConfig] = None,
    ):
        self.channel = channel
        self.dispatcher = dispatcher
        self.owner_id = owner_id
        self.config = config or SessionConfig()
        self.state = SessionState.DISCONNECTED

    @property
    def connected(self) -> bool:
        return self.state == SessionState.CONNECTED

    async def connect(self) -> None:
        if self.state != SessionState.DISCONNECTED:
            return
        self.state = SessionState.CONNECTING
        print(f"---SESSION BRIDGE: Connecting for user {self.owner_id}---")
        try:
            await self.channel.open(self.config)
        except Exception:
            self.state = SessionState.DISCONNECTED
            raise
        self.channel.add_tool_call_listener(self._on_tool_call)
        self.state = SessionState.CONNECTED
        print(f"---SESSION BRIDGE: Connected for user {self.owner_id}---")

    async def disconnect(self) -> None:
        if self.state == SessionState.DISCONNECTED:
            return
        try:
            self.channel.remove_tool_call_listener(self._on_tool_call)
        finally:
            self.state = SessionState.DISCONNECTED
            await self.channel.close()
            print(f"---SESSION BRIDGE: Disconnected for user {self.owner_id}---")

    async def _on_tool_call(self, batch: List[ToolCallRequest]) -> None:
        if not batch:
            return
        if not self.connected:
            print(f"---SESSION BRIDGE: Dropped {len(batch)} tool call(s) while {self.state.value}---")
            return

        responses = await self.dispatcher.dispatch(batch, self.owner_id)

        if not self.connected:
            print(f"---SESSION BRIDGE: Session closed before responses for {len(batch)} call(s) could be sent---")
            return
        await self.channel.send_tool_response(responses)

    async def announce(self, text: str) -> bool:
        """Sends proactive text to the model. Returns False if the session is not connected."""
        if not self.connected:
            print(f"---SESSION BRIDGE: Dropped announcement while {self.state.value}: {text[:40]}---")
            return False
        await self.channel.send_text(text)
        print(f"---SESSION BRIDGE: Announced: {text[:60]}---")
        return True

    async def __aenter__(self) -> "SessionBridge":
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.disconnect()
