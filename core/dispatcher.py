# core/dispatcher.py

import asyncio
from typing import TYPE_CHECKING, List, Mapping, Optional, Sequence

from pydantic_core import to_jsonable_python

from .config import settings
from .models import ToolCallRequest, ToolCallResponse, ToolResult
from .owner_guard import OwnerGuard
from .store import DocumentStore

if TYPE_CHECKING:
    from handlers.base import ToolHandler


class Dispatcher:
    """
    Runs a batch of tool calls for one owner and returns one response per call,
    in request order.

    Calls run one after another: a later call may rely on what an earlier call
    in the same batch wrote. A failing call never stops the rest of the batch;
    its failure is reported in its own response instead.
    """
    def __init__(
        self,
        handlers: Mapping[str, "ToolHandler"],
        store: DocumentStore,
        guard: Optional[OwnerGuard] = None,
        timeout: Optional[float] = None,
    ):
        self.handlers = dict(handlers)
        self.store = store
        self.guard = guard or OwnerGuard()
        self.timeout = timeout if timeout is not None else settings.handler_timeout_seconds

    async def dispatch(self, requests: Sequence[ToolCallRequest], owner_id: str) -> List[ToolCallResponse]:
        print(f"---DISPATCHER: Handling {len(requests)} tool call(s) for user {owner_id}---")
        responses = []
        for request in requests:
            result = await self._run_one(request, owner_id)
            responses.append(ToolCallResponse.model_construct(id=request.id, name=request.name, result=result))
        return responses

    async def _run_one(self, request: ToolCallRequest, owner_id: str) -> ToolResult:
        handler = self.handlers.get(request.name)
        if handler is None:
            print(f"---DISPATCHER: No handler for '{request.name}'---")
            return f"Function {request.name} not implemented yet."

        try:
            arguments = handler.decode(request.args)
            async with self.guard.slots(owner_id):
                result = await asyncio.wait_for(
                    handler.execute(arguments, owner_id, self.store), timeout=self.timeout
                )
            return self._normalise(request.name, result)
        except asyncio.TimeoutError:
            print(f"---DISPATCHER: '{request.name}' timed out after {self.timeout}s---")
            return f"Error executing {request.name}: timed out after {self.timeout:g} seconds"
        except Exception as e:
            print(f"---DISPATCHER: Error in {request.name}: {type(e).__name__}: {e}---")
            return f"Error executing {request.name}: {e}"

    @staticmethod
    def _normalise(name: str, result) -> ToolResult:
        """Shapes a handler's return value into a string or a JSON object."""
        if result is None:
            return f"{name} completed successfully."
        if isinstance(result, str):
            return result
        value = to_jsonable_python(result)
        if isinstance(value, dict):
            return value
        # Lists and scalars still need an object on the wire
        return {"result": value}
