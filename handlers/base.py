# handlers/base.py

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel, ConfigDict

from core.models import ToolResult
from core.store import DocumentStore


class ToolArguments(BaseModel):
    """Base for typed per-operation arguments. Unknown keys from the model are ignored."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class NoArguments(ToolArguments):
    pass


class ToolHandler(ABC):
    """
    The unit of domain logic bound to one catalog operation.

    Subclasses set `name` and `args_model`, and implement `execute`. Returning
    None means "done, nothing to report"; the dispatcher fills in a default message.
    """
    name: str = ""
    args_model: Type[ToolArguments] = NoArguments

    def decode(self, raw_args: Optional[Dict[str, Any]]) -> ToolArguments:
        return self.args_model.model_validate(raw_args or {})

    @abstractmethod
    async def execute(self, arguments: ToolArguments, owner_id: str, store: DocumentStore) -> Optional[ToolResult]:
        ...
