# handlers/social.py

from datetime import datetime, timezone
from typing import List

from pydantic import Field
from pydantic_core import to_jsonable_python

from core.models import Connection, Message
from core.store import DocumentStore, Predicate
from handlers.base import ToolArguments, ToolHandler

CONNECTIONS = "connected"
MESSAGES = "messages"
USERS = "users"
SYMPTOMS = "symptoms"


class SendMessageArgs(ToolArguments):
    name: str
    content: str


class SendMessage(ToolHandler):
    """Delivers a message to one of the owner's connected friends, looked up by exact name."""
    name = "send_message"
    args_model = SendMessageArgs

    async def execute(self, arguments: SendMessageArgs, owner_id: str, store: DocumentStore):
        matches = await store.query(
            CONNECTIONS,
            [Predicate("sender_id", "==", owner_id), Predicate("friend_name", "==", arguments.name)],
            limit=1,
        )
        if not matches:
            print(f"---SOCIAL HANDLER: Recipient not found for friend_name '{arguments.name}'---")
            return {"error": f"No connected friend named '{arguments.name}'."}

        message = Message(sender_id=owner_id, recipient_id=matches[0]["friend_id"], content=arguments.content)
        await store.append(MESSAGES, message.model_dump(exclude={"id"}))
        return f"Message sent to {arguments.name}."


class AgeRange(ToolArguments):
    min: float
    max: float


class FindUsersArgs(ToolArguments):
    interests: List[str]
    age_range: AgeRange = Field(alias="ageRange")


class FindUsers(ToolHandler):
    name = "find_users"
    args_model = FindUsersArgs

    async def execute(self, arguments: FindUsersArgs, owner_id: str, store: DocumentStore):
        users = await store.query(
            USERS,
            [
                Predicate("interests", "array-contains-any", list(arguments.interests)),
                Predicate("age", ">=", arguments.age_range.min),
                Predicate("age", "<=", arguments.age_range.max),
            ],
        )
        print(f"---SOCIAL HANDLER: Found {len(users)} users for {owner_id}---")
        return {"users": to_jsonable_python(users)}


class ConnectUserArgs(ToolArguments):
    userid: str
    friend_name: str = Field(alias="friendName")


class ConnectUser(ToolHandler):
    # Repeat calls add repeat edges; send_message only ever uses the first match.
    name = "connect_user"
    args_model = ConnectUserArgs

    async def execute(self, arguments: ConnectUserArgs, owner_id: str, store: DocumentStore):
        edge = Connection(sender_id=owner_id, friend_id=arguments.userid, friend_name=arguments.friend_name)
        await store.append(CONNECTIONS, edge.model_dump())
        return f"{arguments.friend_name} added to your friends."


class AddSymptomsArgs(ToolArguments):
    content: str


class AddSymptoms(ToolHandler):
    name = "add_symptoms"
    args_model = AddSymptomsArgs

    async def execute(self, arguments: AddSymptomsArgs, owner_id: str, store: DocumentStore):
        await store.append(SYMPTOMS, {
            "sender_id": owner_id,
            "content": arguments.content,
            "timestamp": datetime.now(timezone.utc),
            "is_ai_message": False,
        })
        return "Symptoms noted."


class ReadMessageArgs(ToolArguments):
    message_content: str = Field(alias="messageContent")


class ReadMessage(ToolHandler):
    name = "read_message"
    args_model = ReadMessageArgs

    async def execute(self, arguments: ReadMessageArgs, owner_id: str, store: DocumentStore):
        return f"Read this message aloud to the user: {arguments.message_content}"
