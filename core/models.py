# core/models.py

from pydantic import BaseModel, Field
from typing import Optional, List, Literal, Union, Any, Dict
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive timestamps are taken to be UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_timestamp(value: Any) -> Any:
    """Accepts ISO dates ('2025-03-01') and datetimes ('2025-03-01T08:00:00Z')."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    if isinstance(value, datetime):
        return as_utc(value)
    return value


class FarmerProfile(BaseModel):
    """Defines the structure for a farmer's profile, keyed by the owner id."""
    name: str
    age: int
    place: str
    district: str
    land_size: float
    soil_type: str
    crops_grown: List[str] = []
    tools_owned: List[str] = []
    experience_years: float
    phone_number: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class CropDecision(BaseModel):
    """An append-only record of a farming decision and how it turned out."""
    event: str
    decision: str
    result: str
    crop_name: Optional[str] = None
    season: Optional[str] = None
    farmer_id: str
    timestamp: datetime = Field(default_factory=utc_now)


class Reminder(BaseModel):
    """A farming task the farmer wants to be reminded about."""
    id: Optional[str] = None
    task: str
    date_time: datetime
    is_completed: bool = False
    farmer_id: str
    created_at: datetime = Field(default_factory=utc_now)


class PlanTask(BaseModel):
    task: str
    priority: Literal["high", "medium", "low"]
    estimated_duration: str
    weather_dependent: bool


class WeeklyPlan(BaseModel):
    """A week of farm work generated for one crop stage."""
    farmer_id: str
    week_start: datetime = Field(default_factory=utc_now)
    tasks: List[PlanTask]
    crop_stage: str
    weather_considerations: str


class Message(BaseModel):
    """A direct message between two users of the assistant."""
    id: Optional[str] = None
    sender_id: str
    recipient_id: str
    content: str
    timestamp: datetime = Field(default_factory=utc_now)
    is_ai_message: bool = False


class Connection(BaseModel):
    """A directed 'friend' edge. Repeat connects produce repeat edges."""
    sender_id: str
    friend_id: str
    friend_name: str


# --- Tool call wire types ---

class ToolCallRequest(BaseModel):
    """A single function call requested by the live session."""
    id: str
    name: str
    args: Dict[str, Any] = {}


ToolResult = Union[str, Dict[str, Any]]


class ToolCallResponse(BaseModel):
    """The result for one ToolCallRequest, correlated by id and name."""
    id: str
    name: str
    result: ToolResult

    def to_wire(self) -> dict:
        """Shapes the result the way the live session expects it."""
        if isinstance(self.result, str):
            return {"result": {"string_value": self.result}}
        return {"result": {"object_value": self.result}}
