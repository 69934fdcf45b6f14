# handlers/logs.py

from typing import Optional

from core.models import CropDecision, PlanTask, WeeklyPlan
from core.store import DocumentStore
from handlers.base import ToolArguments, ToolHandler

DECISIONS = "crop_decisions"
WEEKLY_PLANS = "weekly_plans"


class DecisionArgs(ToolArguments):
    event: str
    decision: str
    result: str
    crop_name: Optional[str] = None
    season: Optional[str] = None


class RecordPastDecision(ToolHandler):
    """Appends a decision and its outcome to the farmer's decision log."""
    name = "record_past_decision"
    args_model = DecisionArgs

    async def execute(self, arguments: DecisionArgs, owner_id: str, store: DocumentStore):
        decision = CropDecision(**arguments.model_dump(), farmer_id=owner_id)
        await store.append(DECISIONS, decision.model_dump())
        print(f"---LOG HANDLER: Saved decision for user {owner_id}---")
        return "Decision recorded for future learning."


class WeeklyPlanArgs(ToolArguments):
    current_crop: str
    crop_stage: str
    weather_forecast: Optional[str] = None


def build_weekly_plan(owner_id: str, crop: str, crop_stage: str, weather_forecast: Optional[str]) -> WeeklyPlan:
    return WeeklyPlan(
        farmer_id=owner_id,
        crop_stage=crop_stage,
        weather_considerations=weather_forecast or "Normal weather expected",
        tasks=[
            PlanTask(
                task=f"Monitor {crop} growth",
                priority="high",
                estimated_duration="2 hours",
                weather_dependent=False,
            ),
            PlanTask(
                task="Check soil moisture",
                priority="medium",
                estimated_duration="1 hour",
                weather_dependent=True,
            ),
        ],
    )


class GenerateWeeklyPlan(ToolHandler):
    name = "generate_weekly_plan"
    args_model = WeeklyPlanArgs

    async def execute(self, arguments: WeeklyPlanArgs, owner_id: str, store: DocumentStore):
        plan = build_weekly_plan(owner_id, arguments.current_crop, arguments.crop_stage, arguments.weather_forecast)
        await store.append(WEEKLY_PLANS, plan.model_dump())
        print(f"---LOG HANDLER: Saved weekly plan for user {owner_id}---")
        return plan.model_dump(mode="json")
