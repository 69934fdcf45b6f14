# handlers/profile.py

from datetime import datetime, timezone
from typing import List, Optional

from pydantic import TypeAdapter

from core import agronomy
from core.models import FarmerProfile
from core.store import DocumentStore
from handlers.base import ToolArguments, ToolHandler

PROFILES = "farmer_profiles"

# Fields a farmer may change one at a time through update_farmer_profile
UPDATABLE_FIELDS = {
    name: field for name, field in FarmerProfile.model_fields.items()
    if name not in ("created_at", "updated_at")
}
LIST_FIELDS = {"crops_grown", "tools_owned"}


def coerce_profile_value(field: str, value: str):
    """Turns the spoken string value into the field's type ('rice, maize' -> ['rice', 'maize'])."""
    if field not in UPDATABLE_FIELDS:
        raise ValueError(f"Unknown profile field '{field}'. Valid fields: {', '.join(sorted(UPDATABLE_FIELDS))}")
    if field in LIST_FIELDS:
        return [item.strip() for item in value.split(",") if item.strip()]
    annotation = UPDATABLE_FIELDS[field].annotation
    return TypeAdapter(annotation).validate_python(value)


class CreateProfileArgs(ToolArguments):
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


class CreateFarmerProfile(ToolHandler):
    """Creates (or overwrites) the owner's profile."""
    name = "create_farmer_profile"
    args_model = CreateProfileArgs

    async def execute(self, arguments: CreateProfileArgs, owner_id: str, store: DocumentStore):
        now = datetime.now(timezone.utc)
        profile = FarmerProfile(**arguments.model_dump(), created_at=now, updated_at=now)
        await store.put(PROFILES, owner_id, profile.model_dump())
        print(f"---PROFILE HANDLER: Saved profile for user {owner_id}---")
        return "Farmer profile created successfully!"


class UpdateProfileArgs(ToolArguments):
    data_type: str
    value: str


class UpdateFarmerProfile(ToolHandler):
    name = "update_farmer_profile"
    args_model = UpdateProfileArgs

    async def execute(self, arguments: UpdateProfileArgs, owner_id: str, store: DocumentStore):
        field = arguments.data_type.strip()
        value = coerce_profile_value(field, arguments.value)
        await store.patch(PROFILES, owner_id, {field: value, "updated_at": datetime.now(timezone.utc)})
        print(f"---PROFILE HANDLER: Updated '{field}' for user {owner_id}---")
        return f"Profile updated: {field} set to {arguments.value}"


class AdviceArgs(ToolArguments):
    current_crop: str
    growth_stage: Optional[str] = None
    specific_concern: Optional[str] = None


class GetPersonalizedAdvice(ToolHandler):
    name = "get_personalized_advice"
    args_model = AdviceArgs

    async def execute(self, arguments: AdviceArgs, owner_id: str, store: DocumentStore):
        profile_doc = await store.get(PROFILES, owner_id)
        if profile_doc is None:
            return "Please create your farmer profile first to get personalized advice."

        profile = FarmerProfile.model_validate(profile_doc)
        advice = {
            "general_advice": (
                f"Based on your {profile.experience_years:g} years of experience with {arguments.current_crop}, "
                f"here's personalized advice for your {profile.land_size:g} acre farm."
            ),
            "soil_specific": f"For {profile.soil_type} soil, consider organic amendments.",
            "weather_based": "Current weather conditions suggest adjusting irrigation schedule.",
        }
        if arguments.growth_stage:
            advice["stage_specific"] = agronomy.crop_advice(
                arguments.current_crop, arguments.growth_stage, profile.place
            )["advice"]
        if arguments.specific_concern:
            advice["concern"] = (
                f"About '{arguments.specific_concern}': record what you observe and ask for a "
                "disease diagnosis if the plants show symptoms."
            )
        return advice


class CompareCropArgs(ToolArguments):
    season: str
    land_area: float


class CompareCropChoices(ToolHandler):
    name = "compare_crop_choices"
    args_model = CompareCropArgs

    async def execute(self, arguments: CompareCropArgs, owner_id: str, store: DocumentStore):
        return agronomy.compare_crop_choices(arguments.season, arguments.land_area)
