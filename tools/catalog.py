# tools/catalog.py
"""
The tool catalog advertised to the live session at connect time.

Each entry maps an operation name to its description and an OBJECT parameter
schema in the Gemini schema vocabulary. Every name here must have exactly one
handler in handlers/ (checked by handlers.build_handlers).
"""

import copy
from types import MappingProxyType
from typing import List

STRING = {"type": "STRING"}
NUMBER = {"type": "NUMBER"}
STRING_LIST = {"type": "ARRAY", "items": {"type": "STRING"}}


def _params(properties: dict, required: List[str] = ()) -> dict:
    # Each property gets its own schema dict; STRING and friends are only templates
    schema = {"type": "OBJECT", "properties": copy.deepcopy(properties)}
    if required:
        schema["required"] = list(required)
    return schema


_CATALOG = {
    # --- Farmer profile & records ---
    "create_farmer_profile": {
        "description": "Creates a new farmer profile with basic information",
        "parameters": _params(
            {
                "name": STRING,
                "age": NUMBER,
                "place": STRING,
                "district": STRING,
                "land_size": NUMBER,
                "soil_type": STRING,
                "crops_grown": STRING_LIST,
                "tools_owned": STRING_LIST,
                "experience_years": NUMBER,
                "phone_number": STRING,
            },
            ["name", "age", "place", "district", "land_size", "soil_type", "experience_years"],
        ),
    },
    "update_farmer_profile": {
        "description": "Updates specific farmer profile information",
        "parameters": _params({"data_type": STRING, "value": STRING}, ["data_type", "value"]),
    },
    "get_personalized_advice": {
        "description": "Generates personalized farming advice based on farmer profile and current conditions",
        "parameters": _params(
            {"current_crop": STRING, "growth_stage": STRING, "specific_concern": STRING},
            ["current_crop"],
        ),
    },
    "record_past_decision": {
        "description": "Records farming decisions and their outcomes for learning",
        "parameters": _params(
            {"event": STRING, "decision": STRING, "result": STRING, "crop_name": STRING, "season": STRING},
            ["event", "decision", "result"],
        ),
    },
    "generate_weekly_plan": {
        "description": "Creates a weekly farming plan based on crop stage and weather",
        "parameters": _params(
            {"current_crop": STRING, "crop_stage": STRING, "weather_forecast": STRING},
            ["current_crop", "crop_stage"],
        ),
    },
    "compare_crop_choices": {
        "description": "Recommends best crop choices based on season and land area",
        "parameters": _params({"season": STRING, "land_area": NUMBER}, ["season", "land_area"]),
    },
    "reminder_set": {
        "description": "Sets farming task reminders",
        "parameters": _params({"task": STRING, "date_time": STRING}, ["task", "date_time"]),
    },
    "get_reminders": {
        "description": "Retrieves upcoming farming reminders",
        "parameters": _params({"days_ahead": NUMBER}),
    },

    # --- External data ---
    "get_weather_forecast": {
        "description": "Provides localized weather updates",
        "parameters": _params({"location": STRING, "days": NUMBER}, ["location"]),
    },
    "crop_advice": {
        "description": "Gives context-aware crop advice",
        "parameters": _params(
            {"crop_name": STRING, "growth_stage": STRING, "location": STRING},
            ["crop_name", "growth_stage", "location"],
        ),
    },
    "soil_health_recommendation": {
        "description": "Suggests soil amendments and nutrient plans",
        "parameters": _params(
            {"soil_type": STRING, "pH": NUMBER, "organic_matter": NUMBER, "crop_type": STRING},
            ["soil_type", "crop_type"],
        ),
    },
    "disease_diagnosis": {
        "description": "Diagnoses crop diseases and provides treatment recommendations",
        "parameters": _params({"symptoms": STRING, "crop_name": STRING}, ["symptoms", "crop_name"]),
    },
    "market_price_info": {
        "description": "Provides real-time market prices",
        "parameters": _params({"crop_name": STRING, "location": STRING}, ["crop_name", "location"]),
    },
    "govt_scheme_info": {
        "description": "Provides information about government schemes for farmers",
        "parameters": _params({"category": STRING, "state": STRING}, ["category"]),
    },
    "speak_text": {
        "description": "Converts text to speech",
        "parameters": _params({"text": STRING}, ["text"]),
    },
    "connect_to_agri_expert": {
        "description": "Connects farmer to agricultural experts",
        "parameters": _params({"question": STRING, "expertise_needed": STRING}, ["question"]),
    },
    "community_query": {
        "description": "Fetches advice from nearby farmers",
        "parameters": _params({"question": STRING, "crop_type": STRING}, ["question"]),
    },
    "send_alert_to_nearby_farmers": {
        "description": "Sends alerts to nearby farmers about pests or diseases",
        "parameters": _params(
            {"alert_type": STRING, "severity": STRING, "description": STRING},
            ["alert_type", "description"],
        ),
    },
    "water_need_prediction": {
        "description": "Predicts irrigation requirements",
        "parameters": _params(
            {"crop_type": STRING, "days_since_rain": NUMBER, "soil_moisture": NUMBER},
            ["crop_type", "days_since_rain"],
        ),
    },
    "harvest_prediction": {
        "description": "Predicts harvest date and market timing",
        "parameters": _params(
            {"crop_name": STRING, "planting_date": STRING, "growth_stage": STRING},
            ["crop_name"],
        ),
    },

    # --- Community messaging ---
    "send_message": {
        "description": "Sends a message to a specific user through the AI assistant",
        "parameters": _params({"name": STRING, "content": STRING}, ["name", "content"]),
    },
    "find_users": {
        "description": "Finds users based on interests and age range",
        "parameters": _params(
            {
                "interests": STRING_LIST,
                "ageRange": {"type": "OBJECT", "properties": {"min": NUMBER, "max": NUMBER}},
            },
            ["interests", "ageRange"],
        ),
    },
    "connect_user": {
        "description": (
            "Add a specific user to connected friends list through the AI assistant, "
            "take the userid and friendName as userid and name in the find_users function"
        ),
        "parameters": _params({"userid": STRING, "friendName": STRING}, ["userid", "friendName"]),
    },
    "add_symptoms": {
        "description": "adds the details of symptoms and problems faced by the user in simplified language",
        "parameters": _params({"content": STRING}, ["content"]),
    },
    "read_message": {
        "description": "Reads the message content aloud using text-to-speech",
        "parameters": _params({"messageContent": STRING}, ["messageContent"]),
    },
}

TOOL_CATALOG = MappingProxyType(_CATALOG)


def function_declarations() -> List[dict]:
    """The catalog as a fresh list of {name, description, parameters} declarations."""
    return [
        {"name": name, "description": entry["description"], "parameters": copy.deepcopy(entry["parameters"])}
        for name, entry in TOOL_CATALOG.items()
    ]
