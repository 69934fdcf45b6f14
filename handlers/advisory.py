# handlers/advisory.py
"""
Handlers backed by external data feeds and the agronomy tables.

Each one computes its answer first and performs at most one store write
(a query log used later for trend analysis) as its last step.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import field_validator

from core import agronomy
from core.models import FarmerProfile, parse_timestamp
from core.store import DocumentStore, OrderBy, Predicate
from handlers.base import ToolArguments, ToolHandler
from handlers.profile import PROFILES
from tools.market_api import MarketPriceProvider
from tools.weather_api import WeatherProvider

SOIL_TESTS = "soil_tests"
DISEASE_REPORTS = "disease_reports"
PRICE_QUERIES = "price_queries"
PRICE_HISTORY = "price_history"
IRRIGATION_RECORDS = "irrigation_records"
HARVEST_PREDICTIONS = "harvest_predictions"
EXPERT_REQUESTS = "expert_requests"
COMMUNITY_QUERIES = "community_queries"
ALERTS = "alerts"


async def load_profile(store: DocumentStore, owner_id: str) -> Optional[FarmerProfile]:
    doc = await store.get(PROFILES, owner_id)
    return FarmerProfile.model_validate(doc) if doc else None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class WeatherArgs(ToolArguments):
    location: str
    days: Optional[float] = None


class GetWeatherForecast(ToolHandler):
    name = "get_weather_forecast"
    args_model = WeatherArgs

    def __init__(self, weather: WeatherProvider):
        self.weather = weather

    async def execute(self, arguments: WeatherArgs, owner_id: str, store: DocumentStore):
        days = max(1, round(arguments.days)) if arguments.days is not None else 1
        return await self.weather.get_weather(arguments.location, days)


class CropAdviceArgs(ToolArguments):
    crop_name: str
    growth_stage: str
    location: str


class CropAdvice(ToolHandler):
    name = "crop_advice"
    args_model = CropAdviceArgs

    async def execute(self, arguments: CropAdviceArgs, owner_id: str, store: DocumentStore):
        return agronomy.crop_advice(arguments.crop_name, arguments.growth_stage, arguments.location)


class SoilHealthArgs(ToolArguments):
    soil_type: str
    crop_type: str
    pH: Optional[float] = None
    organic_matter: Optional[float] = None


class SoilHealthRecommendation(ToolHandler):
    name = "soil_health_recommendation"
    args_model = SoilHealthArgs

    async def execute(self, arguments: SoilHealthArgs, owner_id: str, store: DocumentStore):
        ph = arguments.pH if arguments.pH is not None else 7.0
        organic_matter = arguments.organic_matter if arguments.organic_matter is not None else 2.0
        recommendation = agronomy.assess_soil_health(arguments.soil_type, ph, organic_matter)

        await store.append(SOIL_TESTS, {
            "farmer_id": owner_id,
            "soil_type": arguments.soil_type,
            "pH": arguments.pH,
            "crop_type": arguments.crop_type,
            "test_date": _now(),
            "recommendations": recommendation,
        })
        return recommendation


class DiseaseArgs(ToolArguments):
    symptoms: str
    crop_name: str


class DiseaseDiagnosis(ToolHandler):
    """Table lookup by crop, then by symptom phrase. The report is logged against the farmer's place."""
    name = "disease_diagnosis"
    args_model = DiseaseArgs

    async def execute(self, arguments: DiseaseArgs, owner_id: str, store: DocumentStore):
        diagnosis = agronomy.diagnose_crop_disease(arguments.symptoms, arguments.crop_name)
        profile = await load_profile(store, owner_id)

        await store.append(DISEASE_REPORTS, {
            "farmer_id": owner_id,
            "crop_name": arguments.crop_name,
            "symptoms": arguments.symptoms,
            "diagnosis": diagnosis,
            "report_date": _now(),
            "location": profile.place if profile else "unknown",
        })
        return {
            **diagnosis,
            "emergency_contact": "Contact local agricultural extension officer immediately if symptoms worsen",
        }


class MarketPriceArgs(ToolArguments):
    crop_name: str
    location: str


class MarketPriceInfo(ToolHandler):
    name = "market_price_info"
    args_model = MarketPriceArgs

    def __init__(self, market: MarketPriceProvider):
        self.market = market

    async def execute(self, arguments: MarketPriceArgs, owner_id: str, store: DocumentStore):
        price_info = await self.market.get_price(arguments.crop_name, arguments.location)
        current_price = agronomy.parse_price(price_info["current_price"])

        history = await store.query(
            PRICE_HISTORY,
            [Predicate("crop_name", "==", arguments.crop_name), Predicate("location", "==", arguments.location)],
            order_by=OrderBy("date", descending=True),
            limit=30,
        )
        historical_prices = [doc["price"] for doc in history if "price" in doc]
        trend = agronomy.predict_market_trend(historical_prices, current_price)

        await store.append(PRICE_QUERIES, {
            "farmer_id": owner_id,
            "crop_name": arguments.crop_name,
            "location": arguments.location,
            "queried_price": price_info["current_price"],
            "query_date": _now(),
        })
        return {
            **price_info,
            "trend_analysis": trend,
            "price_history": historical_prices[:7],
        }


class SchemeArgs(ToolArguments):
    category: str
    state: Optional[str] = None


class GovtSchemeInfo(ToolHandler):
    name = "govt_scheme_info"
    args_model = SchemeArgs

    async def execute(self, arguments: SchemeArgs, owner_id: str, store: DocumentStore):
        profile = await load_profile(store, owner_id)
        if profile:
            eligibility = f"Based on your {profile.land_size:g} acre farm, you are eligible for most schemes"
        else:
            eligibility = "Create your profile for personalized scheme recommendations"
        result = {
            "category": arguments.category,
            "matched_schemes": agronomy.match_government_schemes(arguments.category),
            "personalized_eligibility": eligibility,
        }
        if arguments.state:
            result["state"] = arguments.state
        return result


class WaterNeedArgs(ToolArguments):
    crop_type: str
    days_since_rain: float
    soil_moisture: Optional[float] = None


class WaterNeedPrediction(ToolHandler):
    name = "water_need_prediction"
    args_model = WaterNeedArgs

    def __init__(self, weather: WeatherProvider):
        self.weather = weather

    async def execute(self, arguments: WaterNeedArgs, owner_id: str, store: DocumentStore):
        profile = await load_profile(store, owner_id)
        weather = await self.weather.get_weather(profile.place if profile else "default")
        daily = agronomy.calculate_water_requirement(
            arguments.crop_type,
            "vegetative",
            weather,
            profile.soil_type if profile else "loamy",
        )

        needs_water = arguments.days_since_rain > 3
        prediction = {
            "crop_type": arguments.crop_type,
            "days_since_rain": arguments.days_since_rain,
            "soil_moisture": arguments.soil_moisture if arguments.soil_moisture is not None else "unknown",
            "daily_water_requirement": f"{daily} mm/day",
            "irrigation_needed": "Yes" if needs_water else "Monitor",
            "irrigation_amount": (
                f"{daily * arguments.days_since_rain:g} mm total" if needs_water else "Check soil moisture first"
            ),
            "next_irrigation": "Irrigate immediately" if needs_water else "Check again in 24 hours",
            "water_saving_tips": [
                "Use drip irrigation if available",
                "Mulch around plants",
                "Irrigate early morning or evening",
            ],
        }

        await store.append(IRRIGATION_RECORDS, {
            "farmer_id": owner_id,
            "crop_type": arguments.crop_type,
            "prediction": prediction,
            "recorded_date": _now(),
        })
        return prediction


class HarvestArgs(ToolArguments):
    crop_name: str
    planting_date: Optional[datetime] = None
    growth_stage: Optional[str] = None

    @field_validator("planting_date", mode="before")
    @classmethod
    def _parse(cls, value):
        return parse_timestamp(value)


class HarvestPrediction(ToolHandler):
    name = "harvest_prediction"
    args_model = HarvestArgs

    async def execute(self, arguments: HarvestArgs, owner_id: str, store: DocumentStore):
        prediction = agronomy.project_harvest(arguments.crop_name, arguments.planting_date)
        if arguments.growth_stage:
            prediction["reported_growth_stage"] = arguments.growth_stage

        await store.append(HARVEST_PREDICTIONS, {
            "farmer_id": owner_id,
            "prediction": prediction,
            "predicted_date": _now(),
        })
        return prediction


class ExpertArgs(ToolArguments):
    question: str
    expertise_needed: Optional[str] = None


class ConnectToAgriExpert(ToolHandler):
    name = "connect_to_agri_expert"
    args_model = ExpertArgs

    async def execute(self, arguments: ExpertArgs, owner_id: str, store: DocumentStore):
        await store.append(EXPERT_REQUESTS, {
            "question": arguments.question,
            "expertise_needed": arguments.expertise_needed or "general",
            "farmer_id": owner_id,
            "status": "pending",
            "created_at": _now(),
        })
        return (
            "Your request has been sent to an agricultural expert. "
            f'You will be contacted shortly for help with "{arguments.question}".'
        )


class CommunityArgs(ToolArguments):
    question: str
    crop_type: Optional[str] = None


class CommunityQuery(ToolHandler):
    """Shares the question with the community and returns what other farmers recently asked about the crop."""
    name = "community_query"
    args_model = CommunityArgs

    async def execute(self, arguments: CommunityArgs, owner_id: str, store: DocumentStore):
        predicates = [Predicate("crop_type", "==", arguments.crop_type)] if arguments.crop_type else []
        recent = await store.query(
            COMMUNITY_QUERIES, predicates, order_by=OrderBy("created_at", descending=True), limit=20
        )
        related = [
            {"question": doc["question"], "crop_type": doc.get("crop_type")}
            for doc in recent if doc.get("farmer_id") != owner_id
        ][:5]

        await store.append(COMMUNITY_QUERIES, {
            "farmer_id": owner_id,
            "question": arguments.question,
            "crop_type": arguments.crop_type,
            "created_at": _now(),
        })
        return {
            "question": arguments.question,
            "shared_with_community": True,
            "related_discussions": related,
        }


class AlertArgs(ToolArguments):
    alert_type: str
    description: str
    severity: Optional[str] = None


class SendAlertToNearbyFarmers(ToolHandler):
    """Posts a pest/disease alert to every other farmer registered in the same district."""
    name = "send_alert_to_nearby_farmers"
    args_model = AlertArgs

    async def execute(self, arguments: AlertArgs, owner_id: str, store: DocumentStore):
        profile = await load_profile(store, owner_id)
        if profile is None:
            return "Please create your farmer profile first so I know which district to alert."

        neighbours = await store.query(PROFILES, [Predicate("district", "==", profile.district)])
        recipients = [doc["id"] for doc in neighbours if doc["id"] != owner_id]

        await store.append(ALERTS, {
            "farmer_id": owner_id,
            "alert_type": arguments.alert_type,
            "severity": arguments.severity or "medium",
            "description": arguments.description,
            "district": profile.district,
            "recipients": recipients,
            "created_at": _now(),
        })
        return {
            "alert_type": arguments.alert_type,
            "district": profile.district,
            "farmers_notified": len(recipients),
        }


class SpeakTextArgs(ToolArguments):
    text: str


class SpeakText(ToolHandler):
    name = "speak_text"
    args_model = SpeakTextArgs

    async def execute(self, arguments: SpeakTextArgs, owner_id: str, store: DocumentStore):
        return f"Read this aloud to the user: {arguments.text}"
