# handlers/__init__.py

from typing import Dict, Optional

from core.errors import CatalogMismatchError
from core.owner_guard import OwnerGuard
from handlers.base import ToolHandler
from handlers import advisory, logs, profile, reminders, social
from tools.catalog import TOOL_CATALOG
from tools.market_api import MarketPriceProvider, MockMarketPriceProvider
from tools.weather_api import WeatherProvider, get_weather_provider


def verify_catalog(handlers: Dict[str, ToolHandler], catalog=TOOL_CATALOG) -> None:
    """Fails fast if any catalog operation lacks a handler, or vice versa."""
    missing_handlers = set(catalog) - set(handlers)
    missing_entries = set(handlers) - set(catalog)
    if missing_handlers or missing_entries:
        raise CatalogMismatchError(missing_handlers, missing_entries)


def build_handlers(
    guard: OwnerGuard,
    weather: Optional[WeatherProvider] = None,
    market: Optional[MarketPriceProvider] = None,
) -> Dict[str, ToolHandler]:
    """Creates one handler per catalog operation and checks the two stay in sync."""
    weather = weather or get_weather_provider()
    market = market or MockMarketPriceProvider()

    handler_list = [
        profile.CreateFarmerProfile(),
        profile.UpdateFarmerProfile(),
        profile.GetPersonalizedAdvice(),
        profile.CompareCropChoices(),
        logs.RecordPastDecision(),
        logs.GenerateWeeklyPlan(),
        reminders.SetReminder(guard),
        reminders.GetReminders(guard),
        advisory.GetWeatherForecast(weather),
        advisory.CropAdvice(),
        advisory.SoilHealthRecommendation(),
        advisory.DiseaseDiagnosis(),
        advisory.MarketPriceInfo(market),
        advisory.GovtSchemeInfo(),
        advisory.SpeakText(),
        advisory.ConnectToAgriExpert(),
        advisory.CommunityQuery(),
        advisory.SendAlertToNearbyFarmers(),
        advisory.WaterNeedPrediction(weather),
        advisory.HarvestPrediction(),
        social.SendMessage(),
        social.FindUsers(),
        social.ConnectUser(),
        social.AddSymptoms(),
        social.ReadMessage(),
    ]
    handlers = {h.name: h for h in handler_list}
    if len(handlers) != len(handler_list):
        raise ValueError("Two handlers share the same operation name")

    verify_catalog(handlers)
    print(f"---HANDLERS: Registered {len(handlers)} tool handlers---")
    return handlers
