# tools/weather_api.py

from abc import ABC, abstractmethod
from typing import Optional

import httpx

from core.config import settings
from tools.geocoding_api import get_coordinates_for_location

API_URL = "https://api.open-meteo.com/v1/forecast"


class WeatherProvider(ABC):
    """Source of current conditions for a named location."""

    @abstractmethod
    async def get_weather(self, location: str, days: int = 1) -> dict:
        """Returns location, temperature, humidity, rainfall_prediction and wind_speed."""


class MockWeatherProvider(WeatherProvider):
    """Fixed conditions, used until a real provider is configured."""

    async def get_weather(self, location: str, days: int = 1) -> dict:
        return {
            "location": location,
            "temperature": "28°C",
            "humidity": "65%",
            "rainfall_prediction": "Light rain expected tomorrow",
            "wind_speed": "12 km/h",
        }


class OpenMeteoWeatherProvider(WeatherProvider):
    """Current conditions and a short rain outlook from Open-Meteo (no API key needed)."""

    def __init__(self, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.timeout = timeout
        self.transport = transport

    async def get_weather(self, location: str, days: int = 1) -> dict:
        print(f"---TOOL: Fetching weather for '{location}' ({days} days)---")
        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            coords = await get_coordinates_for_location(client, location)
            if "error" in coords:
                raise ValueError(f"Could not locate '{location}': {coords['error']}")

            params = {
                "latitude": coords["latitude"],
                "longitude": coords["longitude"],
                "current": "temperature_2m,relative_humidity_2m,wind_speed_10m",
                "daily": "precipitation_sum",
                "timezone": "auto",
                "forecast_days": max(1, min(days, 16)),
            }
            response = await client.get(API_URL, params=params)
            response.raise_for_status()
            data = response.json()

        current = data["current"]
        daily = data["daily"]
        rain_days = [
            day for day, rain in zip(daily["time"], daily["precipitation_sum"])
            if rain is not None and rain > 0
        ]
        if rain_days:
            rainfall = f"Rain expected on {', '.join(rain_days)}"
        else:
            rainfall = "No rain expected in the forecast window"

        return {
            "location": location,
            "temperature": f"{current['temperature_2m']}°C",
            "humidity": f"{current['relative_humidity_2m']}%",
            "rainfall_prediction": rainfall,
            "wind_speed": f"{current['wind_speed_10m']} km/h",
        }


def get_weather_provider(name: Optional[str] = None) -> WeatherProvider:
    name = (name or settings.weather_provider).lower()
    if name == "open-meteo":
        return OpenMeteoWeatherProvider()
    if name == "mock":
        return MockWeatherProvider()
    raise ValueError(f"Unknown weather provider '{name}'")
