# tests/test_weather.py

import asyncio

import httpx
import pytest

from tools.geocoding_api import get_coordinates_for_location
from tools.weather_api import MockWeatherProvider, OpenMeteoWeatherProvider, get_weather_provider


def fake_api(request: httpx.Request) -> httpx.Response:
    if request.url.host == "nominatim.openstreetmap.org":
        if request.url.params["q"] == "Atlantis":
            return httpx.Response(200, json=[])
        return httpx.Response(200, json=[{"lat": "10.78", "lon": "79.13"}])
    return httpx.Response(200, json={
        "current": {"temperature_2m": 31.2, "relative_humidity_2m": 58, "wind_speed_10m": 9.4},
        "daily": {"time": ["2025-06-01", "2025-06-02"], "precipitation_sum": [0.0, 4.5]},
    })


def test_geocoding_found_and_missing():
    async def scenario():
        async with httpx.AsyncClient(transport=httpx.MockTransport(fake_api)) as client:
            return (
                await get_coordinates_for_location(client, "Thanjavur"),
                await get_coordinates_for_location(client, "Atlantis"),
            )

    found, missing = asyncio.run(scenario())
    assert found == {"latitude": 10.78, "longitude": 79.13}
    assert missing == {"error": "Location not found."}


def test_open_meteo_conditions():
    provider = OpenMeteoWeatherProvider(transport=httpx.MockTransport(fake_api))

    weather = asyncio.run(provider.get_weather("Thanjavur", days=2))

    assert weather == {
        "location": "Thanjavur",
        "temperature": "31.2°C",
        "humidity": "58%",
        "rainfall_prediction": "Rain expected on 2025-06-02",
        "wind_speed": "9.4 km/h",
    }


def test_open_meteo_unknown_place_raises():
    provider = OpenMeteoWeatherProvider(transport=httpx.MockTransport(fake_api))

    with pytest.raises(ValueError):
        asyncio.run(provider.get_weather("Atlantis"))


def test_provider_selection():
    assert isinstance(get_weather_provider("mock"), MockWeatherProvider)
    assert isinstance(get_weather_provider("open-meteo"), OpenMeteoWeatherProvider)
    with pytest.raises(ValueError):
        get_weather_provider("crystal-ball")
