# tools/geocoding_api.py

import httpx

NOMINATIM_URL = "https://nominatim.openstreetmap.org/search"


async def get_coordinates_for_location(client: httpx.AsyncClient, location_query: str) -> dict:
    """
    Fetches the latitude and longitude for a given location query (e.g., "Chennai, India").
    Returns a dictionary with 'latitude' and 'longitude' or an error message.
    """
    print(f"---TOOL: Geocoding for '{location_query}'---")
    # Using Nominatim (OpenStreetMap) - no API key needed, but be mindful of usage limits.
    params = {'q': location_query, 'format': 'json', 'limit': 1}
    headers = {'User-Agent': 'AgriguruAssistant/1.0'}  # Nominatim requires a user-agent

    try:
        response = await client.get(NOMINATIM_URL, params=params, headers=headers)
        response.raise_for_status()
        data = response.json()

        if data:
            return {"latitude": float(data[0]['lat']), "longitude": float(data[0]['lon'])}
        return {"error": "Location not found."}

    except httpx.HTTPError as e:
        return {"error": f"API request failed: {e}"}
    except (KeyError, IndexError, TypeError, ValueError) as e:
        return {"error": f"Error parsing geocoding data: {e}"}
