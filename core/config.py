# core/config.py

from typing import Optional
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Loads application settings from .env file."""
    mongo_uri: Optional[str] = None
    mongo_user: Optional[str] = None
    mongo_password: Optional[str] = None
    mongo_host: str = "localhost"
    mongo_port: int = 27017
    db_name: str = "farm_assistant_db"

    google_api_key: Optional[str] = None

    # Realtime session
    live_model: str = "models/gemini-2.0-flash-exp"
    response_modality: str = "AUDIO"
    voice_name: str = "Puck"

    # Background notifications
    reminder_check_interval_seconds: float = 60.0
    reminder_lookahead_days: int = 7

    # Tool execution limits
    handler_timeout_seconds: float = 20.0
    max_concurrent_calls_per_owner: int = 4

    # "mock" or "open-meteo"
    weather_provider: str = "mock"

    @property
    def final_mongo_uri(self) -> str:
        """Constructs safe MongoDB URI from components (preferred) or returns the provided one."""
        if self.mongo_user and self.mongo_password:
            import urllib.parse
            user = urllib.parse.quote_plus(self.mongo_user)
            password = urllib.parse.quote_plus(self.mongo_password)
            return f"mongodb+srv://{user}:{password}@{self.mongo_host}/"

        if self.mongo_uri:
            return self.mongo_uri

        return f"mongodb://{self.mongo_host}:{self.mongo_port}/"

    class Config:
        env_file = ".env"

# Create a single, reusable instance of the settings
settings = Settings()
