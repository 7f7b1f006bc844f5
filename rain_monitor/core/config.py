from pydantic_settings import BaseSettings, NoDecode
from pydantic import Field, field_validator
from typing import List, Union
from typing_extensions import Annotated
import json

class Settings(BaseSettings):
    PROJECT_NAME: str = "Mumbai Rain Monitor"
    API_V1_STR: str = "/api"
    LOG_LEVEL: str = "INFO"

    # CORS Configuration
    # BACKEND_CORS_ORIGINS=https://url1.com,https://url2.com (comma-separated)
    # OR: BACKEND_CORS_ORIGINS=["https://dashboard.example.com"] (JSON array)
    BACKEND_CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("BACKEND_CORS_ORIGINS", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Union[str, List[str]]) -> List[str]:
        """Parse CORS origins from various formats: JSON array, comma-separated, or single URL."""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            if v.startswith("["):
                try:
                    parsed = json.loads(v)
                    if isinstance(parsed, list):
                        return parsed
                except json.JSONDecodeError:
                    pass
            if "," in v:
                return [url.strip() for url in v.split(",") if url.strip()]
            if v.strip():
                return [v.strip()]
        return []

    # Weather providers - a blank key disables that provider
    OPEN_METEO_ENABLED: bool = True        # Free, no key required
    OPENWEATHER_API_KEY: str = ""
    WEATHERAPI_KEY: str = ""
    METEOMATICS_USERNAME: str = ""
    METEOMATICS_PASSWORD: str = ""
    FETCH_TIMEOUT_SECONDS: float = 10.0

    # Telegram Bot API
    TELEGRAM_BOT_TOKEN: str = ""
    TELEGRAM_CHAT_ID: str = ""

    # Email alerts over authenticated SMTP (Gmail app password by default)
    EMAIL_FROM: str = ""
    EMAIL_TO: str = ""
    EMAIL_PASS: str = ""
    SMTP_HOST: str = "smtp.gmail.com"
    SMTP_PORT: int = 587

    # Alerting
    RAIN_ALERT_THRESHOLD_MM: float = 1.0
    ALERT_HISTORY_LIMIT: int = Field(100, ge=1)      # Oldest alerts are evicted past this
    ALERTS_RESPONSE_LIMIT: int = Field(50, ge=1, le=500)  # Default page size for /api/alerts

    # Update cycle
    UPDATE_INTERVAL_MINUTES: int = Field(30, ge=1)
    ZONE_DELAY_MS: int = Field(200, ge=0)  # Pause between zones for provider rate limits

    # Monitoring season (inclusive, wraps across year end: July -> January)
    SEASON_START_MONTH: int = 7
    SEASON_END_MONTH: int = 1

    @field_validator("SEASON_START_MONTH", "SEASON_END_MONTH")
    @classmethod
    def validate_month(cls, v: int) -> int:
        if not 1 <= v <= 12:
            raise ValueError(f"month must be between 1 and 12, got {v}")
        return v

    @property
    def telegram_configured(self) -> bool:
        return bool(self.TELEGRAM_BOT_TOKEN and self.TELEGRAM_CHAT_ID)

    @property
    def email_configured(self) -> bool:
        return bool(self.EMAIL_FROM and self.EMAIL_TO and self.EMAIL_PASS)

    class Config:
        case_sensitive = True
        env_file = ".env"

settings = Settings()
