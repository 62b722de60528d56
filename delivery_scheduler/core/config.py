"""Application configuration."""

from os import getenv

from pydantic import BaseModel


class Settings(BaseModel):
    """Runtime settings for the application."""

    app_name: str = "delivery-scheduler API"
    app_env: str = getenv("APP_ENV", "dev")
    debug: bool = getenv("DEBUG", "0") == "1"
    database_url: str = getenv("DATABASE_URL", "sqlite:///./delivery_scheduler.db")
    app_timezone: str = getenv("APP_TIMEZONE", "Asia/Singapore")
    advance_rule_tie_break: str = getenv("ADVANCE_RULE_TIE_BREAK", "most_restrictive")
    max_range_days: int = int(getenv("MAX_RANGE_DAYS", "92"))
    autocomplete_default_limit: int = int(getenv("AUTOCOMPLETE_DEFAULT_LIMIT", "5"))
    seed_default_rules: bool = getenv("SEED_DEFAULT_RULES", "1") == "1"


settings: Settings = Settings()
