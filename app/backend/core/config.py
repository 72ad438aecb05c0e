"""Application configuration using pydantic-settings."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )
    
    # Database
    database_url: str = "sqlite:///./data/spacerate.db"
    seed_on_startup: bool = True
    
    # Rates
    external_rates_path: str = "./data/external_rates.json"
    reject_overlapping_rates: bool = False
    
    # Pricing
    monthly_proration_days: int = 30
    
    # Logging
    log_level: str = "INFO"
    pricing_trace: bool = False
    
    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000


settings = Settings()
