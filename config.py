"""
Configuration management for the Disaster Alert API
"""
from typing import Annotated, List, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable support"""

    # API Configuration
    api_title: str = "Disaster Alert API"
    api_description: str = "AI-assisted disaster alerts, predictions and evacuation routes"
    api_version: str = "1.0.0"
    debug: bool = False

    # Security Configuration
    api_key: Optional[str] = None
    cors_origins: Annotated[List[str], NoDecode] = [
        "http://localhost:3000", "http://localhost:5000", "http://localhost:5173"
    ]
    trusted_hosts: Annotated[List[str], NoDecode] = ["localhost", "127.0.0.1", "testserver"]

    # Rate Limiting (disabled unless a redis URL is configured)
    redis_url: Optional[str] = None
    rate_limit_requests: int = 100
    rate_limit_window: int = 3600

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_prediction_model: str = "gemini-2.5-pro"
    gemini_route_model: str = "gemini-2.5-flash"
    gemini_max_attempts: int = 3

    # Alert generation thresholds (prediction probability)
    alert_probability_threshold: float = 0.6
    high_severity_threshold: float = 0.7
    critical_severity_threshold: float = 0.8
    alert_ttl_hours: int = 48
    prediction_horizon_hours: int = 24

    # Sample data
    seed_sample_data: bool = False

    # Logging Configuration
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator('cors_origins', 'trusted_hosts', mode='before')
    @classmethod
    def parse_csv_list(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(',') if item.strip()]
        return v

    @field_validator('debug', 'seed_sample_data', mode='before')
    @classmethod
    def parse_bool(cls, v):
        if isinstance(v, str):
            return v.strip().lower() in ('true', '1', 'yes', 'on')
        return v


# Global settings instance
settings = Settings()
