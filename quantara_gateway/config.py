"""Configuration management using Pydantic Settings"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database
    database_url: str = "sqlite:///./quantara.db"

    # Service
    service_name: str = "quantara-gateway"
    log_level: str = "INFO"

    # Risk engine metadata (reported by GET /v1/risk)
    risk_engine_name: str = "QNT-RISK-V2"
    risk_engine_version: str = "2.0.4"
    default_band_volatility: float = 0.05

    # Event channel
    event_log_limit: int = 100

    # Seed the two demo capital pools on startup when the table is empty
    seed_demo_pools: bool = True


settings = Settings()
