"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_ENV: str = "development"
    API_V1_PREFIX: str = "/api"
    LOG_LEVEL: str = "INFO"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # Decimal arithmetic (fixed once at process start)
    DECIMAL_PRECISION: int = 28

    # Liquidity planning
    CUSTOMER_PAYMENT_DAYS: int = 45  # German B2B average
    VARIABLE_COST_PAYMENT_DAYS: int = 0  # Operating costs are paid when incurred

    # BA rules
    BREAK_EVEN_LIMIT_MONTHS: int = 36
    KLEINUNTERNEHMER_GRENZE: int = 22000
    GZ_PAUSCHALE: int = 300  # Monthly social security flat rate

    # CORS
    @property
    def ALLOWED_ORIGINS(self) -> List[str]:
        if self.APP_ENV == "development":
            return ["*"]  # Allow all origins in development
        return [self.FRONTEND_URL, "http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore",
    )


settings = Settings()
