"""
Application configuration
"""
from pydantic_settings import BaseSettings
from pydantic import Field, model_validator
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    API_V1_PREFIX: str = "/api/v1"
    PROJECT_NAME: str = "Yieldwatch"
    LOG_LEVEL: str = "INFO"

    # Cache (in seconds)
    CACHE_TTL_MARKET: int = Field(900, ge=0)  # 15 minutes

    # Outbound fetches
    FETCH_TIMEOUT_SECONDS: float = Field(12.0, gt=0)  # Per attempt
    FETCH_MAX_ATTEMPTS: int = Field(2, ge=1)
    FETCH_RETRY_BACKOFF_SECONDS: float = Field(0.5, ge=0)
    PROVIDER_TIME_BUDGET_SECONDS: float = Field(20.0, gt=0)  # Whole provider step incl. retries
    USER_AGENT: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    )

    # Extraction
    YIELD_MIN_TENORS: int = 4  # Trust threshold, never below 4
    EXTRACT_WINDOW_CHARS: int = Field(320, gt=0)

    # Deployment
    FRONTEND_URL: str = ""  # Production frontend URL, added to CORS automatically

    # CORS
    BACKEND_CORS_ORIGINS: list = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://localhost:8888",
    ]

    @model_validator(mode='after')
    def _normalize(self):
        """
        Clamp the yield trust threshold and register the frontend origin.

        YIELD_MIN_TENORS below 4 is raised to 4.
        """
        if self.YIELD_MIN_TENORS < 4:
            object.__setattr__(self, "YIELD_MIN_TENORS", 4)
        if self.FRONTEND_URL and self.FRONTEND_URL not in self.BACKEND_CORS_ORIGINS:
            self.BACKEND_CORS_ORIGINS.append(self.FRONTEND_URL)
        return self

    class Config:
        env_file = ".env"
        case_sensitive = True


@lru_cache()
def get_settings() -> Settings:
    return Settings()
