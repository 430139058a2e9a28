from typing import List

from dotenv import load_dotenv
from pydantic import BaseModel
import os

# Load .env before reading the environment
load_dotenv()


def _split_csv(value: str) -> List[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


class Settings(BaseModel):
    environment: str = os.getenv("ENVIRONMENT", "development")
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./finance_tracker.db")
    database_echo: bool = os.getenv("DATABASE_ECHO", "false").lower() == "true"
    jwt_secret: str = os.getenv("JWT_SECRET", "change-me")
    jwt_algorithm: str = os.getenv("JWT_ALGORITHM", "HS256")
    access_token_expire_minutes: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    default_base_currency: str = os.getenv("DEFAULT_BASE_CURRENCY", "THB")
    exchange_rate_api_url: str = os.getenv(
        "EXCHANGE_RATE_API_URL", "https://api.frankfurter.app/latest"
    )
    exchange_rate_timeout: float = float(os.getenv("EXCHANGE_RATE_TIMEOUT", "10"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    log_format: str = os.getenv("LOG_FORMAT", "text")
    cors_origins: List[str] = _split_csv(
        os.getenv(
            "CORS_ORIGINS",
            "http://localhost:3000,http://127.0.0.1:3000,http://localhost:5173,http://127.0.0.1:5173",
        )
    )


# Global settings instance
settings = Settings()
