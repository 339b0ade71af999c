from pydantic_settings import BaseSettings
from dotenv import load_dotenv
from typing import List

load_dotenv()

class Settings(BaseSettings):
    DATABASE_URL: str
    DB_ECHO: bool = False

    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 1440  # 24h sessions

    # Redis settings
    REDIS_URL: str = "redis://localhost:6379/0"
    CACHE_TTL_SECONDS: int = 1800

    PROJECT_NAME: str = "Expensio API"
    PROJECT_VERSION: str = "1.0.0"
    PROJECT_DESCRIPTION: str = "Travel expense tracking with shared trip budgets"
    BACKEND_CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5173",
    ]

    PASSWORD_MIN_LENGTH: int = 8
    LOG_LEVEL: str = "INFO"
    APP_NAME: str = "Expensio"

    class Config:
        env_file = ".env"


settings = Settings()
