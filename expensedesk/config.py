"""
Application settings.
"""
from pydantic_settings import BaseSettings
from typing import List, Optional


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = "sqlite:///./data/expensedesk.db"

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # File storage
    DATA_DIR: str = "./data"

    # Demo data
    SEED_DEMO_DATA: bool = True

    # Reports
    CURRENCY_SYMBOL: str = "$"

    # Mock session (no real authentication)
    MOCK_PASSWORD: str = "password"
    MOCK_TOKEN: str = "mock-jwt-token"

    # Text extraction
    TESSERACT_CMD: Optional[str] = None
    OCR_LANG: str = "eng"
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
