from pydantic_settings import BaseSettings
from typing import List, Optional
from decimal import Decimal
from pathlib import Path

# Find .env file - check bank_portal/ directory first, then project root
BASE_DIR = Path(__file__).resolve().parent.parent.parent
APP_ENV = BASE_DIR / "bank_portal" / ".env"
ROOT_ENV = BASE_DIR / ".env"

# Use bank_portal/.env if it exists, otherwise try root .env
env_file = str(APP_ENV) if APP_ENV.exists() else (str(ROOT_ENV) if ROOT_ENV.exists() else ".env")


class Settings(BaseSettings):
    # Database
    DATABASE_URL: str = f"sqlite:///{BASE_DIR / 'bank_portal.db'}"
    DB_ISOLATION_LEVEL: Optional[str] = None  # e.g. "SERIALIZABLE" on PostgreSQL

    # Organisation
    ORGANISATION_NAME: str = "My Organisation"

    # Smart distribution waterfall
    DEVELOPMENT_FEE: Decimal = Decimal("20")
    BASE_DEPOSIT: Decimal = Decimal("500")

    # Pending deposit suggestions (base deposit + development fee, late penalty per missed month)
    MONTHLY_DUE: Decimal = Decimal("520")
    LATE_DEPOSIT_PENALTY: Decimal = Decimal("50")

    # Listing
    DEFAULT_PAGE_SIZE: int = 20

    # CORS
    CORS_ORIGINS: List[str] = ["http://localhost:5173", "http://127.0.0.1:5173"]

    # Application
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = env_file
        case_sensitive = True


settings = Settings()
