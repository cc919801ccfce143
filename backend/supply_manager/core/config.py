"""Application configuration loaded from environment variables."""
import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()

BASE_DIR = Path(__file__).resolve().parent.parent.parent


class Settings:
    # Database URL (SQLite locally, any SQLAlchemy URL for the hosted database)
    DATABASE_URL: str = os.getenv(
        "DATABASE_URL", f"sqlite:///{BASE_DIR / 'supply_manager.db'}"
    )

    # API server
    API_HOST: str = os.getenv("API_HOST", "0.0.0.0")
    API_PORT: int = int(os.getenv("API_PORT", "8000"))

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    LOG_FILE: str = os.getenv("LOG_FILE", str(BASE_DIR / "logs" / "app.log"))
    RECONCILE_LOG_FILE: str = os.getenv(
        "RECONCILE_LOG_FILE", str(BASE_DIR / "logs" / "reconcile.log")
    )

    # CORS
    CORS_ORIGINS: list[str] = [
        o.strip()
        for o in os.getenv(
            "CORS_ORIGINS", "http://localhost:5173,http://localhost:3000"
        ).split(",")
    ]

    # Order defaults applied when a storefront order is converted
    DEFAULT_TAX_RATE: float = float(os.getenv("DEFAULT_TAX_RATE", "13"))
    DEFAULT_CUSTOMER_TYPE: str = os.getenv("DEFAULT_CUSTOMER_TYPE", "Retail")

    # Units whose stock is also tracked as pallets + layers
    PALLET_UNITS: frozenset[str] = frozenset(
        u.strip()
        for u in os.getenv("PALLET_UNITS", "Square Feet,Linear Feet").split(",")
        if u.strip()
    )

    def __init__(self):
        # Ensure log directories exist
        Path(self.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)
        Path(self.RECONCILE_LOG_FILE).parent.mkdir(parents=True, exist_ok=True)


settings = Settings()
