# shopstock/core/config.py

import os
from dotenv import load_dotenv

# Looks for a .env in the working directory (and its parents)
load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings:
    PROJECT_NAME: str = "ShopStock API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./shopstock.db")
    DB_ECHO: bool = _env_bool("DB_ECHO")

    # JWT (change SECRET_KEY in production!)
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change-me-shopstock-dev-secret")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))
    REFRESH_TOKEN_EXPIRE_DAYS: int = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

    # Stock alerts
    DEFAULT_ALERT_THRESHOLD: int = int(os.getenv("DEFAULT_ALERT_THRESHOLD", "10"))
    EXPIRY_WINDOW_DAYS: int = int(os.getenv("EXPIRY_WINDOW_DAYS", "7"))

    # Ledger policies: "reject" | "clamp" and "fail" | "skip"
    INSUFFICIENT_STOCK_POLICY: str = os.getenv("INSUFFICIENT_STOCK_POLICY", "reject").lower()
    MISSING_PRODUCT_POLICY: str = os.getenv("MISSING_PRODUCT_POLICY", "fail").lower()

    # Owner account created on first start
    DEFAULT_ADMIN_USERNAME: str = os.getenv("DEFAULT_ADMIN_USERNAME", "admin")
    DEFAULT_ADMIN_PASSWORD: str = os.getenv("DEFAULT_ADMIN_PASSWORD", "password")

    # Logging
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    LOG_FILE: str = os.getenv("LOG_FILE", "")

    def __init__(self):
        if self.INSUFFICIENT_STOCK_POLICY not in ("reject", "clamp"):
            raise ValueError(
                f"INSUFFICIENT_STOCK_POLICY must be 'reject' or 'clamp', got {self.INSUFFICIENT_STOCK_POLICY!r}"
            )
        if self.MISSING_PRODUCT_POLICY not in ("fail", "skip"):
            raise ValueError(
                f"MISSING_PRODUCT_POLICY must be 'fail' or 'skip', got {self.MISSING_PRODUCT_POLICY!r}"
            )


settings = Settings()
