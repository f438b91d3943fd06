"""Application configuration loaded from the environment (and a .env file)"""
import os
from decimal import Decimal
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field

load_dotenv()


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Settings(BaseModel):
    """Runtime settings"""
    secret_key: str = "change-me-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = Field(default=30, ge=1)

    default_currency: str = "USD"
    tax_rate: Decimal = Field(default=Decimal("0.12"), ge=0)
    booking_fee: Decimal = Field(default=Decimal("25.00"), ge=0)

    store_backend: str = "memory"
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    seed_demo_data: bool = True

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            secret_key=os.getenv("SECRET_KEY", defaults.secret_key),
            jwt_algorithm=os.getenv("JWT_ALGORITHM", defaults.jwt_algorithm),
            access_token_expire_minutes=int(
                os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", defaults.access_token_expire_minutes)
            ),
            default_currency=os.getenv("DEFAULT_CURRENCY", defaults.default_currency),
            tax_rate=Decimal(os.getenv("TAX_RATE", str(defaults.tax_rate))),
            booking_fee=Decimal(os.getenv("BOOKING_FEE", str(defaults.booking_fee))),
            store_backend=os.getenv("STORE_BACKEND", defaults.store_backend).lower(),
            supabase_url=os.getenv("SUPABASE_URL"),
            supabase_key=os.getenv("SUPABASE_KEY"),
            seed_demo_data=_flag(os.getenv("SEED_DEMO_DATA"), defaults.seed_demo_data),
            log_level=os.getenv("LOG_LEVEL", defaults.log_level).upper(),
        )


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()
