from __future__ import annotations

from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", case_sensitive=False)

    currency: str = Field("ALGO", alias="SPLITLEDGER_CURRENCY")
    # smallest unit handed out by an equal split (1 microAlgo)
    amount_quantum: Decimal = Field(Decimal("0.000001"), alias="SPLITLEDGER_AMOUNT_QUANTUM", gt=0)
    share_tolerance: Decimal = Field(Decimal("0.000001"), alias="SPLITLEDGER_SHARE_TOLERANCE", ge=0)
    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
