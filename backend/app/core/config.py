# backend/app/core/config.py

from __future__ import annotations

import logging
from typing import List
from urllib.parse import urlsplit, urlunsplit, parse_qsl, urlencode

from pydantic_settings import BaseSettings, SettingsConfigDict


def _strip_asyncpg_unsupported_params(url: str) -> str:
    """
    asyncpg does NOT accept sslmode or channel_binding as connect kwargs.
    If these appear in the URL query, SQLAlchemy can end up passing them to
    asyncpg.connect(), causing:
      TypeError: connect() got an unexpected keyword argument 'sslmode'
    """
    parts = urlsplit(url)
    if not parts.query:
        return url

    params = parse_qsl(parts.query, keep_blank_values=True)
    filtered = [(k, v) for (k, v) in params if k not in {"sslmode", "channel_binding"}]
    new_query = urlencode(filtered, doseq=True)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, new_query, parts.fragment))


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # -----------------------------
    # Environment
    # -----------------------------
    # Use: development | staging | production
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"

    # -----------------------------
    # DB
    # -----------------------------
    DATABASE_URL_ASYNC: str
    # only alembic needs the sync URL
    DATABASE_URL_SYNC: str | None = None

    # -----------------------------
    # HTTP
    # -----------------------------
    CORS_ORIGINS: List[str] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # -----------------------------
    # Commissions
    # -----------------------------
    # Sale statuses that mean "not final yet": commissions are created on_hold.
    COMMISSION_HOLD_SALE_STATUSES: List[str] = ["Pendente", "pending", "open"]
    # When a sale is cancelled, also cancel its on_hold commissions.
    COMMISSION_CANCEL_ON_HOLD: bool = False

    @property
    def DATABASE_URL_ASYNC_CLEAN(self) -> str:
        return _strip_asyncpg_unsupported_params(self.DATABASE_URL_ASYNC)

    @property
    def hold_sale_statuses(self) -> frozenset[str]:
        return frozenset(s.strip().lower() for s in self.COMMISSION_HOLD_SALE_STATUSES if s.strip())

    def model_post_init(self, __context) -> None:  # pydantic v2 hook
        level = (self.LOG_LEVEL or "").strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unsupported LOG_LEVEL={self.LOG_LEVEL!r}.")
        self.LOG_LEVEL = level

        if not self.hold_sale_statuses:
            raise ValueError("COMMISSION_HOLD_SALE_STATUSES must list at least one sale status.")


settings = Settings()
