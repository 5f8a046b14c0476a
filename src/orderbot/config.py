from __future__ import annotations

import os
from dataclasses import dataclass, field


def _split_origins(raw_value: str) -> tuple[str, ...]:
    return tuple(origin.strip() for origin in raw_value.split(",") if origin.strip())


@dataclass(frozen=True)
class Settings:
    database_url: str | None = None
    redis_url: str | None = None
    log_level: str = "INFO"
    app_env: str = "dev"
    cors_allow_origins: tuple[str, ...] = field(default_factory=tuple)
    default_currency: str = "ARS"
    promotions_cache_ttl_seconds: int = 60
    otel_service_name: str = "orderbot-backend"
    otel_exporter_otlp_endpoint: str | None = None

    def __post_init__(self) -> None:
        if self.promotions_cache_ttl_seconds < 0:
            raise ValueError("PROMOTIONS_CACHE_TTL_SECONDS must be >= 0")
        if len(self.default_currency) != 3 or not self.default_currency.isupper():
            raise ValueError("DEFAULT_CURRENCY must be a 3-letter uppercase code")

    @classmethod
    def from_env(cls) -> Settings:
        return cls(
            database_url=os.getenv("DATABASE_URL"),
            redis_url=os.getenv("REDIS_URL"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            app_env=os.getenv("APP_ENV", "dev").lower(),
            cors_allow_origins=_split_origins(
                os.getenv("CORS_ALLOW_ORIGINS", "https://your-prod-domain.com")
            ),
            default_currency=os.getenv("DEFAULT_CURRENCY", "ARS").strip().upper(),
            promotions_cache_ttl_seconds=int(os.getenv("PROMOTIONS_CACHE_TTL_SECONDS", "60")),
            otel_service_name=os.getenv("OTEL_SERVICE_NAME", "orderbot-backend"),
            otel_exporter_otlp_endpoint=os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT"),
        )

    def require_database_url(self) -> str:
        if not self.database_url:
            raise RuntimeError("DATABASE_URL is not set")
        return self.database_url

    def allowed_origins(self) -> list[str]:
        # dev/test: unblock everything (no credentials allowed)
        if self.app_env in {"dev", "test"}:
            return ["*"]
        return list(self.cors_allow_origins)
