from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any

from dotenv import load_dotenv

# Carrega o .env da raiz do projeto
load_dotenv()

_TRUTHY = {"1", "true", "yes", "on"}

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./jwt_pizza.db")
ENV = os.getenv("ENV", "dev")
ENV_NORMALIZED = ENV.lower()
IS_DEV = ENV_NORMALIZED in {"dev", "development", "local"}
IS_PROD = ENV_NORMALIZED in {"prod", "production"}
APP_VERSION = os.getenv("APP_VERSION", "1.0.0")

# CORS
_cors_env = os.getenv("CORS_ORIGINS", "")
CORS_ORIGINS = [origin.strip() for origin in _cors_env.split(",") if origin.strip() and origin.strip() != "*"]

if not CORS_ORIGINS and IS_DEV:
    CORS_ORIGINS = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

# Auth (JWT)
JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
# 0 desliga o claim "exp": a validade do token fica a cargo da tabela auth
JWT_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", "0"))

# Pizza factory
FACTORY_URL = os.getenv("FACTORY_URL", "https://pizza-factory.cs329.click").rstrip("/")
FACTORY_API_KEY = os.getenv("FACTORY_API_KEY", "")
FACTORY_TIMEOUT_SECONDS = float(os.getenv("FACTORY_TIMEOUT_SECONDS", "10"))

# Paginação do histórico de pedidos
LIST_PER_PAGE = int(os.getenv("LIST_PER_PAGE", "10"))

# Admin inicial
DEFAULT_ADMIN_EMAIL = os.getenv("DEFAULT_ADMIN_EMAIL", "a@jwt.com").strip()
DEFAULT_ADMIN_NAME = os.getenv("DEFAULT_ADMIN_NAME", "常用名字").strip()
DEFAULT_ADMIN_PASSWORD = os.getenv("DEFAULT_ADMIN_PASSWORD", "").strip()

CREATE_TABLES_ON_STARTUP = os.getenv(
    "CREATE_TABLES_ON_STARTUP",
    "1" if DATABASE_URL.startswith("sqlite") else "0",
).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    database_url: str = DATABASE_URL
    jwt_secret_key: str = JWT_SECRET_KEY
    jwt_algorithm: str = JWT_ALGORITHM
    jwt_expire_minutes: int = JWT_EXPIRE_MINUTES
    factory_url: str = FACTORY_URL
    factory_api_key: str = FACTORY_API_KEY
    factory_timeout_seconds: float = FACTORY_TIMEOUT_SECONDS
    list_per_page: int = LIST_PER_PAGE
    cors_origins: list[str] = field(default_factory=lambda: list(CORS_ORIGINS))
    default_admin_email: str = DEFAULT_ADMIN_EMAIL
    default_admin_name: str = DEFAULT_ADMIN_NAME
    default_admin_password: str = DEFAULT_ADMIN_PASSWORD
    create_tables_on_startup: bool = CREATE_TABLES_ON_STARTUP
    app_version: str = APP_VERSION

    def with_overrides(self, **overrides: Any) -> "Settings":
        return replace(self, **overrides)


def load_settings() -> Settings:
    settings = Settings()
    if not settings.jwt_secret_key:
        if IS_PROD:
            raise RuntimeError("JWT_SECRET_KEY não configurado.")
        settings = settings.with_overrides(jwt_secret_key="dev-only-jwt-secret")
    return settings
