"""Configuración del servicio de autenticación leída desde variables de entorno (.env)."""

import os
import logging
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

# Carga variables de entorno desde .env
load_dotenv()

logger = logging.getLogger(__name__)

INSECURE_DEFAULT_SECRET = "clave_secreta_insegura_por_defecto_cambiar_urgentemente"

SIGNUP_TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60
LOGIN_TOKEN_TTL_SECONDS = 24 * 60 * 60
REMEMBER_TOKEN_TTL_SECONDS = 30 * 24 * 60 * 60


def _env_flag(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _database_url_from_env() -> str:
    """
    Resuelve la URL de SQLAlchemy.
    DATABASE_URL tiene prioridad; si no existe pero están las credenciales DB_*,
    se arma la URL de MariaDB/MySQL. En otro caso se usa SQLite local.
    """
    url = os.getenv("DATABASE_URL")
    if url:
        return url

    db_vars = {name: os.getenv(name) for name in ("DB_USER", "DB_PASS", "DB_HOST", "DB_NAME")}
    if all(db_vars.values()):
        return f"mysql+pymysql://{db_vars['DB_USER']}:{db_vars['DB_PASS']}@{db_vars['DB_HOST']}/{db_vars['DB_NAME']}"

    missing = [name for name, value in db_vars.items() if not value]
    if len(missing) < len(db_vars):
        logger.error(f"Faltan variables de entorno para la base de datos: {', '.join(missing)}")
    return "sqlite:///./auth.db"


@dataclass(frozen=True)
class Settings:
    secret_key: str
    database_url: str
    signup_token_ttl: int = SIGNUP_TOKEN_TTL_SECONDS
    login_token_ttl: int = LOGIN_TOKEN_TTL_SECONDS
    remember_token_ttl: int = REMEMBER_TOKEN_TTL_SECONDS
    enable_admin_endpoints: bool = False

    @classmethod
    def from_env(cls, secret_key: Optional[str] = None, database_url: Optional[str] = None) -> "Settings":
        secret = secret_key or os.getenv("JWT_SECRET_KEY")
        if not secret:
            logger.warning("JWT_SECRET_KEY no está definida en las variables de entorno. Usando clave insegura por defecto para desarrollo.")
            secret = INSECURE_DEFAULT_SECRET

        return cls(
            secret_key=secret,
            database_url=database_url or _database_url_from_env(),
            signup_token_ttl=int(os.getenv("SIGNUP_TOKEN_TTL_SECONDS", SIGNUP_TOKEN_TTL_SECONDS)),
            login_token_ttl=int(os.getenv("LOGIN_TOKEN_TTL_SECONDS", LOGIN_TOKEN_TTL_SECONDS)),
            remember_token_ttl=int(os.getenv("REMEMBER_TOKEN_TTL_SECONDS", REMEMBER_TOKEN_TTL_SECONDS)),
            enable_admin_endpoints=_env_flag("ENABLE_ADMIN_ENDPOINTS"),
        )
