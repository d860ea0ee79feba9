"""Configuración del proceso web leída desde variables de entorno (.env)."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass(frozen=True)
class Settings:
    api_service_url: str
    timeout_seconds: float = 15.0

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            api_service_url=os.getenv("API_SERVICE_URL", "http://localhost:8001").rstrip("/"),
            timeout_seconds=float(os.getenv("API_TIMEOUT_SECONDS", 15.0)),
        )
