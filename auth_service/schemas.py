"""Modelos Pydantic (schemas) para validación de datos de entrada/salida en el Servicio de Autenticación."""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr

# --- Schemas de Entrada ---

class SignupRequest(BaseModel):
    """Schema para los datos requeridos al crear un nuevo usuario."""
    email: StrictStr = Field(..., min_length=1)
    password: StrictStr = Field(..., min_length=1)


class LoginRequest(BaseModel):
    """Schema de login; 'remember' se evalúa por veracidad (truthy)."""
    email: StrictStr = Field(..., min_length=1)
    password: StrictStr = Field(..., min_length=1)
    remember: Any = None


# --- Schemas de Respuesta ---

class SignupResponse(BaseModel):
    id: int
    email: str
    token: str


class LoginResponse(BaseModel):
    id: int
    email: str
    token: str
    expiresIn: int


class UserInfo(BaseModel):
    id: int
    email: str

    model_config = ConfigDict(from_attributes=True)


class MeResponse(BaseModel):
    user: Optional[UserInfo] = None


class OkResponse(BaseModel):
    ok: bool = True


class HealthResponse(BaseModel):
    ok: bool = True
    ts: int


class AdminUser(BaseModel):
    id: int
    email: str
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class AdminUsersResponse(BaseModel):
    ok: bool = True
    users: List[AdminUser]
