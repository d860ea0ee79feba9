"""Errores de la API con un código estable en el campo 'error' de la respuesta."""

from typing import Optional

from fastapi import Request, status
from fastapi.responses import JSONResponse


class ApiError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "internal_error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.code)
        self.message = message

    def to_dict(self) -> dict:
        payload = {"error": self.code}
        if self.message:
            payload["message"] = self.message
        return payload


class InvalidInputError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_input"


class EmailTakenError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    code = "email_taken"


class InvalidCredentialsError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "invalid_credentials"


class InternalError(ApiError):
    pass


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())
