"""Funciones de utilidad para el servicio de autenticación: hash de contraseñas y manejo de JWT."""

import hashlib
import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

from jose import JWTError, jwt

# Configuración del logger
logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
SALT_BYTES = 16
HASH_DELIMITER = "$"
BEARER_PREFIX = "Bearer "


# --- Utilidades para Contraseñas ---

def _digest(salt: bytes, password: str) -> str:
    return hashlib.sha256(salt + password.encode("utf-8", "surrogatepass")).hexdigest()


def hash_password(password: str) -> str:
    """
    Genera el hash de una contraseña con una sal aleatoria de 16 bytes.
    Devuelve "<salt-hex>$<digest-hex>"; el delimitador no es hexadecimal.
    """
    salt = secrets.token_bytes(SALT_BYTES)
    return f"{salt.hex()}{HASH_DELIMITER}{_digest(salt, password)}"


def verify_password(plain_password: str, stored_hash: str) -> bool:
    """Verifica una contraseña plana contra un hash almacenado. Un hash corrupto devuelve False."""
    salt_hex, _, digest_hex = (stored_hash or "").partition(HASH_DELIMITER)
    if not salt_hex or not digest_hex:
        return False
    try:
        salt = bytes.fromhex(salt_hex)
    except ValueError:
        logger.warning("Hash de contraseña almacenado con sal inválida.")
        return False
    computed = _digest(salt, plain_password).encode("ascii")
    return hmac.compare_digest(computed, digest_hex.encode("utf-8", "surrogatepass"))


# --- Utilidades para Tokens JWT ---

@dataclass(frozen=True)
class SessionUser:
    id: int
    email: str


@dataclass(frozen=True)
class Authenticated:
    user: SessionUser


@dataclass(frozen=True)
class Unauthenticated:
    pass


AuthResult = Union[Authenticated, Unauthenticated]


def issue_token(user_id: int, email: str, ttl: timedelta, secret_key: str) -> str:
    """
    Genera un JWT con sub (id como string), email, iat y exp = iat + ttl.

    Args:
        user_id: ID del usuario.
        email: Email del usuario.
        ttl: Tiempo de vida del token.
        secret_key: Clave compartida para firmar.

    Returns:
        String del JWT codificado.
    """
    issued_at = datetime.now(timezone.utc)
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "iat": int(issued_at.timestamp()),
        "exp": int((issued_at + ttl).timestamp()),
    }
    return jwt.encode(to_encode, secret_key, algorithm=ALGORITHM)


def verify_token(token: str, secret_key: str) -> Optional[SessionUser]:
    """
    Decodifica y valida un JWT (firma, algoritmo y expiración).

    Returns:
        El usuario del token si es válido; en caso contrario, None.
    """
    try:
        payload = jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.info(f"Fallo en decodificación de token: {e}")
        return None
    except Exception as e: # Captura cualquier otro error inesperado
        logger.error(f"Error inesperado durante decodificación de token: {e}", exc_info=True)
        return None

    sub = payload.get("sub")
    email = payload.get("email")
    if not isinstance(sub, str) or not (sub.isascii() and sub.isdigit()) or not isinstance(email, str):
        logger.warning("Token con firma válida pero sin 'sub' numérico o 'email'.")
        return None
    return SessionUser(id=int(sub), email=email)


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    """Extrae el token de la cabecera 'Authorization: Bearer <token>'."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def authenticate_header(authorization: Optional[str], secret_key: str) -> AuthResult:
    """Token ausente e inválido se resuelven igual: Unauthenticated."""
    token = extract_bearer_token(authorization)
    if token is None:
        return Unauthenticated()
    user = verify_token(token, secret_key)
    if user is None:
        return Unauthenticated()
    return Authenticated(user=user)
