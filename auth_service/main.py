import logging
import time
from typing import Optional, Type, TypeVar

from fastapi import APIRouter, Depends, FastAPI, Header, HTTPException, Request, status
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from pydantic import BaseModel, ValidationError
from sqlalchemy.orm import Session

# Importaciones locales
from auth_service import schemas
from auth_service.config import Settings
from auth_service.db import build_engine, build_session_factory, get_db, init_db
from auth_service.errors import ApiError, InternalError, InvalidInputError, api_error_handler
from auth_service.service import AuthService, list_users
from auth_service.utils import Authenticated

# Configura logger
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# --- Métricas Prometheus ---
REQUEST_COUNT = Counter(
    "auth_requests_total",
    "Total requests processed by Auth Service",
    ["method", "endpoint", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "auth_request_latency_seconds",
    "Request latency in seconds for Auth Service",
    ["endpoint"]
)


# --- Middleware para Métricas ---
def route_label(request: Request) -> str:
    """Plantilla de la ruta resuelta; acota la cardinalidad de la etiqueta 'endpoint'."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def metrics_middleware(request: Request, call_next):
    start_time = time.time()
    response = None

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(f"Unhandled exception during request processing: {exc}", exc_info=True)
        response = JSONResponse(status_code=500, content={"error": "internal_error"})
    finally:
        latency = time.time() - start_time
        endpoint = route_label(request)
        final_status_code = getattr(response, 'status_code', 500)

        REQUEST_LATENCY.labels(endpoint=endpoint).observe(latency)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=endpoint,
            status_code=final_status_code
        ).inc()

    return response


# --- Dependencias ---
def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth


async def read_body(request: Request, schema: Type[SchemaT]) -> SchemaT:
    """Lee y valida el cuerpo JSON; cualquier fallo es 'invalid_input'."""
    try:
        body = await request.json()
    except ValueError:
        raise InvalidInputError()
    try:
        return schema.model_validate(body)
    except ValidationError:
        raise InvalidInputError()


router = APIRouter(prefix="/api")


@router.get("/health", response_model=schemas.HealthResponse, tags=["Monitoring"])
def health_check():
    """Performs a basic health check of the service."""
    return {"ok": True, "ts": int(time.time() * 1000)}


# --- Endpoints de API ---

@router.post("/auth/signup", response_model=schemas.SignupResponse, status_code=status.HTTP_201_CREATED, tags=["Authentication"])
async def signup(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Registra un usuario con email y contraseña y devuelve un token de 7 días.
    """
    payload = await read_body(request, schemas.SignupRequest)
    try:
        return auth.signup(db, payload.email, payload.password)
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during signup for email {payload.email}: {e}", exc_info=True)
        raise InternalError(str(e))


@router.post("/auth/login", response_model=schemas.LoginResponse, tags=["Authentication"])
async def login(
    request: Request,
    db: Session = Depends(get_db),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Autentica por email y contraseña (JSON).
    El token dura 30 días con 'remember' y 24 horas sin él.
    """
    payload = await read_body(request, schemas.LoginRequest)
    try:
        return auth.login(db, payload.email, payload.password, remember=bool(payload.remember))
    except ApiError:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login for {payload.email}: {e}", exc_info=True)
        raise InternalError(str(e))


@router.get("/auth/me", response_model=schemas.MeResponse, tags=["Authentication"])
def me(
    authorization: Optional[str] = Header(None),
    auth: AuthService = Depends(get_auth_service),
):
    """
    Devuelve el usuario del token Bearer, o {user: null}.
    La ausencia de sesión es un estado normal: siempre responde 200.
    """
    try:
        result = auth.authenticate(authorization)
    except Exception as e:
        logger.error(f"Unexpected error verifying session token: {e}", exc_info=True)
        return {"user": None}

    if isinstance(result, Authenticated):
        return {"user": {"id": result.user.id, "email": result.user.email}}
    return {"user": None}


@router.post("/auth/logout", response_model=schemas.OkResponse, tags=["Authentication"])
def logout():
    """Sin sesión en servidor: descartar el token es tarea del cliente."""
    return {"ok": True}


@router.get("/admin/users", tags=["Internal"])
def admin_list_users(request: Request, email: Optional[str] = None, db: Session = Depends(get_db)):
    """
    Lista usuarios para depuración (filtrable por email).
    Solo disponible con ENABLE_ADMIN_ENDPOINTS activo.
    """
    if not request.app.state.settings.enable_admin_endpoints:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not Found")
    try:
        users = list_users(db, email=email)
    except Exception as e:
        logger.error(f"Error listing users: {e}", exc_info=True)
        return JSONResponse(status_code=500, content={"ok": False, "error": str(e)})
    return schemas.AdminUsersResponse(
        users=[schemas.AdminUser.model_validate(user) for user in users]
    ).model_dump(mode="json")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Construye la aplicación con su motor de base de datos y su clave de firma."""
    settings = settings or Settings.from_env()

    engine = build_engine(settings.database_url)
    init_db(engine)

    app = FastAPI(
        title="Auth Service",
        description="Handles user signup, login, session lookup and logout.",
        version="1.0.0"
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = build_session_factory(engine)
    app.state.auth = AuthService(
        secret_key=settings.secret_key,
        signup_ttl=settings.signup_token_ttl,
        login_ttl=settings.login_token_ttl,
        remember_ttl=settings.remember_token_ttl,
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.middleware("http")(metrics_middleware)

    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        """Exposes application metrics for Prometheus."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    app.include_router(router)
    return app


app = create_app()
