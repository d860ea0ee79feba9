"""Proceso web. Reenvía todas las rutas /api/* al servicio de autenticación."""

import logging
import time
import uuid
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST

from web_service.config import Settings

# Configura logger
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)

PROXY_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]
BODYLESS_METHODS = {"GET", "HEAD"}
# Cabeceras que httpx recalcula para la petición reenviada
DROPPED_REQUEST_HEADERS = {"host", "content-length"}
# Cabeceras de la respuesta del API que no se copian (hop-by-hop o recalculadas)
DROPPED_RESPONSE_HEADERS = {
    "connection", "keep-alive", "proxy-authenticate", "proxy-authorization", "te",
    "trailer", "transfer-encoding", "upgrade", "content-length", "content-encoding", "content-type",
}

# --- Métricas Prometheus ---
REQUEST_COUNT = Counter(
    "web_requests_total",
    "Total requests processed by the web process",
    ["method", "endpoint", "status_code"]
)
REQUEST_LATENCY = Histogram(
    "web_request_latency_seconds",
    "Request latency in seconds for the web process",
    ["endpoint"]
)


def route_label(request: Request) -> str:
    """Plantilla de la ruta resuelta (p. ej. '/api/{path:path}'), no la ruta concreta."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


async def metrics_middleware(request: Request, call_next):
    """Middleware de métricas; captura excepciones no controladas."""
    start_time = time.time()
    response = None

    try:
        response = await call_next(request)
    except Exception as exc:
        logger.error(f"Middleware error inesperado en {request.url.path}: {exc}", exc_info=True)
        response = JSONResponse(status_code=500, content={"error": "internal_error"})
    finally:
        latency = time.time() - start_time
        REQUEST_LATENCY.labels(endpoint=route_label(request)).observe(latency)
        REQUEST_COUNT.labels(
            method=request.method,
            endpoint=route_label(request),
            status_code=getattr(response, 'status_code', 500)
        ).inc()

    return response


# --- Funciones Auxiliares para Proxy ---
async def forward_request(request: Request, client: httpx.AsyncClient, base_url: str) -> Response:
    """Reenvía la petición tal cual (método, ruta, query, cuerpo) y devuelve la respuesta del API."""
    target_url = f"{base_url}{request.url.path}"
    if request.url.query:
        target_url = f"{target_url}?{request.url.query}"

    headers = {
        name: value for name, value in request.headers.items()
        if name.lower() not in DROPPED_REQUEST_HEADERS
    }
    trace_id = uuid.uuid4().hex[:8]
    headers["x-trace-id"] = trace_id

    body = None if request.method in BODYLESS_METHODS else await request.body()

    logger.info(f"[WEB:{trace_id}] proxy -> {request.method} {request.url.path} to API service")
    try:
        upstream = await client.request(request.method, target_url, headers=headers, content=body)
    except httpx.RequestError as e:
        logger.error(f"[WEB:{trace_id}] API proxy error: {e}", exc_info=True)
        return JSONResponse(
            status_code=502,
            content={"error": "api_connection_error", "message": "Could not connect to API service"},
        )
    logger.info(f"[WEB:{trace_id}] proxy <- {upstream.status_code} from API service")

    response = Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type"),
    )
    for name, value in upstream.headers.multi_items():
        if name.lower() not in DROPPED_RESPONSE_HEADERS:
            response.headers.append(name, value)
    return response


def create_app(settings: Optional[Settings] = None, client: Optional[httpx.AsyncClient] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    app = FastAPI(
        title="Web",
        description="Punto de entrada web; reenvía /api/* al servicio de autenticación.",
        version="1.0.0"
    )
    app.state.settings = settings
    # Cliente HTTP asíncrono reutilizable
    app.state.client = client or httpx.AsyncClient(timeout=settings.timeout_seconds)

    app.middleware("http")(metrics_middleware)

    # --- Endpoints de Salud y Métricas ---
    @app.get("/metrics", tags=["Monitoring"])
    def metrics():
        """Expone métricas de la aplicación para Prometheus."""
        return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)

    @app.get("/health", tags=["Monitoring"])
    def health_check():
        """Verifica la salud básica del proceso web."""
        return {"status": "ok", "service": "web_service"}

    @app.api_route("/api/{path:path}", methods=PROXY_METHODS, tags=["Proxy"])
    async def proxy_api(request: Request, path: str):
        return await forward_request(request, request.app.state.client, settings.api_service_url)

    # --- Manejador de Cierre ---
    @app.on_event("shutdown")
    async def shutdown_event():
        """Cierra el cliente HTTP al apagar la aplicación."""
        await app.state.client.aclose()

    return app


app = create_app()
