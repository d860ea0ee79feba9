"""Configuración de la conexión a la base de datos usando SQLAlchemy."""

import logging
from sqlalchemy import create_engine, exc
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool
from fastapi import Request

logger = logging.getLogger(__name__)

# Clase base para los modelos declarativos (User hereda de aquí)
Base = declarative_base()


def build_engine(database_url: str) -> Engine:
    """
    Crea el motor (Engine) de SQLAlchemy para la URL dada.
    pool_pre_ping=True ayuda a manejar conexiones inactivas en el pool.
    """
    kwargs = {"pool_pre_ping": True}
    if database_url.startswith("sqlite"):
        kwargs["connect_args"] = {"check_same_thread": False}
        # Una base en memoria debe compartir una única conexión entre hilos
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
    return create_engine(database_url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> None:
    """Crea las tablas si no existen."""
    # Registra los modelos en Base.metadata
    from auth_service import models  # noqa: F401

    try:
        Base.metadata.create_all(bind=engine)
        logger.info("Database tables verified/created.")
    except exc.SQLAlchemyError as e:
        logger.error(f"Error initializing database: {e}", exc_info=True)


# --- Función de Dependencia para FastAPI ---
def get_db(request: Request):
    """
    Generador de dependencia de FastAPI para obtener una sesión de base de datos.
    Cada petición usa su propia sesión; se revierte ante errores y siempre se cierra.
    """
    db: Session = request.app.state.session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
