"""Define el modelo de la tabla 'users' usando SQLAlchemy ORM."""

from sqlalchemy import Column, DateTime, Integer, String, func

from auth_service.db import Base


class User(Base):
    """
    Modelo SQLAlchemy que representa la tabla 'users' en la base de datos.
    Almacena la información de autenticación de los usuarios.
    """
    __tablename__ = "users"

    # Clave primaria autoincremental, asignada por la base al insertar
    id = Column(Integer, primary_key=True, index=True)

    # Email tal como lo envió el usuario (sin normalizar); único a nivel de tabla
    email = Column(String(255), unique=True, index=True, nullable=False)

    # Formato "<salt-hex>$<digest-hex>", ver utils.hash_password
    password_hash = Column(String(255), nullable=False)

    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)
