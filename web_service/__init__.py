"""Proceso web: reenvía /api/* al servicio de autenticación."""
