"""Servicio de autenticación: signup, login, sesión y logout con tokens firmados."""
