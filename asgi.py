"""Module-level app for ASGI servers: ``uvicorn asgi:app``."""

from app import create_app

app = create_app()
