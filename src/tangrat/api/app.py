"""ASGI entry point: uvicorn tangrat.api.app:app"""

from .factory import create_app

app = create_app()
