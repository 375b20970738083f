"""
ASGI entry point.

    uvicorn portal_auth.main:app
"""

from .api.main import create_app

app = create_app()
