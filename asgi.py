"""
asgi.py -- Application assembly for the bloglist API.

This is the only place the process-wide Settings are loaded for the server.
They are built once here and passed into create_app(); nothing downstream
looks them up again.

Run with:  uvicorn asgi:app --reload
"""

from api.main import create_app
from core.config import get_settings

app = create_app(get_settings())
