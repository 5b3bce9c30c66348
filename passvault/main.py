# passvault/main.py
# Entry point: uvicorn passvault.main:app
from passvault.app.main import app  # noqa: F401
