"""Webhook store package exports the ASGI `app` for convenience.

This lets you run: `uvicorn webhook_store:app`
"""
from webhook_store.main import app, create_app

__all__ = ["app", "create_app"]
