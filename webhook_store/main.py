import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from webhook_store.models import (
    ClearResult,
    HealthStatus,
    WebhookList,
    WebhookReceipt,
)
from webhook_store.settings import Settings, get_settings
from webhook_store.store import WebhookStore
from webhook_store.utils import (
    decode_payload,
    model_to_dict,
    parse_webhook_id,
    webhook_event,
)

logging.basicConfig(level=get_settings().log_level.upper())
logger = logging.getLogger("webhook-store")

ENDPOINTS = (
    ("POST", "/webhook", "Receive webhooks"),
    ("GET", "/webhooks", "Get all webhooks"),
    ("GET", "/webhooks/{id}", "Get webhook by ID"),
    ("ANY", "/webhooks/clear", "Clear all webhooks"),
    ("GET", "/health", "Health check"),
)


def get_store(request: Request) -> WebhookStore:
    return request.app.state.store


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: Settings = app.state.settings
    store: WebhookStore = app.state.store
    logger.info("Webhook server listening on %s:%d", settings.host, settings.port)
    if store.bounded:
        logger.info(
            "Keeping the %d most recent webhooks (newest listed first)",
            store.max_size,
        )
    else:
        logger.info("Keeping all webhooks (listed in arrival order)")
    for method, path, summary in ENDPOINTS:
        logger.info("  %s %s - %s", method, path, summary)
    yield


def create_app(
    store: Optional[WebhookStore] = None, settings: Optional[Settings] = None
) -> FastAPI:
    """Build the application around ``store``.

    Without arguments the store is sized from the environment settings.
    """
    settings = settings or get_settings()
    if store is None:
        store = WebhookStore(max_size=settings.max_size)

    app = FastAPI(title="Webhook Store", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store

    @app.post("/webhook", status_code=200)
    async def receive_webhook(
        request: Request,
        store: WebhookStore = Depends(get_store),
        settings: Settings = Depends(get_app_settings),
    ):
        """Store any JSON document sent to the service."""
        raw = await request.body()
        try:
            payload = decode_payload(raw)
            stored = await store.put(payload)
        except (ValueError, ValidationError):
            raise HTTPException(status_code=400, detail="Bad request")

        logger.info("Stored webhook with ID: %d", stored.id)
        typed = webhook_event(payload)
        if typed.event:
            logger.info("Event: %s", typed.event)
        if typed.timestamp:
            logger.info("Timestamp: %d", typed.timestamp)
        logger.debug("Full payload: %r", payload)

        if settings.echo_stored:
            return JSONResponse(model_to_dict(stored))
        return JSONResponse(model_to_dict(WebhookReceipt(id=stored.id)))

    @app.get("/webhooks")
    async def list_webhooks(store: WebhookStore = Depends(get_store)):
        webhooks = await store.get_all()
        return JSONResponse(
            model_to_dict(WebhookList(count=len(webhooks), webhooks=webhooks))
        )

    # Registered before /webhooks/{entry_id} so "clear" is never read as an ID.
    @app.api_route(
        "/webhooks/clear",
        methods=["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    )
    async def clear_webhooks(store: WebhookStore = Depends(get_store)):
        cleared = await store.clear()
        logger.info("Cleared all webhooks. Total cleared: %d", cleared)
        return JSONResponse(model_to_dict(ClearResult(cleared_count=cleared)))

    # Without this route "/webhooks/" would be redirected to the list.
    @app.get("/webhooks/")
    async def get_webhook_without_id():
        raise HTTPException(status_code=404, detail="Webhook not found")

    @app.get("/webhooks/{entry_id}")
    async def get_webhook(entry_id: str, store: WebhookStore = Depends(get_store)):
        webhook_id = parse_webhook_id(entry_id)
        if webhook_id is None:
            raise HTTPException(status_code=400, detail="Invalid webhook ID")
        match = await store.get_by_id(webhook_id)
        if match is None:
            raise HTTPException(status_code=404, detail="Webhook not found")
        return JSONResponse(model_to_dict(match))

    @app.get("/health")
    async def health(store: WebhookStore = Depends(get_store)):
        return JSONResponse(
            model_to_dict(
                HealthStatus(received=await store.count(), max_size=store.max_size)
            )
        )

    return app


app = create_app()
