import pytest
from fastapi.testclient import TestClient

from webhook_store.main import create_app
from webhook_store.settings import Settings
from webhook_store.store import WebhookStore


@pytest.fixture
def settings():
    return Settings(max_size=5)


@pytest.fixture
def store(settings):
    return WebhookStore(max_size=settings.max_size)


@pytest.fixture
def client(store, settings):
    app = create_app(store=store, settings=settings)
    with TestClient(app) as test_client:
        yield test_client
