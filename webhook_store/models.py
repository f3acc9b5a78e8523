from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, JsonValue


class StoredWebhook(BaseModel):
    id: int
    payload: JsonValue
    received: datetime

    model_config = ConfigDict(frozen=True)


class WebhookEvent(BaseModel):
    """Typed view of payloads shaped like ``{"event", "data", "timestamp"}``.

    Only used to enrich log lines. Fields that are missing or of the wrong
    type are left as None.
    """

    event: Optional[str] = None
    data: Any = None
    timestamp: Optional[int] = None


class WebhookReceipt(BaseModel):
    message: str = "Webhook received and stored successfully"
    id: int


class WebhookList(BaseModel):
    count: int
    webhooks: List[StoredWebhook]


class ClearResult(BaseModel):
    message: str = "All webhooks cleared successfully"
    cleared_count: int


class HealthStatus(BaseModel):
    status: str = "ok"
    received: int
    max_size: Optional[int]
