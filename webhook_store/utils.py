import json
import re
from typing import Any, Optional

from webhook_store.models import WebhookEvent

# Deepest array/object nesting accepted in a payload
MAX_NESTING = 128

_WEBHOOK_ID_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def model_to_dict(m: Any) -> dict:
    """Return a JSON-ready dict for a Pydantic model (datetimes as ISO strings)."""
    return m.model_dump(mode="json")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def nesting_depth(value: Any) -> int:
    """Depth of nested arrays/objects in a decoded JSON value; scalars are 0."""
    depth = 0
    stack = [(value, 1)]
    while stack:
        item, level = stack.pop()
        if isinstance(item, dict):
            children = item.values()
        elif isinstance(item, list):
            children = item
        else:
            continue
        depth = max(depth, level)
        stack.extend((child, level + 1) for child in children)
    return depth


def decode_payload(raw: bytes) -> Any:
    """Parse a request body holding exactly one JSON document.

    Raises ValueError for empty bodies, malformed JSON, documents nested
    deeper than ``MAX_NESTING``, and the ``NaN`` / ``Infinity`` extensions
    Python's json module would otherwise accept.
    """
    if not raw.strip():
        raise ValueError("empty body")
    try:
        payload = json.loads(raw, parse_constant=_reject_constant)
    except RecursionError:
        raise ValueError("JSON nested too deeply")
    if nesting_depth(payload) > MAX_NESTING:
        raise ValueError(f"JSON nested deeper than {MAX_NESTING} levels")
    return payload


def parse_webhook_id(value: str) -> Optional[int]:
    """Parse a path segment as a webhook ID, or return None if it is not one.

    Only plain decimal digits with an optional sign that fit in a signed
    64-bit integer are accepted; ``int()`` alone would also take surrounding
    whitespace and ``1_000``.
    """
    if not _WEBHOOK_ID_RE.fullmatch(value):
        return None
    webhook_id = int(value)
    if not _INT64_MIN <= webhook_id <= _INT64_MAX:
        return None
    return webhook_id


def webhook_event(payload: Any) -> WebhookEvent:
    """Pick the well-known ``event``/``data``/``timestamp`` fields out of a payload."""
    if not isinstance(payload, dict):
        return WebhookEvent()

    event = payload.get("event")
    timestamp = payload.get("timestamp")
    if isinstance(timestamp, bool) or not isinstance(timestamp, (int, float)):
        timestamp = None
    elif isinstance(timestamp, float):
        # non-finite floats can't reach here, decode_payload rejects them
        timestamp = int(timestamp)

    return WebhookEvent(
        event=event if isinstance(event, str) else None,
        data=payload.get("data"),
        timestamp=timestamp,
    )
