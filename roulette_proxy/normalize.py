import math
from enum import Enum
from typing import Any

from .upstream import UpstreamResponse

MIN_RESULT = 0
MAX_RESULT = 36

Number = int | float


class PayloadShape(Enum):
    ARRAY = "array"                 # [12, "7", ...]
    ITEMS_OBJECT = "items_object"   # {"items": [...], ...}
    OTHER = "other"


def classify_payload(payload: Any) -> tuple[PayloadShape, list]:
    """Tag the upstream payload with its shape and pull out the candidate list."""
    if isinstance(payload, list):
        return PayloadShape.ARRAY, payload
    if isinstance(payload, dict) and isinstance(payload.get("items"), list):
        return PayloadShape.ITEMS_OBJECT, payload["items"]
    return PayloadShape.OTHER, []


def to_number(value: Any) -> Number | None:
    # bool is an int subclass, but True/False are not spin results
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        text = value.strip()
        # float() also takes "1_0" and non-ASCII digits
        if not text or not text.isascii() or "_" in text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def normalize_items(payload: Any) -> list[Number]:
    """
    Reduce an arbitrarily shaped payload to the valid results, in order.

    Never raises for a malformed payload; it just yields fewer (or no) items.
    """
    shape, candidates = classify_payload(payload)
    if shape is PayloadShape.OTHER:
        return []

    items = []
    for candidate in candidates:
        number = to_number(candidate)
        if number is not None and MIN_RESULT <= number <= MAX_RESULT:
            items.append(number)
    return items


def describe_empty(response: UpstreamResponse) -> str:
    if response.parsed:
        return "JSON payload without a usable items array"
    return "non-JSON response from upstream"
