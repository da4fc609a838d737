"""JSON codec for documents.

jsonb columns and the Redis event transport both carry documents as JSON;
datetimes travel in a tagged ``{"$date": iso}`` form and are restored on
the way back.
"""

import json
from datetime import datetime
from typing import Any


def encode_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return {"$date": value.isoformat()}
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        if len(value) == 1 and "$date" in value:
            return datetime.fromisoformat(value["$date"])
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def dumps(value: Any) -> str:
    return json.dumps(encode_value(value))


def loads(data: Any) -> Any:
    return decode_value(json.loads(data))
