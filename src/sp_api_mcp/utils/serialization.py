"""JSON serialization utilities."""

from __future__ import annotations

import base64
import datetime
import decimal
import json


def json_default(obj: object) -> object:
    """JSON serializer for objects not serializable by default json code."""
    if isinstance(obj, (datetime.date, datetime.datetime)):
        return obj.isoformat()
    if isinstance(obj, decimal.Decimal):
        # Integral values become int; values that survive a float round trip
        # become float; anything else keeps its exact string form.
        if obj == obj.to_integral_value():
            return int(obj)
        f = float(obj)
        if decimal.Decimal(str(f)) != obj:
            return str(obj)
        return f
    if isinstance(obj, bytes):
        try:
            return obj.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(obj).decode("utf-8")
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    return str(obj)


def to_jsonable(payload: object) -> object:
    """Return *payload* as plain JSON types (dict, list, str, int, float, bool, None)."""
    return json.loads(json.dumps(payload, default=json_default, ensure_ascii=False))
