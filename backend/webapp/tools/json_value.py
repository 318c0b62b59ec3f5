"""JSON encoding for framework values — datetimes, durations, document ids, translations."""

import inspect
import json
from datetime import date
from typing import Any, Optional


def _encodable(obj: Any, rq: Optional[Any]) -> Any:
    # Translatable strings render themselves for the request's language
    write = getattr(obj, "write", None)
    if rq is not None and callable(write) and not inspect.iscoroutinefunction(write):
        return write(rq)
    if isinstance(obj, date):
        return obj.isoformat()
    # Durations, document ids (e.g. BSON ObjectId) and the rest fall back to str()
    return str(obj)


def json_encoder(data: Any, rq: Optional[Any] = None) -> str:
    """Serialize ``data``, rendering non-JSON values for ``rq`` where needed."""
    return json.dumps(data, default=lambda obj: _encodable(obj, rq))


def json_decoder(data: str) -> Any:
    return json.loads(data)
