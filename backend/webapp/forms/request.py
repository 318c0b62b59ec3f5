"""Request sources — where a FormValidator reads raw values and leaves its report."""

from typing import Any, Optional, Protocol, runtime_checkable

import structlog
from fastapi import Request

logger = structlog.get_logger()


@runtime_checkable
class RequestSource(Protocol):
    """What the validation engine needs from a request."""

    def data(self, name: str, default: Any = None) -> Any:
        ...

    def add_validator(self, name: str, form: dict) -> None:
        ...


class DictRequest:
    """In-memory request source (tests, background jobs, CLI tooling)."""

    def __init__(self, values: Optional[dict] = None):
        self.values = dict(values or {})
        self.forms: dict[str, dict] = {}

    def data(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def add_validator(self, name: str, form: dict) -> None:
        self.forms[name] = form


class WebRequest:
    """Adapter over a FastAPI request with its body already read.

    Reading the body is async, so it happens once in ``from_request()``;
    validation itself then runs synchronously. Query parameters are
    overridden by body fields of the same name.
    """

    def __init__(self, request: Request, values: dict):
        self.request = request
        self.values = values
        if not hasattr(request.state, "forms"):
            request.state.forms = {}

    @classmethod
    async def from_request(cls, request: Request) -> "WebRequest":
        values: dict[str, Any] = dict(request.query_params)
        content_type = request.headers.get("content-type", "")

        if content_type.startswith("application/json"):
            try:
                body = await request.json()
            except ValueError:
                logger.warning("request_body_invalid_json", path=request.url.path)
                body = None
            if isinstance(body, dict):
                values.update(body)
        elif content_type.startswith(
            ("application/x-www-form-urlencoded", "multipart/form-data")
        ):
            form = await request.form()
            for key in form.keys():
                items = form.getlist(key)
                values[key] = items[0] if len(items) == 1 else items

        return cls(request, values)

    def data(self, name: str, default: Any = None) -> Any:
        return self.values.get(name, default)

    def add_validator(self, name: str, form: dict) -> None:
        self.request.state.forms[name] = form

    @property
    def forms(self) -> dict[str, dict]:
        return self.request.state.forms
