"""Form endpoints — validate submissions and echo them back in report shape."""

from fastapi import APIRouter, Request, Response

import structlog

from webapp.forms import FieldValidator, FormValidator, WebRequest
from webapp.models.responses import FormResponse
from webapp.tools.json_value import json_encoder

logger = structlog.get_logger()

router = APIRouter()


def _contact_fields() -> dict:
    return {
        "name": [FieldValidator.required_field(), FieldValidator.field_length(min=2, max=50)],
        "email": [FieldValidator.required_field(), FieldValidator.is_email_field()],
        "age": [FieldValidator.is_number_field(min=18, max=120)],
        "message": [FieldValidator.field_length(max=1000)],
    }


def _json(payload: FormResponse, rq: WebRequest, status_code: int = 200) -> Response:
    return Response(
        content=json_encoder(payload.model_dump(), rq=rq),
        status_code=status_code,
        media_type="application/json",
    )


@router.post("/contact", response_model=FormResponse)
async def submit_contact(request: Request):
    """Validate a contact form; 422 with per-field errors when it fails."""
    rq = await WebRequest.from_request(request)
    validator = FormValidator(
        rq=rq,
        name="contact",
        fields=_contact_fields(),
        extra_data={"locale": request.headers.get("accept-language", "en")},
    )
    outcome = validator.validate_and_form()

    payload = FormResponse(success=outcome.result, form=rq.forms["contact"])
    return _json(payload, rq, status_code=200 if outcome.result else 422)


@router.post("/echo", response_model=FormResponse)
async def echo_form(request: Request):
    """Report every submitted field as valid, preserving its value."""
    rq = await WebRequest.from_request(request)
    validator = FormValidator.filling(rq=rq, name="echo", data=rq.values)
    logger.debug("form_echoed", fields=list(rq.values))

    payload = FormResponse(success=validator.last_result.result, form=rq.forms["echo"])
    return _json(payload, rq)
