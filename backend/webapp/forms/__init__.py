"""Form validation — composable field rules aggregated into a per-form report.

Usage:
    from webapp.forms import FormValidator, FieldValidator

    validator = FormValidator(rq=rq, name="signup", fields={
        "email": [FieldValidator.required_field(), FieldValidator.is_email_field()],
    })
    if not validator.validate():
        # rq carries the "signup" report for redisplay
"""

from webapp.forms.models import ErrorCode, FieldReport, FieldValidateResult, FormResult
from webapp.forms.request import DictRequest, RequestSource, WebRequest
from webapp.forms.rules import FieldRule, FieldValidator, ValidatorEvent
from webapp.forms.validator import FormValidator

__all__ = [
    "FormValidator",
    "FieldValidator",
    "FieldRule",
    "ValidatorEvent",
    "FieldValidateResult",
    "FieldReport",
    "FormResult",
    "ErrorCode",
    "RequestSource",
    "DictRequest",
    "WebRequest",
]
