"""Form Validator — runs field rules over a request and builds the form report.

Usage:
    validator = FormValidator(
        rq=request,
        name="contact",
        fields={
            "email": [FieldValidator.required_field(), FieldValidator.is_email_field()],
            "age": [FieldValidator.is_number_field(min=18, max=120)],
        },
    )
    outcome = validator.validate_and_form()
    if not outcome.result:
        # Re-render with outcome.as_dict() / request forms["contact"]
"""

from typing import Any, Optional

import structlog

from webapp.forms.models import FieldReport, FormResult
from webapp.forms.request import RequestSource
from webapp.forms.rules import ValidatorEvent

logger = structlog.get_logger()


class FormValidator:
    """Applies a list of rules to every declared field and aggregates the results.

    Design principles:
        - Total reporting: every rule of every field runs, errors accumulate
        - Deterministic: fields in declaration order, rules in declaration order
        - Rule failures are data; nothing here raises for invalid input
    """

    def __init__(
        self,
        rq: RequestSource,
        fields: dict[str, list[ValidatorEvent]],
        name: str,
        failed: Any = "is-invalid",
        success: Any = "",
        extra_data: Optional[dict[str, Any]] = None,
        attach: bool = True,
    ):
        """
        Args:
            rq: Request source values are read from (and the report attached to)
            fields: Field name -> ordered rules
            name: Form name; the key the report is attached under
            failed: Display token for invalid fields (e.g. a CSS class)
            success: Display token for valid fields
            extra_data: Values not present on the request, reported as valid
            attach: Whether to store the report on the request
        """
        self.rq = rq
        self.fields = fields
        self.name = name
        self.failed = failed
        self.success = success
        self.extra_data = dict(extra_data or {})
        self.attach = attach
        self.last_result: Optional[FormResult] = None

    def validate(self, data: Optional[dict] = None) -> bool:
        """Validate and return only the overall outcome."""
        return self.validate_and_form(data=data).result

    def validate_and_form(self, data: Optional[dict] = None) -> FormResult:
        """Validate every declared field and build the form report.

        Args:
            data: Explicit values. When empty, values are read from the request.

        Returns:
            FormResult with the overall flag and one FieldReport per field
        """
        result = True
        form: dict[str, FieldReport] = {}

        for field_name, events in self.fields.items():
            value = self._resolve(field_name, data)

            success = True
            errors: list[str] = []
            for event in events or []:
                check = event(value)
                if not check.success:
                    success = False
                errors.extend(check.errors)

            form[field_name] = FieldReport.build(
                value=value,
                errors=errors,
                success=success,
                valid=self.success if success else self.failed,
            )
            if not success:
                result = False

        for key, value in self.extra_data.items():
            if key not in form:
                form[key] = FieldReport.build(
                    value=value, errors=[], success=True, valid=self.success
                )

        outcome = FormResult(result=result, form=form)
        self.last_result = outcome

        if self.attach:
            self.rq.add_validator(self.name, outcome.as_dict())

        logger.info(
            "form_validated",
            form=self.name,
            result=result,
            fields=len(self.fields),
            failed_fields=outcome.failed_fields,
        )
        return outcome

    def _resolve(self, field_name: str, data: Optional[dict]) -> Any:
        if not data:
            return self.rq.data(field_name)
        value = data.get(field_name)
        if value is None:
            value = self.extra_data.get(field_name)
        return value

    @classmethod
    def filling(cls, rq: RequestSource, name: str, data: dict) -> "FormValidator":
        """Build a rule-less validator over ``data`` and run it once.

        Every key is reported valid with its value preserved, giving arbitrary
        data the same report shape as a validated form.
        """
        fields: dict[str, list[ValidatorEvent]] = {key: [] for key in data}
        validator = cls(rq=rq, fields=fields, name=name)
        validator.validate(data=data)
        return validator
