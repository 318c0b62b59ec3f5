"""Form validation models — error codes, per-rule results, per-field reports.

Validation never raises: every outcome is data that the caller localizes and renders.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ErrorCode(str, Enum):
    """Opaque error codes, resolved to human text by the language layer."""

    FIELD = "error.field"
    REQUIRED = "error.field.required"
    NUMERIC = "error.field.numeric"
    EMAIL = "error.field.email"


def max_code(limit: int) -> str:
    """Code for a value above ``limit``: ``error.field.max#{limit}``."""
    return f"error.field.max#{{{limit}}}"


def min_code(limit: int) -> str:
    """Code for a value below ``limit``: ``error.field.min#{limit}``."""
    return f"error.field.min#{{{limit}}}"


class FieldValidateResult(BaseModel):
    """Outcome of one rule applied to one value.

    ``error`` is folded into ``errors`` at construction. The generic
    ``error.field`` headline is only folded in when no specific code
    accompanies it, so range rules report ``max``/``min`` codes alone.
    """

    model_config = ConfigDict(frozen=True)

    success: bool = False
    errors: list[str] = Field(default_factory=list)
    error: str = ""

    @model_validator(mode="before")
    @classmethod
    def _fold_error(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        error = data.get("error") or ""
        if isinstance(error, Enum):
            error = error.value
        errors = [e.value if isinstance(e, Enum) else e for e in data.get("errors") or []]
        if error and not (error == ErrorCode.FIELD.value and errors):
            errors.append(error)
        return {**data, "error": error, "errors": errors}

    @classmethod
    def ok(cls) -> "FieldValidateResult":
        return cls(success=True)


class FieldReport(BaseModel):
    """Everything a template or API client needs to redisplay one field."""

    model_config = ConfigDict(populate_by_name=True)

    value: Any = None
    valid: Any = ""
    error: str = ""
    error_html: str = Field(default="", alias="errorHtml")
    errors: list[str] = Field(default_factory=list)
    success: bool = True
    failed: bool = False

    @classmethod
    def build(cls, value: Any, errors: list[str], success: bool, valid: Any) -> "FieldReport":
        return cls(
            value=value,
            valid=valid,
            error=",".join(errors),
            error_html="<br/>".join(errors),
            errors=errors,
            success=success,
            failed=not success,
        )

    def as_dict(self) -> dict:
        return {
            "value": self.value,
            "valid": self.valid,
            "error": self.error,
            "errorHtml": self.error_html,
            "errors": list(self.errors),
            "success": self.success,
            "failed": self.failed,
        }


class FormResult(BaseModel):
    """Combined outcome of a form: overall flag plus one report per field."""

    result: bool = True
    form: dict[str, FieldReport] = Field(default_factory=dict)

    @property
    def failed_fields(self) -> list[str]:
        return [name for name, report in self.form.items() if report.failed]

    def as_dict(self) -> dict[str, dict]:
        """Form keyed by field name in the wire shape used by templates and APIs."""
        return {name: report.as_dict() for name, report in self.form.items()}
