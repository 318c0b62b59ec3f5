"""Field rules — Strategy Pattern over a single field value.

A ValidatorEvent is any callable ``value -> FieldValidateResult``. The built-in
rules are FieldRule subclasses: each declares the ValueKind it reads, gets its
coercer bound at construction, and implements ``check()`` on the typed value.

Contract:
    - check() is pure: same value -> same result, no request access
    - check() never raises for bad input; it reports error codes instead
"""

import re
from abc import ABC, abstractmethod
from typing import Any, Callable, Optional

from webapp.forms.models import ErrorCode, FieldValidateResult, max_code, min_code
from webapp.forms.values import TypedValue, ValueKind, coercer_for

ValidatorEvent = Callable[[Any], FieldValidateResult]

EMAIL_PATTERN = re.compile(
    r"^[A-Za-z0-9.!#$%&'*+/=?^_`{|}~-]+@[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?"
    r"(?:\.[A-Za-z0-9](?:[A-Za-z0-9-]{0,61}[A-Za-z0-9])?)+$"
)


class FieldRule(ABC):
    """Abstract base for all field rules."""

    kind: ValueKind = ValueKind.TEXT

    def __init__(self):
        self._coerce = coercer_for(self.kind)

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for logging."""
        ...

    @abstractmethod
    def check(self, value: TypedValue) -> FieldValidateResult:
        ...

    def __call__(self, raw: Any) -> FieldValidateResult:
        return self.check(self._coerce(raw))

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"


class RequiredRule(FieldRule):
    """Fails on None or a value that is blank once stringified and trimmed."""

    @property
    def name(self) -> str:
        return "required"

    def check(self, value: TypedValue) -> FieldValidateResult:
        if value.is_blank:
            return FieldValidateResult(success=False, error=ErrorCode.REQUIRED)
        return FieldValidateResult.ok()


class RequiredMultiLanguageRule(FieldRule):
    """Requires a language -> text object with at least one non-blank entry.

    Input that is not such an object (including broken JSON) is treated as
    having no languages, so it reports the same code as an empty submission.
    """

    kind = ValueKind.MAPPING

    @property
    def name(self) -> str:
        return "required_multi_language"

    def check(self, value: TypedValue) -> FieldValidateResult:
        if value.is_blank or not value.mapping:
            return FieldValidateResult(success=False, error=ErrorCode.REQUIRED)
        return FieldValidateResult.ok()


class LengthRule(FieldRule):
    def __init__(self, max: Optional[int] = None, min: Optional[int] = None):
        super().__init__()
        self.max = max
        self.min = min

    @property
    def name(self) -> str:
        return f"length[{self.min}:{self.max}]"

    def check(self, value: TypedValue) -> FieldValidateResult:
        errors = []
        length = len(value.text)

        if self.max is not None and length > self.max:
            errors.append(max_code(self.max))
        if self.min is not None and length < self.min:
            errors.append(min_code(self.min))

        if errors:
            return FieldValidateResult(success=False, errors=errors, error=ErrorCode.FIELD)
        return FieldValidateResult.ok()


class NumberRule(FieldRule):
    """Integer check with optional bounds.

    A value that does not parse reports only ``error.field.numeric``; the
    bounds are not evaluated for it.
    """

    kind = ValueKind.INTEGER

    def __init__(
        self,
        max: Optional[int] = None,
        min: Optional[int] = None,
        is_required: bool = False,
    ):
        super().__init__()
        self.max = max
        self.min = min
        self.is_required = is_required

    @property
    def name(self) -> str:
        return f"number[{self.min}:{self.max}]"

    def check(self, value: TypedValue) -> FieldValidateResult:
        errors = []

        if value.is_null:
            if self.is_required:
                errors.append(ErrorCode.REQUIRED.value)
        elif not value.parsed:
            errors.append(ErrorCode.NUMERIC.value)
        else:
            if self.max is not None and value.number > self.max:
                errors.append(max_code(self.max))
            if self.min is not None and value.number < self.min:
                errors.append(min_code(self.min))

        if errors:
            return FieldValidateResult(success=False, errors=errors, error=ErrorCode.FIELD)
        return FieldValidateResult.ok()


class EmailRule(FieldRule):
    @property
    def name(self) -> str:
        return "email"

    def check(self, value: TypedValue) -> FieldValidateResult:
        if value.is_blank or not EMAIL_PATTERN.match(value.text.strip()):
            return FieldValidateResult(success=False, error=ErrorCode.EMAIL)
        return FieldValidateResult.ok()


class FieldValidator:
    """Factories for the built-in rules, in the order forms usually declare them."""

    @staticmethod
    def required_field() -> ValidatorEvent:
        return RequiredRule()

    @staticmethod
    def required_field_multi_language() -> ValidatorEvent:
        return RequiredMultiLanguageRule()

    @staticmethod
    def field_length(max: Optional[int] = None, min: Optional[int] = None) -> ValidatorEvent:
        return LengthRule(max=max, min=min)

    @staticmethod
    def is_number_field(
        max: Optional[int] = None,
        min: Optional[int] = None,
        is_required: bool = False,
    ) -> ValidatorEvent:
        return NumberRule(max=max, min=min, is_required=is_required)

    @staticmethod
    def is_email_field() -> ValidatorEvent:
        return EmailRule()
