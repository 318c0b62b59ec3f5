from webapp.forms import DictRequest, FieldValidateResult, FieldValidator, FormValidator


def _always(code):
    return lambda value: FieldValidateResult(success=False, error=code)


def test_field_without_rules_is_successful():
    rq = DictRequest({"nickname": "zed"})
    outcome = FormValidator(rq=rq, fields={"nickname": []}, name="profile").validate_and_form()

    report = outcome.form["nickname"]
    assert outcome.result is True
    assert report.success is True
    assert report.failed is False
    assert report.errors == []
    assert report.value == "zed"


def test_errors_accumulate_in_declaration_order():
    rq = DictRequest({"code": "x"})
    fields = {"code": [_always("first"), FieldValidator.required_field(), _always("second")]}
    outcome = FormValidator(rq=rq, fields=fields, name="f").validate_and_form()

    report = outcome.form["code"]
    assert report.success is False
    assert report.errors == ["first", "second"]
    assert report.error == "first,second"
    assert report.error_html == "first<br/>second"


def test_all_rules_run_after_a_failure():
    rq = DictRequest({"age": ""})
    fields = {"age": [FieldValidator.required_field(), FieldValidator.is_number_field()]}
    outcome = FormValidator(rq=rq, fields=fields, name="f").validate_and_form()
    assert outcome.form["age"].errors == ["error.field.required", "error.field.numeric"]


def test_valid_tokens_are_caller_chosen():
    rq = DictRequest({"a": "", "b": "ok"})
    fields = {"a": [FieldValidator.required_field()], "b": [FieldValidator.required_field()]}
    outcome = FormValidator(
        rq=rq, fields=fields, name="f", failed="bad", success="good"
    ).validate_and_form()
    assert outcome.form["a"].valid == "bad"
    assert outcome.form["b"].valid == "good"


def test_overall_result_is_and_of_fields():
    rq = DictRequest({"email": "a@b.com", "name": ""})
    fields = {
        "email": [FieldValidator.is_email_field()],
        "name": [FieldValidator.required_field()],
    }
    validator = FormValidator(rq=rq, fields=fields, name="f")
    assert validator.validate() is False
    assert validator.last_result.failed_fields == ["name"]

    rq.values["name"] = "Ada"
    assert validator.validate() is True


def test_explicit_data_overrides_request_and_falls_back_to_extra():
    rq = DictRequest({"name": "from request"})
    validator = FormValidator(
        rq=rq,
        fields={"name": [], "lang": [FieldValidator.required_field()]},
        name="f",
        extra_data={"lang": "en"},
    )
    outcome = validator.validate_and_form(data={"name": "explicit"})
    assert outcome.form["name"].value == "explicit"
    assert outcome.form["lang"].value == "en"
    assert outcome.result is True


def test_extra_data_never_affects_result():
    rq = DictRequest({"name": ""})
    validator = FormValidator(
        rq=rq,
        fields={"name": [FieldValidator.required_field()]},
        name="f",
        extra_data={"csrf": None, "page": 3},
    )
    outcome = validator.validate_and_form()

    assert outcome.result is False
    assert outcome.form["csrf"].success is True
    assert outcome.form["page"].value == 3
    assert outcome.form["page"].errors == []

    rq.values["name"] = "Ada"
    assert validator.validate() is True


def test_report_is_attached_to_request_under_form_name():
    rq = DictRequest({"email": "nope"})
    FormValidator(rq=rq, fields={"email": [FieldValidator.is_email_field()]}, name="login").validate()

    attached = rq.forms["login"]["email"]
    assert attached == {
        "value": "nope",
        "valid": "is-invalid",
        "error": "error.field.email",
        "errorHtml": "error.field.email",
        "errors": ["error.field.email"],
        "success": False,
        "failed": True,
    }


def test_attach_can_be_disabled():
    rq = DictRequest({"x": "1"})
    outcome = FormValidator(rq=rq, fields={"x": []}, name="f", attach=False).validate_and_form()
    assert rq.forms == {}
    assert outcome.as_dict()["x"]["success"] is True


def test_filling_reports_every_key_valid():
    rq = DictRequest()
    validator = FormValidator.filling(rq=rq, name="echo", data={"a": 1, "b": 2})

    form = validator.last_result.form
    assert validator.last_result.result is True
    assert form["a"].success is True and form["a"].value == 1
    assert form["b"].success is True and form["b"].value == 2
    assert rq.forms["echo"]["b"]["value"] == 2
