from timetabler.core.exceptions import AppError, InvalidConfigurationError


def test_invalid_configuration_error_structure():
    err = InvalidConfigurationError(message="Bad window", details={"start_time": "09:00"})
    assert err.status_code == 422
    assert err.message == "Bad window"
    assert err.details == {"start_time": "09:00"}
    assert isinstance(err, AppError)


def test_app_error_defaults():
    err = AppError("Generic error")
    assert err.status_code == 500
    assert err.details == {}
    assert str(err) == "Generic error"


def test_validation_errors_drop_body_prefix():
    err = InvalidConfigurationError.from_validation_errors(
        [
            {"loc": ("body", "parameters", "workingDays"), "msg": "Value error, bad day"},
            {"loc": ("courseSubjects",), "msg": "List should have at least 1 item"},
        ]
    )
    assert err.status_code == 422
    assert err.message == "Invalid timetable request"
    assert err.details == {
        "errors": [
            {"loc": ["parameters", "workingDays"], "msg": "Value error, bad day"},
            {"loc": ["courseSubjects"], "msg": "List should have at least 1 item"},
        ]
    }
