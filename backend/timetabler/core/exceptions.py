class AppError(Exception):
    """Base class for all application exceptions."""
    def __init__(self, message: str, status_code: int = 500, details: dict = None):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(self.message)

class InvalidConfigurationError(AppError):
    """Raised when generation input is rejected before any search begins."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status_code=422, details=details)

    @classmethod
    def from_validation_errors(cls, errors, message: str = "Invalid timetable request"):
        """Collect pydantic-style errors as ``{"errors": [{"loc", "msg"}]}``.

        A leading ``body`` location part added by request parsing is dropped.
        """
        collected = []
        for error in errors:
            loc = [str(part) for part in error["loc"]]
            if loc[:1] == ["body"]:
                loc = loc[1:]
            collected.append({"loc": loc, "msg": error["msg"]})
        return cls(message=message, details={"errors": collected})
