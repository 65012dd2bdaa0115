class InvalidInputError(ValueError):
    """Raised when a calculation input is missing, non-numeric or out of range."""

    def __init__(self, message: str, field: str = None):
        super().__init__(message)
        self.field = field


class MissingParametersError(InvalidInputError):
    def __init__(self, missing=()):
        self.missing = list(missing)
        detail = f": {', '.join(self.missing)}" if self.missing else ""
        super().__init__(f"Missing required parameters{detail}")
