class StringAnalyserError(Exception):
    """Base error for the string analyzer. Each subclass maps to one HTTP status."""

    status_code = 400
    default_message = "Invalid request."

    def __init__(self, message=None):
        super().__init__(message or self.default_message)


class InvalidInput(StringAnalyserError):
    status_code = 400
    default_message = 'Invalid request body or missing "value" field.'


class TypeMismatch(StringAnalyserError):
    status_code = 422
    default_message = 'Invalid data type for "value" (must be string).'


class Conflict(StringAnalyserError):
    status_code = 409
    default_message = "String already exists in the system."


class NotFound(StringAnalyserError):
    status_code = 404
    default_message = "String does not exist in the system."


class MissingInput(StringAnalyserError):
    status_code = 400
    default_message = "Query parameter is required."


class Unparseable(StringAnalyserError):
    status_code = 400
    default_message = "Unable to parse natural language query."


class ConflictingFilters(StringAnalyserError):
    status_code = 422
    default_message = "Query parsed but resulted in conflicting filters."
