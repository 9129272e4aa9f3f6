from betsim.error_codes import ErrorCodes, EXIT_INTERNAL_ERROR, EXIT_IO_ERROR, EXIT_CONFIG_ERROR

class AppException(Exception):
    def __init__(self, error_code, status_message, exit_code, details=None):
        super().__init__(status_message)
        self.error_code = error_code
        self.status_message = status_message
        self.exit_code = exit_code
        self.details = details if details is not None else {}

class ValidationException(AppException):
    def __init__(self, status_message="Validation failed", details=None, error_code=ErrorCodes.VALIDATION_ERROR):
        super().__init__(
            error_code=error_code,
            status_message=status_message,
            exit_code=EXIT_CONFIG_ERROR,
            details=details
        )

class InvariantViolationException(AppException):
    """A bug in the simulator itself, e.g. a generator draw outside its configured bound. Never retried."""
    def __init__(self, status_message="Internal invariant violated", details=None):
        super().__init__(
            error_code=ErrorCodes.INVARIANT_VIOLATION,
            status_message=status_message,
            exit_code=EXIT_INTERNAL_ERROR,
            details=details
        )

class OutputSinkException(AppException):
    def __init__(self, status_message="Output sink unavailable", details=None):
        super().__init__(
            error_code=ErrorCodes.OUTPUT_SINK_UNAVAILABLE,
            status_message=status_message,
            exit_code=EXIT_IO_ERROR,
            details=details
        )
