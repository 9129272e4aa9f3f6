class ErrorCodes:
    VALIDATION_ERROR = "BS001"
    UNKNOWN_STRATEGY = "BS004"
    CONFIG_ERROR = "BS100"
    OUTPUT_SINK_UNAVAILABLE = "BS200"
    INVARIANT_VIOLATION = "BS500"


# Process exit codes (sysexits.h)
EXIT_INTERNAL_ERROR = 70
EXIT_IO_ERROR = 74
EXIT_CONFIG_ERROR = 78
