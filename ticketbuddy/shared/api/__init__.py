from ticketbuddy.shared.api.middleware import (
    EdgeHeadersMiddleware,
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)

__all__ = [
    "EdgeHeadersMiddleware",
    "CorrelationIDMiddleware",
    "LoggingMiddleware",
    "application_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
]
