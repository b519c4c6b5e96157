from .error_handler import ErrorHandlerMiddleware, raise_for_result, unwrap

__all__ = [
    "ErrorHandlerMiddleware",
    "raise_for_result",
    "unwrap",
]
