from .client import ApiClient, ApiError, UnauthorizedError

__all__ = ["ApiClient", "ApiError", "UnauthorizedError"]
