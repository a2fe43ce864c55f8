"""Domain errors raised by services and mapped to HTTP responses in main.py."""

from fastapi import status


class ServiceError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal Server Error"

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class BadRequestError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Bad request"


class MissingParametersError(BadRequestError):
    """Required fields absent; the message names them."""

    def __init__(self, *fields: str):
        self.fields = list(fields)
        super().__init__(f"Parameters missing: {', '.join(fields)} not present")


class UnauthorizedError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Invalid credentials"


class TokenError(ServiceError):
    """Bearer token missing (401) or unverifiable (403). Answered as ``{"error": message}``."""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Token not found"


class PermissionDeniedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You don't have the necessary permissions to do that."


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ConflictError(ServiceError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Already exists"


class PayloadTooLargeError(ServiceError):
    status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
    default_message = "File too large"


class UpstreamError(ServiceError):
    """An external API answered with an error; its status is relayed."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_message = "Upstream service error"


class ServiceUnavailableError(ServiceError):
    default_message = "Internal Server Error"
