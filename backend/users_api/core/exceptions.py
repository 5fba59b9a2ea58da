"""
Error taxonomy shared by the storage, service and API layers.

Every error carries the HTTP status it maps to and a client-safe message.
The handlers in ``users_api.api.errors`` turn them into the response envelope
``{message, status, error?}``.
"""
from typing import Optional


class APIError(Exception):
    status_code = 500
    default_message = "An unexpected error occurred."

    def __init__(self, message: Optional[str] = None, error: Optional[str] = None):
        self.message = message or self.default_message
        self.error = error
        super().__init__(self.message)


class ClientInputError(APIError):
    """Missing or invalid fields, unparsable ids, schema violations"""
    status_code = 400
    default_message = "Invalid data provided."


class NotFoundError(APIError):
    status_code = 404
    default_message = "Not found."


class AuthRejected(APIError):
    """Bad password or no bearer token supplied"""
    status_code = 401
    default_message = "Access denied. No token provided."


class InvalidCredentials(AuthRejected):
    """Bearer token present but tampered with or expired"""
    status_code = 403
    default_message = "Invalid or expired token."


class ServerFault(APIError):
    status_code = 500
