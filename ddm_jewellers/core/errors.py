"""Exceptions raised by the service layer and rendered as JSON by the app."""


class ServiceError(Exception):
    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationFailed(ServiceError):
    status_code = 400


class PermissionDenied(ServiceError):
    status_code = 403


class NotFound(ServiceError):
    status_code = 404


class InvalidTransition(ServiceError):
    """A status change that the record's current state does not allow."""
    status_code = 409


class ExternalServiceError(ServiceError):
    status_code = 502


class ServiceUnavailable(ServiceError):
    status_code = 503
