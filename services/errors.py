"""
Service layer exceptions. Routes translate these into HTTP status codes.
"""


class JobKompassError(Exception):
    status_code = 500


class NotAuthenticatedError(JobKompassError):
    status_code = 401

    def __init__(self, message="Not authenticated"):
        super().__init__(message)


class NotAuthorizedError(JobKompassError):
    status_code = 403

    def __init__(self, message="Not authorized"):
        super().__init__(message)


class NotFoundError(JobKompassError):
    status_code = 404


class ValidationError(JobKompassError):
    status_code = 400


class LimitReachedError(JobKompassError):
    status_code = 403

    def __init__(self, message, limit=None, used=None):
        super().__init__(message)
        self.limit = limit
        self.used = used
