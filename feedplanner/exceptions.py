"""Application exception types.

Every exception here is rendered as an RFC 7807 problem body by
``feedplanner.middleware.error_handler``.
"""


class AppException(Exception):
    def __init__(self, status_code: int, detail: str, error_type: str = "about:blank"):
        self.status_code = status_code
        self.detail = detail
        self.error_type = error_type
        super().__init__(detail)


class AuthorizationDenied(AppException):
    """The actor lacks the capability for the requested write or transition."""

    def __init__(self, detail: str = "Insufficient permissions"):
        super().__init__(403, detail, "authorization-denied")


class PreconditionFailed(AppException):
    """The actor may act, but the entity is not in an accepting state."""

    def __init__(self, detail: str):
        super().__init__(409, detail, "precondition-failed")


class UpstreamFailure(AppException):
    def __init__(self, detail: str = "Storage backend unavailable"):
        super().__init__(502, detail, "upstream-failure")


class NotFound(AppException):
    def __init__(self, detail: str = "Not found"):
        super().__init__(404, detail)
