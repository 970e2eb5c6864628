"""API error types rendered as ``{"error": ..., "code": ...}`` bodies."""


class BoerenKompasError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        if code is not None:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code}


class UnauthorizedError(BoerenKompasError):
    """No valid bearer token on the request."""

    status_code = 401
    code = "UNAUTHORIZED"

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ForbiddenError(BoerenKompasError):
    status_code = 403
    code = "FORBIDDEN"

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__(message)


class TenantNotFoundError(BoerenKompasError):
    """User is authenticated but has no tenant membership to act under."""

    status_code = 404
    code = "NO_TENANT"

    def __init__(self, message: str = "No tenant found. Please complete onboarding.") -> None:
        super().__init__(message)
