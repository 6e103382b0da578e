"""OAuth error type shared by the token endpoint."""

from fastapi.responses import JSONResponse

INVALID_REQUEST = "invalid_request"
INVALID_GRANT = "invalid_grant"
UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"


class OAuthError(Exception):
    """Raised when a token request is rejected.

    Attributes:
        error: RFC 6749 error code (invalid_request, invalid_grant, ...)
        description: Human-readable error_description
        status_code: HTTP status code to return (always 400 here)
    """

    def __init__(self, error: str, description: str, status_code: int = 400):
        self.error = error
        self.description = description
        self.status_code = status_code
        super().__init__(f"{error}: {description}")

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            {"error": self.error, "error_description": self.description},
            status_code=self.status_code,
        )
