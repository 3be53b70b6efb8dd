"""Error types raised by validation, tenant checks and handlers.

Every failure a client can cause carries a stable machine-readable ``code``
and a human-readable message; routers turn them into ``{error, code}``
responses with the class's status.
"""

from fastapi.responses import JSONResponse


class ApiError(Exception):
    status_code = 400

    def __init__(self, code: str, message: str):
        super().__init__(message)
        self.code = code
        self.message = message

    def to_response(self) -> JSONResponse:
        return JSONResponse(
            content={"error": self.message, "code": self.code},
            status_code=self.status_code,
        )


class InvalidInput(ApiError):
    """Missing, malformed or out-of-range request input."""
    status_code = 400


class NotFound(ApiError):
    """Entity absent, or absent within the requested tenant."""
    status_code = 404


class DuplicateEntity(ApiError):
    # Conflicts are reported as 400, not 409
    status_code = 400
