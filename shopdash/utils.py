import json
import logging
from datetime import datetime, timezone

from fastapi import Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from shopdash.errors import ApiError, InvalidInput


def to_iso(moment: datetime):
    """
    UTC ISO-8601 string with millisecond precision and a trailing 'Z',
    e.g. '2024-02-10T08:15:30.123Z'.
    """
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def now_iso():
    return to_iso(datetime.now(timezone.utc))


async def read_json_body(request: Request):
    """
    Parse the request body as JSON. A body that does not parse is a client error.
    """
    try:
        return await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        raise InvalidInput("INVALID_BODY", "Request body must be valid JSON")


def error_response(exc: Exception) -> JSONResponse:
    """
    Shape any failure raised inside a handler into the error envelope.
    ApiError keeps its code and status; everything else is a 500 carrying the
    underlying message and no code.
    """
    if isinstance(exc, ApiError):
        logging.warning(f"{exc.code}: {exc.message}")
        return exc.to_response()
    if isinstance(exc, SQLAlchemyError):
        logging.error(f"Database error: {exc}")
    else:
        logging.error(f"Error: {exc}")
    return JSONResponse(content={"error": f"Internal server error: {exc}"}, status_code=500)
