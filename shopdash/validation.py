"""
Field types and coercion for untyped request input (query-string strings,
JSON body values).

Bodies are decoded by the pydantic payload models in
`shopdash.models.base_model`, whose fields use the annotated types below.
Query parameters go through the same types with a `TypeAdapter`. Either way a
pydantic `ValidationError` surfaces as `InvalidInput` carrying a stable code;
nothing is partially applied.
"""

from dataclasses import dataclass
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BeforeValidator,
    StringConstraints,
    TypeAdapter,
    ValidationError,
    confloat,
    conint,
)
from pydantic.alias_generators import to_camel
from pydantic_core import PydanticCustomError

from shopdash.errors import InvalidInput


EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"

ORDER_STATUSES = ("pending", "processing", "completed", "cancelled", "refunded")
STATUS_MESSAGE = f"Invalid status. Must be one of: {', '.join(ORDER_STATUSES)}"

DEFAULT_LIMIT = 10
MAX_LIMIT = 100

# Widest INTEGER both stores accept
INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


@dataclass(frozen=True)
class Page:
    limit: int = DEFAULT_LIMIT
    offset: int = 0


def _reject_bool(value):
    if isinstance(value, bool):
        raise PydanticCustomError("bool_type", "Input should be a number, not a boolean")
    return value


def _number_to_str(value):
    # Shopify ids may arrive as JSON numbers
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


def _known_status(value: str) -> str:
    if value not in ORDER_STATUSES:
        raise PydanticCustomError("INVALID_STATUS", STATUS_MESSAGE)
    return value


RecordId = Annotated[conint(ge=INT64_MIN, le=INT64_MAX), BeforeValidator(_reject_bool)]
Count = Annotated[conint(ge=0, le=INT64_MAX), BeforeValidator(_reject_bool)]
Price = Annotated[confloat(gt=0, allow_inf_nan=False), BeforeValidator(_reject_bool)]
Amount = Annotated[confloat(ge=0, allow_inf_nan=False), BeforeValidator(_reject_bool)]
Text = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
ExternalId = Annotated[Text, BeforeValidator(_number_to_str)]
Domain = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, min_length=1)]
Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True, pattern=EMAIL_PATTERN)]
Status = Annotated[str, StringConstraints(strip_whitespace=True), AfterValidator(_known_status)]

_record_id = TypeAdapter(RecordId)
_limit = TypeAdapter(int)
_status = TypeAdapter(Status)
_bound = TypeAdapter(confloat(allow_inf_nan=False))


def _own_code(error) -> Optional[str]:
    # Custom errors raised by the types above are typed with their public code
    return error["type"] if error["type"].startswith("INVALID_") else None


def invalid_input(exc: ValidationError, codes: dict, default: str = "INVALID_BODY") -> InvalidInput:
    """
    First failure of a model validation as `InvalidInput`. An error typed with
    its own code keeps it; anything else takes the code registered in `codes`
    for the failing field (keyed by the camelCase body key).
    """
    error = exc.errors()[0]
    code = _own_code(error)
    if code:
        return InvalidInput(code, error["msg"])
    field = str(error["loc"][0]) if error["loc"] else ""
    code = codes.get(field) or codes.get(to_camel(field), default)
    return InvalidInput(code, f"Invalid {field or 'value'}: {error['msg']}")


def _coerce(adapter: TypeAdapter, raw: Any, field: str, code: str):
    try:
        return adapter.validate_python(raw)
    except ValidationError as exc:
        error = exc.errors()[0]
        if _own_code(error):
            raise InvalidInput(_own_code(error), error["msg"])
        raise InvalidInput(code, f"Valid {field} is required")


def _lenient(adapter: TypeAdapter, raw: Any):
    try:
        return adapter.validate_python(raw)
    except ValidationError:
        return None


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_body(body: Any) -> dict:
    if not isinstance(body, dict):
        raise InvalidInput("INVALID_BODY", "Request body must be a JSON object")
    return body


def require_fields(body: dict, *fields) -> None:
    """
    Presence check for `(key, missing_code)` pairs, in order. Runs before any
    format check so an incomplete body always reports the first absent field.
    """
    for key, code in fields:
        if is_missing(body.get(key)):
            raise InvalidInput(code, f"{key} is required")


def parse_id(raw: Any) -> int:
    if is_missing(raw):
        raise InvalidInput("MISSING_ID", "id is required")
    return _coerce(_record_id, raw, "ID", "INVALID_ID")


def parse_optional_reference(raw: Any, field: str, invalid_code: str) -> Optional[int]:
    if is_missing(raw):
        return None
    return _coerce(_record_id, raw, field, invalid_code)


def parse_status(raw: Any) -> str:
    return _coerce(_status, raw, "status", "INVALID_STATUS")


def parse_page(limit_raw: Any = None, offset_raw: Any = None) -> Page:
    """
    Pagination from query-string values. Limits above MAX_LIMIT are capped,
    unusable limits fall back to the default, and offsets are passed through
    as given (negative included) unless they cannot be stored.
    """
    limit = None if is_missing(limit_raw) else _lenient(_limit, limit_raw)
    if limit is None or limit < 1:
        limit = DEFAULT_LIMIT
    offset = None if is_missing(offset_raw) else _lenient(_record_id, offset_raw)
    if offset is None:
        offset = 0
    return Page(limit=min(limit, MAX_LIMIT), offset=offset)


def parse_bound(raw: Any) -> Optional[float]:
    # Range filters are lenient: an unparsable bound is dropped, not rejected
    if is_missing(raw):
        return None
    return _lenient(_bound, raw)


def parse_date_bound(raw: Any) -> Optional[str]:
    if is_missing(raw) or not isinstance(raw, str):
        return None
    return raw.strip()
