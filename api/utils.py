"""
Request and response helpers for API handlers.
"""

import json
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from functools import partial
from typing import Any

from aiohttp import web
from pydantic import BaseModel

from app.config.operational_constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from app.utils.exceptions import ValidationError


def _default(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, datetime | date):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    raise TypeError(f"Cannot serialize {type(value).__name__}")


_dumps = partial(json.dumps, default=_default)


def json_ok(data: Any, status: int = 200) -> web.Response:
    return web.json_response(data, status=status, dumps=_dumps)


def model_dict(obj: Any, fields: tuple[str, ...]) -> dict[str, Any]:
    """Selected attributes of an ORM object."""
    return {name: getattr(obj, name) for name in fields}


async def read_json(request: web.Request) -> dict[str, Any]:
    if not request.can_read_body:
        return {}
    try:
        data = await request.json()
    except json.JSONDecodeError as e:
        raise ValidationError("Request body must be valid JSON") from e
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def require(data: dict[str, Any], key: str) -> Any:
    if data.get(key) is None:
        raise ValidationError(f"Field '{key}' is required")
    return data[key]


def to_decimal(value: Any, name: str = "amount") -> Decimal:
    try:
        result = Decimal(str(value))
    except (InvalidOperation, ValueError) as e:
        raise ValidationError(f"'{name}' must be a number") from e
    if not result.is_finite():
        raise ValidationError(f"'{name}' must be a number")
    return result


def to_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"'{name}' must be an integer") from e


def to_bool(value: Any, name: str) -> bool:
    if not isinstance(value, bool):
        raise ValidationError(f"'{name}' must be true or false")
    return value


def path_int(request: web.Request, name: str) -> int:
    return to_int(request.match_info[name], name)


def query_int(request: web.Request, name: str, default: int) -> int:
    raw = request.query.get(name)
    return default if raw is None else to_int(raw, name)


def page_limit(request: web.Request) -> int:
    return max(1, min(query_int(request, "limit", DEFAULT_PAGE_SIZE), MAX_PAGE_SIZE))


def query_date(request: web.Request, name: str) -> date | None:
    raw = request.query.get(name)
    if raw is None:
        return None
    try:
        return date.fromisoformat(raw)
    except ValueError as e:
        raise ValidationError(f"'{name}' must be an ISO date") from e
