from __future__ import annotations
from datetime import date

from dataclasses import dataclass, field
from typing import Any

from flask import request
from sqlalchemy import Boolean, Date, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .time_utils import parse_date


# Keys a client may send but never controls; the server assigns them.
SERVER_OWNED_FIELDS = frozenset({"id", "org_id"})

# INTEGER is 32-bit on PostgreSQL; SQLite accepts a superset
INT_MIN = -(2 ** 31)
INT_MAX = 2 ** 31 - 1


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    - aliases: alternate client spellings mapped onto column keys
    - list_fields: non-column keys (association id lists) accepted as-is
    """
    writable_fields: frozenset[str]
    required_on_create: frozenset[str] = frozenset()
    aliases: dict[str, str] = field(default_factory=dict)
    list_fields: frozenset[str] = frozenset()


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    # Integers - strict validation to reject floats, bools and out-of-range values
    if isinstance(coltype, Integer):
        if _is_int(value) and in_int_range(value):
            return value
        raise ValidationError(f"{col.key} must be an integer")

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        raise ValidationError(f"{col.key} must be true or false")

    # Calendar dates arrive as YYYY-MM-DD strings
    if isinstance(coltype, Date):
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                parsed = parse_date(value)
            except ValueError:
                raise ValidationError(f"{col.key} must be a date in YYYY-MM-DD format")
            if parsed is None:
                raise ValidationError(f"{col.key} must be a date in YYYY-MM-DD format")
            return parsed
        raise ValidationError(f"{col.key} must be a date in YYYY-MM-DD format")

    if isinstance(coltype, (String, Text)):
        if not isinstance(value, str):
            raise ValidationError(f"{col.key} must be a string")
        return value.strip()

    return value


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def in_int_range(value: int) -> bool:
    """True if value fits an INTEGER column on every supported database."""
    return INT_MIN <= value <= INT_MAX


def coerce_id_list(key: str, raw: Any) -> list[int]:
    """Validate a JSON array of integer ids (no bools, no duplicates)."""
    if not isinstance(raw, list):
        raise ValidationError(f"{key} must be a list of integers")
    ids: list[int] = []
    for item in raw:
        if not _is_int(item):
            raise ValidationError(f"{key} must be a list of integers")
        if not in_int_range(item):
            raise ValidationError(f"{key} contains an out-of-range id: {item}")
        ids.append(item)
    if len(set(ids)) != len(ids):
        raise ValidationError(f"{key} must not contain duplicates")
    return ids


def coerce_int_list(key: str, raw: Any) -> list[int]:
    if not isinstance(raw, list):
        raise ValidationError(f"{key} must be a list of integers")
    for item in raw:
        if not _is_int(item):
            raise ValidationError(f"{key} must be a list of integers")
        if not in_int_range(item):
            raise ValidationError(f"{key} contains an out-of-range value: {item}")
    return list(raw)


def json_body() -> dict:
    """
    Parsed JSON body of the current request.

    An empty body reads as {}. A body that is present but is not valid JSON
    is rejected instead of being treated as empty.
    """
    if not request.get_data(cache=True):
        return {}
    data = request.get_json(force=True, silent=True)
    if data is None:
        raise ValidationError("Invalid JSON payload")
    return data


def validate_payload(
    *,
    model: DeclarativeMeta,
    payload: dict,
    policy: ModelValidationPolicy,
    partial: bool,
) -> dict:
    """
    Validates + normalizes incoming JSON against:
    - SQLAlchemy column metadata (nullable, type, String length)
    - a policy allowlist (writable_fields)
    - required_on_create (if partial=False)
    Returns a cleaned patch dict with only writable fields. List fields named
    by the policy are passed through untouched for the caller to check.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    normalized = {}
    for k, v in payload.items():
        k = policy.aliases.get(k, k)
        if k in SERVER_OWNED_FIELDS:
            continue
        normalized[k] = v

    if not partial:
        missing = sorted(f for f in policy.required_on_create if f not in normalized)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}")

    cols = _columns_by_key(model)

    # Reject unknown / non-writable fields
    for k in normalized.keys():
        if k in policy.list_fields:
            continue
        if k not in policy.writable_fields:
            raise ValidationError(f"Field not allowed: {k}")
        if k not in cols:
            raise ValidationError(f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in normalized.items():
        if k in policy.list_fields:
            patch[k] = raw
            continue

        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise ValidationError(f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        # Blank string check for non-nullable text fields
        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise ValidationError(f"{k} cannot be blank")

        # Max length check for String(n)
        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise ValidationError(f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch
