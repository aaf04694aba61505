from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from sqlalchemy import Boolean, Date, DateTime, Integer, String, Text
from sqlalchemy.orm import DeclarativeMeta

from .errors import ValidationError
from .models import PAYMENT_METHODS
from .time_utils import parse_iso_date, parse_iso_datetime


# Largest per-cylinder price or payment accepted: 9,999,999.99 in minor units
MAX_AMOUNT_CENTS = 999_999_999

# Largest cylinder count accepted on a single line, return or adjustment
MAX_QUANTITY = 1_000_000

# Row ids and stored counts are 32-bit columns
MAX_INT32 = 2_147_483_647

PHONE_RE = re.compile(r"^[0-9]{10}$")


def _field_error(key: str, message: str) -> ValidationError:
    return ValidationError(message, errors={key: message})


@dataclass(frozen=True)
class ModelValidationPolicy:
    """
    Central policy layer:
    - writable_fields: what clients are allowed to set (security boundary)
    - required_on_create: fields required for POST
    """
    writable_fields: set[str]
    required_on_create: set[str] = None  # type: ignore


DISTRIBUTOR_POLICY = ModelValidationPolicy(
    writable_fields={"distributor_name", "contact_number", "address"},
    required_on_create={"distributor_name", "contact_number", "address"},
)

STAFF_POLICY = ModelValidationPolicy(
    writable_fields={"staff_name", "mobile_number"},
    required_on_create={"staff_name", "mobile_number"},
)

CUSTOMER_POLICY = ModelValidationPolicy(
    writable_fields={"customer_name", "phone_number", "address"},
    required_on_create={"customer_name", "phone_number"},
)

PAYMENT_POLICY = ModelValidationPolicy(
    writable_fields={
        "distributor_id", "amount_paid_cents", "payment_date",
        "payment_method", "transaction_reference",
    },
    required_on_create={"distributor_id", "amount_paid_cents", "payment_date", "payment_method"},
)

PAYMENT_UPDATE_POLICY = ModelValidationPolicy(
    writable_fields={"amount_paid_cents", "payment_date", "payment_method", "transaction_reference"},
)


def _columns_by_key(model: DeclarativeMeta) -> dict[str, Any]:
    mapper = model.__mapper__
    return {c.key: c for c in mapper.columns}


def coerce_integer(value: Any, key: str) -> int:
    """Strict integer coercion: rejects bools, floats, decimals and scientific notation."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        stripped = value.strip()
        if not stripped:
            raise _field_error(key, f"{key} must be an integer")
        if 'e' in stripped.lower():
            raise _field_error(key, f"{key} must be a plain integer (scientific notation not allowed)")
        if '.' in stripped:
            raise _field_error(key, f"{key} must be an integer (no decimals)")
        try:
            return int(stripped)
        except ValueError:
            raise _field_error(key, f"{key} must be an integer")
    if isinstance(value, float):
        raise _field_error(key, f"{key} must be an integer, not a decimal")
    raise _field_error(key, f"{key} must be an integer")


def coerce_id(value: Any, key: str) -> int:
    """Integer coercion for row ids referenced from a request body."""
    if value is None:
        raise _field_error(key, f"{key} is required")
    value = coerce_integer(value, key)
    if value <= 0 or value > MAX_INT32:
        raise _field_error(key, f"{key} is out of range")
    return value


def coerce_quantity(value: Any, key: str) -> int:
    """A cylinder count in 1..MAX_QUANTITY."""
    value = coerce_integer(value, key)
    if value <= 0:
        raise _field_error(key, f"{key} must be > 0")
    if value > MAX_QUANTITY:
        raise _field_error(key, f"{key} cannot exceed {MAX_QUANTITY}")
    return value


def coerce_date(value: Any, key: str) -> date:
    if isinstance(value, (date, datetime)):
        return parse_iso_date(value)
    if isinstance(value, str):
        try:
            parsed = parse_iso_date(value)
        except ValueError:
            raise _field_error(key, f"{key} must be an ISO-8601 date")
        if parsed is None:
            raise _field_error(key, f"{key} must be an ISO-8601 date")
        return parsed
    raise _field_error(key, f"{key} must be a date")


def _coerce_value(col, value: Any):
    coltype = col.type

    if value is None:
        return None

    if isinstance(coltype, Integer):
        return coerce_integer(value, col.key)

    if isinstance(coltype, Boolean):
        if isinstance(value, bool):
            return value
        return bool(value)

    if isinstance(coltype, Date):
        return coerce_date(value, col.key)

    if isinstance(coltype, DateTime):
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            try:
                dt = parse_iso_datetime(value)
            except ValueError:
                raise _field_error(col.key, f"{col.key} must be an ISO-8601 datetime")
            if dt is None:
                raise _field_error(col.key, f"{col.key} must be an ISO-8601 datetime")
            return dt
        raise _field_error(col.key, f"{col.key} must be a datetime")

    if isinstance(coltype, (String, Text)):
        return str(value).strip()

    return value


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
    Returns a cleaned patch dict with only writable fields.

    partial=False: create semantics (enforce required_on_create)
    partial=True: patch semantics (validate only provided keys, at least one)
    """
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ValidationError("Invalid JSON payload")

    required = policy.required_on_create or set()
    if not partial:
        missing = sorted(f for f in required if f not in payload)
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}",
                errors={f: f"{f} is required" for f in missing},
            )
    elif not payload:
        raise ValidationError("At least one field must be provided for update")

    cols = _columns_by_key(model)

    for k in payload.keys():
        if k not in policy.writable_fields:
            raise _field_error(k, f"Field not allowed: {k}")
        if k not in cols:
            raise _field_error(k, f"Unknown field: {k}")

    patch: dict = {}

    for k, raw in payload.items():
        col = cols[k]

        if raw is None:
            if not col.nullable:
                raise _field_error(k, f"{k} cannot be null")
            patch[k] = None
            continue

        val = _coerce_value(col, raw)

        if isinstance(col.type, (String, Text)) and not col.nullable:
            if isinstance(val, str) and val == "":
                raise _field_error(k, f"{k} cannot be blank")

        if isinstance(col.type, String) and col.type.length and isinstance(val, str):
            if len(val) > col.type.length:
                raise _field_error(k, f"{k} exceeds max length {col.type.length}")

        patch[k] = val

    return patch


def _require_length(patch: dict, key: str, label: str, minimum: int, maximum: int) -> None:
    if key not in patch or patch[key] is None:
        return
    value = patch[key]
    if len(value) < minimum:
        raise _field_error(key, f"{label} must be at least {minimum} characters")
    if len(value) > maximum:
        raise _field_error(key, f"{label} is too long")


def _require_phone(patch: dict, key: str, label: str) -> None:
    if key in patch and patch[key] is not None and not PHONE_RE.match(patch[key]):
        raise _field_error(key, f"{label} must be 10 digits")


def _require_amount(value: int, key: str) -> None:
    if value <= 0:
        raise _field_error(key, f"{key} must be > 0")
    if value > MAX_AMOUNT_CENTS:
        raise _field_error(key, f"{key} cannot exceed {MAX_AMOUNT_CENTS}")


def enforce_rules_distributor(patch: dict) -> None:
    _require_length(patch, "distributor_name", "Distributor name", 2, 255)
    _require_phone(patch, "contact_number", "Contact number")
    _require_length(patch, "address", "Address", 5, 500)


def enforce_rules_staff(patch: dict) -> None:
    _require_length(patch, "staff_name", "Staff name", 2, 255)
    _require_phone(patch, "mobile_number", "Mobile number")


def enforce_rules_customer(patch: dict) -> None:
    _require_length(patch, "customer_name", "Customer name", 2, 255)
    _require_phone(patch, "phone_number", "Phone number")
    if patch.get("address"):
        _require_length(patch, "address", "Address", 5, 500)


def enforce_rules_payment(patch: dict) -> None:
    if patch.get("distributor_id") is not None:
        patch["distributor_id"] = coerce_id(patch["distributor_id"], "distributor_id")
    if patch.get("amount_paid_cents") is not None:
        _require_amount(patch["amount_paid_cents"], "amount_paid_cents")
    if "payment_method" in patch and patch["payment_method"] not in PAYMENT_METHODS:
        raise _field_error(
            "payment_method",
            f"payment_method must be one of: {', '.join(PAYMENT_METHODS)}",
        )
    if patch.get("transaction_reference") == "":
        patch["transaction_reference"] = None


def enforce_rules_adjustment(
    *, full_cylinder_change: int, empty_cylinder_change: int, reason: str | None
) -> str:
    if full_cylinder_change == 0 and empty_cylinder_change == 0:
        raise ValidationError("At least one of full or empty cylinder change must be non-zero")
    for key, change in (("full_cylinder_change", full_cylinder_change),
                        ("empty_cylinder_change", empty_cylinder_change)):
        if abs(change) > MAX_QUANTITY:
            raise _field_error(key, f"{key} cannot exceed {MAX_QUANTITY} in either direction")
    reason = (reason or "").strip()
    if len(reason) < 5:
        raise _field_error("reason", "Reason must be at least 5 characters")
    if len(reason) > 500:
        raise _field_error("reason", "Reason is too long")
    return reason


def enforce_rules_delivery_person(value: Any) -> str:
    if not isinstance(value, str):
        raise _field_error("delivery_person", "delivery_person is required")
    value = value.strip()
    if len(value) < 2:
        raise _field_error("delivery_person", "Delivery person name must be at least 2 characters")
    if len(value) > 255:
        raise _field_error("delivery_person", "Delivery person name is too long")
    return value


def enforce_date_range(start: date | None, end: date | None) -> None:
    if start is not None and end is not None and start > end:
        raise ValidationError(
            "Start date must be before or equal to end date",
            errors={"start_date": "must be on or before end_date"},
        )


def validate_line_items(
    raw: Any,
    *,
    field: str,
    positive: tuple[str, ...],
    non_negative: tuple[str, ...] = (),
    ids: tuple[str, ...] = ("cylinder_type_id",),
    required: bool = True,
) -> list[dict]:
    """
    Validate an array of line objects (order items, returns, sales items, ...).

    Every key in ids/positive must be an integer > 0, every key in
    non_negative an integer >= 0. Errors are collected and reported under
    keys like "items[0].quantity".
    """
    if raw is None:
        raw = []
    if not isinstance(raw, list):
        raise _field_error(field, f"{field} must be an array")
    if required and not raw:
        raise _field_error(field, f"At least one entry is required in {field}")

    errors: dict[str, str] = {}
    lines: list[dict] = []

    for index, entry in enumerate(raw):
        prefix = f"{field}[{index}]"
        if not isinstance(entry, dict):
            errors[prefix] = "must be an object"
            continue

        line: dict = {}
        for key in ids + positive + non_negative:
            path = f"{prefix}.{key}"
            if entry.get(key) is None:
                errors[path] = f"{key} is required"
                continue
            try:
                value = coerce_integer(entry[key], key)
            except ValidationError as exc:
                errors[path] = exc.message
                continue
            if key in non_negative:
                if value < 0:
                    errors[path] = f"{key} cannot be negative"
                    continue
            elif value <= 0:
                errors[path] = f"{key} must be > 0"
                continue
            if key in ids:
                if value > MAX_INT32:
                    errors[path] = f"{key} is out of range"
                    continue
            elif key.endswith("_cents"):
                if value > MAX_AMOUNT_CENTS:
                    errors[path] = f"{key} cannot exceed {MAX_AMOUNT_CENTS}"
                    continue
            elif value > MAX_QUANTITY:
                errors[path] = f"{key} cannot exceed {MAX_QUANTITY}"
                continue
            line[key] = value
        lines.append(line)

    if errors:
        raise ValidationError(f"Invalid {field}", errors=errors)
    return lines


def validate_opening_stock_items(raw: Any) -> list[dict]:
    items = validate_line_items(
        raw,
        field="items",
        positive=(),
        non_negative=("full_cylinders", "empty_cylinders"),
    )
    seen: set[int] = set()
    for index, item in enumerate(items):
        if item["full_cylinders"] == 0 and item["empty_cylinders"] == 0:
            raise _field_error(
                f"items[{index}]",
                "At least one of full or empty cylinders must be greater than 0",
            )
        if item["cylinder_type_id"] in seen:
            raise _field_error(f"items[{index}].cylinder_type_id", "Duplicate cylinder type in items")
        seen.add(item["cylinder_type_id"])
    return items


def query_date(args, key: str, *, required: bool = False) -> date | None:
    """Read an ISO date from query args; blank counts as absent."""
    raw = args.get(key)
    if raw is None or not raw.strip():
        if required:
            raise _field_error(key, f"{key} is required")
        return None
    return coerce_date(raw, key)


def query_bool(args, key: str, default: bool | None = None) -> bool | None:
    raw = args.get(key)
    if raw is None or raw == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes")
