from __future__ import annotations

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional

from email_validator import EmailNotValidError, validate_email

from ..core.constants import EMAIL_MAX_LENGTH, MAX_BILL_AMOUNT, MONEY_QUANTUM
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} can't be blank", {field_name: "can't be blank"})
    return str(value).strip()


def require_min_length(value: Optional[str], field_name: str, min_len: int) -> str:
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} is invalid", {field_name: "is invalid"})
    if value is None or len(value) < min_len:
        problem = f"is too short (minimum is {min_len} characters)"
        raise ValidationError(f"{field_name} {problem}", {field_name: problem})
    return value


def require_max_length(value: str, field_name: str, max_len: int) -> str:
    if len(value) > max_len:
        problem = f"is too long (maximum is {max_len} characters)"
        raise ValidationError(f"{field_name} {problem}", {field_name: problem})
    return value


def require_text(value: Optional[str], field_name: str, max_len: int) -> str:
    """Non-blank, stripped and no longer than the column allows."""

    return require_max_length(require_non_empty(value, field_name), field_name, max_len)


def normalize_email(value: Optional[str], field_name: str = "email") -> str:
    raw = require_non_empty(value, field_name)
    try:
        email = validate_email(raw, check_deliverability=False).normalized
    except EmailNotValidError:
        raise ValidationError(f"{field_name} is invalid", {field_name: "is invalid"})
    return require_max_length(email, field_name, EMAIL_MAX_LENGTH)


def parse_amount(value, field_name: str = "amount") -> Decimal:
    """Parse a positive money amount, rounded to cents."""

    if value is None or (isinstance(value, str) and not value.strip()) or isinstance(value, bool):
        raise ValidationError(f"{field_name} can't be blank", {field_name: "can't be blank"})
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation:
        raise ValidationError(f"{field_name} is not a number", {field_name: "is not a number"})
    if not amount.is_finite():
        raise ValidationError(f"{field_name} is not a number", {field_name: "is not a number"})

    # Range checks run before quantize: huge exponents overflow the decimal context.
    if amount > MAX_BILL_AMOUNT:
        problem = f"must be less than or equal to {MAX_BILL_AMOUNT}"
        raise ValidationError(f"{field_name} {problem}", {field_name: problem})
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0", {field_name: "must be greater than 0"})

    amount = amount.quantize(MONEY_QUANTUM, rounding=ROUND_HALF_UP)
    if amount <= 0:
        raise ValidationError(f"{field_name} must be greater than 0", {field_name: "must be greater than 0"})
    return amount


def parse_id(value, field_name: str) -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} is invalid", {field_name: "is invalid"})
    if parsed <= 0:
        raise ValidationError(f"{field_name} is invalid", {field_name: "is invalid"})
    return parsed


class FieldErrors:
    """Collects validation problems so a single error can report every field."""

    def __init__(self):
        self._fields: dict[str, str] = {}

    def check(self, func, *args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ValidationError as e:
            self._fields.update(e.fields)
            return None

    def add(self, field_name: str, problem: str) -> None:
        self._fields[field_name] = problem

    def raise_if_any(self) -> None:
        if self._fields:
            raise ValidationError.from_fields(self._fields)
