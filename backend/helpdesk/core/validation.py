# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""
Coercion rules shared by the request schemas.

Each function takes the raw inbound value and either returns the canonical
form or raises ``ValueError``; pydantic turns the ``ValueError`` into a
field-level validation error.
"""

from enum import Enum
from typing import Optional, Type, TypeVar, Union

from pydantic import AnyUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

E = TypeVar("E", bound=Enum)

_URL = TypeAdapter(AnyUrl)


def normalize_enum(value, allowed: Type[E]) -> E:
    """
    Case-insensitive enum lookup: ``"high"``, ``"High"`` and ``"HIGH"`` all
    map to ``allowed.HIGH``.
    """
    if isinstance(value, allowed):
        return value
    if not isinstance(value, str):
        raise ValueError("must be a string")
    candidate = value.strip().upper()
    try:
        return allowed[candidate]
    except KeyError:
        choices = ", ".join(member.name for member in allowed)
        raise ValueError(f"must be one of: {choices}") from None


def parse_non_negative_int(value: Union[int, str]) -> int:
    """Accept an int or a string of decimal digits; reject anything else."""
    if isinstance(value, bool):
        raise ValueError("must be a non-negative integer")
    if isinstance(value, int):
        if value < 0:
            raise ValueError("must be a non-negative integer")
        return value
    if isinstance(value, str) and value.strip().isdigit() and value.strip().isascii():
        return int(value.strip())
    raise ValueError("must be a non-negative integer")


def clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


def blank_to_none(value: Optional[str]) -> Optional[str]:
    """Empty or whitespace-only text means "clear this field"."""
    if value is None:
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def valid_url(value: str) -> str:
    """
    Check that *value* parses as an absolute URL with a host.  The string is
    returned as supplied, not in pydantic's normalised form.
    """
    if not isinstance(value, str):
        raise ValueError("must be a URL string")
    try:
        parsed = _URL.validate_python(value.strip())
    except PydanticValidationError:
        raise ValueError("must be a valid URL") from None
    if not parsed.host:
        raise ValueError("must be a valid URL")
    return value.strip()
