"""Matriculation number format rules."""

import re
from typing import Optional, Set

from app.core.config import settings
from app.core.exceptions import InvalidMatricNumberError


def _matric_pattern(digits: int) -> "re.Pattern[str]":
    return re.compile(rf"^\d{{{digits}}}$")


MATRIC_PATTERN = _matric_pattern(settings.MATRIC_NUMBER_DIGITS)


def normalize_matric_number(value: str) -> str:
    """Strip surrounding whitespace and upper-case legacy alphanumeric ids"""
    return (value or "").strip().upper()


def is_valid_matric_number(value: str, legacy_ids: Optional[Set[str]] = None) -> bool:
    """
    A matric number is valid when it is exactly MATRIC_NUMBER_DIGITS digits,
    or when it appears verbatim in the legacy allow-list.
    """
    normalized = normalize_matric_number(value)
    if not normalized:
        return False
    if legacy_ids is None:
        legacy_ids = settings.MATRIC_LEGACY_IDS
    if normalized in legacy_ids:
        return True
    return bool(MATRIC_PATTERN.match(normalized))


def validate_matric_number(value: str, legacy_ids: Optional[Set[str]] = None) -> str:
    """Return the normalized matric number or raise InvalidMatricNumberError"""
    if not is_valid_matric_number(value, legacy_ids):
        raise InvalidMatricNumberError((value or "").strip())
    return normalize_matric_number(value)
