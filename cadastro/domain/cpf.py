"""Domain helpers for CPF validation and formatting."""
from __future__ import annotations

import re

CPF_LENGTH = 11
CANONICAL_PATTERN = re.compile(r"\d{3}\.\d{3}\.\d{3}-\d{2}")
_NON_DIGITS = re.compile(r"\D")


def normalize(raw: str | None) -> str:
    """Strip every non-digit character."""
    return _NON_DIGITS.sub("", raw or "")


def _check_digit(digits: str) -> int:
    # weights run from len+1 down to 2
    weight = len(digits) + 1
    total = sum(int(d) * (weight - i) for i, d in enumerate(digits))
    rest = 11 - (total % 11)
    return 0 if rest >= 10 else rest


def check_digits(base: str) -> str:
    """Return the two check digits for a 9-digit CPF base."""
    digits = normalize(base)
    if len(digits) != 9:
        raise ValueError("CPF base must have exactly 9 digits")
    first = _check_digit(digits)
    second = _check_digit(digits + str(first))
    return f"{first}{second}"


def is_valid(raw: str | None) -> bool:
    """Return True when the value carries a CPF with matching check digits."""
    digits = normalize(raw)
    if len(digits) != CPF_LENGTH:
        return False
    # sequences like 000.000.000-00 pass the modulo-11 rule but are not issued
    if len(set(digits)) == 1:
        return False
    return digits[9:] == check_digits(digits[:9])


def canonicalize(raw: str | None) -> str:
    """
    Format as XXX.XXX.XXX-XX.

    The caller must make sure the value has 11 digits; anything else is a
    programming error and raises ValueError.
    """
    digits = normalize(raw)
    if len(digits) != CPF_LENGTH:
        raise ValueError(f"canonicalize expects {CPF_LENGTH} digits, got {len(digits)}")
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


def is_canonical(value: str | None) -> bool:
    return bool(value) and bool(CANONICAL_PATTERN.fullmatch(value))
