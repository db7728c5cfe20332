"""
validator.py — USSD keystroke validation.

Phone numbers are accepted in any of the spellings Nigerian subscribers type:
  08031234567, 2348031234567, +2348031234567, 8031234567
The whole keystroke must match; separators such as spaces or dashes are rejected.
"""
from __future__ import annotations

import re

from wethrift.ussd.schemas import PHONE_PATTERN

_PHONE_RE = re.compile(PHONE_PATTERN, re.ASCII)
_PIN_RE = re.compile(r"^[0-9]{6}$")


def is_valid_phone_number(phone: str) -> bool:
    """True for a Nigerian MSISDN with optional +234 / 234 / 0 prefix."""
    return _PHONE_RE.fullmatch(phone) is not None


def is_valid_pin(pin: str) -> bool:
    """True for exactly six ASCII digits."""
    return _PIN_RE.fullmatch(pin) is not None


def national_number(phone: str) -> str:
    """
    Strip the country/trunk prefix: '+2348031234567' -> '8031234567'.

    Raises:
        ValueError: if the input is not a valid Nigerian MSISDN.
    """
    match = _PHONE_RE.fullmatch(phone)
    if match is None:
        raise ValueError(f"Not a valid Nigerian phone number: {mask_phone(phone)}")
    prefix = match.group(1) or ""
    return phone[len(prefix):]


def phone_variants(phone: str) -> list[str]:
    """
    Every spelling a member's phone may be stored under.

    Registration accepts all prefixed forms, so lookups must match any of them.
    """
    national = national_number(phone)
    return [f"0{national}", f"234{national}", f"+234{national}", national]


def mask_phone(phone: str) -> str:
    """Mask all but the last four characters for logging: '08031234567' -> '*******4567'."""
    if len(phone) <= 4:
        return "*" * len(phone)
    return "*" * (len(phone) - 4) + phone[-4:]
