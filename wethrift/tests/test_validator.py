"""
test_validator.py — phone number and PIN keystroke validation.
"""
from __future__ import annotations

import re

import pytest

from wethrift.ussd.schemas import PHONE_PATTERN
from wethrift.ussd.validator import (
    is_valid_phone_number,
    is_valid_pin,
    mask_phone,
    national_number,
    phone_variants,
)


@pytest.mark.parametrize(
    "phone",
    [
        "08031234567",
        "2348031234567",
        "+2348031234567",
        "8031234567",
        "07012345678",
        "09051234567",
        "08121234567",
    ],
)
def test_valid_phone_numbers(phone) -> None:
    assert is_valid_phone_number(phone) is True


@pytest.mark.parametrize(
    "phone",
    [
        "",
        "notaphone",
        "0803123456",        # too short
        "080312345678",      # too long
        "06031234567",       # 6 is not a network digit
        "08231234567",       # operator digit must be 0 or 1
        "+2448031234567",    # foreign country code
        "0803-123-4567",
        "0803 123 4567",
        "0803\t1234567",
        " 08031234567 ",
        "０８０３１２３４５６７",  # full-width digits
    ],
)
def test_invalid_phone_numbers(phone) -> None:
    assert is_valid_phone_number(phone) is False


@pytest.mark.parametrize("pin", ["123456", "000000", "999999"])
def test_valid_pins(pin) -> None:
    assert is_valid_pin(pin) is True


@pytest.mark.parametrize("pin", ["", "12345", "1234567", "12a456", "12 456", "١٢٣٤٥٦"])
def test_invalid_pins(pin) -> None:
    assert is_valid_pin(pin) is False


def test_national_number_strips_prefix() -> None:
    assert national_number("+2348031234567") == "8031234567"
    assert national_number("2348031234567") == "8031234567"
    assert national_number("08031234567") == "8031234567"
    assert national_number("8031234567") == "8031234567"


def test_national_number_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        national_number("notaphone")


def test_phone_variants_cover_all_spellings() -> None:
    assert phone_variants("+2348031234567") == [
        "08031234567",
        "2348031234567",
        "+2348031234567",
        "8031234567",
    ]


def test_mask_phone_keeps_last_four() -> None:
    assert mask_phone("08031234567") == "*******4567"
    assert mask_phone("123") == "***"


@pytest.mark.parametrize(
    "phone",
    ["08031234567", "+2348031234567", "0803 123 4567", "0803\t1234567", "2348031234567 ", "7011112222"],
)
def test_phone_validator_agrees_with_pattern(phone) -> None:
    assert is_valid_phone_number(phone) is bool(re.fullmatch(PHONE_PATTERN, phone))
