"""
Tests for personnel/core - dates, money, security.
"""
from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from personnel.core.dates import is_current, normalize_end_date, parse_date
from personnel.core.money import format_money, to_major_units, to_minor_units
from personnel.core.security import (
    create_access_token,
    decode_token,
    generate_random_password,
    get_password_hash,
    verify_password,
)


class TestDates:
    def test_parse_date_is_lenient(self):
        assert parse_date("2024-03-01") == date(2024, 3, 1)
        assert parse_date(datetime(2024, 3, 1, 12, 30)) == date(2024, 3, 1)
        assert parse_date("not a date") is None
        assert parse_date(None) is None

    @pytest.mark.parametrize("value", ["", "9999-12-31", "9999-01-01", None, date(9999, 12, 31)])
    def test_open_end_markers_become_none(self, value):
        assert normalize_end_date(value) is None

    def test_real_end_date_is_kept(self):
        assert normalize_end_date("2024-06-30") == date(2024, 6, 30)

    def test_invalid_end_date_raises(self):
        with pytest.raises(ValueError):
            normalize_end_date("30/06/2024")

    @pytest.mark.parametrize("value", [20250101, 2025.5, ["2025-01-01"]])
    def test_non_date_end_date_raises(self, value):
        assert parse_date(value) is None
        with pytest.raises(ValueError):
            normalize_end_date(value)

    def test_is_current(self):
        today = date(2024, 6, 1)
        assert is_current(None, today) is True
        assert is_current(date(2024, 6, 2), today) is True
        assert is_current(today, today) is False


class TestMoney:
    def test_minor_units_round_half_up(self):
        assert to_minor_units(Decimal("8000")) == 800000
        assert to_minor_units("10.005") == 1001
        assert to_minor_units(0.1) == 10

    def test_major_units(self):
        assert to_major_units(800050) == Decimal("8000.50")

    def test_format_money(self):
        assert format_money(800000) == "$8000.00"
        assert format_money(-150) == "-$1.50"
        assert format_money(12345, symbol="€") == "€123.45"


class TestPasswords:
    def test_verify_password_correct(self):
        hashed = get_password_hash("correct_password")
        assert verify_password("correct_password", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("correct_password")
        assert verify_password("wrong_password", hashed) is False

    def test_malformed_hash_never_matches(self):
        assert verify_password("anything", "not-a-bcrypt-hash") is False

    def test_empty_hash_never_matches(self):
        assert verify_password("anything", "") is False
        assert verify_password("anything", None) is False

    def test_random_password(self):
        pw = generate_random_password()
        assert len(pw) == 8
        assert generate_random_password(16) != generate_random_password(16)


class TestTokens:
    def test_round_trip(self):
        token = create_access_token({"sub": "1001", "username": "apereira"})
        payload = decode_token(token)
        assert payload["sub"] == "1001"
        assert payload["username"] == "apereira"

    def test_expired_token_rejected(self):
        token = create_access_token({"sub": "1001"}, expires_delta=timedelta(seconds=-1))
        assert decode_token(token) is None

    def test_garbage_token_rejected(self):
        assert decode_token("not.a.token") is None
