"""
Unit tests for the expense text tokenizer.
"""

from datetime import date

import pytest

from costoflife.core.dates import today
from costoflife.core.errors import InvalidDateFormat
from costoflife.core.lifetime import Lifetime, LifetimeUnit
from costoflife.core.parser import (
    MISSING_AMOUNT,
    extract_amount,
    extract_date,
    extract_fields,
    extract_hashtag,
    is_field_token,
    is_label,
)


class TestTokenExtractors:
    """Test the single token classifiers."""

    @pytest.mark.parametrize("token, expected", [
        ("1729€", "1729"),
        ("9.99€", "9.99"),
        ("10$", "10"),
        ("3.50£", "3.50"),
        ("9.999€", None),
        ("10.5€", None),
        ("10x", None),
        ("€10", None),
        ("rent", None),
    ])
    def test_extract_amount(self, token, expected):
        """Verify only numbers directly followed by a currency symbol match."""
        assert extract_amount(token) == expected

    @pytest.mark.parametrize("token, expected", [
        ("#rent", "rent"),
        (".transport", "transport"),
        ("#my_tag-2", "my_tag-2"),
        ("#2018", None),
        ("Rent#2018", None),
        ("rent", None),
    ])
    def test_extract_hashtag(self, token, expected):
        """Verify tags start with # or . followed by a letter."""
        assert extract_hashtag(token) == expected

    def test_extract_date(self):
        """Verify ddmmyy dates are parsed."""
        assert extract_date("010118") == date(2018, 1, 1)
        assert extract_date("210421") == date(2021, 4, 21)

    def test_extract_date_ignores_other_tokens(self):
        """Verify non date tokens are not dates."""
        assert extract_date("invalid date") is None
        assert extract_date("12345") is None

    def test_extract_date_invalid_day(self):
        """Verify impossible dates raise an error."""
        with pytest.raises(InvalidDateFormat):
            extract_date("320118")
        with pytest.raises(InvalidDateFormat):
            extract_date("290219")

    @pytest.mark.parametrize("token", ["9.99€", "#rent", ".rent", "1m12x", "100d", "010118", "320118"])
    def test_field_tokens(self, token):
        """Verify tokens read as amount, tag, lifetime or date."""
        assert is_field_token(token)

    @pytest.mark.parametrize("token", ["Rent", "Test#1", "0d", "12.345€", "12345", "mobile"])
    def test_name_tokens(self, token):
        """Verify tokens left to the name."""
        assert not is_field_token(token)

    def test_is_label(self):
        """Verify which labels can be written as hashtags."""
        assert is_label("rent")
        assert is_label("big_trip-2")
        assert not is_label("Big Trip")
        assert not is_label("2021")
        assert not is_label("#rent")
        assert not is_label("")


class TestExtractFields:
    """Test splitting a full expense text."""

    def test_all_fields(self):
        """Verify every kind of token lands in its field."""
        fields = extract_fields("Rent 1729€ 1m12x 010118 #rent")
        assert fields.name == "Rent"
        assert fields.amount == "1729"
        assert fields.lifetime.unit == LifetimeUnit.MONTH
        assert fields.lifetime == Lifetime.month(1, 12)
        assert fields.starts_on == date(2018, 1, 1)
        assert fields.tags == ["rent"]

    def test_tokens_in_any_order(self):
        """Verify order of tokens does not matter, name keeps its word order."""
        fields = extract_fields("#nice 100d Something 1000€ we #living bought")
        assert fields.name == "Something we bought"
        assert fields.amount == "1000"
        assert fields.lifetime == Lifetime.day(100)
        assert fields.tags == ["nice", "living"]

    def test_last_token_wins(self):
        """Verify repeated amount, lifetime and date tokens overwrite each other."""
        fields = extract_fields("Phone 10€ 20€ 1d 2w 010120 020220")
        assert fields.amount == "20"
        assert fields.lifetime.unit == LifetimeUnit.WEEK
        assert fields.lifetime.amount == 2
        assert fields.starts_on == date(2020, 2, 2)

    def test_defaults(self):
        """Verify defaults when tokens are missing."""
        fields = extract_fields("we bought nothing")
        assert fields.name == "we bought nothing"
        assert fields.amount == MISSING_AMOUNT
        assert fields.lifetime.unit == LifetimeUnit.SINGLE_DAY
        assert fields.starts_on == today()
        assert fields.tags == []

    def test_empty_name(self):
        """Verify a text made only of tokens has an empty name."""
        fields = extract_fields("10€ #food")
        assert fields.name == ""

    def test_invalid_date(self):
        """Verify an impossible date aborts the extraction."""
        with pytest.raises(InvalidDateFormat):
            extract_fields("Rent#2018 1729€ 1m12x 320118 #rent")
