"""Unit tests for recipient address normalization."""

import pytest

from ledgerbot.lib.exceptions import ValidationError
from ledgerbot.services.whatsapp.addressing import normalize_address, strip_number, to_address


class TestStripNumber:
    """Tests for digit extraction."""

    def test_removes_formatting(self):
        assert strip_number("+55 (11) 98888-7777") == "5511988887777"

    def test_none_becomes_empty(self):
        assert strip_number(None) == ""


class TestNormalizeAddress:
    """Tests for candidate generation."""

    def test_nine_digit_mobile_adds_eight_digit_variant(self):
        candidates = normalize_address("5511988887777")

        assert candidates[0] == "5511988887777@s.whatsapp.net"
        assert "551188887777@s.whatsapp.net" in candidates
        assert len(candidates) == 2

    def test_eight_digit_mobile_adds_nine_digit_variant(self):
        candidates = normalize_address("551188887777")

        assert candidates[0] == "551188887777@s.whatsapp.net"
        assert "5511988887777@s.whatsapp.net" in candidates
        assert len(candidates) == 2

    def test_formatted_input_is_stripped(self):
        candidates = normalize_address("+55 (11) 98888-7777")

        assert candidates[0] == "5511988887777@s.whatsapp.net"

    def test_nine_digits_without_leading_nine_has_no_variant(self):
        # 11 national digits but the subscriber part does not start with 9
        assert normalize_address("5511888877776") == ("5511888877776@s.whatsapp.net",)

    def test_foreign_number_has_single_candidate(self):
        assert normalize_address("14155550123") == ("14155550123@s.whatsapp.net",)

    def test_landline_length_outside_range_has_single_candidate(self):
        assert normalize_address("55119888") == ("55119888@s.whatsapp.net",)

    def test_full_address_returned_unchanged(self):
        assert normalize_address("123-456@g.us") == ("123-456@g.us",)

    def test_custom_domain(self):
        candidates = normalize_address("5511988887777", domain="c.us")

        assert candidates == ("5511988887777@c.us", "551188887777@c.us")

    @pytest.mark.parametrize("raw", ["", "abc", "+() -"])
    def test_no_digits_rejected(self, raw):
        with pytest.raises(ValidationError) as exc_info:
            normalize_address(raw)

        assert exc_info.value.field == "phone"


class TestToAddress:
    """Tests for literal address formatting."""

    def test_formats_digits_without_variants(self):
        assert to_address("55 11 98888-7777") == "5511988887777@s.whatsapp.net"

    def test_full_address_returned_unchanged(self):
        assert to_address("5511988887777@s.whatsapp.net") == "5511988887777@s.whatsapp.net"

    def test_no_digits_rejected(self):
        with pytest.raises(ValidationError):
            to_address("n/a")
