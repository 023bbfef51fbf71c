"""Tests for snmpvlan.portspec parsing and VLAN id validation."""

from __future__ import annotations

import pytest

from snmpvlan.exceptions import ValidationError
from snmpvlan.portspec import PortSpecParser, parse_port_spec, validate_vlan_id


class TestParse:
    """Test PortSpecParser.parse."""

    def test_range(self):
        """An inclusive range expands to every port."""
        assert parse_port_spec("1-4", 24) == [1, 2, 3, 4]

    def test_single_port(self):
        """A single number is one port."""
        assert parse_port_spec("7", 24) == [7]

    def test_mixed_tokens_sorted_and_deduplicated(self):
        """Output is ascending with duplicates removed."""
        assert parse_port_spec("10,1-3,2,10-11", 24) == [1, 2, 3, 10, 11]

    def test_whitespace_tolerated(self):
        """Blanks around tokens and dashes are ignored."""
        assert parse_port_spec(" 1 - 2 , 5 ", 24) == [1, 2, 5]

    def test_single_port_range(self):
        """N-N is a valid one-port range."""
        assert parse_port_spec("5-5", 24) == [5]

    def test_out_of_range(self):
        """A port above port_count is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            parse_port_spec("5", 4)
        assert exc_info.value.token == "5"
        assert exc_info.value.valid_range == (1, 4)

    def test_range_end_out_of_range(self):
        """A range running past port_count is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            parse_port_spec("20-30", 24)
        assert "1-24" in str(exc_info.value)

    def test_port_zero(self):
        """Ports are 1-based."""
        with pytest.raises(ValidationError):
            parse_port_spec("0-3", 24)

    def test_inverted_range(self):
        """start > end is rejected."""
        with pytest.raises(ValidationError) as exc_info:
            parse_port_spec("4-2", 24)
        assert "inverted" in str(exc_info.value)
        assert exc_info.value.token == "4-2"

    @pytest.mark.parametrize(
        "spec", ["a", "1-", "-3", "1-2-3", "1;2", "1,,2", "2.5", "1 2", "1 0-3", "1-2 3", "\u0661", "1-\u0663"]
    )
    def test_malformed_tokens(self, spec):
        """Non-numeric or badly shaped tokens are rejected."""
        with pytest.raises(ValidationError):
            parse_port_spec(spec, 24)

    @pytest.mark.parametrize("spec", ["", "   "])
    def test_empty_spec(self, spec):
        """An empty spec is rejected."""
        with pytest.raises(ValidationError):
            parse_port_spec(spec, 24)

    def test_first_bad_token_reported(self):
        """Validation short-circuits on the first offending token."""
        with pytest.raises(ValidationError) as exc_info:
            parse_port_spec("1,x,99", 24)
        assert exc_info.value.token == "x"


class TestValidateAndNormalize:
    """Test PortSpecParser.validate / normalize."""

    def test_validate_iterable(self):
        """An iterable of ints is range-checked, sorted and de-duplicated."""
        assert PortSpecParser(24).validate({3, 1, 3}) == [1, 3]

    def test_validate_out_of_range(self):
        """Range rules apply to pre-parsed ports too."""
        with pytest.raises(ValidationError):
            PortSpecParser(24).validate([1, 25])

    def test_validate_rejects_non_int(self):
        """Strings inside an iterable are not silently accepted."""
        with pytest.raises(ValidationError):
            PortSpecParser(24).validate(["1"])

    def test_validate_empty(self):
        """An empty port set is rejected."""
        with pytest.raises(ValidationError):
            PortSpecParser(24).validate([])

    def test_normalize_dispatches_on_type(self):
        """Strings are parsed, iterables validated."""
        parser = PortSpecParser(8)
        assert parser.normalize("1-2") == [1, 2]
        assert parser.normalize([2, 1]) == [1, 2]

    def test_port_count_must_be_positive(self):
        """A parser for zero ports is a programming error."""
        with pytest.raises(ValueError):
            PortSpecParser(0)


class TestValidateVlanId:
    """Test validate_vlan_id."""

    @pytest.mark.parametrize("vlan_id", [1, 100, 4094])
    def test_valid(self, vlan_id):
        """1..4094 are accepted."""
        assert validate_vlan_id(vlan_id) == vlan_id

    def test_numeric_string(self):
        """Numeric strings are converted."""
        assert validate_vlan_id("42") == 42

    @pytest.mark.parametrize("vlan_id", [0, 4095, -1, "abc", "", True, 1.5, "\u00b2", "\u0664\u0662", "1 0"])
    def test_invalid(self, vlan_id):
        """Out-of-range or non-integer ids raise ValidationError."""
        with pytest.raises(ValidationError) as exc_info:
            validate_vlan_id(vlan_id)
        assert exc_info.value.valid_range == (1, 4094)
