"""Tests for snmpvlan.bitmask PortList codec and mask algebra."""

from __future__ import annotations

import pytest

from snmpvlan import bitmask
from snmpvlan.portspec import parse_port_spec


class TestMaskByteLen:
    """Test mask_byte_len function."""

    @pytest.mark.parametrize(("port_count", "expected"), [(1, 1), (8, 1), (9, 2), (24, 3), (26, 4), (52, 7)])
    def test_rounds_up(self, port_count, expected):
        """Width is ceil(port_count / 8)."""
        assert bitmask.mask_byte_len(port_count) == expected


class TestEncode:
    """Test encode function."""

    def test_first_four_ports(self):
        """Ports 1-4 fill the high nibble of the first byte."""
        assert bitmask.encode({1, 2, 3, 4}, 3) == bytes([0xF0, 0x00, 0x00])

    def test_port_8_is_lowest_bit(self):
        """Port 8 is the least significant bit of byte 0."""
        assert bitmask.encode({8}, 3) == bytes([0x01, 0x00, 0x00])

    def test_port_9_starts_second_byte(self):
        """Port 9 is the most significant bit of byte 1."""
        assert bitmask.encode({9}, 3) == bytes([0x00, 0x80, 0x00])

    def test_last_port(self):
        """Port 24 is the lowest bit of the last byte."""
        assert bitmask.encode({24}, 3) == bytes([0x00, 0x00, 0x01])

    def test_empty_set(self):
        """No ports encode to all zeros of the requested width."""
        assert bitmask.encode(set(), 4) == bytes(4)

    def test_port_outside_width_is_programming_error(self):
        """A port that does not fit the mask raises ValueError."""
        with pytest.raises(ValueError):
            bitmask.encode({25}, 3)

    def test_port_zero_rejected(self):
        """Ports are 1-based."""
        with pytest.raises(ValueError):
            bitmask.encode({0}, 3)


class TestDecode:
    """Test decode function."""

    def test_single_port_first_bit(self):
        """First bit of first byte represents port 1."""
        assert bitmask.decode(b"\x80") == {1}

    def test_ports_across_bytes(self):
        """Ports span multiple bytes."""
        assert bitmask.decode(b"\x80\x01") == {1, 16}

    def test_alternating_pattern(self):
        """0xAA 0x55 decodes to odd ports then even ports."""
        assert bitmask.decode(b"\xaa\x55") == {1, 3, 5, 7, 10, 12, 14, 16}

    def test_empty_bytes(self):
        """Empty bytes return empty set."""
        assert bitmask.decode(b"") == set()

    @pytest.mark.parametrize(
        ("spec", "port_count"),
        [("1-4", 24), ("1,3,5-7", 8), ("24", 24), ("1-52", 52), ("2,9-10,17", 26)],
    )
    def test_roundtrip_from_port_spec(self, spec, port_count):
        """decode(encode(ports)) gives back the parsed port set."""
        ports = set(parse_port_spec(spec, port_count))
        assert bitmask.decode(bitmask.encode(ports, bitmask.mask_byte_len(port_count))) == ports

    @pytest.mark.parametrize("port_count", range(1, 65))
    def test_roundtrip_every_port_and_prefix(self, port_count):
        """Every single port and every 1-N range survives encode then decode."""
        byte_len = bitmask.mask_byte_len(port_count)
        for port in range(1, port_count + 1):
            for spec in (str(port), f"1-{port}", f"{port}-{port_count}"):
                ports = set(parse_port_spec(spec, port_count))
                assert bitmask.decode(bitmask.encode(ports, byte_len)) == ports, spec


class TestMaskAlgebra:
    """Test merge, subtract and complement."""

    def test_merge_is_bytewise_or(self):
        """merge ORs every byte."""
        assert bitmask.merge(b"\xf0\x01", b"\x0f\x80") == b"\xff\x81"

    def test_merge_is_idempotent(self):
        """merge(m, m) == m."""
        m = b"\xa5\x00\x3c"
        assert bitmask.merge(m, m) == m

    def test_complement(self):
        """complement XORs every byte with 0xFF."""
        assert bitmask.complement(b"\xf0\x00\xff") == b"\x0f\xff\x00"

    def test_subtract_clears_bits(self):
        """subtract(a, b) keeps only bits of a not in b."""
        assert bitmask.subtract(b"\xff\x0f", b"\xf0\x01") == b"\x0f\x0e"

    def test_add_then_remove_restores_original(self):
        """subtract(merge(m, p), p) == m for disjoint m and p."""
        m = bitmask.encode({1, 5, 17}, 3)
        p = bitmask.encode({2, 3, 24}, 3)
        assert bitmask.subtract(bitmask.merge(m, p), p) == m

    def test_subtract_absent_ports_is_noop(self):
        """Removing ports that are not members leaves the mask untouched."""
        m = bitmask.encode({1, 2}, 3)
        assert bitmask.subtract(m, bitmask.encode({9}, 3)) == m

    @pytest.mark.parametrize("op", [bitmask.merge, bitmask.subtract])
    def test_length_mismatch_raises_value_error(self, op):
        """Masks of different widths are never combined."""
        with pytest.raises(ValueError, match="length mismatch"):
            op(b"\x00\x00\x00", b"\x00\x00\x00\x00")


class TestHelpers:
    """Test fit, is_empty, empty_mask and to_hex."""

    def test_fit_pads_short_mask(self):
        """Short masks are right-padded with zero bytes."""
        assert bitmask.fit(b"\xf0", 3) == b"\xf0\x00\x00"

    def test_fit_keeps_longer_mask(self):
        """Masks wider than requested are not truncated."""
        assert bitmask.fit(b"\xf0\x00\x00\x01", 3) == b"\xf0\x00\x00\x01"

    def test_is_empty(self):
        """Only all-zero masks are empty."""
        assert bitmask.is_empty(bitmask.empty_mask(4))
        assert not bitmask.is_empty(b"\x00\x01")

    def test_to_hex(self):
        """Masks render as space separated upper-case hex pairs."""
        assert bitmask.to_hex(b"\xf0\x00\x0a") == "F0 00 0A"
