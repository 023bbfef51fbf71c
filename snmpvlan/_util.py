"""Private helpers for parsing tagged net-snmp style replies."""

from __future__ import annotations

import re

from snmpvlan.exceptions import TransportError

_TAGGED_RE = re.compile(r"^\s*([A-Za-z][A-Za-z0-9-]*)\s*:\s*(.*?)\s*$", re.DOTALL)
_INTEGER_TAGS = {"INTEGER", "Integer32", "Gauge32", "Unsigned32", "Counter32", "Counter64", "Timeticks"}
_HEX_BYTE_RE = re.compile(r"^[0-9A-Fa-f]{2}$")


def split_reply(reply: str) -> tuple[str, str]:
    """Split ``'TYPE: payload'`` into ``('TYPE', 'payload')``."""
    if reply is None:
        raise TransportError("empty SNMP reply")
    m = _TAGGED_RE.match(reply)
    if not m:
        raise TransportError(f"untagged SNMP reply: {reply!r}")
    return m.group(1), m.group(2)


def _unquote(payload: str) -> str:
    if len(payload) >= 2 and payload.startswith('"') and payload.endswith('"'):
        return payload[1:-1]
    return payload


def parse_integer(reply: str) -> int:
    """Parse ``INTEGER: 28``, ``INTEGER: active(1)``, ``Gauge32: 100`` or ``Timeticks: (42) 0:00:00.42``."""
    tag, payload = split_reply(reply)
    if tag not in _INTEGER_TAGS:
        raise TransportError(f"expected an integer reply, got {tag}: {payload!r}")
    m = re.search(r"\((-?\d+)\)", payload) or re.match(r"^(-?\d+)", payload)
    if m is None:
        raise TransportError(f"unparsable integer reply: {reply!r}")
    return int(m.group(1))


def _hex_payload_to_bytes(payload: str, reply: str) -> bytes:
    parts = payload.split()
    if not all(_HEX_BYTE_RE.match(p) for p in parts):
        raise TransportError(f"unparsable Hex-STRING reply: {reply!r}")
    return bytes(int(p, 16) for p in parts)


def parse_string(reply: str) -> str:
    """Parse ``STRING: "core-sw1"`` (quotes optional); ``Hex-STRING`` is decoded as UTF-8."""
    tag, payload = split_reply(reply)
    if tag == "STRING":
        return _unquote(payload)
    if tag == "Hex-STRING":
        return _hex_payload_to_bytes(payload, reply).decode("utf-8", errors="replace")
    raise TransportError(f"expected a string reply, got {tag}: {payload!r}")


def parse_hex_string(reply: str) -> bytes:
    """Parse a PortList reply into raw bytes.

    Devices render octet strings as ``Hex-STRING: F0 00 00``; when every byte
    happens to be printable net-snmp shows ``STRING: "..."`` instead, which is
    mapped back byte for byte.
    """
    tag, payload = split_reply(reply)
    if tag == "Hex-STRING":
        return _hex_payload_to_bytes(payload, reply)
    if tag == "STRING":
        try:
            return _unquote(payload).encode("latin-1")
        except UnicodeEncodeError as exc:
            raise TransportError(f"unparsable PortList reply: {reply!r}") from exc
    raise TransportError(f"expected a Hex-STRING reply, got {tag}: {payload!r}")


def oid_index(oid: str) -> int:
    """Return the trailing numeric component of a dotted OID."""
    m = re.search(r"\.?(\d+)$", oid.strip())
    if not m:
        raise TransportError(f"OID has no numeric index: {oid!r}")
    return int(m.group(1))
