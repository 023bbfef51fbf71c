"""Port specification parsing and VLAN id validation.

A port spec is a comma separated list of single ports and inclusive ranges,
e.g. ``"1-4,7,10-12"``. Parsing never contacts the device.
"""

from __future__ import annotations

import re
from typing import Iterable

from snmpvlan.exceptions import ValidationError

VLAN_ID_MIN = 1
VLAN_ID_MAX = 4094

_TOKEN_RE = re.compile(r"^(\d+)\s*(?:-\s*(\d+))?$", re.ASCII)
_VLAN_ID_RE = re.compile(r"\d+", re.ASCII)


def validate_vlan_id(vlan_id: int | str) -> int:
    """Return ``vlan_id`` as int if it lies in 1..4094, else raise :class:`ValidationError`."""
    if isinstance(vlan_id, bool):
        raise ValidationError(f"invalid VLAN id {vlan_id!r}", token=str(vlan_id), valid_range=(VLAN_ID_MIN, VLAN_ID_MAX))
    if isinstance(vlan_id, str):
        if not _VLAN_ID_RE.fullmatch(vlan_id.strip()):
            raise ValidationError(
                f"invalid VLAN id {vlan_id!r}", token=vlan_id, valid_range=(VLAN_ID_MIN, VLAN_ID_MAX)
            )
        vlan_id = int(vlan_id.strip())
    if not isinstance(vlan_id, int) or not VLAN_ID_MIN <= vlan_id <= VLAN_ID_MAX:
        raise ValidationError(
            f"VLAN id {vlan_id} out of range {VLAN_ID_MIN}-{VLAN_ID_MAX}",
            token=str(vlan_id),
            valid_range=(VLAN_ID_MIN, VLAN_ID_MAX),
            vlan_id=vlan_id if isinstance(vlan_id, int) else None,
        )
    return vlan_id


class PortSpecParser:
    """Parse human-entered port specs against a switch's port count."""

    def __init__(self, port_count: int) -> None:
        if port_count < 1:
            raise ValueError(f"port_count must be positive, got {port_count}")
        self.port_count = port_count

    @property
    def valid_range(self) -> tuple[int, int]:
        return 1, self.port_count

    def _out_of_range(self, port: int, token: str) -> ValidationError:
        return ValidationError(
            f"port {port} in {token!r} is outside the switch's port range 1-{self.port_count}",
            token=token,
            valid_range=self.valid_range,
        )

    def parse_token(self, token: str) -> range:
        """Parse one ``N`` or ``N-M`` token into an inclusive range of ports."""
        raw = token
        token = token.strip()
        m = _TOKEN_RE.match(token)
        if not m:
            raise ValidationError(
                f"malformed port token {raw!r} (expected N or N-M)", token=raw, valid_range=self.valid_range
            )
        start = int(m.group(1))
        end = int(m.group(2)) if m.group(2) is not None else start
        if start > end:
            raise ValidationError(
                f"inverted port range {raw!r} (start > end)", token=raw, valid_range=self.valid_range
            )
        for port in (start, end):
            if not 1 <= port <= self.port_count:
                raise self._out_of_range(port, raw)
        return range(start, end + 1)

    def parse(self, spec: str) -> list[int]:
        """Parse ``spec`` into an ascending, de-duplicated list of ports.

        Tokens are checked left to right; the first invalid one raises
        :class:`ValidationError` naming the token and the valid range.
        """
        if spec is None or not str(spec).strip():
            raise ValidationError("empty port specification", token="", valid_range=self.valid_range)
        ports: set[int] = set()
        for token in str(spec).split(","):
            ports.update(self.parse_token(token))
        return sorted(ports)

    def validate(self, ports: Iterable[int]) -> list[int]:
        """Apply the same range rules to an already-parsed collection of ports."""
        result: set[int] = set()
        for port in ports:
            if isinstance(port, bool) or not isinstance(port, int):
                raise ValidationError(f"malformed port {port!r}", token=str(port), valid_range=self.valid_range)
            if not 1 <= port <= self.port_count:
                raise self._out_of_range(port, str(port))
            result.add(port)
        if not result:
            raise ValidationError("empty port set", token="", valid_range=self.valid_range)
        return sorted(result)

    def normalize(self, ports: str | Iterable[int]) -> list[int]:
        """Accept either a spec string or an iterable of ints."""
        if isinstance(ports, str):
            return self.parse(ports)
        return self.validate(ports)


def parse_port_spec(spec: str, port_count: int) -> list[int]:
    """Shortcut for ``PortSpecParser(port_count).parse(spec)``."""
    return PortSpecParser(port_count).parse(spec)
