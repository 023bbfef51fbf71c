"""Exception hierarchy for VLAN management.

Four domain kinds, each carrying the context of the failed operation:

* :class:`ValidationError` -- malformed or out-of-range input, no device contact
* :class:`AuthError` -- community probe failed (read or write phase)
* :class:`TransportError` -- GET / SET / WALK failed or the reply was unparsable
* :class:`StateError` -- VLAN state conflicts with the requested operation

Mismatched mask lengths are programming errors and raise plain ``ValueError``.
"""

from __future__ import annotations

from typing import Iterable


class SnmpVlanError(Exception):
    """Base exception for all VLAN management errors."""

    def __init__(
        self,
        message: str,
        *,
        vlan_id: int | None = None,
        ports: Iterable[int] | None = None,
        phase: str | None = None,
        oid: str | None = None,
    ) -> None:
        self.vlan_id = vlan_id
        self.ports = sorted(ports) if ports is not None else None
        self.phase = phase
        self.oid = oid
        super().__init__(message)


class ValidationError(SnmpVlanError):
    """Malformed or out-of-range port spec or VLAN id."""

    def __init__(self, message: str, token: str = "", valid_range: tuple[int, int] | None = None, **context):
        self.token = token
        self.valid_range = valid_range
        super().__init__(message, **context)


class AuthError(SnmpVlanError):
    """Community string probe failed."""

    def __init__(self, kind: str, phase: str = "read", message: str = "", **context):
        self.kind = kind
        context.setdefault("phase", phase)
        super().__init__(message or f"{kind} community check failed ({phase} phase)", **context)


class TransportError(SnmpVlanError):
    """SNMP request failed or returned something the core cannot parse.

    ``partial`` is set when a multi-write operation applied some of its SETs
    before failing; ``applied`` then lists the OIDs already written.
    """

    def __init__(self, message: str, partial: bool = False, applied: Iterable[str] = (), **context):
        self.partial = partial
        self.applied = list(applied)
        super().__init__(message, **context)


class StateError(SnmpVlanError):
    """VLAN is absent / already exists / not empty / was not created."""

    def __init__(self, reason: str, message: str = "", **context):
        self.reason = reason
        super().__init__(message or reason, **context)
