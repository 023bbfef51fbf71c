"""Abstract SNMP transport collaborator.

The VLAN core talks to the device exclusively through this contract. Replies
are net-snmp style display strings tagged with their SNMP type, e.g.
``INTEGER: 28``, ``STRING: "core-sw1"``, ``Hex-STRING: F0 00 00`` or
``Gauge32: 1000000000``; the core parses them itself.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Self

# net-snmp SET type letters understood by every transport
VALUE_TYPE_INTEGER = "i"
VALUE_TYPE_STRING = "s"
VALUE_TYPE_HEX = "x"
VALUE_TYPES = (VALUE_TYPE_INTEGER, VALUE_TYPE_STRING, VALUE_TYPE_HEX)


class BaseSnmpTransport(ABC):
    """Abstract base class for SNMP transports.

    Implementations raise :class:`~snmpvlan.exceptions.TransportError` for any
    failure (timeout, error status, noSuchObject/noSuchInstance). Timeouts and
    retries are the transport's business; the core never retries.
    """

    @abstractmethod
    def get(self, ip: str, community: str, oid: str) -> str:
        """GET a single object and return its tagged textual value."""

    @abstractmethod
    def set(self, ip: str, community: str, oid: str, value_type: str, value: str) -> None:
        """SET a single object. ``value_type`` is one of :data:`VALUE_TYPES`."""

    @abstractmethod
    def walk(self, ip: str, community: str, oid_prefix: str) -> list[tuple[str, str]]:
        """WALK a subtree and return ``(oid, tagged value)`` pairs in device order."""

    def close(self) -> None:
        """Release transport resources (no-op by default)."""

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self, exc_type: type[BaseException] | None, exc_val: BaseException | None, exc_tb: TracebackType | None
    ) -> None:
        self.close()
