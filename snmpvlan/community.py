"""Community string probes run once per session bootstrap."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger as glogger

from snmpvlan._util import split_reply
from snmpvlan.exceptions import AuthError, TransportError
from snmpvlan.snmp import OID_SYS_DESCR, OID_SYS_NAME
from snmpvlan.transport import VALUE_TYPE_HEX, VALUE_TYPE_STRING, BaseSnmpTransport

if TYPE_CHECKING:
    from loguru import Logger


class CommunityValidator:
    """Prove that the supplied communities actually work against ``ip``.

    The read-write probe is a real SET: sysName is read and written back
    unchanged, so a successful bootstrap guarantees write access.
    """

    def __init__(self, transport: BaseSnmpTransport, ip: str, logger: Logger | Any | None = None) -> None:
        self._transport = transport
        self.ip = ip
        self.logger = logger if logger is not None else glogger.bind(classname=self.__class__.__name__)

    def check_read_only(self, community: str) -> None:
        """GET sysDescr with the read-only community."""
        self.logger.debug(f"[{self.ip}] checking read-only community")
        try:
            self._transport.get(self.ip, community, OID_SYS_DESCR)
        except TransportError as exc:
            self.logger.error(f"[{self.ip}] read-only community check failed: {exc}")
            raise AuthError("read-only", "read", oid=OID_SYS_DESCR) from exc

    def check_read_write(self, community: str) -> None:
        """GET sysName with the read-write community, then SET the same value back."""
        self.logger.debug(f"[{self.ip}] checking read-write community")
        try:
            reply = self._transport.get(self.ip, community, OID_SYS_NAME)
            value_type, value = self._writeback_value(reply)
        except TransportError as exc:
            self.logger.error(f"[{self.ip}] read-write community check failed reading sysName: {exc}")
            raise AuthError("read-write", "read", oid=OID_SYS_NAME) from exc

        self.logger.info(f"[{self.ip}] SET {OID_SYS_NAME} {value!r} (write-back probe)")
        try:
            self._transport.set(self.ip, community, OID_SYS_NAME, value_type, value)
        except TransportError as exc:
            self.logger.error(f"[{self.ip}] read-write community check failed writing sysName: {exc}")
            raise AuthError("read-write", "write", oid=OID_SYS_NAME) from exc

    @staticmethod
    def _writeback_value(reply: str) -> tuple[str, str]:
        tag, payload = split_reply(reply)
        if tag == "Hex-STRING":
            return VALUE_TYPE_HEX, payload
        if tag != "STRING":
            raise TransportError(f"unexpected sysName reply: {reply!r}")
        if len(payload) >= 2 and payload.startswith('"') and payload.endswith('"'):
            payload = payload[1:-1]
        return VALUE_TYPE_STRING, payload

    def validate(self, read_only_community: str, read_write_community: str) -> None:
        """Run both probes; the first failure aborts with :class:`AuthError`."""
        self.check_read_only(read_only_community)
        self.logger.debug(f"[{self.ip}] read-only community OK")
        self.check_read_write(read_write_community)
        self.logger.debug(f"[{self.ip}] read-write community OK")
