"""Port count resolution from IF-MIB::ifNumber."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from loguru import logger as glogger

from snmpvlan._util import parse_integer
from snmpvlan.bitmask import mask_byte_len
from snmpvlan.exceptions import TransportError
from snmpvlan.models import PortCountResult
from snmpvlan.snmp import OID_IF_NUMBER
from snmpvlan.transport import BaseSnmpTransport

if TYPE_CHECKING:
    from loguru import Logger

DEFAULT_PORT_COUNT = 24
RESERVED_INTERFACES = 2


class PortCountResolver:
    """Derive the usable port count as ``ifNumber - reserved``.

    Fails open: if the GET fails or the reply is unusable the default port
    count is returned with ``fallback=True`` and a warning, so read paths keep
    working. Range validation is then based on a guess.
    """

    def __init__(
        self,
        transport: BaseSnmpTransport,
        ip: str,
        community: str,
        logger: Logger | Any | None = None,
        default_port_count: int = DEFAULT_PORT_COUNT,
        reserved_interfaces: int = RESERVED_INTERFACES,
    ) -> None:
        self._transport = transport
        self.ip = ip
        self.community = community
        self.logger = logger if logger is not None else glogger.bind(classname=self.__class__.__name__)
        self.default_port_count = default_port_count
        self.reserved_interfaces = reserved_interfaces

    def _fallback(self, reason: str) -> PortCountResult:
        warning = f"port count unavailable ({reason}); assuming {self.default_port_count} ports"
        self.logger.warning(f"[{self.ip}] {warning}")
        return PortCountResult(
            port_count=self.default_port_count,
            mask_byte_len=mask_byte_len(self.default_port_count),
            fallback=True,
            warning=warning,
        )

    def resolve(self) -> PortCountResult:
        try:
            total = parse_integer(self._transport.get(self.ip, self.community, OID_IF_NUMBER))
        except TransportError as exc:
            return self._fallback(str(exc))

        port_count = total - self.reserved_interfaces
        if port_count < 1:
            return self._fallback(f"ifNumber={total} leaves no usable ports")

        self.logger.debug(f"[{self.ip}] ifNumber={total} -> {port_count} ports")
        return PortCountResult(port_count=port_count, mask_byte_len=mask_byte_len(port_count))
