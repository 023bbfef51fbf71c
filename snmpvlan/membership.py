"""VLAN port membership: read, merge and write the egress / untagged PortLists."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable

from loguru import logger as glogger

from snmpvlan import bitmask
from snmpvlan._util import oid_index, parse_hex_string, parse_string
from snmpvlan.config import SnmpCredentials
from snmpvlan.exceptions import StateError, TransportError
from snmpvlan.models import Membership, PortVlanEntry, PortVlans, Vlan
from snmpvlan.portspec import PortSpecParser, validate_vlan_id
from snmpvlan.snmp import (
    OID_VLAN_EGRESS_PORTS,
    OID_VLAN_STATIC_NAME,
    OID_VLAN_UNTAGGED_PORTS,
    vlan_oid,
)
from snmpvlan.transport import VALUE_TYPE_HEX, BaseSnmpTransport

if TYPE_CHECKING:
    from loguru import Logger

_COLUMN_LABELS = {
    OID_VLAN_EGRESS_PORTS: "tagged",
    OID_VLAN_UNTAGGED_PORTS: "untagged",
}


def format_ports(ports: Iterable[int]) -> str:
    """Compact ``[1, 2, 3, 7]`` into ``'1-3,7'`` for log lines."""
    nums = sorted(set(ports))
    if not nums:
        return "-"
    parts: list[str] = []
    start = end = nums[0]
    for n in nums[1:]:
        if n == end + 1:
            end = n
            continue
        parts.append(f"{start}" if start == end else f"{start}-{end}")
        start = end = n
    parts.append(f"{start}" if start == end else f"{start}-{end}")
    return ",".join(parts)


class VlanMembershipEngine:
    """Read-modify-write access to a VLAN's tagged and untagged port sets.

    Every operation reads live state; nothing is cached between calls. There
    is no locking: two concurrent mutations of the same VLAN race and the
    last writer wins. Serialize externally (see
    :class:`~snmpvlan.session.VlanLockRegistry`).
    """

    def __init__(
        self,
        transport: BaseSnmpTransport,
        ip: str,
        credentials: SnmpCredentials,
        port_count: int,
        logger: Logger | Any | None = None,
    ) -> None:
        self._transport = transport
        self.ip = ip
        self.credentials = credentials
        self.port_count = port_count
        self.mask_byte_len = bitmask.mask_byte_len(port_count)
        self.parser = PortSpecParser(port_count)
        self.logger = logger if logger is not None else glogger.bind(classname=self.__class__.__name__)

    # ── reads ──────────────────────────────────────────────────────────

    def list_vlans(self) -> list[int]:
        """WALK the static VLAN name column and return the VLAN ids found."""
        rows = self._transport.walk(self.ip, self.credentials.read_only_community, OID_VLAN_STATIC_NAME)
        return sorted({oid_index(oid) for oid, _ in rows})

    def read_mask(self, column: str, vlan_id: int) -> bytes | None:
        """GET one PortList; ``None`` if the GET fails or the reply is not a PortList."""
        oid = vlan_oid(column, vlan_id)
        try:
            return parse_hex_string(self._transport.get(self.ip, self.credentials.read_only_community, oid))
        except TransportError as exc:
            self.logger.debug(f"[{self.ip}] no {_COLUMN_LABELS.get(column, column)} mask for VLAN {vlan_id}: {exc}")
            return None

    def vlan_exists(self, vlan_id: int) -> bool:
        """A VLAN exists iff its egress PortList can be read."""
        return self.read_mask(OID_VLAN_EGRESS_PORTS, validate_vlan_id(vlan_id)) is not None

    def read_membership(self, vlan_id: int) -> tuple[bytes | None, bytes | None]:
        """Two independent GETs: ``(tagged, untagged)``; either may be ``None``."""
        vlan_id = validate_vlan_id(vlan_id)
        return self.read_mask(OID_VLAN_EGRESS_PORTS, vlan_id), self.read_mask(OID_VLAN_UNTAGGED_PORTS, vlan_id)

    def require_membership(self, vlan_id: int, ports: Iterable[int] | None = None) -> Membership:
        """Read both masks at a common width or raise :class:`TransportError`."""
        tagged, untagged = self.read_membership(vlan_id)
        if tagged is None or untagged is None:
            missing = "tagged" if tagged is None else "untagged"
            raise TransportError(
                f"failed to read {missing} mask of VLAN {vlan_id} on {self.ip}",
                vlan_id=vlan_id,
                ports=ports,
                phase="read",
            )
        width = max(self.mask_byte_len, len(tagged), len(untagged))
        return Membership(vlan_id=vlan_id, tagged=bitmask.fit(tagged, width), untagged=bitmask.fit(untagged, width))

    def read_name(self, vlan_id: int) -> str:
        try:
            reply = self._transport.get(
                self.ip, self.credentials.read_only_community, vlan_oid(OID_VLAN_STATIC_NAME, vlan_id)
            )
            return parse_string(reply)
        except TransportError as exc:
            self.logger.debug(f"[{self.ip}] no name for VLAN {vlan_id}: {exc}")
            return ""

    def get_vlan(self, vlan_id: int) -> Vlan:
        vlan_id = validate_vlan_id(vlan_id)
        if not self.vlan_exists(vlan_id):
            raise StateError("vlan absent", f"VLAN {vlan_id} does not exist on {self.ip}", vlan_id=vlan_id)
        membership = self.require_membership(vlan_id)
        return Vlan(
            vlan_id=vlan_id,
            name=self.read_name(vlan_id),
            tagged_mask=membership.tagged,
            untagged_mask=membership.untagged,
            tagged_ports=sorted(bitmask.decode(membership.tagged)),
            untagged_ports=sorted(bitmask.decode(membership.untagged)),
        )

    def port_vlans(self, ports: str | Iterable[int]) -> list[PortVlans]:
        """Report every VLAN each port belongs to and whether it is untagged or tagged there.

        A port set in the untagged list counts as untagged, otherwise a bit in
        the egress list counts as tagged. VLANs whose masks cannot be read are
        skipped.
        """
        port_list = self.parser.normalize(ports)
        report = {port: PortVlans(port=port) for port in port_list}
        for vlan_id in self.list_vlans():
            tagged, untagged = self.read_membership(vlan_id)
            if tagged is None or untagged is None:
                continue
            tagged_ports = bitmask.decode(tagged)
            untagged_ports = bitmask.decode(untagged)
            for port in port_list:
                if port in untagged_ports:
                    report[port].vlans.append(PortVlanEntry(vlan=vlan_id, type="untagged"))
                elif port in tagged_ports:
                    report[port].vlans.append(PortVlanEntry(vlan=vlan_id, type="tagged"))
        return [report[port] for port in port_list]

    # ── writes ─────────────────────────────────────────────────────────

    def log_snapshot(self, membership: Membership, action: str) -> None:
        self.logger.info(
            f"[{self.ip}] VLAN {membership.vlan_id} before {action}: "
            f"tagged={format_ports(bitmask.decode(membership.tagged))} "
            f"[{bitmask.to_hex(membership.tagged)}] "
            f"untagged={format_ports(bitmask.decode(membership.untagged))} "
            f"[{bitmask.to_hex(membership.untagged)}]"
        )

    def set_value(self, oid: str, value_type: str, value: str) -> None:
        """SET one object with the read-write community."""
        self.logger.info(f"[{self.ip}] SET {oid} {value_type} {value!r}")
        self._transport.set(self.ip, self.credentials.read_write_community, oid, value_type, value)

    def write_mask(self, column: str, vlan_id: int, mask: bytes) -> str:
        """SET one PortList as a Hex-STRING; returns the OID written."""
        oid = vlan_oid(column, vlan_id)
        self.set_value(oid, VALUE_TYPE_HEX, bitmask.to_hex(mask))
        return oid

    def _require_exists(self, vlan_id: int, ports: Iterable[int] | None = None) -> None:
        if not self.vlan_exists(vlan_id):
            raise StateError("vlan absent", f"VLAN {vlan_id} does not exist on {self.ip}", vlan_id=vlan_id, ports=ports)

    def add_ports(self, ports: str | Iterable[int], vlan_id: int, tagged: bool = False) -> Membership:
        """Add ``ports`` to ``vlan_id`` as tagged (egress list) or untagged (untagged list).

        Only the list matching ``tagged`` is written; a single SET per call.
        Returns the membership as written.
        """
        vlan_id = validate_vlan_id(vlan_id)
        port_list = self.parser.normalize(ports)
        self._require_exists(vlan_id, port_list)

        current = self.require_membership(vlan_id, port_list)
        self.log_snapshot(current, f"adding {'tagged' if tagged else 'untagged'} ports {format_ports(port_list)}")
        new_ports_mask = bitmask.fit(bitmask.encode(port_list, self.mask_byte_len), len(current.tagged))

        column = OID_VLAN_EGRESS_PORTS if tagged else OID_VLAN_UNTAGGED_PORTS
        if tagged:
            result = current.model_copy(update={"tagged": bitmask.merge(current.tagged, new_ports_mask)})
            mask = result.tagged
        else:
            result = current.model_copy(update={"untagged": bitmask.merge(current.untagged, new_ports_mask)})
            mask = result.untagged

        try:
            self.write_mask(column, vlan_id, mask)
        except TransportError as exc:
            raise TransportError(
                f"failed to add ports {format_ports(port_list)} to VLAN {vlan_id} "
                f"({_COLUMN_LABELS[column]}) on {self.ip}: {exc}",
                vlan_id=vlan_id,
                ports=port_list,
                phase=f"write-{_COLUMN_LABELS[column]}",
                oid=vlan_oid(column, vlan_id),
            ) from exc
        return result

    def remove_ports(self, ports: str | Iterable[int], vlan_id: int) -> Membership:
        """Clear ``ports`` from the untagged list, then from the egress list.

        The two SETs are independent. If the first succeeds and the second
        fails the ports are left tagged-only and :class:`TransportError` is
        raised with ``partial=True``.
        """
        vlan_id = validate_vlan_id(vlan_id)
        port_list = self.parser.normalize(ports)
        self._require_exists(vlan_id, port_list)

        current = self.require_membership(vlan_id, port_list)
        self.log_snapshot(current, f"removing ports {format_ports(port_list)}")
        port_mask = bitmask.fit(bitmask.encode(port_list, self.mask_byte_len), len(current.tagged))

        new_untagged = bitmask.subtract(current.untagged, port_mask)
        new_tagged = bitmask.subtract(current.tagged, port_mask)

        applied: list[str] = []
        for column, mask in ((OID_VLAN_UNTAGGED_PORTS, new_untagged), (OID_VLAN_EGRESS_PORTS, new_tagged)):
            label = _COLUMN_LABELS[column]
            try:
                applied.append(self.write_mask(column, vlan_id, mask))
            except TransportError as exc:
                partial = bool(applied)
                if partial:
                    self.logger.warning(
                        f"[{self.ip}] VLAN {vlan_id}: ports {format_ports(port_list)} removed from "
                        f"untagged list but still present in {label} list"
                    )
                raise TransportError(
                    f"failed to remove ports {format_ports(port_list)} from VLAN {vlan_id} ({label}) "
                    f"on {self.ip}{' after partial completion' if partial else ''}: {exc}",
                    partial=partial,
                    applied=applied,
                    vlan_id=vlan_id,
                    ports=port_list,
                    phase=f"write-{label}",
                    oid=vlan_oid(column, vlan_id),
                ) from exc

        return Membership(vlan_id=vlan_id, tagged=new_tagged, untagged=new_untagged)
