"""OID constants and the pysnmp-backed SNMP transport."""

from __future__ import annotations

import asyncio
from typing import Any

from loguru import logger

from snmpvlan.exceptions import TransportError
from snmpvlan.transport import (
    VALUE_TYPE_HEX,
    VALUE_TYPE_INTEGER,
    VALUE_TYPE_STRING,
    BaseSnmpTransport,
)

# Optional pysnmp import
try:
    from pysnmp.hlapi.asyncio import (
        CommunityData,
        ContextData,
        ObjectIdentity,
        ObjectType,
        SnmpEngine,
        UdpTransportTarget,
        bulk_walk_cmd,
        get_cmd,
        set_cmd,
    )
    from pysnmp.proto.rfc1902 import Integer, OctetString

    HAS_PYSNMP = True
except ImportError:
    HAS_PYSNMP = False

# ── OID constants ──────────────────────────────────────────────────────
OID_SYS_DESCR = ".1.3.6.1.2.1.1.1.0"
OID_SYS_NAME = ".1.3.6.1.2.1.1.5.0"
OID_IF_NUMBER = ".1.3.6.1.2.1.2.1.0"  # IF-MIB::ifNumber
OID_VLAN_STATIC_NAME = ".1.3.6.1.2.1.17.7.1.4.3.1.1"  # Q-BRIDGE-MIB
OID_VLAN_EGRESS_PORTS = ".1.3.6.1.2.1.17.7.1.4.3.1.2"  # Q-BRIDGE-MIB (tagged / egress)
OID_VLAN_UNTAGGED_PORTS = ".1.3.6.1.2.1.17.7.1.4.3.1.4"  # Q-BRIDGE-MIB
OID_VLAN_ROW_STATUS = ".1.3.6.1.2.1.17.7.1.4.3.1.5"  # Q-BRIDGE-MIB

# SNMPv2-TC RowStatus values
ROW_STATUS_CREATE_AND_GO = 4
ROW_STATUS_DESTROY = 6


def vlan_oid(column: str, vlan_id: int) -> str:
    """Return the instance OID of a dot1qVlanStaticTable column for ``vlan_id``."""
    return f"{column}.{vlan_id}"


def _is_printable(data: bytes) -> bool:
    return all(32 <= b < 127 or b in (9, 10, 13) for b in data)


def render_value(val: Any) -> str:
    """Render a pysnmp value the way net-snmp displays it (``TYPE: payload``)."""
    type_name = type(val).__name__
    if type_name in ("NoSuchObject", "NoSuchInstance", "EndOfMibView"):
        raise TransportError(f"no such object ({type_name})")
    if type_name in ("Integer", "Integer32"):
        return f"INTEGER: {int(val)}"
    if type_name in ("Gauge32", "Unsigned32"):
        return f"Gauge32: {int(val)}"
    if type_name in ("Counter32", "Counter64"):
        return f"{type_name}: {int(val)}"
    if type_name == "TimeTicks":
        return f"Timeticks: ({int(val)})"
    if type_name in ("ObjectIdentifier", "ObjectName"):
        return f"OID: .{val}"
    if type_name == "IpAddress":
        return f"IpAddress: {val.prettyPrint()}"
    if hasattr(val, "asOctets"):
        raw = bytes(val.asOctets())
        if raw and not _is_printable(raw):
            return "Hex-STRING: " + " ".join(f"{b:02X}" for b in raw)
        return f'STRING: "{raw.decode("ascii")}"'
    return f'STRING: "{val}"'


def _strip(oid: str) -> str:
    return oid.lstrip(".")


class PysnmpTransport(BaseSnmpTransport):
    """SNMPv2c transport on top of pysnmp's asyncio hlapi.

    Each call spins up its own event loop via ``asyncio.run`` so the transport
    can be used from plain synchronous code. Do not call it from inside a
    running event loop; use ``asyncio.to_thread`` there.
    """

    def __init__(self, port: int = 161, timeout: float = 2.0, retries: int = 1) -> None:
        if not HAS_PYSNMP:
            raise RuntimeError("pysnmp is required (pip install pysnmp)")
        self.port = port
        self.timeout = timeout
        self.retries = retries

    # ── public contract ────────────────────────────────────────────────

    def get(self, ip: str, community: str, oid: str) -> str:
        logger.debug(f"GET [{ip}] {oid}")
        return asyncio.run(self._get(ip, community, oid))

    def set(self, ip: str, community: str, oid: str, value_type: str, value: str) -> None:
        logger.debug(f"SET [{ip}] {oid} {value_type} {value!r}")
        asyncio.run(self._set(ip, community, oid, self._typed_value(value_type, value)))

    def walk(self, ip: str, community: str, oid_prefix: str) -> list[tuple[str, str]]:
        logger.debug(f"WALK [{ip}] {oid_prefix}")
        return asyncio.run(self._walk(ip, community, oid_prefix))

    # ── async implementation ───────────────────────────────────────────

    @staticmethod
    def _typed_value(value_type: str, value: str) -> Any:
        if value_type == VALUE_TYPE_INTEGER:
            return Integer(int(value))
        if value_type == VALUE_TYPE_STRING:
            return OctetString(value)
        if value_type == VALUE_TYPE_HEX:
            return OctetString(hexValue="".join(value.split()))
        raise ValueError(f"unsupported SNMP value type {value_type!r}")

    async def _target(self, ip: str) -> Any:
        try:
            return await UdpTransportTarget.create((ip, self.port), timeout=self.timeout, retries=self.retries)
        except Exception as exc:  # resolver / socket errors
            raise TransportError(f"cannot reach {ip}:{self.port}: {exc}") from exc

    @staticmethod
    def _check(ip: str, oid: str, error_indication: Any, error_status: Any) -> None:
        if error_indication:
            raise TransportError(f"SNMP error [{ip}] on {oid}: {error_indication}", oid=oid)
        if error_status:
            raise TransportError(f"SNMP error [{ip}] on {oid}: {error_status.prettyPrint()}", oid=oid)

    async def _get(self, ip: str, community: str, oid: str) -> str:
        engine = SnmpEngine()
        try:
            target = await self._target(ip)
            error_indication, error_status, _, var_binds = await get_cmd(
                engine,
                CommunityData(community),
                target,
                ContextData(),
                ObjectType(ObjectIdentity(_strip(oid))),
            )
            self._check(ip, oid, error_indication, error_status)
            _, val = var_binds[0]
            try:
                return render_value(val)
            except TransportError as exc:
                raise TransportError(f"SNMP error [{ip}] on {oid}: {exc}", oid=oid) from exc
        finally:
            engine.close_dispatcher()

    async def _set(self, ip: str, community: str, oid: str, value: Any) -> None:
        engine = SnmpEngine()
        try:
            target = await self._target(ip)
            error_indication, error_status, _, _ = await set_cmd(
                engine,
                CommunityData(community),
                target,
                ContextData(),
                ObjectType(ObjectIdentity(_strip(oid)), value),
            )
            self._check(ip, oid, error_indication, error_status)
        finally:
            engine.close_dispatcher()

    async def _walk(self, ip: str, community: str, oid_prefix: str) -> list[tuple[str, str]]:
        engine = SnmpEngine()
        results: list[tuple[str, str]] = []
        try:
            target = await self._target(ip)
            async for error_indication, error_status, _, var_binds in bulk_walk_cmd(
                engine,
                CommunityData(community),
                target,
                ContextData(),
                0,
                25,  # nonRepeaters, maxRepetitions
                ObjectType(ObjectIdentity(_strip(oid_prefix))),
                lexicographicMode=False,
            ):
                self._check(ip, oid_prefix, error_indication, error_status)
                for var_bind_oid, val in var_binds:
                    if type(val).__name__ == "EndOfMibView":
                        break
                    results.append((f".{var_bind_oid}", render_value(val)))
        finally:
            engine.close_dispatcher()
        return results
