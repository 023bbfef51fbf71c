"""SwitchSession: one switch IP plus one credential pair, validated and sized."""

from __future__ import annotations

import threading
import time
from contextlib import contextmanager, nullcontext
from typing import TYPE_CHECKING, Any, Callable, ContextManager, Iterable, Iterator

from loguru import logger as glogger

from snmpvlan._util import parse_string
from snmpvlan.community import CommunityValidator
from snmpvlan.config import SessionSettings, SnmpCredentials
from snmpvlan.exceptions import TransportError
from snmpvlan.lifecycle import VlanLifecycleController
from snmpvlan.membership import VlanMembershipEngine
from snmpvlan.models import Membership, PortCountResult, PortVlans, SwitchInfo, Vlan
from snmpvlan.portcount import PortCountResolver
from snmpvlan.portspec import validate_vlan_id
from snmpvlan.snmp import OID_SYS_DESCR, OID_SYS_NAME
from snmpvlan.transport import BaseSnmpTransport

if TYPE_CHECKING:
    from loguru import Logger


class VlanLockRegistry:
    """One lock per ``(switch_ip, vlan_id)``.

    Membership changes are read-modify-write against the device, so two
    unserialized callers touching the same VLAN lose updates. Share one
    registry between all sessions of a process to serialize them.

    Locks are created on first use and never evicted. The map stays bounded
    at 4094 entries per switch, one for each possible VLAN id.
    """

    def __init__(self) -> None:
        self._locks: dict[tuple[str, int], threading.Lock] = {}
        self._guard = threading.Lock()

    def lock_for(self, ip: str, vlan_id: int) -> threading.Lock:
        with self._guard:
            return self._locks.setdefault((ip, vlan_id), threading.Lock())

    @contextmanager
    def hold(self, ip: str, vlan_id: int) -> Iterator[None]:
        with self.lock_for(ip, vlan_id):
            yield


class SwitchSession:
    """Composition root for VLAN operations on one switch.

    Construction validates both communities (the read-write probe performs a
    real SET) and resolves the port count; any :class:`AuthError` aborts it
    before further calls are made. A port-count fallback does not abort but
    is reported via :attr:`port_count_warning`.
    """

    def __init__(
        self,
        ip: str,
        credentials: SnmpCredentials,
        transport: BaseSnmpTransport | None = None,
        settings: SessionSettings | None = None,
        logger: Logger | Any | None = None,
        locks: VlanLockRegistry | None = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ip = ip
        self.credentials = credentials
        self.settings = settings or SessionSettings()
        self.logger = logger if logger is not None else glogger.bind(classname=self.__class__.__name__)
        self.locks = locks

        if transport is None:
            from snmpvlan.snmp import PysnmpTransport

            transport = PysnmpTransport(
                port=self.settings.port, timeout=self.settings.timeout, retries=self.settings.retries
            )
        self._transport = transport

        self.logger.info(f"[{ip}] opening session")
        CommunityValidator(transport, ip, logger=logger).validate(
            credentials.read_only_community, credentials.read_write_community
        )
        self.port_count_result: PortCountResult = PortCountResolver(
            transport,
            ip,
            credentials.read_only_community,
            logger=logger,
            default_port_count=self.settings.default_port_count,
            reserved_interfaces=self.settings.reserved_interfaces,
        ).resolve()

        self.membership = VlanMembershipEngine(
            transport, ip, credentials, self.port_count_result.port_count, logger=logger
        )
        self.lifecycle = VlanLifecycleController(
            self.membership,
            logger=logger,
            settle_timeout=self.settings.settle_timeout,
            poll_interval=self.settings.poll_interval,
            sleep=sleep,
            clock=clock,
        )
        self.logger.info(
            f"[{ip}] session ready: {self.port_count} ports, {self.mask_byte_len}-byte masks"
            + (" (port count is a fallback guess)" if self.port_count_result.fallback else "")
        )

    @property
    def port_count(self) -> int:
        return self.port_count_result.port_count

    @property
    def mask_byte_len(self) -> int:
        return self.port_count_result.mask_byte_len

    @property
    def port_count_warning(self) -> str | None:
        return self.port_count_result.warning

    def _serialized(self, vlan_id: int) -> ContextManager[Any]:
        if self.locks is None:
            return nullcontext()
        return self.locks.hold(self.ip, validate_vlan_id(vlan_id))

    # ── reads ──────────────────────────────────────────────────────────

    def _read_text(self, oid: str) -> str:
        try:
            return parse_string(self._transport.get(self.ip, self.credentials.read_only_community, oid))
        except TransportError as exc:
            self.logger.debug(f"[{self.ip}] {oid} unavailable: {exc}")
            return ""

    def get_switch_info(self) -> SwitchInfo:
        return SwitchInfo(
            ip=self.ip,
            port_count=self.port_count,
            mask_byte_len=self.mask_byte_len,
            port_count_fallback=self.port_count_result.fallback,
            model=self._read_text(OID_SYS_DESCR),
            name=self._read_text(OID_SYS_NAME),
        )

    def list_vlans(self) -> list[int]:
        return self.membership.list_vlans()

    def vlan_exists(self, vlan_id: int) -> bool:
        return self.membership.vlan_exists(vlan_id)

    def get_vlan(self, vlan_id: int) -> Vlan:
        return self.membership.get_vlan(vlan_id)

    def read_membership(self, vlan_id: int) -> tuple[bytes | None, bytes | None]:
        return self.membership.read_membership(vlan_id)

    def get_port_vlans(self, ports: str | Iterable[int]) -> list[PortVlans]:
        return self.membership.port_vlans(ports)

    # ── mutations ──────────────────────────────────────────────────────

    def add_ports(self, ports: str | Iterable[int], vlan_id: int, tagged: bool = False) -> Membership:
        with self._serialized(vlan_id):
            return self.membership.add_ports(ports, vlan_id, tagged=tagged)

    def remove_ports(self, ports: str | Iterable[int], vlan_id: int) -> Membership:
        with self._serialized(vlan_id):
            return self.membership.remove_ports(ports, vlan_id)

    def create_vlan(self, vlan_id: int, name: str = "") -> Vlan:
        with self._serialized(vlan_id):
            return self.lifecycle.create(vlan_id, name)

    def delete_vlan(self, vlan_id: int) -> None:
        with self._serialized(vlan_id):
            self.lifecycle.delete(vlan_id)

    def close(self) -> None:
        self._transport.close()
