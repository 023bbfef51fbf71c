"""VLAN create / delete through dot1qVlanStaticRowStatus."""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Callable

from loguru import logger as glogger

from snmpvlan import bitmask
from snmpvlan.exceptions import StateError, TransportError
from snmpvlan.membership import VlanMembershipEngine, format_ports
from snmpvlan.models import Vlan
from snmpvlan.portspec import validate_vlan_id
from snmpvlan.snmp import (
    OID_VLAN_ROW_STATUS,
    OID_VLAN_STATIC_NAME,
    ROW_STATUS_CREATE_AND_GO,
    ROW_STATUS_DESTROY,
    vlan_oid,
)
from snmpvlan.transport import VALUE_TYPE_INTEGER, VALUE_TYPE_STRING

if TYPE_CHECKING:
    from loguru import Logger


class VlanLifecycleController:
    """Drive a VLAN between Absent and Active.

    Existence is whatever the device says: there is no local state. Neither
    operation is compensated on partial failure; a VLAN whose row was created
    but whose name could not be set stays on the device and the error says so.

    The settle wait after ``createAndGo`` is a blocking poll on the calling
    thread. Async callers must run :meth:`create` off the event loop.
    """

    def __init__(
        self,
        membership: VlanMembershipEngine,
        logger: Logger | Any | None = None,
        settle_timeout: float = 5.0,
        poll_interval: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.membership = membership
        self.logger = logger if logger is not None else glogger.bind(classname=self.__class__.__name__)
        self.settle_timeout = settle_timeout
        self.poll_interval = poll_interval
        self._sleep = sleep
        self._clock = clock

    @property
    def ip(self) -> str:
        return self.membership.ip

    def wait_until_exists(self, vlan_id: int) -> float:
        """Poll ``vlan_exists`` every ``poll_interval`` until it is true or ``settle_timeout`` expires.

        Returns the seconds waited; raises ``StateError("not created")`` on timeout.
        """
        start = self._clock()
        deadline = start + self.settle_timeout
        while True:
            if self.membership.vlan_exists(vlan_id):
                return self._clock() - start
            now = self._clock()
            if now >= deadline:
                raise StateError(
                    "not created",
                    f"VLAN {vlan_id} did not appear on {self.ip} within {self.settle_timeout:g}s",
                    vlan_id=vlan_id,
                    phase="settle",
                )
            self._sleep(min(self.poll_interval, deadline - now))

    def create(self, vlan_id: int, name: str = "") -> Vlan:
        """Create ``vlan_id`` with ``createAndGo``, wait for the row, then name it."""
        vlan_id = validate_vlan_id(vlan_id)
        name = name or f"VLAN{vlan_id}"
        if self.membership.vlan_exists(vlan_id):
            raise StateError("already exists", f"VLAN {vlan_id} already exists on {self.ip}", vlan_id=vlan_id)
        self.logger.info(f"[{self.ip}] VLAN {vlan_id} absent before create; creating as {name!r}")

        row_status_oid = vlan_oid(OID_VLAN_ROW_STATUS, vlan_id)
        try:
            self.membership.set_value(row_status_oid, VALUE_TYPE_INTEGER, str(ROW_STATUS_CREATE_AND_GO))
        except TransportError as exc:
            raise TransportError(
                f"failed to create VLAN {vlan_id} on {self.ip}: {exc}",
                vlan_id=vlan_id,
                phase="create",
                oid=row_status_oid,
            ) from exc

        waited = self.wait_until_exists(vlan_id)
        self.logger.debug(f"[{self.ip}] VLAN {vlan_id} row present after {waited:.2f}s")

        name_oid = vlan_oid(OID_VLAN_STATIC_NAME, vlan_id)
        try:
            self.membership.set_value(name_oid, VALUE_TYPE_STRING, name)
        except TransportError as exc:
            self.logger.warning(f"[{self.ip}] VLAN {vlan_id} created but left without name: {exc}")
            raise TransportError(
                f"VLAN {vlan_id} created on {self.ip} but setting its name failed: {exc}",
                partial=True,
                applied=[row_status_oid],
                vlan_id=vlan_id,
                phase="name",
                oid=name_oid,
            ) from exc

        if not self.membership.vlan_exists(vlan_id):
            raise StateError("not created", f"VLAN {vlan_id} vanished from {self.ip} after naming", vlan_id=vlan_id)
        self.logger.info(f"[{self.ip}] VLAN {vlan_id} ({name!r}) created")
        return self.membership.get_vlan(vlan_id)

    def delete(self, vlan_id: int) -> None:
        """Destroy ``vlan_id``; refused while any port is still a member."""
        vlan_id = validate_vlan_id(vlan_id)
        if not self.membership.vlan_exists(vlan_id):
            raise StateError("vlan absent", f"VLAN {vlan_id} does not exist on {self.ip}", vlan_id=vlan_id)

        current = self.membership.require_membership(vlan_id)
        self.membership.log_snapshot(current, "delete")
        if not (bitmask.is_empty(current.tagged) and bitmask.is_empty(current.untagged)):
            members = bitmask.decode(current.tagged) | bitmask.decode(current.untagged)
            raise StateError(
                "vlan not empty",
                f"VLAN {vlan_id} on {self.ip} still has member ports {format_ports(members)}",
                vlan_id=vlan_id,
                ports=members,
            )

        row_status_oid = vlan_oid(OID_VLAN_ROW_STATUS, vlan_id)
        try:
            self.membership.set_value(row_status_oid, VALUE_TYPE_INTEGER, str(ROW_STATUS_DESTROY))
        except TransportError as exc:
            raise TransportError(
                f"failed to delete VLAN {vlan_id} on {self.ip}: {exc}",
                vlan_id=vlan_id,
                phase="destroy",
                oid=row_status_oid,
            ) from exc
        self.logger.info(f"[{self.ip}] VLAN {vlan_id} deleted")
