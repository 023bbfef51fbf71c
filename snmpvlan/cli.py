"""CLI entry point: thin argparse wrapper around SwitchSession."""

from __future__ import annotations

import argparse
import sys

from loguru import logger
from tabulate import tabulate

from snmpvlan.config import load_credentials_from_env, load_settings_from_env
from snmpvlan.exceptions import SnmpVlanError
from snmpvlan.membership import format_ports
from snmpvlan.models import Vlan
from snmpvlan.portspec import validate_vlan_id

ACTIONS = ("info", "list", "show", "get", "add", "remove", "create", "delete")


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Build argparse parser for the VLAN CLI."""
    parser = argparse.ArgumentParser(
        prog="snmpvlan",
        description="Manage dot1q VLAN port membership on a switch via SNMPv2c.",
    )
    parser.add_argument("action", choices=ACTIONS, help="Operation to run")
    parser.add_argument("ip", help="Switch IP address")
    parser.add_argument(
        "ports",
        nargs="?",
        help="Port spec, e.g. '1-4,7' (get/add/remove); VLAN id for show/create/delete",
    )
    parser.add_argument("vlan", nargs="?", type=int, help="VLAN id (add/remove)")
    parser.add_argument("-t", "--tagged", action="store_true", help="Add ports as tagged members (add)")
    parser.add_argument("-n", "--name", default="", help="VLAN name (create)")
    parser.add_argument("--ro-community", help="Read-only community (default: $SNMPVLAN_RO_COMMUNITY)")
    parser.add_argument("--rw-community", help="Read-write community (default: $SNMPVLAN_RW_COMMUNITY)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose logging")
    return parser.parse_args(args)


def _require(value: object, what: str, action: str) -> None:
    if value is None:
        raise SystemExit(f"snmpvlan: '{action}' needs {what}")


def _vlan_table(vlan: Vlan) -> str:
    rows = [
        ["vlan", vlan.vlan_id],
        ["name", vlan.name],
        ["tagged", format_ports(vlan.tagged_ports)],
        ["untagged", format_ports(vlan.untagged_ports)],
    ]
    return tabulate(rows, tablefmt="simple")


def _validated_vlan_id(parsed: argparse.Namespace) -> int | None:
    """Check the positional arguments of ``parsed.action``; return its VLAN id, if it takes one."""
    action = parsed.action
    if action in ("get", "add", "remove"):
        _require(parsed.ports, "a port spec", action)
    if action in ("add", "remove"):
        _require(parsed.vlan, "a VLAN id", action)
        return validate_vlan_id(parsed.vlan)
    if action in ("show", "create", "delete"):
        # these take the VLAN id as the first positional
        _require(parsed.ports, "a VLAN id", action)
        return validate_vlan_id(parsed.ports)
    return None


def run(parsed: argparse.Namespace) -> str:
    """Execute one action and return the text to print."""
    from snmpvlan.session import SwitchSession

    action = parsed.action
    vlan_id = _validated_vlan_id(parsed)

    credentials = load_credentials_from_env(
        read_only_community=parsed.ro_community, read_write_community=parsed.rw_community
    )
    session = SwitchSession(parsed.ip, credentials, settings=load_settings_from_env())
    if session.port_count_warning:
        logger.warning(session.port_count_warning)

    if action == "info":
        info = session.get_switch_info()
        return tabulate(list(info.model_dump().items()), tablefmt="simple")

    if action == "list":
        return "\n".join(str(vid) for vid in session.list_vlans())

    if action == "get":
        rows = [
            [pv.port, ", ".join(f"{e.vlan} ({e.type})" for e in pv.vlans) or "-"]
            for pv in session.get_port_vlans(parsed.ports)
        ]
        return tabulate(rows, headers=["Port", "VLANs"], tablefmt="simple")

    assert vlan_id is not None
    if action == "add":
        session.add_ports(parsed.ports, vlan_id, tagged=parsed.tagged)
    elif action == "remove":
        session.remove_ports(parsed.ports, vlan_id)
    elif action == "delete":
        session.delete_vlan(vlan_id)
        return f"VLAN {vlan_id} deleted"
    elif action == "create":
        return _vlan_table(session.create_vlan(vlan_id, parsed.name))
    return _vlan_table(session.get_vlan(vlan_id))


def main(args: list[str] | None = None) -> None:
    """Main entry point for the VLAN CLI."""
    parsed = parse_args(args)

    if not parsed.verbose:
        logger.remove()
        logger.add(sys.stderr, level="INFO")
    logger.enable("snmpvlan")

    try:
        print(run(parsed))
    except SnmpVlanError as exc:
        logger.error(str(exc))
        sys.exit(1)
