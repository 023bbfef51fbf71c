"""SNMP VLAN port-membership management for dot1q switches.

Creates and deletes VLANs and edits their tagged / untagged port sets on a
managed switch through Q-BRIDGE-MIB read-modify-write SNMP operations.
"""

__version__ = "0.1.0"

import os
import sys
from typing import Any, Callable, Dict

from loguru import logger as glogger

glogger.disable(__name__)


def _loguru_skiplog_filter(record: dict) -> bool:  # type: ignore[type-arg]
    """Filter function to hide records with ``extra['skiplog']`` set."""
    return not record.get("extra", {}).get("skiplog", False)


def configure_logging(
    loguru_filter: Callable[[Dict[str, Any]], bool] = _loguru_skiplog_filter,
) -> None:
    """Configure a default ``loguru`` sink and enable the package's log output.

    Meant for the composition root only (CLI, service entry point). Library
    users that never call it see no log output from ``snmpvlan``.
    """
    os.environ["LOGURU_LEVEL"] = os.getenv("LOGURU_LEVEL", "DEBUG")
    glogger.remove()
    logger_fmt: str = (
        "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{module}</cyan>::<cyan>{extra[classname]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
    )
    glogger.add(sys.stderr, level=os.getenv("LOGURU_LEVEL"), format=logger_fmt, filter=loguru_filter)  # type: ignore[arg-type]
    glogger.configure(extra={"classname": "None", "skiplog": False})
    glogger.enable(__name__)


from snmpvlan.config import SessionSettings, SnmpCredentials  # noqa: E402
from snmpvlan.exceptions import (  # noqa: E402
    AuthError,
    SnmpVlanError,
    StateError,
    TransportError,
    ValidationError,
)
from snmpvlan.session import SwitchSession, VlanLockRegistry  # noqa: E402
from snmpvlan.transport import BaseSnmpTransport  # noqa: E402

__all__ = [
    "glogger",
    "configure_logging",
    "SwitchSession",
    "VlanLockRegistry",
    "SnmpCredentials",
    "SessionSettings",
    "BaseSnmpTransport",
    "SnmpVlanError",
    "ValidationError",
    "AuthError",
    "TransportError",
    "StateError",
]
