"""Session configuration: credentials and tunables.

The structs are passed explicitly into :class:`~snmpvlan.session.SwitchSession`;
the ``load_*_from_env`` helpers exist for the composition root only.
"""

from __future__ import annotations

import os

from pydantic import BaseModel, ConfigDict, Field

ENV_PREFIX = "SNMPVLAN_"


class SnmpCredentials(BaseModel):
    """Read-only and read-write SNMPv2c community strings."""

    model_config = ConfigDict(frozen=True)

    read_only_community: str = "public"
    read_write_community: str = "private"


class SessionSettings(BaseModel):
    """Transport and controller tunables for one switch session."""

    model_config = ConfigDict(frozen=True)

    port: int = Field(default=161, ge=1, le=65535)
    timeout: float = Field(default=2.0, gt=0)
    retries: int = Field(default=1, ge=0)

    # VLAN creation: poll for the new row every poll_interval up to settle_timeout
    settle_timeout: float = Field(default=5.0, ge=0)
    poll_interval: float = Field(default=0.5, gt=0)

    default_port_count: int = Field(default=24, ge=1)
    reserved_interfaces: int = Field(default=2, ge=0)


def _env(name: str) -> str | None:
    raw = os.getenv(ENV_PREFIX + name)
    if raw is None or not raw.strip():
        return None
    return raw.strip()


def load_credentials_from_env(**overrides: str | None) -> SnmpCredentials:
    """Build credentials from ``SNMPVLAN_RO_COMMUNITY`` / ``SNMPVLAN_RW_COMMUNITY``.

    Non-None keyword overrides (e.g. from CLI flags) win over the environment.
    """
    values: dict[str, str] = {}
    ro = overrides.get("read_only_community") or _env("RO_COMMUNITY")
    rw = overrides.get("read_write_community") or _env("RW_COMMUNITY")
    if ro is not None:
        values["read_only_community"] = ro
    if rw is not None:
        values["read_write_community"] = rw
    return SnmpCredentials(**values)


def load_settings_from_env() -> SessionSettings:
    """Build session settings from ``SNMPVLAN_*`` environment variables."""
    mapping = {
        "port": "PORT",
        "timeout": "TIMEOUT",
        "retries": "RETRIES",
        "settle_timeout": "SETTLE_TIMEOUT",
        "poll_interval": "POLL_INTERVAL",
        "default_port_count": "DEFAULT_PORT_COUNT",
        "reserved_interfaces": "RESERVED_INTERFACES",
    }
    values = {field: raw for field, var in mapping.items() if (raw := _env(var)) is not None}
    return SessionSettings(**values)  # pydantic coerces the strings
