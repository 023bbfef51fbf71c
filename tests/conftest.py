"""Shared fixtures for the snmpvlan test suite."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fakes import RO, RW, SWITCH_IP, FakeClock, FakeSwitch

from snmpvlan.config import SessionSettings, SnmpCredentials
from snmpvlan.session import SwitchSession

# ── session fixtures ──────────────────────────────────────────────────


@pytest.fixture()
def credentials():
    return SnmpCredentials(read_only_community=RO, read_write_community=RW)


@pytest.fixture()
def mock_logger():
    """MagicMock standing in for a loguru logger."""
    return MagicMock()


@pytest.fixture()
def fake_clock():
    return FakeClock()


@pytest.fixture()
def make_switch():
    """Factory fixture returning a FakeSwitch; a 24-port switch with VLAN 1 by default."""

    def _make(**kwargs):
        kwargs.setdefault("vlans", {1: ("default", b"\xff\xff\xff", b"\xff\xff\xff")})
        return FakeSwitch(**kwargs)

    return _make


@pytest.fixture()
def make_session(credentials, mock_logger, fake_clock):
    """Factory fixture building a SwitchSession on top of a FakeSwitch."""

    def _make(switch, **kwargs):
        kwargs.setdefault("logger", mock_logger)
        kwargs.setdefault("sleep", fake_clock.sleep)
        kwargs.setdefault("clock", fake_clock)
        kwargs.setdefault("settings", SessionSettings(settle_timeout=2.0, poll_interval=0.5))
        return SwitchSession(SWITCH_IP, kwargs.pop("credentials", credentials), transport=switch, **kwargs)

    return _make
