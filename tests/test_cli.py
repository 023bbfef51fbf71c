"""Tests for snmpvlan.cli."""

from __future__ import annotations

import os

import pytest
from fakes import SWITCH_IP

from snmpvlan.cli import main, parse_args, run
from snmpvlan.exceptions import ValidationError
from snmpvlan.session import SwitchSession


@pytest.fixture()
def cli_switch(monkeypatch, make_switch, mock_logger, fake_clock):
    """Route the CLI's SwitchSession onto a FakeSwitch with VLANs 1 and 10."""
    for name in list(os.environ):
        if name.startswith("SNMPVLAN_"):
            monkeypatch.delenv(name)

    switch = make_switch()
    switch.add_vlan(10, "users", egress=b"\x80\x00\x00", untagged=b"\x80\x00\x00")

    def factory(ip, credentials, settings=None):
        return SwitchSession(
            ip,
            credentials,
            transport=switch,
            settings=settings,
            logger=mock_logger,
            sleep=fake_clock.sleep,
            clock=fake_clock,
        )

    monkeypatch.setattr("snmpvlan.session.SwitchSession", factory)
    return switch


class TestParseArgs:
    """Test parse_args function."""

    def test_add(self):
        """Positional port spec and VLAN id plus the tagged flag."""
        args = parse_args(["add", SWITCH_IP, "1-4,7", "10", "-t"])
        assert args.action == "add"
        assert args.ip == SWITCH_IP
        assert args.ports == "1-4,7"
        assert args.vlan == 10
        assert args.tagged is True

    def test_defaults(self):
        """Optional arguments default to empty."""
        args = parse_args(["list", SWITCH_IP])
        assert args.ports is None
        assert args.vlan is None
        assert args.tagged is False
        assert args.name == ""
        assert args.ro_community is None
        assert args.verbose is False

    def test_communities(self):
        """Community flags are captured verbatim."""
        args = parse_args(["info", SWITCH_IP, "--ro-community", "ro", "--rw-community", "rw"])
        assert args.ro_community == "ro"
        assert args.rw_community == "rw"

    def test_unknown_action(self):
        """Actions outside the known set are rejected by argparse."""
        with pytest.raises(SystemExit):
            parse_args(["reboot", SWITCH_IP])


class TestRun:
    """Test run() against a fake switch."""

    def test_info(self, cli_switch):
        """info renders the switch summary."""
        out = run(parse_args(["info", SWITCH_IP]))
        assert "port_count" in out
        assert "DES-3200-28" in out

    def test_list(self, cli_switch):
        """list prints one VLAN id per line."""
        assert run(parse_args(["list", SWITCH_IP])) == "1\n10"

    def test_get(self, cli_switch):
        """get reports each port's VLANs."""
        out = run(parse_args(["get", SWITCH_IP, "1,2"]))
        assert "1 (untagged), 10 (untagged)" in out
        assert "1 (untagged)" in out.splitlines()[-1]

    def test_show(self, cli_switch):
        """show prints the VLAN table."""
        out = run(parse_args(["show", SWITCH_IP, "10"]))
        assert "users" in out

    def test_add_tagged(self, cli_switch):
        """add -t writes the egress list and prints the result."""
        out = run(parse_args(["add", SWITCH_IP, "2-3", "10", "-t"]))
        assert cli_switch.vlans[10]["egress"] == b"\xe0\x00\x00"
        assert "1-3" in out

    def test_remove(self, cli_switch):
        """remove clears the port from both lists."""
        run(parse_args(["remove", SWITCH_IP, "1", "10"]))
        assert cli_switch.vlans[10]["egress"] == b"\x00\x00\x00"
        assert cli_switch.vlans[10]["untagged"] == b"\x00\x00\x00"

    def test_create_and_delete(self, cli_switch):
        """create names the new VLAN; delete removes it."""
        out = run(parse_args(["create", SWITCH_IP, "20", "-n", "guests"]))
        assert "guests" in out
        assert cli_switch.vlans[20]["name"] == "guests"
        assert run(parse_args(["delete", SWITCH_IP, "20"])) == "VLAN 20 deleted"
        assert 20 not in cli_switch.vlans

    def test_missing_vlan_id(self, cli_switch):
        """add without a VLAN id is a usage error raised before connecting."""
        with pytest.raises(SystemExit):
            run(parse_args(["add", SWITCH_IP, "1"]))
        assert cli_switch.calls == []

    @pytest.mark.parametrize("vlan_id", ["abc", "0", "4095", "\u00b2"])
    @pytest.mark.parametrize("action", ["show", "create", "delete"])
    def test_bad_vlan_id(self, cli_switch, action, vlan_id):
        """A malformed VLAN id fails validation without touching the switch."""
        with pytest.raises(ValidationError):
            run(parse_args([action, SWITCH_IP, vlan_id]))
        assert cli_switch.calls == []

    @pytest.mark.parametrize("action", ["add", "remove"])
    def test_out_of_range_vlan_for_membership(self, cli_switch, action):
        """add and remove check their VLAN id before connecting."""
        with pytest.raises(ValidationError):
            run(parse_args([action, SWITCH_IP, "1", "5000"]))
        assert cli_switch.calls == []


class TestMain:
    """Test main() output and exit status."""

    def test_prints_result(self, cli_switch, capsys):
        """The action's output goes to stdout."""
        main(["list", SWITCH_IP, "-v"])
        assert capsys.readouterr().out == "1\n10\n"

    def test_domain_error_exits_1(self, cli_switch):
        """Domain errors are logged and turned into exit status 1."""
        with pytest.raises(SystemExit) as exc_info:
            main(["delete", SWITCH_IP, "10", "-v"])
        assert exc_info.value.code == 1
        assert 10 in cli_switch.vlans

    def test_validation_error_exits_1(self, cli_switch):
        """A non-ASCII digit VLAN id is reported, not a traceback."""
        with pytest.raises(SystemExit) as exc_info:
            main(["show", SWITCH_IP, "\u00b2", "-v"])
        assert exc_info.value.code == 1
        assert cli_switch.calls == []
