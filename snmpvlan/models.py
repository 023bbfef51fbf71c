"""Pydantic models for values returned by the VLAN core."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class PortCountResult(BaseModel):
    """Resolved port count; ``warning`` is set when the default was used."""

    port_count: int
    mask_byte_len: int
    fallback: bool = False
    warning: str | None = None


class Membership(BaseModel):
    """Raw tagged (egress) and untagged masks of one VLAN."""

    vlan_id: int
    tagged: bytes
    untagged: bytes


class Vlan(BaseModel):
    """A VLAN as currently configured on the device."""

    vlan_id: int
    name: str = ""
    tagged_mask: bytes = b""
    untagged_mask: bytes = b""
    tagged_ports: list[int] = Field(default_factory=list)
    untagged_ports: list[int] = Field(default_factory=list)


class PortVlanEntry(BaseModel):
    """One VLAN membership of a port."""

    vlan: int
    type: Literal["tagged", "untagged"]


class PortVlans(BaseModel):
    """All VLAN memberships of a single port."""

    port: int
    vlans: list[PortVlanEntry] = Field(default_factory=list)


class SwitchInfo(BaseModel):
    """Basic switch facts gathered at session bootstrap."""

    ip: str
    port_count: int
    mask_byte_len: int
    port_count_fallback: bool = False
    model: str = ""
    name: str = ""
