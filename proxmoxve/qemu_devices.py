"""QEMU device values: NUMA nodes, PCI passthrough, serial ports and the like.

Each value object encodes itself into API form parameters with
``encode_values``; some also parse the comma-separated property string the
API returns with ``parse``.  Encoded parameters are returned as a ``dict``
mapping parameter names to their string values.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from proxmoxve.qemu_config import _atoi, _flag, _numbered, _pairs


@dataclass
class CustomNUMADevice:
    """QEMU NUMA node parameters."""

    cpu_ids: list[str] = field(default_factory=list)
    host_node_names: list[str] | None = None
    memory: float | None = None
    policy: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"cpus={';'.join(self.cpu_ids)}"]
        if self.host_node_names is not None:
            values.append(f"hostnodes={';'.join(self.host_node_names)}")
        if self.memory is not None:
            values.append(f"memory={self.memory:f}")
        if self.policy is not None:
            values.append(f"policy={self.policy}")
        return {key: ",".join(values)}


def encode_numa_devices(devices: Iterable[CustomNUMADevice], key: str) -> dict[str, str]:
    """Encode every NUMA node as a ``<key><index>`` parameter."""
    return _numbered(devices, key, only_enabled=False)


@dataclass
class CustomPCIDevice:
    """QEMU host PCI device mapping parameters."""

    device_ids: list[str] = field(default_factory=list)
    mdev: str | None = None
    pci_express: bool | None = None
    rombar: bool | None = None
    rom_file: str | None = None
    x_vga: bool | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"host={';'.join(self.device_ids)}"]
        if self.mdev is not None:
            values.append(f"mdev={self.mdev}")
        if self.pci_express is not None:
            values.append(_flag("pcie", self.pci_express))
        if self.rombar is not None:
            values.append(_flag("rombar", self.rombar))
        if self.rom_file is not None:
            values.append(f"romfile={self.rom_file}")
        if self.x_vga is not None:
            values.append(_flag("x-vga", self.x_vga))
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomPCIDevice:
        """Parse a property string; every item must be of the form name=value."""
        device = cls()
        for parts in _pairs(text):
            if len(parts) == 1:
                raise ValueError(f"PCI device property {parts[0]!r} has no value")
            if len(parts) != 2:
                continue
            name, value = parts
            if name == "host":
                device.device_ids = value.split(";")
            elif name == "mdev":
                device.mdev = value
            elif name == "pcie":
                device.pci_express = value == "1"
            elif name == "rombar":
                device.rombar = value == "1"
            elif name == "romfile":
                device.rom_file = value
            elif name == "x-vga":
                device.x_vga = value == "1"
        return device


def encode_pci_devices(devices: Iterable[CustomPCIDevice], key: str) -> dict[str, str]:
    """Encode every PCI device as a ``<key><index>`` parameter."""
    return _numbered(devices, key, only_enabled=False)


def encode_serial_devices(devices: Iterable[str], key: str) -> dict[str, str]:
    """Encode every serial device as a ``<key><index>`` parameter."""
    return {f"{key}{index}": device for index, device in enumerate(devices)}


@dataclass
class CustomSharedMemory:
    """QEMU inter-VM shared memory parameters."""

    size: int = 0
    name: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"size={self.size}"]
        if self.name is not None:
            values.append(f"name={self.name}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomSharedMemory:
        memory = cls()
        for parts in _pairs(text):
            if len(parts) == 2:
                name, value = parts
                if name == "name":
                    memory.name = value
                elif name == "size":
                    memory.size = _atoi(value)
        return memory


@dataclass
class CustomSMBIOS:
    """QEMU SMBIOS type 1 parameters."""

    base64: bool | None = None
    family: str | None = None
    manufacturer: str | None = None
    product: str | None = None
    serial: str | None = None
    sku: str | None = None
    uuid: str | None = None
    version: str | None = None

    _TEXT_FIELDS = ("family", "manufacturer", "product", "serial", "sku", "uuid", "version")

    def encode_values(self, key: str) -> dict[str, str]:
        values = []
        if self.base64 is not None:
            values.append(_flag("base64", self.base64))
        for name in self._TEXT_FIELDS:
            value = getattr(self, name)
            if value is not None:
                values.append(f"{name}={value}")
        return {key: ",".join(values)} if values else {}

    @classmethod
    def parse(cls, text: str) -> CustomSMBIOS:
        smbios = cls()
        for parts in _pairs(text):
            if len(parts) != 2:
                continue
            name, value = parts
            if name == "base64":
                smbios.base64 = value == "1"
            elif name in cls._TEXT_FIELDS:
                setattr(smbios, name, value)
        return smbios


@dataclass
class CustomSpiceEnhancements:
    """QEMU SPICE enhancement parameters."""

    folder_sharing: bool | None = None
    video_streaming: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = []
        if self.folder_sharing is not None:
            values.append(_flag("foldersharing", self.folder_sharing))
        if self.video_streaming is not None:
            values.append(f"videostreaming={self.video_streaming}")
        return {key: ",".join(values)} if values else {}


@dataclass
class CustomStartupOrder:
    """QEMU startup order parameters."""

    down: int | None = None
    order: int | None = None
    up: int | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [
            f"{name}={value}"
            for name, value in (("order", self.order), ("up", self.up), ("down", self.down))
            if value is not None
        ]
        return {key: ",".join(values)} if values else {}