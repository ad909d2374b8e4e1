"""QEMU storage and peripheral values: disks, USB, VGA, VirtIO and watchdog.

Each value object encodes itself into API form parameters with
``encode_values``; some also parse the comma-separated property string the
API returns with ``parse``.  Encoded parameters are returned as a ``dict``
mapping parameter names to their string values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Mapping

from proxmoxve.qemu_config import _atoi, _flag, _numbered, _pairs


def _extension(path: str) -> str:
    """Return the extension of the last path element, including the dot."""
    base = path.rsplit("/", 1)[-1]
    dot = base.rfind(".")
    return base[dot:] if dot >= 0 else ""


@dataclass
class CustomStorageDevice:
    """QEMU disk device parameters (IDE, SATA, SCSI and VirtIO)."""

    aio: str | None = None
    backup_enabled: bool | None = None
    burstable_read_speed_mbps: int | None = None
    burstable_write_speed_mbps: int | None = None
    discard: str | None = None
    enabled: bool = False
    file_volume: str = ""
    format: str | None = None
    iothread: bool | None = None
    ssd: bool | None = None
    max_read_speed_mbps: int | None = None
    max_write_speed_mbps: int | None = None
    media: str | None = None
    size: str | None = None
    interface: str | None = None
    id: str | None = None
    file_id: str | None = None
    size_int: int | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"file={self.file_volume}"]
        if self.aio is not None:
            values.append(f"aio={self.aio}")
        if self.backup_enabled is not None:
            values.append(_flag("backup", self.backup_enabled))
        for name, number in (
            ("mbps_rd_max", self.burstable_read_speed_mbps),
            ("mbps_wr_max", self.burstable_write_speed_mbps),
            ("mbps_rd", self.max_read_speed_mbps),
            ("mbps_wr", self.max_write_speed_mbps),
        ):
            if number is not None:
                values.append(f"{name}={number}")
        if self.media is not None:
            values.append(f"media={self.media}")
        if self.size is not None:
            values.append(f"size={self.size}")
        if self.iothread is not None:
            values.append(_flag("iothread", self.iothread))
        if self.ssd is not None:
            values.append(_flag("ssd", self.ssd))
        if self.discard:
            values.append(f"discard={self.discard}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomStorageDevice:
        device = cls()
        for parts in _pairs(text):
            if len(parts) == 1:
                device.file_volume = parts[0]
                ext = _extension(parts[0])
                if ext:
                    device.format = ext[1:]
                continue
            if len(parts) != 2:
                continue
            name, value = parts
            if name == "aio":
                device.aio = value
            elif name == "backup":
                device.backup_enabled = value == "1"
            elif name == "file":
                device.file_volume = value
            elif name == "mbps_rd":
                device.max_read_speed_mbps = _atoi(value)
            elif name == "mbps_rd_max":
                device.burstable_read_speed_mbps = _atoi(value)
            elif name == "mbps_wr":
                device.max_write_speed_mbps = _atoi(value)
            elif name == "mbps_wr_max":
                device.burstable_write_speed_mbps = _atoi(value)
            elif name == "media":
                device.media = value
            elif name == "size":
                device.size = value
            elif name == "format":
                device.format = value
            elif name == "iothread":
                device.iothread = value == "1"
            elif name == "ssd":
                device.ssd = value == "1"
            elif name == "discard":
                device.discard = value
        device.enabled = True
        return device


def encode_storage_devices(devices: Mapping[str, CustomStorageDevice]) -> dict[str, str]:
    """Encode the enabled disks, each under its own device name."""
    values: dict[str, str] = {}
    for name, device in devices.items():
        if device.enabled:
            values.update(device.encode_values(name))
    return values


@dataclass
class CustomUSBDevice:
    """QEMU USB device parameters."""

    host_device: str = ""
    usb3: bool | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"host={self.host_device}"]
        if self.usb3 is not None:
            values.append(_flag("usb3", self.usb3))
        return {key: ",".join(values)}


def encode_usb_devices(devices: Iterable[CustomUSBDevice], key: str) -> dict[str, str]:
    """Encode every USB device as a ``<key><index>`` parameter."""
    return _numbered(devices, key, only_enabled=False)


@dataclass
class CustomVGADevice:
    """QEMU VGA device parameters."""

    memory: int | None = None
    type: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = []
        if self.memory is not None:
            values.append(f"memory={self.memory}")
        if self.type is not None:
            values.append(f"type={self.type}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomVGADevice:
        vga = cls()
        if text == "":
            return vga
        for parts in _pairs(text):
            if len(parts) == 1:
                vga.type = parts[0]
            elif len(parts) == 2:
                name, value = parts
                if name == "memory":
                    vga.memory = _atoi(value)
                elif name == "type":
                    vga.type = value
        return vga


@dataclass
class CustomVirtualIODevice:
    """QEMU VirtIO block device parameters."""

    aio: str | None = None
    backup_enabled: bool | None = None
    enabled: bool = False
    file_volume: str = ""

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"file={self.file_volume}"]
        if self.aio is not None:
            values.append(f"aio={self.aio}")
        if self.backup_enabled is not None:
            values.append(_flag("backup", self.backup_enabled))
        return {key: ",".join(values)}


def encode_virtual_io_devices(
    devices: Iterable[CustomVirtualIODevice], key: str
) -> dict[str, str]:
    """Encode the enabled VirtIO devices as ``<key><index>`` parameters."""
    return _numbered(devices, key, only_enabled=True)


@dataclass
class CustomWatchdogDevice:
    """QEMU watchdog device parameters."""

    action: str | None = None
    model: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        model = self.model if self.model is not None else "<nil>"
        values = [f"model={model}"]
        if self.action is not None:
            values.append(f"action={self.action}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomWatchdogDevice:
        watchdog = cls()
        if text == "":
            return watchdog
        for parts in _pairs(text):
            if len(parts) == 1:
                watchdog.model = parts[0]
            elif len(parts) == 2:
                name, value = parts
                if name == "action":
                    watchdog.action = value
                elif name == "model":
                    watchdog.model = value
        return watchdog