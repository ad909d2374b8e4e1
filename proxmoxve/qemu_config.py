"""QEMU configuration values: agent, audio, cloud-init, CPU, EFI disk and network.

Each value object encodes itself into API form parameters with
``encode_values`` and parses the comma-separated property string the API
returns with ``parse``.  Encoded parameters are returned as a ``dict``
mapping parameter names to their string values.
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass, field
from typing import Iterable, Iterator

_INT_RE = re.compile(r"[+-]?[0-9]+")
_BAD_ESCAPE_RE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def _pairs(text: str) -> Iterator[list[str]]:
    """Yield each comma-separated item of ``text`` split on '='."""
    for item in text.split(","):
        yield item.strip().split("=")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid integer: {text!r}")
    return int(text)


def _parse_float(text: str) -> float:
    if text != text.strip() or "_" in text:
        raise ValueError(f"invalid number: {text!r}")
    return float(text)


def _flag(name: str, value: bool) -> str:
    return f"{name}={1 if value else 0}"


def _numbered(devices: Iterable, key: str, only_enabled: bool) -> dict[str, str]:
    values: dict[str, str] = {}
    for index, device in enumerate(devices):
        if only_enabled and not device.enabled:
            continue
        values.update(device.encode_values(f"{key}{index}"))
    return values


@dataclass
class CustomAgent:
    """QEMU guest agent parameters."""

    enabled: bool | None = None
    trim_cloned_disks: bool | None = None
    type: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = []
        if self.enabled is not None:
            values.append(_flag("enabled", self.enabled))
        if self.trim_cloned_disks is not None:
            values.append(_flag("fstrim_cloned_disks", self.trim_cloned_disks))
        if self.type is not None:
            values.append(f"type={self.type}")
        return {key: ",".join(values)} if values else {}

    @classmethod
    def parse(cls, text: str) -> CustomAgent:
        agent = cls()
        for parts in _pairs(text):
            if len(parts) == 1:
                agent.enabled = parts[0] == "1"
            elif len(parts) == 2:
                name, value = parts
                if name == "enabled":
                    agent.enabled = value == "1"
                elif name == "fstrim_cloned_disks":
                    agent.trim_cloned_disks = value == "1"
                elif name == "type":
                    agent.type = value
        return agent


@dataclass
class CustomAudioDevice:
    """QEMU audio device parameters."""

    device: str = ""
    driver: str | None = None
    enabled: bool = False

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"device={self.device}"]
        if self.driver is not None:
            values.append(f"driver={self.driver}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomAudioDevice:
        audio = cls()
        for parts in _pairs(text):
            if len(parts) == 2:
                name, value = parts
                if name == "device":
                    audio.device = value
                elif name == "driver":
                    audio.driver = value
        return audio


def encode_audio_devices(devices: Iterable[CustomAudioDevice], key: str) -> dict[str, str]:
    """Encode the enabled audio devices as ``<key><index>`` parameters."""
    return _numbered(devices, key, only_enabled=True)


@dataclass
class CustomCloudInitFiles:
    """Custom cloud-init file volumes."""

    meta_volume: str | None = None
    network_volume: str | None = None
    user_volume: str | None = None
    vendor_volume: str | None = None

    @classmethod
    def parse(cls, text: str) -> CustomCloudInitFiles:
        files = cls()
        for parts in _pairs(text):
            if len(parts) == 2:
                name, value = parts
                if name == "meta":
                    files.meta_volume = value
                elif name == "network":
                    files.network_volume = value
                elif name == "user":
                    files.user_volume = value
                elif name == "vendor":
                    files.vendor_volume = value
        return files


@dataclass
class CustomCloudInitIPConfig:
    """Cloud-init IP configuration of one interface."""

    gateway_ipv4: str | None = None
    gateway_ipv6: str | None = None
    ipv4: str | None = None
    ipv6: str | None = None

    @classmethod
    def parse(cls, text: str) -> CustomCloudInitIPConfig:
        config = cls()
        for parts in _pairs(text):
            if len(parts) == 2:
                name, value = parts
                if name == "gw":
                    config.gateway_ipv4 = value
                elif name == "gw6":
                    config.gateway_ipv6 = value
                elif name == "ip":
                    config.ipv4 = value
                elif name == "ip6":
                    config.ipv6 = value
        return config


@dataclass
class CustomCloudInitConfig:
    """Cloud-init parameters of a virtual machine."""

    files: CustomCloudInitFiles | None = None
    ip_config: list[CustomCloudInitIPConfig] = field(default_factory=list)
    nameserver: str | None = None
    password: str | None = None
    search_domain: str | None = None
    ssh_keys: list[str] | None = None
    type: str | None = None
    username: str | None = None

    def encode_values(self, key: str = "") -> dict[str, str]:
        """Encode as separate top-level parameters; ``key`` is not used."""
        values: dict[str, str] = {}

        if self.files is not None:
            volumes = [
                f"{name}={volume}"
                for name, volume in (
                    ("meta", self.files.meta_volume),
                    ("network", self.files.network_volume),
                    ("user", self.files.user_volume),
                    ("vendor", self.files.vendor_volume),
                )
                if volume is not None
            ]
            if volumes:
                values["cicustom"] = ",".join(volumes)

        for index, config in enumerate(self.ip_config):
            items = [
                f"{name}={value}"
                for name, value in (
                    ("gw", config.gateway_ipv4),
                    ("gw6", config.gateway_ipv6),
                    ("ip", config.ipv4),
                    ("ip6", config.ipv6),
                )
                if value is not None
            ]
            if items:
                values[f"ipconfig{index}"] = ",".join(items)

        if self.nameserver is not None:
            values["nameserver"] = self.nameserver
        if self.password is not None:
            values["cipassword"] = self.password
        if self.search_domain is not None:
            values["searchdomain"] = self.search_domain
        if self.ssh_keys is not None:
            escaped = urllib.parse.quote_plus("\n".join(self.ssh_keys), safe="")
            values["sshkeys"] = escaped.replace("+", "%20")
        if self.type is not None:
            values["citype"] = self.type
        if self.username is not None:
            values["ciuser"] = self.username
        return values


def parse_ssh_keys(text: str) -> list[str]:
    """Decode the URL-escaped, newline-separated list of SSH keys."""
    if _BAD_ESCAPE_RE.search(text):
        raise ValueError(f"invalid URL escape in {text!r}")
    decoded = urllib.parse.unquote_plus(text, errors="strict")
    if decoded == "":
        return []
    return decoded.strip().split("\n")


@dataclass
class CustomCPUEmulation:
    """QEMU CPU emulation parameters."""

    type: str = ""
    flags: list[str] | None = None
    hidden: bool | None = None
    hv_vendor_id: str | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"cputype={self.type}"]
        if self.flags:
            values.append(f"flags={';'.join(self.flags)}")
        if self.hidden is not None:
            values.append(_flag("hidden", self.hidden))
        if self.hv_vendor_id is not None:
            values.append(f"hv-vendor-id={self.hv_vendor_id}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomCPUEmulation:
        if text == "":
            raise ValueError("unexpected empty string")
        cpu = cls()
        for parts in _pairs(text):
            if len(parts) == 1:
                cpu.type = parts[0]
            elif len(parts) == 2:
                name, value = parts
                if name == "cputype":
                    cpu.type = value
                elif name == "flags":
                    cpu.flags = value.split(";") if value != "" else []
                elif name == "hidden":
                    cpu.hidden = value == "1"
                elif name == "hv-vendor-id":
                    cpu.hv_vendor_id = value
        return cpu


@dataclass
class CustomEFIDisk:
    """QEMU EFI disk parameters."""

    file_volume: str = ""
    format: str | None = None
    disk_size: int | None = None

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"file={self.file_volume}"]
        if self.format is not None:
            values.append(f"format={self.format}")
        if self.disk_size is not None:
            values.append(f"size={self.disk_size}")
        return {key: ",".join(values)}


@dataclass
class CustomNetworkDevice:
    """QEMU network device parameters."""

    model: str = ""
    bridge: str | None = None
    enabled: bool = False
    firewall: bool | None = None
    link_down: bool | None = None
    mac_address: str | None = None
    queues: int | None = None
    rate_limit: float | None = None
    tag: int | None = None
    mtu: int | None = None
    trunks: list[int] = field(default_factory=list)

    def encode_values(self, key: str) -> dict[str, str]:
        values = [f"model={self.model}"]
        if self.bridge is not None:
            values.append(f"bridge={self.bridge}")
        if self.firewall is not None:
            values.append(_flag("firewall", self.firewall))
        if self.link_down is not None:
            values.append(_flag("link_down", self.link_down))
        if self.mac_address is not None:
            values.append(f"macaddr={self.mac_address}")
        if self.queues is not None:
            values.append(f"queues={self.queues}")
        if self.rate_limit is not None:
            values.append(f"rate={self.rate_limit:f}")
        if self.tag is not None:
            values.append(f"tag={self.tag}")
        if self.mtu is not None:
            values.append(f"mtu={self.mtu}")
        if self.trunks:
            values.append(f"trunks={';'.join(str(t) for t in self.trunks)}")
        return {key: ",".join(values)}

    @classmethod
    def parse(cls, text: str) -> CustomNetworkDevice:
        device = cls()
        for parts in _pairs(text):
            if len(parts) != 2:
                continue
            name, value = parts
            if name == "bridge":
                device.bridge = value
            elif name == "firewall":
                device.firewall = value == "1"
            elif name == "link_down":
                device.link_down = value == "1"
            elif name == "macaddr":
                device.mac_address = value
            elif name == "model":
                device.model = value
            elif name == "queues":
                device.queues = _atoi(value)
            elif name == "rate":
                device.rate_limit = _parse_float(value)
            elif name == "mtu":
                device.mtu = _atoi(value)
            elif name == "tag":
                device.tag = _atoi(value)
            elif name == "trunks":
                device.trunks = [_atoi(trunk) for trunk in value.split(";")]
            else:
                device.mac_address = value
                device.model = name
        device.enabled = True
        return device


def encode_network_devices(devices: Iterable[CustomNetworkDevice], key: str) -> dict[str, str]:
    """Encode the enabled network devices as ``<key><index>`` parameters."""
    return _numbered(devices, key, only_enabled=True)