"""Virtual machine API requests and responses.

Request objects encode themselves into API form parameters with
``encode_values``, which returns a list of ``(name, value)`` pairs in field
order, ready for ``urllib.parse.urlencode``.  A list is used rather than a
mapping because a parameter name may legitimately appear more than once.
Response helpers decode the JSON bodies the API returns.
"""

from __future__ import annotations

import json
import math
from dataclasses import dataclass, field, fields
from typing import Any, Callable, Mapping

from proxmoxve.qemu_config import (
    CustomAgent,
    CustomAudioDevice,
    CustomCloudInitConfig,
    CustomCPUEmulation,
    CustomEFIDisk,
    CustomNetworkDevice,
    encode_audio_devices,
    encode_network_devices,
)
from proxmoxve.qemu_devices import (
    CustomNUMADevice,
    CustomPCIDevice,
    CustomSharedMemory,
    CustomSMBIOS,
    CustomSpiceEnhancements,
    CustomStartupOrder,
    encode_numa_devices,
    encode_pci_devices,
    encode_serial_devices,
)
from proxmoxve.qemu_storage import (
    CustomStorageDevice,
    CustomUSBDevice,
    CustomVGADevice,
    CustomWatchdogDevice,
    encode_storage_devices,
    encode_usb_devices,
)

Pairs = list[tuple[str, str]]


def _param(
    name: str,
    *,
    default: Any = None,
    factory: Callable[[], Any] | None = None,
    encoder: Callable[..., dict[str, str]] | None = None,
    comma: bool = False,
) -> Any:
    metadata = {"param": name, "encoder": encoder, "comma": comma}
    if factory is not None:
        return field(default_factory=factory, metadata=metadata)
    return field(default=default, metadata=metadata)


def _go_float(value: float) -> str:
    """Format a float the way the API client's query encoder does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def _encode_scalar(value: Any) -> str:
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        return _go_float(value)
    return str(value)


def _encode_fields(request: Any) -> Pairs:
    pairs: Pairs = []
    for spec in fields(request):
        name = spec.metadata.get("param")
        if name is None:
            continue
        value = getattr(request, spec.name)
        if value is None:
            continue
        encoder = spec.metadata.get("encoder")
        if isinstance(value, Mapping):
            if value:
                pairs.extend(encode_storage_devices(value).items())
        elif isinstance(value, (list, tuple)):
            if not value:
                continue
            if encoder is not None:
                pairs.extend(encoder(value, name).items())
            elif spec.metadata.get("comma"):
                pairs.append((name, ",".join(str(item) for item in value)))
            else:
                pairs.extend((name, _encode_scalar(item)) for item in value)
        elif hasattr(value, "encode_values"):
            pairs.extend(value.encode_values(name).items())
        else:
            pairs.append((name, _encode_scalar(value)))
    return pairs


@dataclass
class VMCloneRequest:
    """Parameters of a virtual machine clone request."""

    vm_id_new: int = _param("newid", default=0)
    bandwidth_limit: int | None = _param("bwlimit")
    description: str | None = _param("description")
    full_copy: bool | None = _param("full")
    name: str | None = _param("name")
    pool_id: str | None = _param("pool")
    snapshot_name: str | None = _param("snapname")
    target_node_name: str | None = _param("target")
    target_storage: str | None = _param("storage")
    target_storage_format: str | None = _param("format")

    def encode_values(self) -> Pairs:
        pairs = _encode_fields(self)
        newid = pairs.pop(0)
        pairs.append(newid)
        return pairs


@dataclass
class VMCreateRequest:
    """Parameters of a virtual machine create or update request."""

    acpi: bool | None = _param("acpi")
    agent: CustomAgent | None = _param("agent")
    allow_reboot: bool | None = _param("reboot")
    audio_devices: list[CustomAudioDevice] = _param(
        "audio", factory=list, encoder=encode_audio_devices
    )
    autostart: bool | None = _param("autostart")
    backup_file: str | None = _param("archive")
    bandwidth_limit: int | None = _param("bwlimit")
    bios: str | None = _param("bios")
    boot_disk: str | None = _param("bootdisk")
    boot_order: str | None = _param("boot")
    cdrom: str | None = _param("cdrom")
    cloud_init_config: CustomCloudInitConfig | None = _param("cloudinit")
    cpu_architecture: str | None = _param("arch")
    cpu_cores: int | None = _param("cores")
    cpu_emulation: CustomCPUEmulation | None = _param("cpu")
    cpu_limit: int | None = _param("cpulimit")
    cpu_sockets: int | None = _param("sockets")
    cpu_units: int | None = _param("cpuunits")
    dedicated_memory: int | None = _param("memory")
    delete: list[str] = _param("delete", factory=list, comma=True)
    deletion_protection: bool | None = _param("force")
    description: str | None = _param("description")
    efi_disk: CustomEFIDisk | None = _param("efidisk0")
    floating_memory: int | None = _param("balloon")
    floating_memory_shares: int | None = _param("shares")
    freeze: bool | None = _param("freeze")
    hook_script: str | None = _param("hookscript")
    hotplug: list[str] = _param("hotplug", factory=list, comma=True)
    hugepages: str | None = _param("hugepages")
    ide_devices: dict[str, CustomStorageDevice] = _param("ide", factory=dict)
    keyboard_layout: str | None = _param("keyboard")
    kvm_arguments: str | None = _param("args")
    kvm_enabled: bool | None = _param("kvm")
    local_time: bool | None = _param("localtime")
    lock: str | None = _param("lock")
    machine: str | None = _param("machine")
    migrate_downtime: float | None = _param("migrate_downtime")
    migrate_speed: int | None = _param("migrate_speed")
    name: str | None = _param("name")
    network_devices: list[CustomNetworkDevice] = _param(
        "net", factory=list, encoder=encode_network_devices
    )
    numa_devices: list[CustomNUMADevice] = _param(
        "numa", factory=list, encoder=encode_numa_devices
    )
    numa_enabled: bool | None = _param("numa")
    os_type: str | None = _param("ostype")
    overwrite: bool | None = _param("force")
    pci_devices: list[CustomPCIDevice] = _param(
        "hostpci", factory=list, encoder=encode_pci_devices
    )
    pool_id: str | None = _param("pool")
    revert: str | None = _param("revert")
    sata_devices: dict[str, CustomStorageDevice] = _param("sata", factory=dict)
    scsi_devices: dict[str, CustomStorageDevice] = _param("scsi", factory=dict)
    scsi_hardware: str | None = _param("scsihw")
    serial_devices: list[str] = _param("serial", factory=list, encoder=encode_serial_devices)
    shared_memory: CustomSharedMemory | None = _param("ivshmem")
    skip_lock: bool | None = _param("skiplock")
    smbios: CustomSMBIOS | None = _param("smbios1")
    spice_enhancements: CustomSpiceEnhancements | None = _param("spice_enhancements")
    start_date: str | None = _param("startdate")
    start_on_boot: bool | None = _param("onboot")
    startup_order: CustomStartupOrder | None = _param("startup")
    tablet_device_enabled: bool | None = _param("tablet")
    tags: str | None = _param("tags")
    template: bool | None = _param("template")
    time_drift_fix_enabled: bool | None = _param("tdf")
    usb_devices: list[CustomUSBDevice] = _param("usb", factory=list, encoder=encode_usb_devices)
    vga_device: CustomVGADevice | None = _param("vga")
    virtual_cpu_count: int | None = _param("vcpus")
    virtual_io_devices: dict[str, CustomStorageDevice] = _param("virtio", factory=dict)
    vm_generation_id: str | None = _param("vmgenid")
    vm_id: int | None = _param("vmid")
    vm_state_datastore_id: str | None = _param("vmstatestorage")
    watchdog_device: CustomWatchdogDevice | None = _param("watchdog")

    def encode_values(self) -> Pairs:
        return _encode_fields(self)


VMUpdateRequest = VMCreateRequest


@dataclass
class VMMigrateRequest:
    """Parameters of a virtual machine migration request."""

    target_node: str = _param("target", default="")
    online_migration: bool | None = _param("online")
    target_storage: str | None = _param("targetstorage")
    with_local_disks: bool | None = _param("with-local-disks")

    def encode_values(self) -> Pairs:
        pairs = _encode_fields(self)
        online = [pair for pair in pairs if pair[0] == "online"]
        rest = [pair for pair in pairs if pair[0] != "online"]
        return online + rest


@dataclass
class VMMoveDiskRequest:
    """Parameters of a virtual machine disk move request."""

    disk: str = _param("disk", default="")
    target_storage: str = _param("storage", default="")
    bandwidth_limit: int | None = _param("bwlimit")
    delete_original_disk: bool | None = _param("delete")
    digest: str | None = _param("digest")
    target_storage_format: str | None = _param("format")

    def encode_values(self) -> Pairs:
        order = ("bwlimit", "delete", "digest", "disk", "storage", "format")
        pairs = _encode_fields(self)
        return sorted(pairs, key=lambda pair: order.index(pair[0]))


@dataclass
class VMRebootRequest:
    """Parameters of a virtual machine reboot request."""

    timeout: int | None = _param("timeout")

    def encode_values(self) -> Pairs:
        return _encode_fields(self)


@dataclass
class VMResizeDiskRequest:
    """Parameters of a virtual machine disk resize request."""

    disk: str = _param("disk", default="")
    size: str = _param("size", default="")
    digest: str | None = _param("digest")
    skip_lock: bool | None = _param("skiplock")

    def encode_values(self) -> Pairs:
        order = ("digest", "disk", "size", "skiplock")
        pairs = _encode_fields(self)
        return sorted(pairs, key=lambda pair: order.index(pair[0]))


@dataclass
class VMShutdownRequest:
    """Parameters of a virtual machine shutdown request."""

    force_stop: bool | None = _param("forceStop")
    keep_active: bool | None = _param("keepActive")
    skip_lock: bool | None = _param("skipLock")
    timeout: int | None = _param("timeout")

    def encode_values(self) -> Pairs:
        return _encode_fields(self)


def _load(body: Any) -> Any:
    if isinstance(body, (str, bytes, bytearray)):
        return json.loads(body)
    return body


def _int(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise ValueError(f"{name}: expected an integer, got {value!r}")


def _float(value: Any, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError(f"{name}: expected a number, got {value!r}")
    return float(value)


def _str(value: Any, name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{name}: expected a string, got {value!r}")
    return value


def _bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value == 1
    if isinstance(value, str):
        return value in ("1", "true")
    raise ValueError(f"{name}: expected a boolean, got {value!r}")


def _optional(data: Mapping[str, Any], key: str, convert: Callable[[Any, str], Any]) -> Any:
    value = data.get(key)
    return None if value is None else convert(value, key)


@dataclass
class NetworkInterfaceAddress:
    """An IP address reported by the QEMU guest agent."""

    address: str = ""
    prefix: int = 0
    type: str = ""


@dataclass
class NetworkInterfaceStatistics:
    """Traffic counters of a guest network interface."""

    rx_bytes: int = 0
    rx_dropped: int = 0
    rx_errors: int = 0
    rx_packets: int = 0
    tx_bytes: int = 0
    tx_dropped: int = 0
    tx_errors: int = 0
    tx_packets: int = 0


_STATISTICS_KEYS = {
    "rx_bytes": "rx-bytes",
    "rx_dropped": "rx-dropped",
    "rx_errors": "rx-errs",
    "rx_packets": "rx-packets",
    "tx_bytes": "tx-bytes",
    "tx_dropped": "tx-dropped",
    "tx_errors": "tx-errs",
    "tx_packets": "tx-packets",
}


@dataclass
class NetworkInterface:
    """A guest network interface reported by the QEMU guest agent."""

    mac_address: str = ""
    name: str = ""
    statistics: NetworkInterfaceStatistics | None = None
    ip_addresses: list[NetworkInterfaceAddress] | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> NetworkInterface:
        statistics = None
        raw_stats = data.get("statistics")
        if raw_stats is not None:
            statistics = NetworkInterfaceStatistics(
                **{
                    attr: _int(raw_stats.get(key, 0), key)
                    for attr, key in _STATISTICS_KEYS.items()
                }
            )
        addresses = None
        raw_addresses = data.get("ip-addresses")
        if raw_addresses is not None:
            addresses = [
                NetworkInterfaceAddress(
                    address=_str(item.get("ip-address", ""), "ip-address"),
                    prefix=_int(item.get("prefix", 0), "prefix"),
                    type=_str(item.get("ip-address-type", ""), "ip-address-type"),
                )
                for item in raw_addresses
            ]
        return cls(
            mac_address=_str(data.get("hardware-address", ""), "hardware-address"),
            name=_str(data.get("name", ""), "name"),
            statistics=statistics,
            ip_addresses=addresses,
        )


def parse_network_interfaces(body: Any) -> list[NetworkInterface] | None:
    """Decode a guest agent network interface response; None when it holds no result."""
    payload = _load(body)
    data = payload.get("data")
    if data is None:
        return None
    result = data.get("result")
    if result is None:
        return None
    return [NetworkInterface.from_json(item) for item in result]


@dataclass
class VMStatus:
    """The current status of a virtual machine."""

    agent_enabled: bool | None = None
    cpu_count: float | None = None
    lock: str | None = None
    memory_allocation: int | None = None
    name: str | None = None
    pid: int | None = None
    qmp_status: str | None = None
    root_disk_size: int | None = None
    spice_support: bool | None = None
    status: str = ""
    tags: str | None = None
    uptime: int | None = None
    vm_id: int | None = None

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> VMStatus:
        return cls(
            agent_enabled=_optional(data, "agent", _bool),
            cpu_count=_optional(data, "cpus", _float),
            lock=_optional(data, "lock", _str),
            memory_allocation=_optional(data, "maxmem", _int),
            name=_optional(data, "name", _str),
            pid=_optional(data, "pid", _int),
            qmp_status=_optional(data, "qmpstatus", _str),
            root_disk_size=_optional(data, "maxdisk", _int),
            spice_support=_optional(data, "spice", _bool),
            status=_optional(data, "status", _str) or "",
            tags=_optional(data, "tags", _str),
            uptime=_optional(data, "uptime", _int),
            vm_id=_optional(data, "vmid", _int),
        )


def parse_task_id(body: Any) -> str | None:
    """Return the task identifier held by an asynchronous operation response."""
    payload = _load(body)
    data = payload.get("data")
    return None if data is None else _str(data, "data")