import json

import pytest

from proxmoxve.qemu_config import CustomAgent, CustomCloudInitConfig, CustomNetworkDevice
from proxmoxve.qemu_storage import CustomStorageDevice
from proxmoxve.vm_requests import (
    NetworkInterface,
    VMCloneRequest,
    VMCreateRequest,
    VMMigrateRequest,
    VMMoveDiskRequest,
    VMRebootRequest,
    VMResizeDiskRequest,
    VMShutdownRequest,
    VMStatus,
    VMUpdateRequest,
    parse_network_interfaces,
    parse_task_id,
)


def test_clone_minimal_has_only_new_id():
    assert VMCloneRequest(vm_id_new=200).encode_values() == [("newid", "200")]


def test_clone_full_copy_flag_and_order():
    pairs = VMCloneRequest(vm_id_new=201, full_copy=True, name="copy").encode_values()
    assert pairs == [("full", "1"), ("name", "copy"), ("newid", "201")]


def test_create_empty_encodes_nothing():
    assert VMCreateRequest().encode_values() == []


def test_create_booleans_encode_as_digits():
    pairs = VMCreateRequest(acpi=True, kvm_enabled=False).encode_values()
    assert pairs == [("acpi", "1"), ("kvm", "0")]


def test_create_nested_values_use_their_encoders():
    agent = CustomAgent(enabled=True)
    net = CustomNetworkDevice(model="virtio", bridge="vmbr0", enabled=True)
    pairs = dict(VMCreateRequest(agent=agent, network_devices=[net]).encode_values())
    assert pairs["agent"] == agent.encode_values("agent")["agent"]
    assert pairs["net0"] == net.encode_values("net0")["net0"]


def test_create_skips_disabled_network_devices():
    devices = [
        CustomNetworkDevice(model="e1000", enabled=False),
        CustomNetworkDevice(model="virtio", enabled=True),
    ]
    keys = [name for name, _ in VMCreateRequest(network_devices=devices).encode_values()]
    assert keys == ["net1"]


def test_create_storage_devices_keyed_by_name():
    disks = {
        "scsi0": CustomStorageDevice(file_volume="local-lvm:vm-1-disk-0", enabled=True),
        "scsi1": CustomStorageDevice(file_volume="local-lvm:vm-1-disk-1", enabled=False),
    }
    pairs = VMCreateRequest(scsi_devices=disks).encode_values()
    assert pairs == [("scsi0", "file=local-lvm:vm-1-disk-0")]


def test_create_delete_is_comma_joined():
    pairs = VMCreateRequest(delete=["ide2", "net1"]).encode_values()
    assert pairs == [("delete", "ide2,net1")]


def test_create_protection_and_overwrite_share_force():
    pairs = VMCreateRequest(deletion_protection=True, overwrite=False).encode_values()
    assert pairs == [("force", "1"), ("force", "0")]


def test_create_float_formatting():
    assert VMCreateRequest(migrate_downtime=0.5).encode_values() == [("migrate_downtime", "0.5")]
    assert VMCreateRequest(migrate_downtime=2.0).encode_values() == [("migrate_downtime", "2")]


def test_create_cloud_init_uses_top_level_parameters():
    config = CustomCloudInitConfig(username="ubuntu")
    assert VMCreateRequest(cloud_init_config=config).encode_values() == [("ciuser", "ubuntu")]


def test_update_request_is_create_request():
    assert VMUpdateRequest(name="vm").encode_values() == VMCreateRequest(name="vm").encode_values()


def test_migrate_request():
    pairs = VMMigrateRequest(
        target_node="node2", online_migration=True, with_local_disks=False
    ).encode_values()
    assert pairs == [("online", "1"), ("target", "node2"), ("with-local-disks", "0")]


def test_move_disk_request_order():
    pairs = VMMoveDiskRequest(
        disk="scsi0", target_storage="local", delete_original_disk=True
    ).encode_values()
    assert pairs == [("delete", "1"), ("disk", "scsi0"), ("storage", "local")]


def test_reboot_request():
    assert VMRebootRequest().encode_values() == []
    assert VMRebootRequest(timeout=30).encode_values() == [("timeout", "30")]


def test_resize_disk_request():
    pairs = VMResizeDiskRequest(disk="virtio0", size="10G", skip_lock=True).encode_values()
    assert pairs == [("disk", "virtio0"), ("size", "10G"), ("skiplock", "1")]


def test_shutdown_request():
    pairs = VMShutdownRequest(force_stop=True, timeout=60).encode_values()
    assert pairs == [("forceStop", "1"), ("timeout", "60")]


def test_parse_network_interfaces():
    body = json.dumps(
        {
            "data": {
                "result": [
                    {
                        "hardware-address": "02:00:00:00:00:01",
                        "name": "eth0",
                        "ip-addresses": [
                            {"ip-address": "192.0.2.10", "prefix": 24, "ip-address-type": "ipv4"}
                        ],
                        "statistics": {"rx-bytes": 10, "tx-errs": 2},
                    }
                ]
            }
        }
    )
    interfaces = parse_network_interfaces(body)
    assert len(interfaces) == 1
    iface = interfaces[0]
    assert iface.mac_address == "02:00:00:00:00:01"
    assert iface.name == "eth0"
    assert iface.ip_addresses[0].address == "192.0.2.10"
    assert iface.ip_addresses[0].prefix == 24
    assert iface.statistics.rx_bytes == 10
    assert iface.statistics.tx_errors == 2
    assert iface.statistics.tx_bytes == 0


def test_network_interface_without_optional_parts():
    iface = NetworkInterface.from_json({"name": "lo"})
    assert iface.statistics is None
    assert iface.ip_addresses is None
    assert iface.mac_address == ""


def test_parse_network_interfaces_without_data():
    assert parse_network_interfaces({}) is None
    assert parse_network_interfaces({"data": {}}) is None


def test_vm_status_from_json():
    status = VMStatus.from_json(
        {"status": "running", "vmid": 100, "agent": 1, "cpus": 2, "maxmem": 2048, "spice": 0}
    )
    assert status.status == "running"
    assert status.vm_id == 100
    assert status.agent_enabled is True
    assert status.spice_support is False
    assert status.cpu_count == 2.0
    assert status.memory_allocation == 2048
    assert status.name is None


def test_vm_status_rejects_wrong_type():
    with pytest.raises(ValueError):
        VMStatus.from_json({"vmid": "abc"})


def test_parse_task_id():
    assert parse_task_id({"data": "UPID:node:task"}) == "UPID:node:task"
    assert parse_task_id(json.dumps({"data": "UPID:node:task"})) == "UPID:node:task"
    assert parse_task_id({}) is None