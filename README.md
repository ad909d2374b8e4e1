# proxmoxve

Building blocks for talking to a Proxmox Virtual Environment API from Python:
QEMU configuration values, VM request bodies, and read-only data sources.

## QEMU configuration values

Proxmox stores many VM settings as comma-separated `key=value` strings, for
example `local-lvm:vm-100-disk-0,ssd=1,size=8G`. Dataclasses in three modules
model these values:

- `proxmoxve.qemu_config`: `CustomAgent`, `CustomAudioDevice`,
  `CustomCloudInitFiles`, `CustomCloudInitIPConfig`, `CustomCloudInitConfig`,
  `CustomCPUEmulation`, `CustomEFIDisk`, `CustomNetworkDevice`, plus
  `parse_ssh_keys`, `encode_audio_devices` and `encode_network_devices`.
- `proxmoxve.qemu_devices`: `CustomNUMADevice`, `CustomPCIDevice`,
  `CustomSharedMemory`, `CustomSMBIOS`, `CustomSpiceEnhancements`,
  `CustomStartupOrder`, plus `encode_numa_devices`, `encode_pci_devices` and
  `encode_serial_devices`.
- `proxmoxve.qemu_storage`: `CustomStorageDevice`, `CustomUSBDevice`,
  `CustomVGADevice`, `CustomVirtualIODevice`, `CustomWatchdogDevice`, plus
  `encode_storage_devices`, `encode_usb_devices` and
  `encode_virtual_io_devices`.

`encode_values(key)` returns a `dict` mapping parameter names to string values.
Classes with a `parse(text)` class method build an instance from the API's
property string. Parsing raises `ValueError` on malformed numbers, on an empty
CPU string and on a PCI property without a value.

```python
from proxmoxve.qemu_storage import CustomStorageDevice

disk = CustomStorageDevice.parse("local-lvm:vm-100-disk-0,discard=on,ssd=1,size=8G")
print(disk.file_volume, disk.size, disk.ssd)   # local-lvm:vm-100-disk-0 8G True
print(disk.encode_values("scsi0"))
# {'scsi0': 'file=local-lvm:vm-100-disk-0,size=8G,ssd=1,discard=on'}
```

The list encoders number their entries (`net0`, `net1`, …); the audio,
network and VirtIO encoders skip devices whose `enabled` is false:

```python
from proxmoxve.qemu_config import CustomNetworkDevice, encode_network_devices

devices = [CustomNetworkDevice(model="virtio", bridge="vmbr0", enabled=True)]
print(encode_network_devices(devices, "net"))  # {'net0': 'model=virtio,bridge=vmbr0'}
```

## VM requests and responses

`proxmoxve.vm_requests` holds request bodies `VMCloneRequest`,
`VMCreateRequest` (also available as `VMUpdateRequest`), `VMMigrateRequest`,
`VMMoveDiskRequest`, `VMRebootRequest`, `VMResizeDiskRequest` and
`VMShutdownRequest`. Their `encode_values()` returns a list of
`(name, value)` pairs, ready for `urllib.parse.urlencode`; unset fields are
left out and booleans are sent as `1`/`0`.

For responses, `VMStatus.from_json`, `NetworkInterface.from_json`,
`parse_network_interfaces(body)` and `parse_task_id(body)` decode JSON bodies
(given as text, bytes or already-decoded objects).

## Data sources

`proxmoxve.schema` describes a read-only data source as a `Resource` made of
`Schema` entries, each with a `ValueType`. A `Resource` reports its
`required_keys()`, `computed_keys()`, `value_types()` and `nested(key)`
element schema. `ResourceData` holds the values of one read; `set` checks
each value against the schema and raises `TypeError` on a mismatch.

Data sources are defined in:

- `proxmoxve.access_sources`: `cluster_alias_data_source`,
  `cluster_aliases_data_source`, `group_data_source`, `groups_data_source`,
  `pool_data_source`, `pools_data_source`, with matching `read_*` functions.
- `proxmoxve.role_sources`: `role_data_source`, `roles_data_source`,
  `read_role`, `read_roles`.
- `proxmoxve.node_sources`: `dns_data_source`, `hosts_data_source`,
  `version_data_source`, their `read_*` functions and `parse_hosts(text)`.

```python
from proxmoxve.node_sources import hosts_data_source, parse_hosts
from proxmoxve.schema import ResourceData

entries = parse_hosts("127.0.0.1 localhost\n# comment\n10.0.0.1\tpve pve.example.com\n")
# [{'address': '127.0.0.1', 'hostnames': ['localhost']},
#  {'address': '10.0.0.1', 'hostnames': ['pve', 'pve.example.com']}]

resource = hosts_data_source()
data = ResourceData(resource, {"node_name": "pve"})
resource.read(client, data)   # client provides get_hosts(node_name)
print(data.id, data.get("addresses"))
```

A read function calls methods on the client you pass in (`get_alias`,
`list_pools`, `get_group`, `get_acl`, `list_groups`, `get_pool`, `get_role`,
`list_roles`, `get_dns`, `get_hosts`, `version`) and reads attributes of what
they return. Errors the client raises propagate unchanged.

## What this package does not do

It contains no API client: it makes no HTTP requests, handles no
authentication and holds no connection settings. You supply a client object
with the methods listed above. There is no command-line program.

## Installation

```
pip install .
```

## Running the tests

```
pip install .[test]
pytest
```