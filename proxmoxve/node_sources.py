"""Data sources for node DNS settings, the hosts file and the API version.

The ``*_data_source`` functions describe the data sources; the ``read_*``
functions fill a ``ResourceData`` from an API client offering ``get_dns``,
``get_hosts`` and ``version``.  Errors the client raises propagate.
"""

from __future__ import annotations

from typing import Any

from proxmoxve.schema import Resource, ResourceData, Schema, ValueType

DNS_DOMAIN = "domain"
DNS_NODE_NAME = "node_name"
DNS_SERVERS = "servers"

HOSTS_ADDRESSES = "addresses"
HOSTS_DIGEST = "digest"
HOSTS_ENTRIES = "entries"
HOSTS_ENTRIES_ADDRESS = "address"
HOSTS_ENTRIES_HOSTNAMES = "hostnames"
HOSTS_HOSTNAMES = "hostnames"
HOSTS_NODE_NAME = "node_name"

VERSION_KEYBOARD_LAYOUT = "keyboard_layout"
VERSION_RELEASE = "release"
VERSION_REPOSITORY_ID = "repository_id"
VERSION_VERSION = "version"


def _string_list(description: str) -> Schema:
    return Schema(
        type=ValueType.LIST,
        description=description,
        computed=True,
        elem=Schema(type=ValueType.STRING),
    )


def _node_name() -> Schema:
    return Schema(type=ValueType.STRING, description="The node name", required=True)


def dns_data_source() -> Resource:
    return Resource(
        schema={
            DNS_DOMAIN: Schema(
                type=ValueType.STRING, description="The DNS search domain", computed=True
            ),
            DNS_NODE_NAME: _node_name(),
            DNS_SERVERS: _string_list("The DNS servers"),
        },
        reader=read_dns,
    )


def read_dns(client: Any, data: ResourceData) -> None:
    node_name = data.get(DNS_NODE_NAME)
    dns = client.get_dns(node_name)
    data.id = f"{node_name}_dns"
    data.set(DNS_DOMAIN, dns.search_domain or "")
    servers = [
        server for server in (dns.server1, dns.server2, dns.server3) if server is not None
    ]
    data.set(DNS_SERVERS, servers)


def hosts_data_source() -> Resource:
    entries = Resource(
        schema={
            HOSTS_ENTRIES_ADDRESS: Schema(
                type=ValueType.STRING, description="The address", computed=True
            ),
            HOSTS_ENTRIES_HOSTNAMES: _string_list("The hostnames"),
        }
    )
    return Resource(
        schema={
            HOSTS_ADDRESSES: _string_list("The addresses"),
            HOSTS_DIGEST: Schema(
                type=ValueType.STRING, description="The SHA1 digest", computed=True
            ),
            HOSTS_ENTRIES: Schema(
                type=ValueType.LIST,
                description="The host entries",
                computed=True,
                elem=entries,
            ),
            HOSTS_HOSTNAMES: Schema(
                type=ValueType.LIST,
                description="The hostnames",
                computed=True,
                elem=Schema(type=ValueType.LIST, elem=Schema(type=ValueType.STRING)),
            ),
            HOSTS_NODE_NAME: _node_name(),
        },
        reader=read_hosts,
    )


def parse_hosts(text: str) -> list[dict[str, Any]]:
    """Parse a hosts file into entries of an address and its hostnames.

    Comment lines and lines that start with blank space are skipped.
    """
    entries = []
    for line in text.split("\n"):
        if line.startswith("#"):
            continue
        address, *rest = line.replace("\t", " ").split(" ")
        if address == "":
            continue
        entries.append(
            {
                HOSTS_ENTRIES_ADDRESS: address,
                HOSTS_ENTRIES_HOSTNAMES: [name for name in rest if name != ""],
            }
        )
    return entries


def read_hosts(client: Any, data: ResourceData) -> None:
    node_name = data.get(HOSTS_NODE_NAME)
    hosts = client.get_hosts(node_name)
    data.id = f"{node_name}_hosts"
    entries = parse_hosts(hosts.data)
    data.set(HOSTS_ADDRESSES, [entry[HOSTS_ENTRIES_ADDRESS] for entry in entries])
    data.set(HOSTS_DIGEST, hosts.digest or "")
    data.set(HOSTS_ENTRIES, entries)
    data.set(HOSTS_HOSTNAMES, [entry[HOSTS_ENTRIES_HOSTNAMES] for entry in entries])


def version_data_source() -> Resource:
    def computed(description: str) -> Schema:
        return Schema(
            type=ValueType.STRING, description=description, computed=True, force_new=True
        )

    return Resource(
        schema={
            VERSION_KEYBOARD_LAYOUT: computed("The keyboard layout"),
            VERSION_RELEASE: computed("The release information"),
            VERSION_REPOSITORY_ID: computed("The repository id"),
            VERSION_VERSION: computed("The version information"),
        },
        reader=read_version,
    )


def read_version(client: Any, data: ResourceData) -> None:
    version = client.version()
    data.id = "version"
    data.set(VERSION_KEYBOARD_LAYOUT, version.keyboard)
    data.set(VERSION_RELEASE, version.release)
    data.set(VERSION_REPOSITORY_ID, version.repository_id)
    data.set(VERSION_VERSION, version.version)