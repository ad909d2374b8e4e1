from types import SimpleNamespace

import pytest

from proxmoxve.node_sources import (
    DNS_DOMAIN,
    DNS_NODE_NAME,
    DNS_SERVERS,
    HOSTS_ADDRESSES,
    HOSTS_DIGEST,
    HOSTS_ENTRIES,
    HOSTS_ENTRIES_ADDRESS,
    HOSTS_ENTRIES_HOSTNAMES,
    HOSTS_HOSTNAMES,
    HOSTS_NODE_NAME,
    VERSION_KEYBOARD_LAYOUT,
    VERSION_RELEASE,
    VERSION_REPOSITORY_ID,
    VERSION_VERSION,
    dns_data_source,
    hosts_data_source,
    parse_hosts,
    read_dns,
    read_hosts,
    read_version,
    version_data_source,
)
from proxmoxve.schema import ResourceData, ValueType


class FakeClient:
    def __init__(self, dns=None, hosts=None, version=None, error=None):
        self._dns = dns
        self._hosts = hosts
        self._version = version
        self.error = error
        self.node = None

    def get_dns(self, node):
        if self.error:
            raise self.error
        self.node = node
        return self._dns

    def get_hosts(self, node):
        if self.error:
            raise self.error
        self.node = node
        return self._hosts

    def version(self):
        if self.error:
            raise self.error
        return self._version


def test_dns_schema():
    s = dns_data_source()
    assert s.required_keys() == {DNS_NODE_NAME}
    assert s.computed_keys() == {DNS_DOMAIN, DNS_SERVERS}
    assert s.value_types() == {
        DNS_DOMAIN: ValueType.STRING,
        DNS_NODE_NAME: ValueType.STRING,
        DNS_SERVERS: ValueType.LIST,
    }


def test_hosts_schema():
    s = hosts_data_source()
    assert s.required_keys() == {HOSTS_NODE_NAME}
    assert s.computed_keys() == {HOSTS_ADDRESSES, HOSTS_DIGEST, HOSTS_ENTRIES, HOSTS_HOSTNAMES}
    assert s.value_types() == {
        HOSTS_ADDRESSES: ValueType.LIST,
        HOSTS_DIGEST: ValueType.STRING,
        HOSTS_ENTRIES: ValueType.LIST,
        HOSTS_HOSTNAMES: ValueType.LIST,
        HOSTS_NODE_NAME: ValueType.STRING,
    }
    entries = s.nested(HOSTS_ENTRIES)
    assert entries.computed_keys() == {HOSTS_ENTRIES_ADDRESS, HOSTS_ENTRIES_HOSTNAMES}
    assert entries.value_types() == {
        HOSTS_ENTRIES_ADDRESS: ValueType.STRING,
        HOSTS_ENTRIES_HOSTNAMES: ValueType.LIST,
    }


def test_version_schema():
    s = version_data_source()
    keys = {VERSION_KEYBOARD_LAYOUT, VERSION_RELEASE, VERSION_REPOSITORY_ID, VERSION_VERSION}
    assert s.required_keys() == set()
    assert s.computed_keys() == keys
    assert s.value_types() == {key: ValueType.STRING for key in keys}


def test_read_dns():
    dns = SimpleNamespace(
        search_domain="example.com", server1="10.0.0.1", server2=None, server3="10.0.0.3"
    )
    client = FakeClient(dns=dns)
    data = ResourceData(dns_data_source(), {DNS_NODE_NAME: "pve"})
    read_dns(client, data)
    assert client.node == "pve"
    assert data.id == "pve_dns"
    assert data.get(DNS_DOMAIN) == "example.com"
    assert data.get(DNS_SERVERS) == ["10.0.0.1", "10.0.0.3"]


def test_read_dns_without_domain():
    dns = SimpleNamespace(search_domain=None, server1=None, server2=None, server3=None)
    data = ResourceData(dns_data_source(), {DNS_NODE_NAME: "pve"})
    read_dns(FakeClient(dns=dns), data)
    assert data.get(DNS_DOMAIN) == ""
    assert data.get(DNS_SERVERS) == []


def test_parse_hosts_skips_comments_and_indented_lines():
    text = "# comment\n127.0.0.1\tlocalhost  localhost.localdomain\n  ignored line\n\n::1 ip6-localhost"
    assert parse_hosts(text) == [
        {"address": "127.0.0.1", "hostnames": ["localhost", "localhost.localdomain"]},
        {"address": "::1", "hostnames": ["ip6-localhost"]},
    ]


def test_parse_hosts_address_without_names():
    assert parse_hosts("10.0.0.5") == [{"address": "10.0.0.5", "hostnames": []}]


def test_read_hosts():
    hosts = SimpleNamespace(data="127.0.0.1 localhost\n10.0.0.2 pve pve.example.com\n", digest="abc")
    data = ResourceData(hosts_data_source(), {HOSTS_NODE_NAME: "pve"})
    read_hosts(FakeClient(hosts=hosts), data)
    assert data.id == "pve_hosts"
    assert data.get(HOSTS_ADDRESSES) == ["127.0.0.1", "10.0.0.2"]
    assert data.get(HOSTS_DIGEST) == "abc"
    assert data.get(HOSTS_HOSTNAMES) == [["localhost"], ["pve", "pve.example.com"]]
    assert data.get(HOSTS_ENTRIES)[1] == {
        "address": "10.0.0.2",
        "hostnames": ["pve", "pve.example.com"],
    }


def test_read_hosts_without_digest():
    hosts = SimpleNamespace(data="", digest=None)
    data = ResourceData(hosts_data_source(), {HOSTS_NODE_NAME: "n1"})
    read_hosts(FakeClient(hosts=hosts), data)
    assert data.get(HOSTS_DIGEST) == ""
    assert data.get(HOSTS_ADDRESSES) == []


def test_read_version():
    version = SimpleNamespace(
        keyboard="en-us", release="7.3", repository_id="abcdef12", version="7.3-4"
    )
    data = ResourceData(version_data_source())
    read_version(FakeClient(version=version), data)
    assert data.id == "version"
    assert data.get(VERSION_KEYBOARD_LAYOUT) == "en-us"
    assert data.get(VERSION_RELEASE) == "7.3"
    assert data.get(VERSION_REPOSITORY_ID) == "abcdef12"
    assert data.get(VERSION_VERSION) == "7.3-4"


def test_read_version_error_propagates():
    data = ResourceData(version_data_source())
    with pytest.raises(ConnectionError):
        read_version(FakeClient(error=ConnectionError("down")), data)