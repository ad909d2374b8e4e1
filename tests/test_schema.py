import pytest

from proxmoxve.schema import Resource, ResourceData, Schema, ValueType


def _resource():
    inner = Resource(
        schema={
            "path": Schema(type=ValueType.STRING, computed=True),
            "flag": Schema(type=ValueType.BOOL, computed=True),
        }
    )
    return Resource(
        schema={
            "name": Schema(type=ValueType.STRING, required=True),
            "count": Schema(type=ValueType.INT, computed=True),
            "ratio": Schema(type=ValueType.FLOAT, computed=True),
            "tags": Schema(type=ValueType.SET, computed=True, elem=Schema(type=ValueType.STRING)),
            "items": Schema(type=ValueType.LIST, computed=True, elem=inner),
        }
    )


def test_required_and_computed_keys():
    resource = _resource()
    assert resource.required_keys() == {"name"}
    assert resource.computed_keys() == {"count", "ratio", "tags", "items"}


def test_value_types():
    types = _resource().value_types()
    assert types["name"] is ValueType.STRING
    assert types["tags"] is ValueType.SET
    assert types["items"] is ValueType.LIST


def test_nested_returns_inner_resource():
    inner = _resource().nested("items")
    assert inner.computed_keys() == {"path", "flag"}


def test_nested_without_resource_raises():
    with pytest.raises(ValueError):
        _resource().nested("tags")
    with pytest.raises(KeyError):
        _resource().nested("missing")


def test_get_unset_returns_zero_value():
    data = ResourceData(_resource())
    assert data.get("name") == ""
    assert data.get("count") == 0
    assert data.get("items") == []


def test_set_get_round_trip():
    data = ResourceData(_resource(), {"name": "alpha"})
    data.set("count", 7)
    assert data.get("name") == "alpha"
    assert data.get("count") == 7


def test_set_none_stores_zero_value():
    data = ResourceData(_resource())
    data.set("items", None)
    assert data.get("items") == []


def test_set_removes_duplicates_from_sets():
    data = ResourceData(_resource())
    data.set("tags", ["a", "b", "a"])
    assert data.get("tags") == ["a", "b"]


def test_set_unknown_key_raises():
    data = ResourceData(_resource())
    with pytest.raises(KeyError):
        data.set("missing", "x")
    with pytest.raises(KeyError):
        data.get("missing")


@pytest.mark.parametrize(
    "key, value",
    [("name", 3), ("count", "3"), ("count", True), ("ratio", "x"), ("tags", "abc")],
)
def test_set_wrong_type_raises(key, value):
    data = ResourceData(_resource())
    with pytest.raises(TypeError):
        data.set(key, value)


def test_read_calls_reader():
    def reader(client, data):
        data.id = client
        data.set("count", len(client))

    resource = Resource(schema=_resource().schema, reader=reader)
    data = ResourceData(resource)
    resource.read("node1", data)
    assert data.id == "node1"
    assert data.get("count") == len("node1")


def test_read_without_reader_raises():
    resource = _resource()
    with pytest.raises(ValueError):
        resource.read(None, ResourceData(resource))