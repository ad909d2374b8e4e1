"""Data sources for cluster aliases, groups and pools.

Each ``*_data_source`` function returns the ``Resource`` describing a data
source; each ``read_*`` function fills a ``ResourceData`` from an API
client.  The client is any object offering the methods used here
(``get_alias``, ``list_pools``, ``get_group``, ``get_acl``, ``list_groups``
and ``get_pool``); errors it raises propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Iterable

from proxmoxve.schema import Resource, ResourceData, Schema, ValueType

DEFAULT_ALIAS_COMMENT = ""

ALIAS_NAME = "name"
ALIAS_CIDR = "cidr"
ALIAS_COMMENT = "comment"

ALIASES_ALIAS_IDS = "alias_ids"

GROUP_ACL = "acl"
GROUP_ACL_PATH = "path"
GROUP_ACL_PROPAGATE = "propagate"
GROUP_ACL_ROLE_ID = "role_id"
GROUP_COMMENT = "comment"
GROUP_ID = "group_id"
GROUP_MEMBERS = "members"

GROUPS_COMMENTS = "comments"
GROUPS_GROUP_IDS = "group_ids"

POOL_COMMENT = "comment"
POOL_MEMBERS = "members"
POOL_MEMBERS_DATASTORE_ID = "datastore_id"
POOL_MEMBERS_ID = "id"
POOL_MEMBERS_NODE_NAME = "node_name"
POOL_MEMBERS_TYPE = "type"
POOL_MEMBERS_VM_ID = "vm_id"
POOL_POOL_ID = "pool_id"

POOLS_POOL_IDS = "pool_ids"


def _string_list(description: str) -> Schema:
    return Schema(
        type=ValueType.LIST,
        description=description,
        computed=True,
        elem=Schema(type=ValueType.STRING),
    )


def _or(value: Any, default: Any) -> Any:
    return default if value is None else value


def cluster_alias_data_source() -> Resource:
    return Resource(
        schema={
            ALIAS_NAME: Schema(type=ValueType.STRING, description="Alias name", required=True),
            ALIAS_CIDR: Schema(type=ValueType.STRING, description="IP/CIDR block", computed=True),
            ALIAS_COMMENT: Schema(
                type=ValueType.STRING, description="Alias comment", computed=True
            ),
        },
        reader=read_cluster_alias,
    )


def read_cluster_alias(client: Any, data: ResourceData) -> None:
    alias_id = data.get(ALIAS_NAME)
    alias = client.get_alias(alias_id)
    data.id = alias_id
    data.set(ALIAS_CIDR, alias.cidr)
    data.set(ALIAS_COMMENT, _or(alias.comment, DEFAULT_ALIAS_COMMENT))


def cluster_aliases_data_source() -> Resource:
    return Resource(
        schema={ALIASES_ALIAS_IDS: _string_list("Alias IDs")},
        reader=read_cluster_aliases,
    )


def read_cluster_aliases(client: Any, data: ResourceData) -> None:
    # The identifiers are taken from the pool listing.
    entries = client.list_pools()
    data.id = "aliases"
    data.set(ALIASES_ALIAS_IDS, [entry.id for entry in entries])


def _acl_schema() -> Resource:
    return Resource(
        schema={
            GROUP_ACL_PATH: Schema(type=ValueType.STRING, computed=True, description="The path"),
            GROUP_ACL_PROPAGATE: Schema(
                type=ValueType.BOOL,
                computed=True,
                description="Whether to propagate to child paths",
            ),
            GROUP_ACL_ROLE_ID: Schema(
                type=ValueType.STRING, computed=True, description="The role id"
            ),
        }
    )


def group_data_source() -> Resource:
    return Resource(
        schema={
            GROUP_ACL: Schema(
                type=ValueType.SET,
                description="The access control list",
                computed=True,
                elem=_acl_schema(),
            ),
            GROUP_COMMENT: Schema(
                type=ValueType.STRING, description="The group comment", computed=True
            ),
            GROUP_ID: Schema(type=ValueType.STRING, description="The group id", required=True),
            GROUP_MEMBERS: Schema(
                type=ValueType.SET,
                description="The group members",
                computed=True,
                elem=Schema(type=ValueType.STRING),
            ),
        },
        reader=read_group,
    )


def _acl_entries(acl: Iterable[Any], kind: str, ident: str) -> list[dict[str, Any]]:
    return [
        {
            GROUP_ACL_PATH: entry.path,
            GROUP_ACL_PROPAGATE: bool(_or(entry.propagate, False)),
            GROUP_ACL_ROLE_ID: entry.role_id,
        }
        for entry in acl
        if entry.type == kind and entry.user_or_group_id == ident
    ]


def read_group(client: Any, data: ResourceData) -> None:
    group_id = data.get(GROUP_ID)
    group = client.get_group(group_id)
    acl = client.get_acl()
    data.id = group_id
    data.set(GROUP_ACL, _acl_entries(acl, "group", group_id))
    data.set(GROUP_COMMENT, _or(group.comment, ""))
    data.set(GROUP_MEMBERS, group.members)


def groups_data_source() -> Resource:
    return Resource(
        schema={
            GROUPS_COMMENTS: _string_list("The group comments"),
            GROUPS_GROUP_IDS: _string_list("The group ids"),
        },
        reader=read_groups,
    )


def read_groups(client: Any, data: ResourceData) -> None:
    groups = list(client.list_groups())
    data.id = "groups"
    data.set(GROUPS_COMMENTS, [_or(group.comment, "") for group in groups])
    data.set(GROUPS_GROUP_IDS, [group.id for group in groups])


def pool_data_source() -> Resource:
    members = Resource(
        schema={
            POOL_MEMBERS_DATASTORE_ID: Schema(
                type=ValueType.STRING, computed=True, description="The datastore id"
            ),
            POOL_MEMBERS_ID: Schema(
                type=ValueType.STRING, computed=True, description="The member id"
            ),
            POOL_MEMBERS_NODE_NAME: Schema(
                type=ValueType.STRING, computed=True, description="The node name"
            ),
            POOL_MEMBERS_TYPE: Schema(
                type=ValueType.STRING, computed=True, description="The member type"
            ),
            POOL_MEMBERS_VM_ID: Schema(
                type=ValueType.INT, computed=True, description="The virtual machine id"
            ),
        }
    )
    return Resource(
        schema={
            POOL_COMMENT: Schema(
                type=ValueType.STRING, description="The pool comment", computed=True
            ),
            POOL_MEMBERS: Schema(
                type=ValueType.LIST,
                description="The pool members",
                computed=True,
                elem=members,
            ),
            POOL_POOL_ID: Schema(type=ValueType.STRING, description="The pool id", required=True),
        },
        reader=read_pool,
    )


def read_pool(client: Any, data: ResourceData) -> None:
    pool_id = data.get(POOL_POOL_ID)
    pool = client.get_pool(pool_id)
    data.id = pool_id
    data.set(POOL_COMMENT, _or(pool.comment, ""))
    data.set(
        POOL_MEMBERS,
        [
            {
                POOL_MEMBERS_ID: member.id,
                POOL_MEMBERS_NODE_NAME: member.node,
                POOL_MEMBERS_DATASTORE_ID: _or(member.datastore_id, ""),
                POOL_MEMBERS_TYPE: member.type,
                POOL_MEMBERS_VM_ID: _or(member.vm_id, 0),
            }
            for member in pool.members or []
        ],
    )


def pools_data_source() -> Resource:
    return Resource(
        schema={POOLS_POOL_IDS: _string_list("The pool ids")},
        reader=read_pools,
    )


def read_pools(client: Any, data: ResourceData) -> None:
    entries = client.list_pools()
    data.id = "pools"
    data.set(POOLS_POOL_IDS, [entry.id for entry in entries])