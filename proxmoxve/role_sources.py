"""Data sources for access roles.

``role_data_source`` and ``roles_data_source`` describe the data sources.
``read_role`` and ``read_roles`` fill a ``ResourceData`` from an API client,
which is any object with ``get_role`` and ``list_roles`` methods.  Errors the
client raises propagate to the caller.
"""

from __future__ import annotations

from typing import Any, Iterable

from proxmoxve.schema import Resource, ResourceData, Schema, ValueType

ROLE_ID = "role_id"
ROLE_PRIVILEGES = "privileges"

ROLES_PRIVILEGES = "privileges"
ROLES_ROLE_IDS = "role_ids"
ROLES_SPECIAL = "special"


def _unique(items: Iterable[str] | None) -> list[str]:
    return list(dict.fromkeys(items or []))


def role_data_source() -> Resource:
    return Resource(
        schema={
            ROLE_ID: Schema(type=ValueType.STRING, description="The role id", required=True),
            ROLE_PRIVILEGES: Schema(
                type=ValueType.SET,
                description="The role privileges",
                computed=True,
                elem=Schema(type=ValueType.STRING),
            ),
        },
        reader=read_role,
    )


def read_role(client: Any, data: ResourceData) -> None:
    role_id = data.get(ROLE_ID)
    privileges = client.get_role(role_id)
    data.id = role_id
    data.set(ROLE_PRIVILEGES, _unique(privileges))


def roles_data_source() -> Resource:
    return Resource(
        schema={
            ROLES_PRIVILEGES: Schema(
                type=ValueType.LIST,
                description="The role privileges",
                computed=True,
                elem=Schema(type=ValueType.SET, elem=Schema(type=ValueType.STRING)),
            ),
            ROLES_ROLE_IDS: Schema(
                type=ValueType.LIST,
                description="The role ids",
                computed=True,
                elem=Schema(type=ValueType.STRING),
            ),
            ROLES_SPECIAL: Schema(
                type=ValueType.LIST,
                description="Whether the role is special (built-in)",
                computed=True,
                elem=Schema(type=ValueType.BOOL),
            ),
        },
        reader=read_roles,
    )


def read_roles(client: Any, data: ResourceData) -> None:
    roles = list(client.list_roles())
    data.id = "roles"
    data.set(ROLES_PRIVILEGES, [_unique(role.privileges) for role in roles])
    data.set(ROLES_ROLE_IDS, [role.id for role in roles])
    data.set(
        ROLES_SPECIAL,
        [False if role.special is None else bool(role.special) for role in roles],
    )