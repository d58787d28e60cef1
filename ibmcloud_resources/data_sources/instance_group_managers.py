"""Data source listing the managers of a VPC instance group."""

from datetime import datetime, timezone
from typing import Any, Dict

from ..core.identifiers import join_id
from ..core.pagination import list_all
from ..resources.base import (
    Attribute,
    AttributeType,
    DataSource,
    ResourceData,
    ResourceSchema,
)

MANAGER_PAGE_LIMIT = 50


def _manager_state(instance_group_id: str, manager: Dict[str, Any]) -> Dict[str, Any]:
    state: Dict[str, Any] = {
        "id": join_id(instance_group_id, manager["id"]),
        "manager_id": manager["id"],
        "name": manager.get("name"),
        "manager_type": manager.get("manager_type"),
    }
    if manager.get("manager_type") == "scheduled":
        if manager.get("actions") is not None:
            state["actions"] = [
                {
                    "instance_group_manager_action": action.get("id"),
                    "instance_group_manager_action_name": action.get("name"),
                    "resource_type": action.get("resource_type"),
                }
                for action in manager["actions"]
            ]
        return state

    state["aggregation_window"] = manager.get("aggregation_window")
    state["cooldown"] = manager.get("cooldown")
    state["max_membership_count"] = manager.get("max_membership_count")
    state["min_membership_count"] = manager.get("min_membership_count")
    state["policies"] = [policy["id"] for policy in manager.get("policies") or []]
    return state


class InstanceGroupManagersDataSource(DataSource):
    """List every manager of an instance group."""

    type_name = "ibm_is_instance_group_managers"

    async def get_schema(self) -> ResourceSchema:
        string = Attribute(type=AttributeType.STRING, computed=True)
        number = Attribute(type=AttributeType.INT, computed=True)
        return ResourceSchema(
            type_name=self.type_name,
            description="Managers of a VPC instance group",
            kind=self.kind,
            attributes={
                "instance_group": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="Instance group ID",
                ),
                "instance_group_managers": Attribute(
                    type=AttributeType.LIST,
                    computed=True,
                    elements={
                        "id": string,
                        "manager_id": string,
                        "name": string,
                        "manager_type": string,
                        "aggregation_window": number,
                        "cooldown": number,
                        "max_membership_count": number,
                        "min_membership_count": number,
                        "policies": Attribute(
                            type=AttributeType.LIST,
                            computed=True,
                            element_type=AttributeType.STRING,
                        ),
                        "actions": Attribute(
                            type=AttributeType.LIST,
                            computed=True,
                            elements={
                                "instance_group_manager_action": string,
                                "instance_group_manager_action_name": string,
                                "resource_type": string,
                            },
                        ),
                    },
                ),
            },
        )

    async def read(self, data: ResourceData) -> None:
        instance_group_id, has_group = data.get_ok("instance_group")
        if not has_group:
            raise self._invalid("read", "Required parameter instance_group is not defined")

        vpc = self.session.vpc_client()

        def fetch(start):
            return self._call(
                "read",
                "list_instance_group_managers",
                vpc.list_instance_group_managers,
                instance_group_id,
                start=start,
                limit=MANAGER_PAGE_LIMIT,
            )

        managers = list_all(fetch, "managers")
        data.set(
            "instance_group_managers",
            [_manager_state(instance_group_id, manager) for manager in managers],
        )
        data.set_id(str(datetime.now(timezone.utc)))
