"""
Tests for the instance group managers data source.
"""

from unittest.mock import call

import pytest

from ibmcloud_resources.resources.base import Operation, ResourceData
from ibmcloud_resources.data_sources.instance_group_managers import (
    InstanceGroupManagersDataSource,
)

GROUP = "r006-group-1"
NEXT_HREF = (
    "https://us-south.iaas.cloud.ibm.com/v1/instance_groups/r006-group-1/managers"
    "?limit=50&start=page-2"
)


@pytest.fixture
def data_source(session):
    return InstanceGroupManagersDataSource(session)


def autoscale_manager():
    return {
        "id": "mgr-auto",
        "name": "autoscale",
        "manager_type": "autoscale",
        "aggregation_window": 90,
        "cooldown": 300,
        "max_membership_count": 10,
        "min_membership_count": 1,
        "policies": [{"id": "pol-1", "name": "cpu"}, {"id": "pol-2", "name": "mem"}],
    }


def scheduled_manager():
    return {
        "id": "mgr-sched",
        "name": "nightly",
        "manager_type": "scheduled",
        "actions": [
            {"id": "act-1", "name": "scale-down", "resource_type": "instance_group_manager_action"}
        ],
    }


class TestInstanceGroupManagersDataSource:
    """Test listing instance group managers."""

    @pytest.mark.asyncio
    async def test_lists_all_pages(self, data_source, mock_vpc, make_response):
        mock_vpc.list_instance_group_managers.side_effect = [
            make_response({"managers": [autoscale_manager()], "next": {"href": NEXT_HREF}}),
            make_response({"managers": [scheduled_manager()]}),
        ]
        data = ResourceData(attributes={"instance_group": GROUP})

        result = await data_source.apply(Operation.READ, data)

        assert result.success
        assert mock_vpc.list_instance_group_managers.call_args_list == [
            call(GROUP, start=None, limit=50),
            call(GROUP, start="page-2", limit=50),
        ]
        managers = data.get("instance_group_managers")
        assert [m["manager_id"] for m in managers] == ["mgr-auto", "mgr-sched"]
        assert data.id

    @pytest.mark.asyncio
    async def test_autoscale_manager_fields(self, data_source, mock_vpc, make_response):
        mock_vpc.list_instance_group_managers.return_value = make_response(
            {"managers": [autoscale_manager()]}
        )
        data = ResourceData(attributes={"instance_group": GROUP})

        await data_source.read(data)

        manager = data.get("instance_group_managers")[0]
        assert manager == {
            "id": f"{GROUP}/mgr-auto",
            "manager_id": "mgr-auto",
            "name": "autoscale",
            "manager_type": "autoscale",
            "aggregation_window": 90,
            "cooldown": 300,
            "max_membership_count": 10,
            "min_membership_count": 1,
            "policies": ["pol-1", "pol-2"],
        }

    @pytest.mark.asyncio
    async def test_scheduled_manager_fields(self, data_source, mock_vpc, make_response):
        mock_vpc.list_instance_group_managers.return_value = make_response(
            {"managers": [scheduled_manager()]}
        )
        data = ResourceData(attributes={"instance_group": GROUP})

        await data_source.read(data)

        manager = data.get("instance_group_managers")[0]
        assert manager["actions"] == [
            {
                "instance_group_manager_action": "act-1",
                "instance_group_manager_action_name": "scale-down",
                "resource_type": "instance_group_manager_action",
            }
        ]
        assert "cooldown" not in manager
        assert "policies" not in manager

    @pytest.mark.asyncio
    async def test_empty_group(self, data_source, mock_vpc, make_response):
        mock_vpc.list_instance_group_managers.return_value = make_response({"managers": []})
        data = ResourceData(attributes={"instance_group": GROUP})

        await data_source.read(data)

        assert data.get("instance_group_managers") == []

    @pytest.mark.asyncio
    async def test_list_failure(self, data_source, mock_vpc, api_error):
        mock_vpc.list_instance_group_managers.side_effect = api_error(403, "Forbidden")
        data = ResourceData(attributes={"instance_group": GROUP})

        result = await data_source.apply(Operation.READ, data)

        assert not result.success
        assert "list_instance_group_managers failed: Forbidden" in result.diagnostics[0].detail
        assert data.id == ""

    @pytest.mark.asyncio
    async def test_missing_instance_group(self, data_source, mock_vpc):
        result = await data_source.apply(Operation.READ, ResourceData())

        assert not result.success
        mock_vpc.list_instance_group_managers.assert_not_called()

    @pytest.mark.asyncio
    async def test_looping_cursor_fails(self, data_source, mock_vpc, make_response):
        mock_vpc.list_instance_group_managers.return_value = make_response(
            {"managers": [autoscale_manager()], "next": {"href": NEXT_HREF}}
        )
        data = ResourceData(attributes={"instance_group": GROUP})

        result = await data_source.apply(Operation.READ, data)

        assert not result.success
        assert "returned cursor 'page-2' twice" in result.diagnostics[0].detail
        assert mock_vpc.list_instance_group_managers.call_count == 2
        assert data.id == ""
