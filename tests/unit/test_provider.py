"""
Tests for the provider entry point.
"""

import pytest

from ibmcloud_resources.config.settings import AppSettings
from ibmcloud_resources.provider import Provider
from ibmcloud_resources.resources.base import Operation


@pytest.fixture
def app_settings(cloud_settings, polling_settings):
    return AppSettings(cloud=cloud_settings, polling=polling_settings)


@pytest.fixture
def provider(app_settings, session):
    return Provider(settings=app_settings, session=session)


class TestProvider:
    """Test running operations by type name."""

    def test_type_listing(self, provider):
        assert "ibm_is_network_acl" in provider.resource_types()
        assert "ibm_code_engine_function" in provider.data_source_types()
        assert "ibm_is_network_acl" not in provider.data_source_types()

    def test_handler_is_cached(self, provider, session, polling_settings):
        first = provider.handler("ibm_is_image_export_job")

        assert provider.handler("ibm_is_image_export_job") is first
        assert first.session is session
        assert first.polling is polling_settings

    def test_unknown_handler(self, provider):
        with pytest.raises(ValueError):
            provider.handler("ibm_is_vpc")

    @pytest.mark.asyncio
    async def test_get_schemas(self, provider):
        schemas = await provider.get_schemas()

        assert set(schemas) == set(provider.resource_types()) | set(
            provider.data_source_types()
        )
        assert schemas["ibm_is_instance_group_managers"].kind == "data_source"
        assert schemas["ibm_is_network_acl"].kind == "resource"

    @pytest.mark.asyncio
    async def test_apply_read(self, provider, mock_vpc, make_response):
        mock_vpc.get_image_export_job.return_value = make_response(
            {"id": "job-1", "name": "export", "status": "succeeded"}
        )

        result = await provider.apply(
            "ibm_is_image_export_job",
            Operation.READ,
            attributes={"image": "img-1", "image_export_job": "job-1"},
        )

        assert result.success
        assert result.id == "img-1/job-1"
        assert result.state["status"] == "succeeded"

    @pytest.mark.asyncio
    async def test_apply_passes_prior_and_timeouts(self, provider, mock_vpc, make_response):
        mock_vpc.add_bare_metal_server_network_interface_floating_ip.return_value = (
            make_response({"id": "fip-2", "status": "available"})
        )

        result = await provider.apply(
            "ibm_is_bare_metal_server_network_interface_floating_ip",
            Operation.UPDATE,
            attributes={"floating_ip": "fip-2"},
            resource_id="bms/nic/fip-1",
            prior={"floating_ip": "fip-1"},
            timeouts={"update": 30},
        )

        assert result.success
        assert result.id == "bms/nic/fip-2"
        mock_vpc.add_bare_metal_server_network_interface_floating_ip.assert_called_once_with(
            "bms", "nic", "fip-2"
        )
