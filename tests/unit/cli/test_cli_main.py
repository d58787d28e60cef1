"""
Unit tests for CLI main module.

Tests cover the logging formatter, attribute parsing and all CLI commands
including type listing, schema output, reads and configuration display.
"""

import json
import logging
from unittest.mock import AsyncMock, patch

import click
import pytest
from click.testing import CliRunner

from ibmcloud_resources.cli.main import StructuredFormatter, cli, parse_assignments
from ibmcloud_resources.config.settings import AppSettings, CloudSettings
from ibmcloud_resources.resources.base import Diagnostic, OperationResult, Severity


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def app_settings():
    return AppSettings(cloud=CloudSettings(api_key="very-secret-key", region="us-south"))


@pytest.fixture(autouse=True)
def cli_environment(app_settings):
    """Use fixed settings and leave the root logger alone."""
    with patch(
        "ibmcloud_resources.cli.main.get_settings", return_value=app_settings
    ), patch("ibmcloud_resources.cli.main.configure_logging"):
        yield


class TestParseAssignments:
    """Test key=value attribute parsing."""

    def test_json_and_plain_values(self):
        attributes = parse_assignments(
            ("name=web", "count=3", 'tags=["a","b"]', "flag=true", "empty=")
        )

        assert attributes == {
            "name": "web",
            "count": 3,
            "tags": ["a", "b"],
            "flag": True,
            "empty": "",
        }

    def test_value_with_equals_sign(self):
        assert parse_assignments(("filter=a=b",)) == {"filter": "a=b"}

    @pytest.mark.parametrize("assignment", ["novalue", "=value"])
    def test_invalid_assignment(self, assignment):
        with pytest.raises(click.BadParameter):
            parse_assignments((assignment,))


class TestStructuredFormatter:
    """Test JSON log formatting."""

    def test_includes_extra_fields(self):
        record = logging.LogRecord(
            name="NetworkAclResource:ibm_is_network_acl",
            level=logging.INFO,
            pathname=__file__,
            lineno=10,
            msg="Created network ACL",
            args=(),
            exc_info=None,
        )
        record.resource_id = "r006-acl-1"

        payload = json.loads(StructuredFormatter().format(record))

        assert payload["message"] == "Created network ACL"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "NetworkAclResource:ibm_is_network_acl"
        assert payload["resource_id"] == "r006-acl-1"
        assert "msg" not in payload


class TestCLICommands:
    """Test CLI commands."""

    def test_cli_help(self, runner):
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "Manage IBM Cloud resources" in result.output

    def test_types(self, runner):
        result = runner.invoke(cli, ["types"])

        assert result.exit_code == 0
        assert "Resources:" in result.output
        assert "  ibm_is_network_acl" in result.output
        assert "Data sources:" in result.output
        assert "  ibm_is_instance_group_managers" in result.output

    def test_schema(self, runner):
        result = runner.invoke(cli, ["schema", "ibm_is_image_export_job"])

        assert result.exit_code == 0
        schema = json.loads(result.output)
        assert schema["type_name"] == "ibm_is_image_export_job"
        assert schema["kind"] == "data_source"
        assert schema["attributes"]["image"]["required"] is True

    def test_schema_unknown_type(self, runner):
        result = runner.invoke(cli, ["schema", "ibm_is_vpc"])

        assert result.exit_code == 2
        assert "Unknown type: ibm_is_vpc" in result.output

    def test_read(self, runner):
        outcome = OperationResult(
            success=True,
            type_name="ibm_is_image_export_job",
            operation="read",
            id="img-1/job-1",
            state={"id": "img-1/job-1", "status": "succeeded"},
        )

        with patch(
            "ibmcloud_resources.cli.main.Provider.apply",
            new_callable=AsyncMock,
            return_value=outcome,
        ) as mock_apply:
            result = runner.invoke(
                cli,
                [
                    "read",
                    "ibm_is_image_export_job",
                    "--set",
                    "image=img-1",
                    "--set",
                    "image_export_job=job-1",
                ],
            )

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["state"]["status"] == "succeeded"
        _, kwargs = mock_apply.call_args
        assert kwargs["attributes"] == {"image": "img-1", "image_export_job": "job-1"}
        assert kwargs["resource_id"] == ""

    def test_read_to_file(self, runner, tmp_path):
        outcome = OperationResult(
            success=True, type_name="ibm_is_network_acl", operation="read", id="acl-1"
        )
        output_file = tmp_path / "acl.json"

        with patch(
            "ibmcloud_resources.cli.main.Provider.apply",
            new_callable=AsyncMock,
            return_value=outcome,
        ):
            result = runner.invoke(
                cli, ["read", "ibm_is_network_acl", "--id", "acl-1", "-o", str(output_file)]
            )

        assert result.exit_code == 0
        assert f"Result saved to {output_file}" in result.output
        assert json.loads(output_file.read_text())["id"] == "acl-1"

    def test_read_failure(self, runner):
        outcome = OperationResult(
            success=False,
            type_name="ibm_is_network_acl",
            operation="read",
            id="acl-1",
            diagnostics=[
                Diagnostic(
                    severity=Severity.ERROR,
                    summary="Error during read of ibm_is_network_acl",
                    detail="get_network_acl failed: Forbidden",
                )
            ],
        )

        with patch(
            "ibmcloud_resources.cli.main.Provider.apply",
            new_callable=AsyncMock,
            return_value=outcome,
        ):
            result = runner.invoke(cli, ["read", "ibm_is_network_acl", "--id", "acl-1"])

        assert result.exit_code == 1
        assert "get_network_acl failed: Forbidden" in result.output

    def test_read_unknown_type(self, runner):
        result = runner.invoke(cli, ["read", "ibm_is_vpc", "--id", "x"])

        assert result.exit_code == 2

    def test_read_bad_assignment(self, runner):
        result = runner.invoke(cli, ["read", "ibm_is_network_acl", "--set", "oops"])

        assert result.exit_code == 2
        assert "key=value" in result.output

    def test_config_masks_secrets(self, runner):
        result = runner.invoke(cli, ["config"])

        assert result.exit_code == 0
        assert "very-secret-key" not in result.output
        config = json.loads(result.output)
        assert config["cloud"]["api_key"] == "***MASKED***"
        assert config["cloud"]["region"] == "us-south"
