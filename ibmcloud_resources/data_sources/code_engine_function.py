"""
Data source reading a Code Engine function.

The function is addressed by project and name; the data source id is
``<project_id>/<name>``.
"""

from typing import Any, Dict, List, Optional

from ..core.identifiers import join_id
from ..resources.base import (
    Attribute,
    AttributeType,
    DataSource,
    ResourceData,
    ResourceSchema,
)

ENV_VAR_FIELDS = ("key", "name", "prefix", "reference", "type", "value")

# Fields copied as returned, present or not
_PLAIN_FIELDS = (
    "code_binary",
    "code_reference",
    "entity_tag",
    "managed_domain_mappings",
    "runtime",
    "scale_cpu_limit",
    "scale_memory_limit",
)

# Fields only copied when the service returns them
_OPTIONAL_FIELDS = (
    "code_main",
    "code_secret",
    "created_at",
    "endpoint",
    "endpoint_internal",
    "href",
    "region",
    "resource_type",
    "status",
)

_INT_FIELDS = (
    "scale_concurrency",
    "scale_down_delay",
    "scale_max_execution_time",
)


def env_vars_to_state(env_vars: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    """Flatten environment variable references, keeping only set fields."""
    result = []
    for env_var in env_vars or []:
        entry = {
            field: env_var[field]
            for field in ENV_VAR_FIELDS
            if env_var.get(field) is not None
        }
        result.append(entry)
    return result


class CodeEngineFunctionDataSource(DataSource):
    """Look up a function in a Code Engine project."""

    type_name = "ibm_code_engine_function"

    async def get_schema(self) -> ResourceSchema:
        string = Attribute(type=AttributeType.STRING, computed=True)
        number = Attribute(type=AttributeType.INT, computed=True)
        env_var = Attribute(
            type=AttributeType.LIST,
            computed=True,
            elements={field: string for field in ENV_VAR_FIELDS},
        )
        return ResourceSchema(
            type_name=self.type_name,
            description="Code Engine function",
            kind=self.kind,
            attributes={
                "project_id": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="The ID of the project.",
                ),
                "name": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="The name of your function.",
                ),
                "code_binary": Attribute(type=AttributeType.BOOL, computed=True),
                "code_main": string,
                "code_reference": string,
                "code_secret": string,
                "computed_env_variables": env_var,
                "created_at": string,
                "endpoint": string,
                "endpoint_internal": string,
                "entity_tag": string,
                "href": string,
                "function_id": string,
                "managed_domain_mappings": string,
                "region": string,
                "resource_type": string,
                "run_env_variables": env_var,
                "runtime": string,
                "scale_concurrency": number,
                "scale_cpu_limit": string,
                "scale_down_delay": number,
                "scale_max_execution_time": number,
                "scale_memory_limit": string,
                "status": string,
                "status_details": Attribute(
                    type=AttributeType.LIST,
                    computed=True,
                    elements={"reason": string},
                ),
            },
        )

    async def read(self, data: ResourceData) -> None:
        for key in ("project_id", "name"):
            if not data.get_ok(key)[1]:
                raise self._invalid("read", f"Required parameter {key} is not defined")

        project_id = data.get("project_id")
        name = data.get("name")
        client = self.session.code_engine_client()
        function = self._call(
            "read",
            "get_function",
            client.get_function,
            project_id=project_id,
            name=name,
        )

        data.set_id(join_id(project_id, name))
        for key in _PLAIN_FIELDS:
            data.set(key, function.get(key))
        for key in _OPTIONAL_FIELDS:
            if function.get(key) is not None:
                data.set(key, function[key])
        for key in _INT_FIELDS:
            data.set(key, function.get(key) or 0)

        if function.get("id") is not None:
            data.set("function_id", function["id"])
        if function.get("computed_env_variables") is not None:
            data.set(
                "computed_env_variables",
                env_vars_to_state(function["computed_env_variables"]),
            )
        data.set("run_env_variables", env_vars_to_state(function.get("run_env_variables")))

        details = function.get("status_details")
        data.set(
            "status_details",
            [{"reason": details["reason"]} if details.get("reason") else {}]
            if details
            else [],
        )
