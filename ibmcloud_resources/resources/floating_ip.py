"""
Floating IP association with a bare metal server network interface.

The resource id is ``<server>/<network interface>/<floating ip>``.
"""

from typing import Any, Dict, Optional, Tuple

from ibm_cloud_sdk_core import ApiException

from ..clients import is_not_found
from ..core.identifiers import join_id, split_id
from ..core.polling import wait_for_state
from ..errors import MalformedIdentifierError, RemoteCallError
from .base import Attribute, AttributeType, Resource, ResourceData, ResourceSchema

STATUS_AVAILABLE = "available"
STATUS_DELETING = "deleting"
STATUS_PENDING = "pending"
STATUS_DELETED = "deleted"
STATUS_FAILED = "failed"


class BareMetalServerFloatingIpResource(Resource):
    """Attach a floating IP to a bare metal server network interface."""

    type_name = "ibm_is_bare_metal_server_network_interface_floating_ip"

    async def get_schema(self) -> ResourceSchema:
        return ResourceSchema(
            type_name=self.type_name,
            description="Floating IP bound to a bare metal server network interface",
            kind=self.kind,
            timeouts=["create", "update", "delete"],
            attributes={
                "bare_metal_server": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="Bare metal server identifier",
                ),
                "network_interface": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="Bare metal server network interface identifier",
                ),
                "floating_ip": Attribute(
                    type=AttributeType.STRING,
                    required=True,
                    description="The floating ip identifier of the network interface",
                ),
                "name": Attribute(
                    type=AttributeType.STRING,
                    computed=True,
                    description="Name of the floating IP",
                ),
                "address": Attribute(
                    type=AttributeType.STRING,
                    computed=True,
                    description="Floating IP address",
                ),
                "status": Attribute(
                    type=AttributeType.STRING,
                    computed=True,
                    description="Floating IP status",
                ),
                "zone": Attribute(
                    type=AttributeType.STRING, computed=True, description="Zone name"
                ),
                "target": Attribute(
                    type=AttributeType.STRING, computed=True, description="Target info"
                ),
                "crn": Attribute(
                    type=AttributeType.STRING,
                    computed=True,
                    description="Floating IP crn",
                ),
            },
        )

    def _parse_id(self, operation: str, identifier: str) -> Tuple[str, str, str]:
        try:
            server_id, nic_id, fip_id = split_id(identifier, 3)
        except MalformedIdentifierError as e:
            e.resource_type = self.type_name
            e.operation = operation
            e.step = "parse_id"
            raise
        return server_id, nic_id, fip_id

    def _network_interface_id(self, operation: str, value: str) -> str:
        """Accept either a bare interface id or a ``server/interface`` id."""
        if "/" in value:
            try:
                _, nic_id = split_id(value, 2)
            except MalformedIdentifierError as e:
                e.resource_type = self.type_name
                e.operation = operation
                e.step = "parse_network_interface"
                raise
            return nic_id
        return value

    def _copy_fields(
        self, data: ResourceData, fip: Dict[str, Any], server_id: str, nic_id: str
    ) -> None:
        data.set_id(join_id(server_id, nic_id, fip["id"]))
        data.set("name", fip.get("name"))
        data.set("address", fip.get("address"))
        data.set("status", fip.get("status"))
        data.set("zone", (fip.get("zone") or {}).get("name"))
        data.set("crn", fip.get("crn"))
        target = fip.get("target")
        if target and target.get("id"):
            data.set("target", target["id"])

    def _add(self, operation: str, server_id: str, nic_id: str, fip_id: str):
        vpc = self.session.vpc_client()
        return self._call(
            operation,
            "add_bare_metal_server_network_interface_floating_ip",
            vpc.add_bare_metal_server_network_interface_floating_ip,
            server_id,
            nic_id,
            fip_id,
        )

    async def _wait_available(
        self, data: ResourceData, server_id: str, nic_id: str, fip_id: str
    ) -> Dict[str, Any]:
        vpc = self.session.vpc_client()

        def refresh():
            try:
                fip = vpc.get_bare_metal_server_network_interface_floating_ip(
                    server_id, nic_id, fip_id
                ).get_result()
            except ApiException as e:
                raise RemoteCallError(
                    f"get_bare_metal_server_network_interface_floating_ip failed: {e.message}",
                    status_code=e.code,
                    **self._error_context("create", "wait_available"),
                )
            status = fip.get("status") or ""
            # Record what the service reports; the poller only needs pending or terminal
            data.set("status", status)
            if status in (STATUS_AVAILABLE, STATUS_FAILED):
                return fip, status
            return fip, STATUS_PENDING

        fip, status = await wait_for_state(
            refresh,
            pending=[STATUS_PENDING],
            target=[STATUS_AVAILABLE, STATUS_FAILED],
            timeout=data.timeout("create", self.polling.default_timeout),
            interval=self.polling.poll_interval,
            delay=self.polling.poll_delay,
        )
        if status == STATUS_FAILED:
            raise RemoteCallError(
                f"Floating IP {fip_id} on network interface {nic_id} entered the failed state",
                **self._error_context("create", "wait_available"),
            )
        return fip

    async def create(self, data: ResourceData) -> None:
        for key in ("bare_metal_server", "network_interface", "floating_ip"):
            if not data.get_ok(key)[1]:
                raise self._invalid("create", f"Required parameter {key} is not defined")

        server_id = data.get("bare_metal_server")
        nic_id = self._network_interface_id("create", data.get("network_interface"))
        fip = self._add("create", server_id, nic_id, data.get("floating_ip"))
        data.set_id(join_id(server_id, nic_id, fip["id"]))
        self.logger.info(
            "Added floating IP to network interface",
            extra={"resource_id": data.id, "status": fip.get("status")},
        )

        if fip.get("status") == STATUS_PENDING:
            fip = await self._wait_available(data, server_id, nic_id, fip["id"])

        self._copy_fields(data, fip, server_id, nic_id)

    def _get(self, operation: str, server_id: str, nic_id: str, fip_id: str) -> Optional[Dict[str, Any]]:
        vpc = self.session.vpc_client()
        return self._fetch(
            operation,
            "get_bare_metal_server_network_interface_floating_ip",
            vpc.get_bare_metal_server_network_interface_floating_ip,
            server_id,
            nic_id,
            fip_id,
        )

    async def read(self, data: ResourceData) -> None:
        server_id, nic_id, fip_id = self._parse_id("read", data.id)
        fip = self._get("read", server_id, nic_id, fip_id)
        if fip is None:
            data.set_id("")
            return
        self._copy_fields(data, fip, server_id, nic_id)

    async def update(self, data: ResourceData) -> None:
        if not data.has_change("floating_ip"):
            return
        server_id, nic_id, _ = self._parse_id("update", data.id)
        fip = self._add("update", server_id, nic_id, data.get("floating_ip"))
        self._copy_fields(data, fip, server_id, nic_id)

    async def delete(self, data: ResourceData) -> None:
        server_id, nic_id, fip_id = self._parse_id("delete", data.id)
        if self._get("delete", server_id, nic_id, fip_id) is None:
            data.set_id("")
            return

        vpc = self.session.vpc_client()
        self._call(
            "delete",
            "remove_bare_metal_server_network_interface_floating_ip",
            vpc.remove_bare_metal_server_network_interface_floating_ip,
            server_id,
            nic_id,
            fip_id,
        )

        def refresh():
            try:
                fip = vpc.get_bare_metal_server_network_interface_floating_ip(
                    server_id, nic_id, fip_id
                ).get_result()
            except ApiException as e:
                if is_not_found(e):
                    return None, STATUS_DELETED
                raise RemoteCallError(
                    f"get_bare_metal_server_network_interface_floating_ip failed: {e.message}",
                    status_code=e.code,
                    **self._error_context("delete", "wait_deleted"),
                )
            return fip, STATUS_DELETING

        await wait_for_state(
            refresh,
            pending=[STATUS_AVAILABLE, STATUS_DELETING, STATUS_PENDING],
            target=[STATUS_DELETED, STATUS_FAILED, ""],
            timeout=data.timeout("delete", self.polling.default_timeout),
            interval=self.polling.poll_interval,
            delay=self.polling.poll_delay,
        )
        self.logger.info("Removed floating IP", extra={"resource_id": data.id})
        data.set_id("")

    async def exists(self, data: ResourceData) -> bool:
        server_id, nic_id, fip_id = self._parse_id("exists", data.id)
        return self._get("exists", server_id, nic_id, fip_id) is not None
