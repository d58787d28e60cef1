"""
VPC network ACL resource.

A network ACL owns an ordered list of inline rules. The rules are never
patched individually: every create and every rule change removes all rules
on the ACL (including the defaults the service adds on creation) and
recreates the configured list in order.
"""

import ipaddress
import re
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from ..core.pagination import list_all
from ..core.tags import ACCESS_TAG_TYPE, USER_TAG_TYPE, read_tags, update_tags
from ..errors import ClientInitializationError, RemoteCallError, TagSyncError
from .base import Attribute, AttributeType, Resource, ResourceData, ResourceSchema

NAME_PATTERN = re.compile(r"^([a-z]|[a-z][-a-z0-9]*[a-z0-9])$")
TAG_PATTERN = re.compile(r"^[A-Za-z0-9:_ .-]+$")
ACCESS_TAG_PATTERN = re.compile(
    r"^([A-Za-z0-9_.-]|[A-Za-z0-9_.-][A-Za-z0-9_ .-]*[A-Za-z0-9_.-])"
    r":([A-Za-z0-9_.-]|[A-Za-z0-9_.-][A-Za-z0-9_ .-]*[A-Za-z0-9_.-])$"
)

RULE_PAGE_LIMIT = 50


def validate_name(value: str) -> str:
    if not 1 <= len(value) <= 63 or not NAME_PATTERN.match(value):
        raise ValueError(
            f"{value!r} must be 1-63 characters of lowercase letters, digits and "
            "hyphens, starting with a letter and not ending with a hyphen"
        )
    return value


def validate_ip_or_cidr(value: str) -> str:
    try:
        if "/" in value:
            ipaddress.ip_network(value, strict=False)
        else:
            ipaddress.ip_address(value)
    except ValueError:
        raise ValueError(f"{value!r} is not a valid IP address or CIDR block")
    return value


def validate_tag(value: str, access: bool = False) -> str:
    pattern = ACCESS_TAG_PATTERN if access else TAG_PATTERN
    if not 1 <= len(value) <= 128 or not pattern.match(value):
        kind = "access tag" if access else "tag"
        raise ValueError(f"{value!r} is not a valid {kind}")
    return value


# Rule configuration, as written by the user


class IcmpMatch(BaseModel):
    """ICMP type and code filter."""

    type: Optional[int] = Field(default=None, ge=0, le=254)
    code: Optional[int] = Field(default=None, ge=0, le=255)


class PortMatch(BaseModel):
    """TCP or UDP port ranges."""

    port_min: int = Field(default=1, ge=1, le=65535)
    port_max: int = Field(default=65535, ge=1, le=65535)
    source_port_min: int = Field(default=1, ge=1, le=65535)
    source_port_max: int = Field(default=65535, ge=1, le=65535)


class RuleConfig(BaseModel):
    """A configured inline rule."""

    model_config = ConfigDict(extra="ignore")

    name: str
    action: Literal["allow", "deny"]
    source: str
    destination: str
    direction: Literal["inbound", "outbound"]
    icmp: List[IcmpMatch] = Field(default_factory=list, max_length=1)
    tcp: List[PortMatch] = Field(default_factory=list, max_length=1)
    udp: List[PortMatch] = Field(default_factory=list, max_length=1)

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        return validate_name(v)

    @field_validator("source", "destination")
    @classmethod
    def check_address(cls, v):
        return validate_ip_or_cidr(v)

    @field_validator("icmp", "tcp", "udp", mode="before")
    @classmethod
    def drop_empty_blocks(cls, v):
        # Read-back state renders an unset block as an empty list
        if v is None:
            return []
        return [block if block is not None else {} for block in v]

    @model_validator(mode="after")
    def check_single_protocol(self):
        defined = [name for name in ("icmp", "tcp", "udp") if getattr(self, name)]
        if len(defined) > 1:
            raise ValueError("Only one of icmp|tcp|udp can be defined per rule")
        return self

    @property
    def protocol(self) -> str:
        if self.icmp:
            return "icmp"
        if self.tcp:
            return "tcp"
        if self.udp:
            return "udp"
        return "all"

    def to_prototype(self) -> Dict[str, Any]:
        """Build the create-rule request body."""
        prototype: Dict[str, Any] = {
            "name": self.name,
            "action": self.action,
            "source": self.source,
            "destination": self.destination,
            "direction": self.direction,
            "protocol": self.protocol,
        }
        if self.icmp:
            icmp = self.icmp[0]
            if icmp.type is not None:
                prototype["type"] = icmp.type
            if icmp.code is not None:
                prototype["code"] = icmp.code
        elif self.tcp or self.udp:
            ports = (self.tcp or self.udp)[0]
            prototype["destination_port_min"] = ports.port_min
            prototype["destination_port_max"] = ports.port_max
            prototype["source_port_min"] = ports.source_port_min
            prototype["source_port_max"] = ports.source_port_max
        return prototype


# Rules as returned by the service, keyed on protocol


class _RemoteRule(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    action: str
    ip_version: str = "ipv4"
    source: str
    destination: str
    direction: str

    def _common(self, subnets: int) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "action": self.action,
            "ip_version": self.ip_version,
            "source": self.source,
            "destination": self.destination,
            "direction": self.direction,
            "subnets": subnets,
            "icmp": [],
            "tcp": [],
            "udp": [],
        }


class AllProtocolRule(_RemoteRule):
    protocol: Literal["all", "any", "icmp_tcp_udp"]

    def to_state(self, subnets: int) -> Dict[str, Any]:
        return self._common(subnets)


class IcmpRule(_RemoteRule):
    protocol: Literal["icmp"]
    type: Optional[int] = None
    code: Optional[int] = None

    def to_state(self, subnets: int) -> Dict[str, Any]:
        state = self._common(subnets)
        if self.code is not None and self.type is not None:
            state["icmp"] = [{"code": self.code, "type": self.type}]
        else:
            state["icmp"] = [{}]
        return state


class TcpUdpRule(_RemoteRule):
    protocol: Literal["tcp", "udp"]
    destination_port_min: Optional[int] = None
    destination_port_max: Optional[int] = None
    source_port_min: Optional[int] = None
    source_port_max: Optional[int] = None

    def to_state(self, subnets: int) -> Dict[str, Any]:
        state = self._common(subnets)
        state[self.protocol] = [
            {
                "port_min": self.destination_port_min or 0,
                "port_max": self.destination_port_max or 0,
                "source_port_min": self.source_port_min or 0,
                "source_port_max": self.source_port_max or 0,
            }
        ]
        return state


NetworkAclRule = Annotated[
    Union[AllProtocolRule, IcmpRule, TcpUdpRule], Field(discriminator="protocol")
]

_remote_rules = TypeAdapter(List[NetworkAclRule])


def decode_rules(raw_rules: List[Dict[str, Any]]) -> List[NetworkAclRule]:
    """Decode service rule items into their protocol variants."""
    return _remote_rules.validate_python(raw_rules)


class NetworkAclResource(Resource):
    """Manage a VPC network ACL and its inline rules."""

    type_name = "ibm_is_network_acl"

    async def get_schema(self) -> ResourceSchema:
        port = Attribute(type=AttributeType.INT, optional=True)
        port_block = {
            "port_min": port.model_copy(update={"default": 1}),
            "port_max": port.model_copy(update={"default": 65535}),
            "source_port_min": port.model_copy(update={"default": 1}),
            "source_port_max": port.model_copy(update={"default": 65535}),
        }
        rule = {
            "id": Attribute(type=AttributeType.STRING, computed=True),
            "name": Attribute(type=AttributeType.STRING, required=True),
            "action": Attribute(
                type=AttributeType.STRING, required=True, description="allow or deny"
            ),
            "ip_version": Attribute(type=AttributeType.STRING, computed=True),
            "source": Attribute(type=AttributeType.STRING, required=True),
            "destination": Attribute(type=AttributeType.STRING, required=True),
            "direction": Attribute(
                type=AttributeType.STRING,
                required=True,
                description="Direction of traffic to enforce, either inbound or outbound",
            ),
            "subnets": Attribute(type=AttributeType.INT, computed=True),
            "icmp": Attribute(
                type=AttributeType.LIST,
                optional=True,
                max_items=1,
                elements={
                    "code": Attribute(type=AttributeType.INT, optional=True),
                    "type": Attribute(type=AttributeType.INT, optional=True),
                },
            ),
            "tcp": Attribute(
                type=AttributeType.LIST, optional=True, max_items=1, elements=port_block
            ),
            "udp": Attribute(
                type=AttributeType.LIST, optional=True, max_items=1, elements=port_block
            ),
        }
        return ResourceSchema(
            type_name=self.type_name,
            description="VPC network ACL with ordered inline rules",
            kind=self.kind,
            timeouts=["create", "delete"],
            attributes={
                "name": Attribute(
                    type=AttributeType.STRING,
                    optional=True,
                    computed=True,
                    description="Network ACL name",
                ),
                "vpc": Attribute(
                    type=AttributeType.STRING,
                    optional=True,
                    force_new=True,
                    description="Network ACL VPC name",
                ),
                "resource_group": Attribute(
                    type=AttributeType.STRING,
                    optional=True,
                    computed=True,
                    force_new=True,
                    description="Resource group ID for the network ACL",
                ),
                "tags": Attribute(
                    type=AttributeType.SET,
                    optional=True,
                    computed=True,
                    element_type=AttributeType.STRING,
                    description="List of tags",
                ),
                "access_tags": Attribute(
                    type=AttributeType.SET,
                    optional=True,
                    computed=True,
                    element_type=AttributeType.STRING,
                    description="List of access management tags",
                ),
                "crn": Attribute(
                    type=AttributeType.STRING,
                    computed=True,
                    description="The crn of the resource",
                ),
                "resource_controller_url": Attribute(
                    type=AttributeType.STRING,
                    computed=True,
                    description="The URL of the IBM Cloud dashboard for this instance",
                ),
                "resource_name": Attribute(type=AttributeType.STRING, computed=True),
                "resource_crn": Attribute(type=AttributeType.STRING, computed=True),
                "resource_group_name": Attribute(
                    type=AttributeType.STRING, computed=True
                ),
                "rules": Attribute(
                    type=AttributeType.LIST,
                    optional=True,
                    computed=True,
                    elements=rule,
                ),
            },
        )

    def _validate_rules(self, operation: str, data: ResourceData) -> List[RuleConfig]:
        try:
            return [RuleConfig.model_validate(rule) for rule in data.get("rules") or []]
        except ValidationError as e:
            raise self._invalid(operation, f"Invalid rule: {e}")

    def _validate_fields(self, operation: str, data: ResourceData) -> None:
        try:
            name, has_name = data.get_ok("name")
            if has_name:
                validate_name(name)
            for tag in data.get("tags") or []:
                validate_tag(tag)
            for tag in data.get("access_tags") or []:
                validate_tag(tag, access=True)
        except ValueError as e:
            raise self._invalid(operation, str(e))

    def _clear_rules(self, operation: str, acl_id: str) -> None:
        """Delete every rule currently on the ACL."""
        vpc = self.session.vpc_client()

        def fetch(start):
            return self._call(
                operation,
                "list_network_acl_rules",
                vpc.list_network_acl_rules,
                acl_id,
                start=start,
                limit=RULE_PAGE_LIMIT,
            )

        existing = list_all(fetch, "rules")
        for rule in existing:
            self._call(
                operation,
                "delete_network_acl_rule",
                vpc.delete_network_acl_rule,
                acl_id,
                rule["id"],
            )
        self.logger.debug(
            "Cleared network ACL rules",
            extra={"network_acl_id": acl_id, "rule_count": len(existing)},
        )

    def _create_rules(self, operation: str, acl_id: str, rules: List[RuleConfig]) -> None:
        vpc = self.session.vpc_client()
        for rule in rules:
            self._call(
                operation,
                "create_network_acl_rule",
                vpc.create_network_acl_rule,
                acl_id,
                rule.to_prototype(),
            )

    def _sync_tags(
        self,
        data: ResourceData,
        crn: str,
        key: str,
        tag_type: str,
        old: Any,
        new: Any,
    ) -> None:
        env_tags = self.session.env_tags if tag_type == USER_TAG_TYPE else None
        try:
            update_tags(
                self.session.tagging_client(),
                crn,
                old,
                new,
                tag_type=tag_type,
                env_tags=env_tags,
            )
        except (TagSyncError, ClientInitializationError) as e:
            self._warn(data, f"Error updating {key} of network ACL {data.id}", e)

    async def create(self, data: ResourceData) -> None:
        vpc_id, has_vpc = data.get_ok("vpc")
        if not has_vpc:
            raise self._invalid("create", "Required parameter vpc is not defined")

        # Rules are checked before anything is created remotely
        rules = self._validate_rules("create", data)
        self._validate_fields("create", data)

        prototype: Dict[str, Any] = {"vpc": {"id": vpc_id}}
        name, has_name = data.get_ok("name")
        if has_name:
            prototype["name"] = name
        resource_group, has_group = data.get_ok("resource_group")
        if has_group:
            prototype["resource_group"] = {"id": resource_group}

        vpc = self.session.vpc_client()
        acl = self._call(
            "create", "create_network_acl", vpc.create_network_acl, prototype
        )
        data.set_id(acl["id"])
        self.logger.info("Created network ACL", extra={"network_acl_id": acl["id"]})

        # The service seeds new ACLs with default rules
        self._clear_rules("create", data.id)
        self._create_rules("create", data.id, rules)

        tags, has_tags = data.get_ok("tags")
        if has_tags or self.session.env_tags:
            old, new = data.get_change("tags")
            self._sync_tags(data, acl["crn"], "tags", USER_TAG_TYPE, old, new)
        if data.get_ok("access_tags")[1]:
            old, new = data.get_change("access_tags")
            self._sync_tags(data, acl["crn"], "access_tags", ACCESS_TAG_TYPE, old, new)

        await self.read(data)

    async def read(self, data: ResourceData) -> None:
        vpc = self.session.vpc_client()
        acl = self._fetch("read", "get_network_acl", vpc.get_network_acl, data.id)
        if acl is None:
            self.logger.info(
                "Network ACL not found, removing from state",
                extra={"network_acl_id": data.id},
            )
            data.set_id("")
            return

        if acl.get("name") is not None:
            data.set("name", acl["name"])
        if acl.get("vpc"):
            data.set("vpc", acl["vpc"]["id"])
        if acl.get("resource_group"):
            data.set("resource_group", acl["resource_group"]["id"])
            data.set("resource_group_name", acl["resource_group"].get("name"))

        crn = acl.get("crn")
        try:
            data.set(
                "tags",
                read_tags(
                    self.session.tagging_client(),
                    crn,
                    USER_TAG_TYPE,
                    env_tags=self.session.env_tags,
                ),
            )
        except (TagSyncError, ClientInitializationError) as e:
            self._warn(data, f"Error reading tags of network ACL {data.id}", e)
        try:
            data.set(
                "access_tags",
                read_tags(self.session.tagging_client(), crn, ACCESS_TAG_TYPE),
            )
        except (TagSyncError, ClientInitializationError) as e:
            self._warn(data, f"Error reading access tags of network ACL {data.id}", e)

        data.set("crn", crn)
        data.set("resource_crn", crn)

        try:
            remote_rules = decode_rules(acl.get("rules") or [])
        except ValidationError as e:
            raise RemoteCallError(
                f"get_network_acl returned an unrecognised rule: {e}",
                **self._error_context("read", "decode_rules"),
            )
        subnet_count = len(acl.get("subnets") or [])
        data.set("rules", [rule.to_state(subnet_count) for rule in remote_rules])

        data.set(
            "resource_controller_url",
            f"{self.session.console_url}/vpc-ext/network/acl",
        )
        data.set("resource_name", acl.get("name"))

    async def update(self, data: ResourceData) -> None:
        self._validate_fields("update", data)
        rules = None
        if data.has_change("rules"):
            rules = self._validate_rules("update", data)

        vpc = self.session.vpc_client()
        if data.has_change("name"):
            self._call(
                "update",
                "update_network_acl",
                vpc.update_network_acl,
                data.id,
                {"name": data.get("name")},
            )

        crn = data.get("crn")
        if data.has_change("tags"):
            old, new = data.get_change("tags")
            self._sync_tags(data, crn, "tags", USER_TAG_TYPE, old, new)
        if data.has_change("access_tags"):
            old, new = data.get_change("access_tags")
            self._sync_tags(data, crn, "access_tags", ACCESS_TAG_TYPE, old, new)

        if rules is not None:
            self._clear_rules("update", data.id)
            self._create_rules("update", data.id, rules)

        await self.read(data)

    async def delete(self, data: ResourceData) -> None:
        vpc = self.session.vpc_client()
        acl = self._fetch("delete", "get_network_acl", vpc.get_network_acl, data.id)
        if acl is None:
            data.set_id("")
            return

        self._call("delete", "delete_network_acl", vpc.delete_network_acl, data.id)
        self.logger.info("Deleted network ACL", extra={"network_acl_id": data.id})
        data.set_id("")

    async def exists(self, data: ResourceData) -> bool:
        vpc = self.session.vpc_client()
        acl = self._fetch("exists", "get_network_acl", vpc.get_network_acl, data.id)
        return acl is not None
