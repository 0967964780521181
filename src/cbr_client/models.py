"""Pydantic models for context-based restrictions zones and rules.

Type-safe models for zone addresses, rule attributes, remote zone/rule
responses, and bulk delete results.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from cbr_client.exceptions import CBRBulkDeleteError

# Protected service identifiers
VPC_SERVICE = "is"
KUBERNETES_SERVICE = "containers-kubernetes"
COS_SERVICE = "cloud-object-storage"
KMS_SERVICE = "kms"

NETWORK_ZONE_ID = "networkZoneId"


class AddressType(str, Enum):
    """Types of zone membership entries."""

    IP_ADDRESS = "ipAddress"
    IP_RANGE = "ipRange"
    SUBNET = "subnet"
    VPC = "vpc"
    SERVICE_REF = "serviceRef"


class EnforcementMode(str, Enum):
    """Rule enforcement modes."""

    ENABLED = "enabled"
    DISABLED = "disabled"
    REPORT = "report"


class APIType(str, Enum):
    """Kubernetes API types a rule can be narrowed to."""

    MANAGEMENT = "management"
    CLUSTER = "cluster"

    @property
    def crn(self) -> str:
        """API type ID expected by the rule operations field."""
        return f"crn:v1:bluemix:public:{KUBERNETES_SERVICE}::::api-type:{self.value}"

    @classmethod
    def parse(cls, value: str | None) -> "APIType | None":
        """Return the API type for an exact match, None for anything else."""
        for api_type in cls:
            if value == api_type.value:
                return api_type
        return None


def classify_address(address: str) -> AddressType:
    """Infer the address type from its textual form.

    A dash marks a range and wins over a slash, so "10.0.0.1-10.0.0.0/24"
    is a range. The value is not otherwise validated; the service does that.

    Args:
        address: Address string as supplied by the caller.

    Returns:
        IP_RANGE, SUBNET or IP_ADDRESS.
    """
    if "-" in address:
        return AddressType.IP_RANGE
    if "/" in address:
        return AddressType.SUBNET
    return AddressType.IP_ADDRESS


class ServiceRef(BaseModel):
    """Reference to a cloud service inside an account.

    Attributes:
        account_id: Account owning the service
        service_name: Service name (e.g., "cloud-object-storage")
    """

    account_id: str
    service_name: str | None = None
    service_type: str | None = None
    service_instance: str | None = None
    location: str | None = None


class ZoneAddress(BaseModel):
    """A single zone membership entry.

    Exactly one of value (addresses, VPC CRNs) or ref (service refs) is set.

    Attributes:
        type: Entry kind
        value: Address, range, subnet or VPC CRN
        ref: Service reference for serviceRef entries
    """

    type: AddressType
    value: str | None = None
    ref: ServiceRef | None = None

    @classmethod
    def from_address(cls, address: str) -> "ZoneAddress":
        """Build an ipAddress/ipRange/subnet entry from an address string."""
        return cls(type=classify_address(address), value=address)

    @classmethod
    def vpc(cls, crn: str) -> "ZoneAddress":
        """Build a VPC entry from its CRN."""
        return cls(type=AddressType.VPC, value=crn)

    @classmethod
    def service_ref(cls, account_id: str, service_name: str) -> "ZoneAddress":
        """Build a serviceRef entry for a service in the given account."""
        return cls(
            type=AddressType.SERVICE_REF,
            ref=ServiceRef(account_id=account_id, service_name=service_name),
        )

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to API request format.

        Returns:
            Dictionary for API request.
        """
        result: dict[str, Any] = {"type": self.type.value}
        if self.ref is not None:
            result["ref"] = self.ref.model_dump(exclude_none=True)
        else:
            result["value"] = self.value
        return result


class ZoneSpec(BaseModel):
    """Membership input for a new zone.

    Any subset of the lists may be empty.

    Attributes:
        vpc: VPC CRNs allowed in the zone
        address: IP addresses, ranges ("a-b") and subnets ("a/n")
        service_ref: Service names, paired with the client's account ID
    """

    model_config = ConfigDict(populate_by_name=True)

    vpc: list[str] = Field(default_factory=list, alias="VPC")
    address: list[str] = Field(default_factory=list, alias="Address")
    service_ref: list[str] = Field(default_factory=list, alias="ServiceRef")

    def to_addresses(self, account_id: str) -> list[ZoneAddress]:
        """Build membership entries: addresses, then service refs, then VPCs.

        Args:
            account_id: Account paired with each service ref.

        Returns:
            One ZoneAddress per input entry.
        """
        addresses = [ZoneAddress.from_address(a) for a in self.address]
        addresses.extend(
            ZoneAddress.service_ref(account_id, name) for name in self.service_ref
        )
        addresses.extend(ZoneAddress.vpc(crn) for crn in self.vpc)
        return addresses


class RuleAttribute(BaseModel):
    """A name/value attribute of a rule context or resource.

    Attributes:
        name: Attribute name (e.g., "networkZoneId", "serviceName")
        value: Attribute value
        operator: Optional comparison operator (e.g., "stringEquals")
    """

    name: str
    value: str
    operator: str | None = None

    def to_api_dict(self) -> dict[str, Any]:
        """Convert to API request format."""
        result: dict[str, Any] = {"name": self.name, "value": self.value}
        if self.operator:
            result["operator"] = self.operator
        return result


class RuleContext(BaseModel):
    """Network context a rule allows."""

    attributes: list[RuleAttribute] = Field(default_factory=list)


class RuleResource(BaseModel):
    """Protected resource scope of a rule."""

    attributes: list[RuleAttribute] = Field(default_factory=list)
    tags: list[RuleAttribute] = Field(default_factory=list)

    def attribute(self, name: str) -> str | None:
        """Get an attribute value by name."""
        for attr in self.attributes:
            if attr.name == name:
                return attr.value
        return None


class Zone(BaseModel):
    """A network zone as returned by the service.

    Attributes:
        id: Service-assigned zone ID
        name: Zone name
        description: Optional description
        account_id: Owning account
        addresses: Membership entries
        crn: Zone CRN
        created_at: When the zone was created
        last_modified_at: When the zone was last modified
    """

    id: str
    name: str = ""
    description: str | None = None
    account_id: str | None = None
    addresses: list[ZoneAddress] = Field(default_factory=list)
    crn: str | None = None
    created_at: datetime | None = None
    last_modified_at: datetime | None = None


class Rule(BaseModel):
    """A context-based restriction rule as returned by the service.

    Attributes:
        id: Service-assigned rule ID
        description: Rule description
        contexts: Allowed network contexts
        resources: Protected resource scopes
        operations: Optional API type restrictions
        enforcement_mode: Enforcement mode
        crn: Rule CRN
        created_at: When the rule was created
        last_modified_at: When the rule was last modified
    """

    id: str
    description: str = ""
    contexts: list[RuleContext] = Field(default_factory=list)
    resources: list[RuleResource] = Field(default_factory=list)
    operations: dict[str, Any] | None = None
    enforcement_mode: EnforcementMode | None = None
    crn: str | None = None
    created_at: datetime | None = None
    last_modified_at: datetime | None = None


@dataclass
class DeleteOutcome:
    """Result of deleting one matched zone or rule.

    Attributes:
        id: Zone or rule ID
        name: Zone name or rule description that matched
        deleted: Whether the delete call succeeded
        error: Error message if the delete failed
    """

    id: str
    name: str
    deleted: bool = False
    error: str | None = None


@dataclass
class BulkDeleteResult:
    """Result of a pattern-based bulk delete.

    Attributes:
        pattern: Substring matched against names or descriptions
        listed_count: Number of objects returned by the list call
        outcomes: One outcome per matched object, in listing order
    """

    pattern: str
    listed_count: int = 0
    outcomes: list[DeleteOutcome] = field(default_factory=list)

    @property
    def deleted_ids(self) -> list[str]:
        """IDs that were deleted successfully."""
        return [o.id for o in self.outcomes if o.deleted]

    @property
    def failed(self) -> list[DeleteOutcome]:
        """Outcomes of deletions that failed."""
        return [o for o in self.outcomes if not o.deleted]

    @property
    def matched_count(self) -> int:
        """Number of objects that matched the pattern."""
        return len(self.outcomes)

    @property
    def has_failures(self) -> bool:
        """Whether any matched object could not be deleted."""
        return any(not o.deleted for o in self.outcomes)

    def raise_for_failures(self) -> None:
        """Raise if any deletion failed.

        Raises:
            CBRBulkDeleteError: Listing the failed outcomes.
        """
        failed = self.failed
        if failed:
            msg = (
                f"Failed to delete {len(failed)} of {self.matched_count} "
                f"objects matching '{self.pattern}'"
            )
            raise CBRBulkDeleteError(
                msg, failed=failed, errors=[{"message": f"{o.id}: {o.error}"} for o in failed]
            )

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "pattern": self.pattern,
            "listed_count": self.listed_count,
            "matched_count": self.matched_count,
            "deleted_ids": self.deleted_ids,
            "failed": [
                {"id": o.id, "name": o.name, "error": o.error} for o in self.failed
            ],
        }
